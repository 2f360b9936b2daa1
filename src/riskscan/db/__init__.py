"""Persistence layer for scan jobs."""

from .init import create_db_engine, get_session_factory, init_db
from .models import Base, ScanJobRecord

__all__ = ["Base", "ScanJobRecord", "create_db_engine", "get_session_factory", "init_db"]
