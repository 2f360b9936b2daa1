"""Scan job lifecycle: records, storage, supervision and orchestration."""

from .manager import ProbeSuite, ScanManager
from .models import ALLOWED_TRANSITIONS, JobStatus, ScanJob
from .store import JobStore, SqlJobStore
from .supervisor import TaskFailure, TaskSupervisor

__all__ = [
    "ALLOWED_TRANSITIONS",
    "JobStatus",
    "JobStore",
    "ProbeSuite",
    "ScanJob",
    "ScanManager",
    "SqlJobStore",
    "TaskFailure",
    "TaskSupervisor",
]
