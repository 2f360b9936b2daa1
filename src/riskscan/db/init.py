"""Database engine and session helpers."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from riskscan.db.models import Base


def create_db_engine(db_url: str) -> Engine:
    """Create an engine for *db_url*, preparing SQLite files and threads."""
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(db_url, echo=False)

    database = url.database or ""
    if database in ("", ":memory:"):
        # One shared connection so every session sees the same in-memory db.
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    path = Path(database).expanduser()
    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        url.set(database=str(path)), echo=False, connect_args={"check_same_thread": False}
    )


def init_db(engine: Engine) -> None:
    """Create all tables."""
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to *engine*."""
    return sessionmaker(bind=engine, expire_on_commit=False)
