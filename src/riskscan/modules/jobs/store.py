"""Job Store: durable scan job documents keyed by identifier."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import update
from sqlalchemy.engine import Engine

from riskscan.db import ScanJobRecord, create_db_engine, get_session_factory, init_db
from riskscan.errors import InvalidTransition, ScanNotFound
from riskscan.modules.scanner.models import Findings

from .models import ALLOWED_TRANSITIONS, JobStatus, ScanJob

DEFAULT_LIST_LIMIT = 50


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class JobStore(ABC):
    """Create, read and advance scan jobs."""

    @abstractmethod
    def create(self, job: ScanJob) -> None: ...

    @abstractmethod
    def get(self, scan_id: str) -> ScanJob:
        """Return the job or raise ScanNotFound."""

    @abstractmethod
    def transition(self, scan_id: str, status: JobStatus, **fields: Any) -> ScanJob:
        """Move a job to *status*, writing *fields* in the same step.

        Raises InvalidTransition when the move is not a legal edge of the
        job state machine; the stored job is left as it was.
        """

    @abstractmethod
    def list_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> list[ScanJob]:
        """A user's jobs, newest first."""


class SqlJobStore(JobStore):
    """Job Store on SQLAlchemy, one short session per operation."""

    def __init__(self, engine: Engine):
        self.engine = engine
        init_db(engine)
        self._session_factory = get_session_factory(engine)

    @classmethod
    def from_url(cls, db_url: str) -> SqlJobStore:
        return cls(create_db_engine(db_url))

    @staticmethod
    def _to_job(record: ScanJobRecord) -> ScanJob:
        return ScanJob(
            id=record.id,
            user_id=record.user_id,
            target_url=record.target_url,
            status=JobStatus(record.status),
            created_at=_aware(record.created_at),
            started_at=_aware(record.started_at),
            completed_at=_aware(record.completed_at),
            risk_score=record.risk_score,
            findings=Findings.from_dict(record.findings) if record.findings else None,
            error=record.error,
        )

    def create(self, job: ScanJob) -> None:
        record = ScanJobRecord(
            id=job.id,
            user_id=job.user_id,
            target_url=job.target_url,
            status=str(job.status),
            created_at=job.created_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
            risk_score=job.risk_score,
            findings=job.findings.to_dict() if job.findings else None,
            error=job.error,
        )
        with self._session_factory() as session:
            session.add(record)
            session.commit()

    def get(self, scan_id: str) -> ScanJob:
        with self._session_factory() as session:
            record = session.get(ScanJobRecord, scan_id)
            if record is None:
                raise ScanNotFound(scan_id)
            return self._to_job(record)

    def transition(self, scan_id: str, status: JobStatus, **fields: Any) -> ScanJob:
        status = JobStatus(status)
        sources = [str(s) for s, targets in ALLOWED_TRANSITIONS.items() if status in targets]

        values = {"status": str(status)}
        for name, value in fields.items():
            if name not in ("started_at", "completed_at", "risk_score", "findings", "error"):
                raise TypeError(f"Unknown job field: {name}")
            values[name] = value.to_dict() if isinstance(value, Findings) else value

        with self._session_factory() as session:
            # Compare-and-set on the current status keeps concurrent writers honest.
            result = session.execute(
                update(ScanJobRecord)
                .where(ScanJobRecord.id == scan_id, ScanJobRecord.status.in_(sources))
                .values(**values)
            )
            session.commit()
            if result.rowcount == 0:
                record = session.get(ScanJobRecord, scan_id)
                if record is None:
                    raise ScanNotFound(scan_id)
                raise InvalidTransition(scan_id, record.status, str(status))

        return self.get(scan_id)

    def list_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> list[ScanJob]:
        with self._session_factory() as session:
            records = (
                session.query(ScanJobRecord)
                .filter_by(user_id=user_id)
                .order_by(ScanJobRecord.created_at.desc())
                .limit(limit)
                .all()
            )
            return [self._to_job(r) for r in records]
