"""Scan job records."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from riskscan.modules.scanner.models import Findings


class JobStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Every legal status change; anything else is rejected by the store.
ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


@dataclass
class ScanJob:
    """One scan request and, once finished, its outcome."""

    id: str
    user_id: str
    target_url: str
    status: JobStatus
    created_at: datetime
    started_at: datetime
    completed_at: datetime | None = None
    risk_score: int | None = None
    findings: Findings | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "targetUrl": self.target_url,
            "status": str(self.status),
            "createdAt": self.created_at.isoformat(),
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "riskScore": self.risk_score,
            "findings": self.findings.to_dict() if self.findings else None,
            "error": self.error,
        }
