"""Job Lifecycle Manager: create, run and report scan jobs."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from riskscan.config import ScanSettings, load_scan_settings
from riskscan.modules.scanner.aggregate import build_vulnerabilities
from riskscan.modules.scanner.certificate import inspect_certificate
from riskscan.modules.scanner.cms import fingerprint_cms
from riskscan.modules.scanner.headers import analyze_security_headers
from riskscan.modules.scanner.injection import probe_sql_injection, probe_xss
from riskscan.modules.scanner.models import Findings, ProbeResult
from riskscan.modules.scanner.ports import scan_ports
from riskscan.modules.scanner.rules import RuleSet, load_rules
from riskscan.modules.scanner.scoring import calculate_risk_score
from riskscan.modules.scanner.target import normalize_target, target_host
from riskscan.tools.http import HTTPClient

from .models import JobStatus, ScanJob
from .store import DEFAULT_LIST_LIMIT, JobStore, SqlJobStore
from .supervisor import TaskSupervisor

logger = logging.getLogger(__name__)

Probe = Callable[[str], Awaitable[ProbeResult[Any]]]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class ProbeSuite:
    """The six probes run for every job, each taking the normalized target."""

    ssl: Probe
    headers: Probe
    cms: Probe
    xss: Probe
    sql: Probe
    ports: Probe

    @classmethod
    def from_settings(cls, settings: ScanSettings, rules: RuleSet) -> ProbeSuite:
        """Network-backed probes using the configured timeouts and rule tables."""

        def page_client() -> HTTPClient:
            return HTTPClient(
                timeout=settings.http_timeout,
                max_redirects=settings.http_max_redirects,
                user_agent=settings.user_agent,
            )

        def payload_client() -> HTTPClient:
            return HTTPClient(
                timeout=settings.probe_timeout,
                max_redirects=settings.probe_max_redirects,
                user_agent=settings.user_agent,
            )

        async def ssl(target: str) -> ProbeResult[Any]:
            return await inspect_certificate(
                target_host(target), settings.tls_port, settings.tls_timeout
            )

        async def headers(target: str) -> ProbeResult[Any]:
            async with page_client() as client:
                return await analyze_security_headers(client, target, rules.security_headers)

        async def cms(target: str) -> ProbeResult[Any]:
            async with page_client() as client:
                return await fingerprint_cms(
                    client, target, rules.cms_rules, rules.cms_match_threshold
                )

        async def xss(target: str) -> ProbeResult[Any]:
            async with payload_client() as client:
                return await probe_xss(client, target, rules.xss_payloads, rules.xss_markers)

        async def sql(target: str) -> ProbeResult[Any]:
            async with payload_client() as client:
                return await probe_sql_injection(
                    client, target, rules.sql_payloads, rules.sql_error_signatures
                )

        async def ports(target: str) -> ProbeResult[Any]:
            return await scan_ports(
                target_host(target),
                enabled=settings.port_scan_enabled,
                ports=rules.candidate_ports,
                risks=rules.port_risks,
                timeout=settings.port_timeout,
                concurrency=settings.port_concurrency,
            )

        return cls(ssl=ssl, headers=headers, cms=cms, xss=xss, sql=sql, ports=ports)


class ScanManager:
    """Owns the scan job lifecycle.

    ``create_scan`` validates the target, stores a pending job and hands the
    run to the supervisor; ``execute_scan`` is the run itself. A job only
    ever moves pending -> running -> completed or failed.
    """

    def __init__(
        self,
        settings: ScanSettings | None = None,
        store: JobStore | None = None,
        probes: ProbeSuite | None = None,
        supervisor: TaskSupervisor | None = None,
        rules: RuleSet | None = None,
    ):
        self.settings = settings or load_scan_settings()
        self.rules = rules or load_rules(self.settings.rules_file)
        self.store = store or SqlJobStore.from_url(self.settings.db_url)
        self.probes = probes or ProbeSuite.from_settings(self.settings, self.rules)
        self.supervisor = supervisor or TaskSupervisor(self.settings.max_concurrent_scans)

    async def create_scan(self, target_url: str, user_id: str) -> str:
        """Start a scan of *target_url* for *user_id* and return its identifier.

        Raises InvalidTarget before anything is stored.
        """
        target = normalize_target(target_url)
        now = _utc_now()
        job = ScanJob(
            id=str(uuid.uuid4()),
            user_id=user_id,
            target_url=target,
            status=JobStatus.PENDING,
            created_at=now,
            started_at=now,
        )
        self.store.create(job)
        logger.info("Scan %s created for %s (user %s)", job.id, target, user_id)

        self.supervisor.spawn(job.id, self.execute_scan(job.id, target, user_id))
        return job.id

    async def execute_scan(self, scan_id: str, target_url: str, user_id: str) -> None:
        """Run all probes, aggregate, score and persist the terminal state."""
        self.store.transition(scan_id, JobStatus.RUNNING, started_at=_utc_now())
        logger.info("Scan %s started for %s (user %s)", scan_id, target_url, user_id)

        try:
            findings = await self._collect_findings(target_url)
            risk_score = calculate_risk_score(
                findings.ssl_info,
                findings.security_headers,
                findings.vulnerabilities,
                findings.xss_tests,
                findings.sql_injection_tests,
            )
            self.store.transition(
                scan_id,
                JobStatus.COMPLETED,
                completed_at=_utc_now(),
                risk_score=risk_score,
                findings=findings,
            )
        except Exception as exc:
            logger.exception("Scan %s failed", scan_id)
            self.store.transition(
                scan_id, JobStatus.FAILED, completed_at=_utc_now(), error=str(exc) or repr(exc)
            )
            return

        logger.info("Scan %s completed with risk score %d", scan_id, risk_score)

    async def _collect_findings(self, target: str) -> Findings:
        names = ("ssl", "headers", "cms", "xss", "sql", "ports")
        results = await asyncio.gather(*(getattr(self.probes, name)(target) for name in names))
        by_name: dict[str, ProbeResult[Any]] = dict(zip(names, results, strict=True))

        degraded = {}
        for name, result in by_name.items():
            if result.degraded:
                logger.debug("Probe %s degraded for %s: %s", name, target, result.reason)
                degraded[name] = result.reason or "degraded"

        ssl_info = by_name["ssl"].value
        security_headers = by_name["headers"].value
        xss_tests = by_name["xss"].value
        sql_tests = by_name["sql"].value

        return Findings(
            vulnerabilities=build_vulnerabilities(
                target, ssl_info, security_headers, xss_tests, sql_tests
            ),
            ssl_info=ssl_info,
            security_headers=security_headers,
            cms_detection=by_name["cms"].value,
            xss_tests=xss_tests,
            sql_injection_tests=sql_tests,
            open_ports=by_name["ports"].value,
            degraded_probes=degraded,
        )

    def get_scan_status(self, scan_id: str) -> ScanJob:
        """Current job record; raises ScanNotFound for unknown identifiers."""
        return self.store.get(scan_id)

    def list_scans(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> list[ScanJob]:
        return self.store.list_for_user(user_id, limit)

    async def wait(self, scan_id: str | None = None) -> None:
        """Wait for one job, or for every running job when *scan_id* is None."""
        if scan_id is None:
            await self.supervisor.join()
        else:
            await self.supervisor.wait(scan_id)
