"""Composite 0-100 risk score."""

from collections.abc import Sequence

from .models import ProbeOutcome, SecurityHeaders, SSLInfo, Vulnerability

INVALID_CERT_PENALTY = 30
GRADE_PENALTIES = {"F": 25, "C": 15, "B": 10}
MISSING_HEADER_PENALTY = 3
SEVERITY_PENALTIES = {"critical": 20, "high": 15, "medium": 10, "low": 5, "info": 0}
XSS_PENALTY = 15
SQL_INJECTION_PENALTY = 20


def calculate_risk_score(
    ssl_info: SSLInfo | None,
    security_headers: SecurityHeaders,
    vulnerabilities: Sequence[Vulnerability],
    xss_tests: Sequence[ProbeOutcome],
    sql_tests: Sequence[ProbeOutcome],
) -> int:
    """Start at 100, subtract penalties, clamp to [0, 100]. Higher is safer."""
    score = 100

    if ssl_info is not None:
        if not ssl_info.valid:
            score -= INVALID_CERT_PENALTY
        else:
            score -= GRADE_PENALTIES.get(ssl_info.grade, 0)

    score -= MISSING_HEADER_PENALTY * len(security_headers.missing_headers)

    for vulnerability in vulnerabilities:
        score -= SEVERITY_PENALTIES.get(vulnerability.severity, 0)

    if any(test.vulnerable for test in xss_tests):
        score -= XSS_PENALTY
    if any(test.vulnerable for test in sql_tests):
        score -= SQL_INJECTION_PENALTY

    return max(0, min(100, score))
