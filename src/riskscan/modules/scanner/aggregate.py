"""Turn probe results into a uniform vulnerability list."""

import uuid
from collections.abc import Callable, Sequence

from .models import ProbeOutcome, SecurityHeaders, SSLInfo, Vulnerability

# Above this many missing headers every header finding is high, else medium.
MISSING_HEADER_HIGH_THRESHOLD = 4


def _new_id() -> str:
    return str(uuid.uuid4())


def build_vulnerabilities(
    target: str,
    ssl_info: SSLInfo | None,
    security_headers: SecurityHeaders,
    xss_tests: Sequence[ProbeOutcome],
    sql_tests: Sequence[ProbeOutcome],
    id_factory: Callable[[], str] = _new_id,
) -> list[Vulnerability]:
    """Synthesize vulnerabilities; CMS and port results produce none."""
    vulnerabilities: list[Vulnerability] = []

    if ssl_info is not None and not ssl_info.valid:
        vulnerabilities.append(
            Vulnerability(
                id=id_factory(),
                type="ssl",
                severity="critical",
                title="Invalid SSL Certificate",
                description="The SSL certificate is invalid or expired.",
                recommendation="Renew and properly configure SSL certificate.",
                affected_resource=target,
            )
        )

    missing = security_headers.missing_headers
    header_severity = "high" if len(missing) > MISSING_HEADER_HIGH_THRESHOLD else "medium"
    for header in missing:
        vulnerabilities.append(
            Vulnerability(
                id=id_factory(),
                type="headers",
                severity=header_severity,
                title=f"Missing Security Header: {header}",
                description=(
                    f"The {header} header is missing, which could expose your site to attacks."
                ),
                recommendation=f"Add the {header} header to your server configuration.",
                affected_resource=target,
            )
        )

    # One finding per vulnerable payload; not deduplicated by location.
    for test in xss_tests:
        if not test.vulnerable:
            continue
        vulnerabilities.append(
            Vulnerability(
                id=id_factory(),
                type="xss",
                severity="high",
                title="Cross-Site Scripting (XSS) Vulnerability",
                description=f"XSS vulnerability detected in {test.location}.",
                recommendation="Sanitize and validate all user inputs before rendering.",
                affected_resource=target,
            )
        )

    for test in sql_tests:
        if not test.vulnerable:
            continue
        vulnerabilities.append(
            Vulnerability(
                id=id_factory(),
                type="sql",
                severity="critical",
                title="SQL Injection Vulnerability",
                description=f"SQL injection vulnerability detected in {test.location}.",
                recommendation="Use parameterized queries and input validation.",
                affected_resource=target,
            )
        )

    return vulnerabilities
