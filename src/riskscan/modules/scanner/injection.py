"""Reflected XSS and error-based SQL injection checks.

Detection is plain substring matching on the response body, so it both
over- and under-reports. Each payload gets one request; a network error on
one payload skips that payload only.
"""

import logging
from collections.abc import Callable, Sequence

import httpx

from riskscan.tools.http import HTTPClient

from .models import ProbeOutcome, ProbeResult
from .rules import SQL_ERROR_SIGNATURES, SQL_PAYLOADS, XSS_MARKERS, XSS_PAYLOADS

logger = logging.getLogger(__name__)

QUERY_LOCATION = "Query parameter"


def xss_reflected(body: str, payload: str, markers: Sequence[str] = XSS_MARKERS) -> bool:
    """The raw payload, or any marker such as ``alert``, appears in the body."""
    return payload in body or any(marker in body for marker in markers)


def sql_error_present(body: str, signatures: Sequence[str] = SQL_ERROR_SIGNATURES) -> bool:
    """Any error signature appears in the body (case-sensitive)."""
    return any(signature in body for signature in signatures)


async def _run_payloads(
    client: HTTPClient,
    target: str,
    param: str,
    payloads: Sequence[str],
    test_type: str,
    severity: str,
    is_vulnerable: Callable[[str, str], bool],
) -> list[ProbeOutcome]:
    outcomes: list[ProbeOutcome] = []
    for payload in payloads:
        try:
            response = await client.get(target, params={param: payload})
        except httpx.HTTPError as exc:
            logger.debug("%s payload %r against %s skipped: %s", test_type, payload, target, exc)
            continue

        outcomes.append(
            ProbeOutcome(
                test_type=test_type,
                vulnerable=is_vulnerable(response.body, payload),
                payload=payload,
                location=QUERY_LOCATION,
                severity=severity,
            )
        )
    return outcomes


async def probe_xss(
    client: HTTPClient,
    target: str,
    payloads: Sequence[str] = XSS_PAYLOADS,
    markers: Sequence[str] = XSS_MARKERS,
) -> ProbeResult[list[ProbeOutcome]]:
    """Send each XSS payload as ``?q=`` and look for reflection.

    Every evaluated payload is returned, vulnerable or not, so a stored job
    shows what was tried. Payloads whose request failed are left out.
    """
    outcomes = await _run_payloads(
        client,
        target,
        "q",
        payloads,
        "Reflected XSS",
        "high",
        lambda body, payload: xss_reflected(body, payload, markers),
    )
    return ProbeResult.ok(outcomes)


async def probe_sql_injection(
    client: HTTPClient,
    target: str,
    payloads: Sequence[str] = SQL_PAYLOADS,
    signatures: Sequence[str] = SQL_ERROR_SIGNATURES,
) -> ProbeResult[list[ProbeOutcome]]:
    """Send each SQLi payload as ``?id=`` and look for database errors.

    Like :func:`probe_xss`, non-vulnerable outcomes are kept too.
    """
    outcomes = await _run_payloads(
        client,
        target,
        "id",
        payloads,
        "SQL Injection",
        "critical",
        lambda body, _payload: sql_error_present(body, signatures),
    )
    return ProbeResult.ok(outcomes)
