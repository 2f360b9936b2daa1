"""Security header presence analysis."""

import logging
import math
from collections.abc import Mapping, Sequence

import httpx

from riskscan.tools.http import HTTPClient, lookup_headers

from .models import ProbeResult, SecurityHeaders
from .rules import SECURITY_HEADERS

logger = logging.getLogger(__name__)

# Reported instead of header names when the page could not be fetched.
ALL_HEADERS_MISSING = "All headers"

_FIELD_NAMES = {
    "strict-transport-security": "strict_transport_security",
    "x-frame-options": "x_frame_options",
    "x-content-type-options": "x_content_type_options",
    "content-security-policy": "content_security_policy",
    "x-xss-protection": "x_xss_protection",
    "referrer-policy": "referrer_policy",
    "permissions-policy": "permissions_policy",
}


def header_score(missing_count: int, total: int = len(SECURITY_HEADERS)) -> int:
    """round((total - missing) / total * 100), halves rounded up."""
    if total <= 0:
        return 0
    return math.floor((total - missing_count) / total * 100 + 0.5)


def build_security_headers(
    headers: Mapping[str, str],
    checklist: Sequence[str] = SECURITY_HEADERS,
) -> SecurityHeaders:
    """Check *headers* against the checklist, keeping checklist order."""
    found = lookup_headers(headers, checklist)
    result = SecurityHeaders()
    missing: list[str] = []
    for name in checklist:
        present = found[name] is not None
        field_name = _FIELD_NAMES.get(name.lower())
        if field_name:
            setattr(result, field_name, present)
        if not present:
            missing.append(name)
    result.missing_headers = missing
    result.score = header_score(len(missing), len(checklist))
    return result


def fetch_failed_headers() -> SecurityHeaders:
    return SecurityHeaders(missing_headers=[ALL_HEADERS_MISSING], score=0)


async def analyze_security_headers(
    client: HTTPClient,
    target: str,
    checklist: Sequence[str] = SECURITY_HEADERS,
) -> ProbeResult[SecurityHeaders]:
    """Fetch *target* and report which security headers are present."""
    try:
        response = await client.get(target)
    except httpx.HTTPError as exc:
        logger.warning("Header fetch for %s failed: %s", target, exc)
        return ProbeResult.degrade(fetch_failed_headers(), f"fetch failed: {exc}")
    return ProbeResult.ok(build_security_headers(response.headers, checklist))
