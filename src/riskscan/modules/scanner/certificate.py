"""Certificate inspection and grading."""

import logging
import math
from collections.abc import Awaitable, Callable
from datetime import datetime

from riskscan.tools.tls import (
    LATEST_TLS_PROTOCOL,
    PeerCertificate,
    decode_certificate,
    fetch_peer_certificate_async,
    utc_now,
)

from .models import ProbeResult, SSLInfo

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS = 30
EXPIRY_NOTICE_DAYS = 90

CertificateFetcher = Callable[[str, int, float], Awaitable[PeerCertificate]]


def days_until(moment: datetime, now: datetime) -> int:
    """Whole days from *now* to *moment*, floored; negative once passed."""
    return math.floor((moment - now).total_seconds() / 86400)


def grade_certificate(valid: bool, days_until_expiry: int, protocol: str | None) -> str:
    """Grade policy, first matching rule wins."""
    if not valid or days_until_expiry < 0:
        return "F"
    if days_until_expiry < EXPIRY_WARNING_DAYS:
        return "C"
    if days_until_expiry < EXPIRY_NOTICE_DAYS:
        return "B"
    return "A+" if protocol == LATEST_TLS_PROTOCOL else "A"


def build_ssl_info(peer: PeerCertificate, now: datetime | None = None) -> SSLInfo:
    """Evaluate a retrieved certificate. Raises ValueError if it cannot be decoded."""
    now = now or utc_now()
    details = decode_certificate(peer.der)
    days = days_until(details.not_after, now)

    errors: list[str] = []
    if not peer.trusted:
        errors.append("Certificate is invalid")
        if peer.trust_error:
            errors.append(peer.trust_error)
    if details.not_before > now:
        errors.append("Certificate is not yet valid")
    if days < 0:
        errors.append("Certificate has expired")
    elif days < EXPIRY_WARNING_DAYS:
        errors.append("Certificate expires soon")

    valid = peer.trusted and details.not_before <= now and days >= 0
    return SSLInfo(
        valid=valid,
        issuer=details.issuer,
        valid_from=details.not_before,
        valid_to=details.not_after,
        days_until_expiry=days,
        protocol=peer.protocol or "Unknown",
        cipher=peer.cipher,
        grade=grade_certificate(valid, days, peer.protocol),
        errors=errors,
    )


async def inspect_certificate(
    host: str,
    port: int = 443,
    timeout: float = 10.0,
    fetch: CertificateFetcher = fetch_peer_certificate_async,
) -> ProbeResult[SSLInfo]:
    """Grade the certificate presented by host:port.

    Connection failures yield the F-graded "Failed to connect" result
    instead of an exception.
    """
    try:
        peer = await fetch(host, port, timeout)
    except (OSError, UnicodeError) as exc:
        # UnicodeError: the host name cannot be IDNA-encoded for lookup.
        logger.warning("TLS connect to %s:%d failed: %s", host, port, exc)
        return ProbeResult.degrade(SSLInfo.connection_failed(), f"TLS connect failed: {exc}")

    try:
        return ProbeResult.ok(build_ssl_info(peer))
    except ValueError as exc:
        logger.warning("Certificate from %s:%d could not be decoded: %s", host, port, exc)
        info = SSLInfo.connection_failed()
        info.errors = [f"Unreadable certificate: {exc}"]
        return ProbeResult.degrade(info, f"certificate decode failed: {exc}")
