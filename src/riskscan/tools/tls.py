"""Raw TLS connect capability for certificate inspection.

This is the one place in the package that completes a handshake with
certificate verification switched off, so that whatever certificate the
peer presents can be retrieved and graded. Trust is then checked with a
separate, fully verifying handshake.
"""

import asyncio
import socket
import ssl
from dataclasses import dataclass
from datetime import UTC, datetime

from cryptography import x509
from cryptography.x509.oid import NameOID

LATEST_TLS_PROTOCOL = "TLSv1.3"


@dataclass
class PeerCertificate:
    """What a single inspection handshake revealed."""

    der: bytes
    protocol: str | None
    cipher: str | None
    trusted: bool
    trust_error: str | None = None


@dataclass
class CertificateDetails:
    """Decoded fields of an X.509 certificate."""

    issuer: str
    not_before: datetime
    not_after: datetime


def create_inspection_context() -> ssl.SSLContext:
    """Return a context that accepts any certificate. Inspection only."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def verify_chain(host: str, port: int = 443, timeout: float = 10.0) -> tuple[bool, str | None]:
    """Handshake with full verification; return (trusted, reason)."""
    context = ssl.create_default_context()
    try:
        with socket.create_connection((host, port), timeout=timeout) as sock:
            with context.wrap_socket(sock, server_hostname=host):
                return True, None
    except ssl.SSLCertVerificationError as exc:
        return False, exc.verify_message or str(exc)
    except OSError as exc:
        return False, str(exc)


def fetch_peer_certificate(host: str, port: int = 443, timeout: float = 10.0) -> PeerCertificate:
    """Connect to host:port and return the presented certificate.

    Raises OSError (including ssl.SSLError, socket.timeout, socket.gaierror)
    when no handshake could be completed.
    """
    context = create_inspection_context()
    with socket.create_connection((host, port), timeout=timeout) as sock:
        with context.wrap_socket(sock, server_hostname=host) as ssock:
            der = ssock.getpeercert(binary_form=True)
            cipher = ssock.cipher()
            protocol = ssock.version()

    if not der:
        raise ssl.SSLError(f"{host}:{port} presented no certificate")

    trusted, reason = verify_chain(host, port, timeout)
    return PeerCertificate(
        der=der,
        protocol=protocol,
        cipher=cipher[0] if cipher else None,
        trusted=trusted,
        trust_error=reason,
    )


async def fetch_peer_certificate_async(
    host: str, port: int = 443, timeout: float = 10.0
) -> PeerCertificate:
    """Run :func:`fetch_peer_certificate` off the event loop."""
    return await asyncio.to_thread(fetch_peer_certificate, host, port, timeout)


def _name_value(name: x509.Name, *oids) -> str | None:
    for oid in oids:
        attrs = name.get_attributes_for_oid(oid)
        if attrs:
            return str(attrs[0].value)
    return None


def decode_certificate(der: bytes) -> CertificateDetails:
    """Decode a DER certificate. Raises ValueError on malformed input."""
    cert = x509.load_der_x509_certificate(der)
    return CertificateDetails(
        issuer=_name_value(cert.issuer, NameOID.COMMON_NAME, NameOID.ORGANIZATION_NAME)
        or "Unknown",
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
    )


def utc_now() -> datetime:
    return datetime.now(UTC)
