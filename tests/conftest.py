"""Test configuration and fixtures for riskscan."""

import os
import socket
import ssl
import tempfile
import threading
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from riskscan.config import ScanSettings
from riskscan.modules.jobs import ProbeSuite, SqlJobStore
from riskscan.modules.scanner.headers import build_security_headers
from riskscan.modules.scanner.models import CMSInfo, ProbeResult, SSLInfo


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_env(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests away from the real home directory and RISKSCAN_* variables."""
    for key in list(os.environ):
        if key.startswith("RISKSCAN_"):
            monkeypatch.delenv(key)
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(temp_dir)
    return home


@pytest.fixture
def db_url(temp_dir: Path) -> str:
    """SQLite database file inside the temp directory."""
    return f"sqlite:///{temp_dir / 'scans.db'}"


@pytest.fixture
def store(db_url: str) -> SqlJobStore:
    return SqlJobStore.from_url(db_url)


@pytest.fixture
def settings(db_url: str) -> ScanSettings:
    return ScanSettings(db_url=db_url)


def make_certificate(
    not_before: datetime,
    not_after: datetime,
    issuer_cn: str | None = "Test CA",
    issuer_org: str | None = None,
) -> tuple[x509.Certificate, ec.EllipticCurvePrivateKey]:
    """Mint a self-signed certificate with the given validity window."""
    key = ec.generate_private_key(ec.SECP256R1())
    attrs = []
    if issuer_cn:
        attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, issuer_cn))
    if issuer_org:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, issuer_org))
    name = x509.Name(attrs)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )
    return cert, key


def make_certificate_der(not_before: datetime, not_after: datetime, **kwargs) -> bytes:
    cert, _ = make_certificate(not_before, not_after, **kwargs)
    return cert.public_bytes(serialization.Encoding.DER)


@pytest.fixture
def cert_factory() -> Callable[..., bytes]:
    """Build DER certificates expiring a number of days from now."""

    def factory(days_left: float, days_old: float = 30, **kwargs) -> bytes:
        now = datetime.now(UTC)
        return make_certificate_der(
            now - timedelta(days=days_old), now + timedelta(days=days_left), **kwargs
        )

    return factory


def healthy_ssl() -> SSLInfo:
    now = datetime.now(UTC)
    return SSLInfo(
        valid=True,
        issuer="Test CA",
        valid_from=now - timedelta(days=30),
        valid_to=now + timedelta(days=200),
        days_until_expiry=200,
        protocol="TLSv1.3",
        cipher="TLS_AES_128_GCM_SHA256",
        grade="A+",
    )


def static_probe(value, degraded_reason: str | None = None):
    """Async probe returning a fixed result."""

    async def probe(target: str) -> ProbeResult:
        if degraded_reason:
            return ProbeResult.degrade(value, degraded_reason)
        return ProbeResult.ok(value)

    return probe


def make_probe_suite(**overrides) -> ProbeSuite:
    """A suite of canned probes describing a well-configured site."""
    all_headers = {
        "Strict-Transport-Security": "max-age=31536000",
        "X-Frame-Options": "DENY",
        "X-Content-Type-Options": "nosniff",
        "Content-Security-Policy": "default-src 'self'",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "no-referrer",
        "Permissions-Policy": "geolocation=()",
    }
    probes = {
        "ssl": static_probe(healthy_ssl()),
        "headers": static_probe(build_security_headers(all_headers)),
        "cms": static_probe(CMSInfo(detected=False)),
        "xss": static_probe([]),
        "sql": static_probe([]),
        "ports": static_probe([]),
    }
    probes.update(overrides)
    return ProbeSuite(**probes)


@pytest.fixture
def canned_probe() -> Callable[..., Callable]:
    return static_probe


@pytest.fixture
def make_suite() -> Callable[..., ProbeSuite]:
    return make_probe_suite


@pytest.fixture
def healthy_ssl_info() -> SSLInfo:
    return healthy_ssl()


@pytest.fixture
def expired_tls_server(temp_dir: Path) -> Generator[int, None, None]:
    """Serve an expired self-signed certificate on 127.0.0.1; yields the port."""
    now = datetime.now(UTC)
    cert, key = make_certificate(now - timedelta(days=400), now - timedelta(days=10))
    cert_file = temp_dir / "server.pem"
    key_file = temp_dir / "server.key"
    cert_file.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_file.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(cert_file, key_file)

    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen()
    listener.settimeout(0.2)
    stop = threading.Event()

    def serve() -> None:
        while not stop.is_set():
            try:
                conn, _ = listener.accept()
            except TimeoutError:
                continue
            except OSError:
                return
            conn.settimeout(5)
            with conn:
                # The verifying handshake is expected to abort.
                try:
                    with context.wrap_socket(conn, server_side=True) as tls:
                        tls.recv(1)
                except OSError:
                    pass

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    try:
        yield listener.getsockname()[1]
    finally:
        stop.set()
        thread.join(timeout=5)
        listener.close()
