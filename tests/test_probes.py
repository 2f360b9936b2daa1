"""Tests for the individual scan probes."""

import socket
import ssl

import httpx
import respx
from httpx import Response

from riskscan.modules.scanner.certificate import (
    build_ssl_info,
    grade_certificate,
    inspect_certificate,
)
from riskscan.modules.scanner.cms import detect_cms, fingerprint_cms
from riskscan.modules.scanner.headers import (
    ALL_HEADERS_MISSING,
    analyze_security_headers,
    build_security_headers,
    header_score,
)
from riskscan.modules.scanner.injection import probe_sql_injection, probe_xss
from riskscan.modules.scanner.ports import scan_ports, tcp_connect_state
from riskscan.modules.scanner.rules import SECURITY_HEADERS, XSS_PAYLOADS
from riskscan.tools.http import HTTPClient
from riskscan.tools.tls import PeerCertificate, fetch_peer_certificate_async

TARGET = "https://example.com"


class TestHeaderScore:
    """Test header_score rounding."""

    def test_all_present_and_all_missing(self):
        assert header_score(0) == 100
        assert header_score(7) == 0

    def test_partial_scores(self):
        assert [header_score(n) for n in range(1, 7)] == [86, 71, 57, 43, 29, 14]

    def test_halves_round_up(self):
        assert header_score(1, total=8) == 88
        assert header_score(3, total=8) == 63


class TestSecurityHeaders:
    """Test header presence analysis."""

    def test_case_insensitive_presence(self):
        result = build_security_headers(
            {"strict-transport-security": "max-age=1", "X-FRAME-OPTIONS": "DENY"}
        )
        assert result.strict_transport_security
        assert result.x_frame_options
        assert not result.content_security_policy
        assert result.missing_headers == list(SECURITY_HEADERS[2:])
        assert result.score == 29

    @respx.mock
    async def test_error_status_still_analyzed(self):
        respx.get(TARGET).mock(
            return_value=Response(404, text="nope", headers={"X-Content-Type-Options": "nosniff"})
        )

        async with HTTPClient() as client:
            result = await analyze_security_headers(client, TARGET)

        assert not result.degraded
        assert result.value.x_content_type_options
        assert "X-Content-Type-Options" not in result.value.missing_headers
        assert len(result.value.missing_headers) == 6

    @respx.mock
    async def test_fetch_failure_uses_sentinel(self):
        respx.get(TARGET).mock(side_effect=httpx.ConnectError("connection refused"))

        async with HTTPClient() as client:
            result = await analyze_security_headers(client, TARGET)

        assert result.degraded
        assert "connection refused" in result.reason
        assert result.value.missing_headers == [ALL_HEADERS_MISSING]
        assert result.value.score == 0
        assert not result.value.strict_transport_security


class TestCMSDetection:
    """Test CMS fingerprinting."""

    def test_two_matches_required(self):
        assert not detect_cms("<link href='/wp-content/style.css'>").detected
        info = detect_cms("<link href='/wp-content/a.css'><script src='/wp-includes/b.js'>")
        assert info.detected
        assert info.cms_type == "wordpress"
        assert info.version is None

    def test_case_insensitive(self):
        assert detect_cms("Powered by DRUPAL, see sites/default/files").cms_type == "drupal"

    def test_first_match_wins(self):
        body = "wp-content wp-includes joomla components/com_users"
        assert detect_cms(body).cms_type == "wordpress"

    @respx.mock
    async def test_fingerprint_from_body(self):
        respx.get(TARGET).mock(
            return_value=Response(200, text="<a href='/administrator'>Joomla! admin</a>")
        )

        async with HTTPClient() as client:
            result = await fingerprint_cms(client, TARGET)

        assert result.value.detected
        assert result.value.cms_type == "joomla"

    @respx.mock
    async def test_fetch_failure_not_detected(self):
        respx.get(TARGET).mock(side_effect=httpx.ReadTimeout("timed out"))

        async with HTTPClient() as client:
            result = await fingerprint_cms(client, TARGET)

        assert result.degraded
        assert not result.value.detected
        assert result.value.cms_type is None


class TestInjectionProbes:
    """Test the XSS and SQL injection probes."""

    @respx.mock
    async def test_xss_reflection(self):
        def reflect(request: httpx.Request) -> Response:
            return Response(200, text=f"<p>You searched for {request.url.params['q']}</p>")

        respx.get(host="example.com").mock(side_effect=reflect)

        async with HTTPClient() as client:
            result = await probe_xss(client, TARGET)

        outcomes = result.value
        assert len(outcomes) == len(XSS_PAYLOADS)
        assert all(o.vulnerable for o in outcomes)
        assert outcomes[0].test_type == "Reflected XSS"
        assert outcomes[0].location == "Query parameter"
        assert outcomes[0].severity == "high"

    @respx.mock
    async def test_xss_clean_page(self):
        respx.get(host="example.com").mock(return_value=Response(200, text="<p>Hello</p>"))

        async with HTTPClient() as client:
            result = await probe_xss(client, TARGET)

        assert len(result.value) == len(XSS_PAYLOADS)
        assert not any(o.vulnerable for o in result.value)

    @respx.mock
    async def test_failed_payloads_are_skipped(self):
        def flaky(request: httpx.Request) -> Response:
            if "img" in request.url.params["q"]:
                raise httpx.ConnectError("reset")
            return Response(200, text="ok")

        respx.get(host="example.com").mock(side_effect=flaky)

        async with HTTPClient() as client:
            result = await probe_xss(client, TARGET)

        assert not result.degraded
        assert len(result.value) == len(XSS_PAYLOADS) - 1
        assert all("img" not in o.payload for o in result.value)

    @respx.mock
    async def test_sql_error_signature(self):
        def database_error(request: httpx.Request) -> Response:
            if request.url.params["id"] == "' OR 1=1--":
                return Response(500, text="You have an error in your SQL syntax")
            return Response(200, text="Product 1")

        respx.get(host="example.com").mock(side_effect=database_error)

        async with HTTPClient() as client:
            result = await probe_sql_injection(client, TARGET)

        vulnerable = [o for o in result.value if o.vulnerable]
        assert [o.payload for o in vulnerable] == ["' OR 1=1--"]
        assert vulnerable[0].test_type == "SQL Injection"
        assert vulnerable[0].severity == "critical"

    @respx.mock
    async def test_sql_signatures_are_case_sensitive(self):
        respx.get(host="example.com").mock(return_value=Response(200, text="MySQL rocks"))

        async with HTTPClient() as client:
            result = await probe_sql_injection(client, TARGET)

        assert not any(o.vulnerable for o in result.value)

    @respx.mock
    async def test_all_payloads_failing_yields_empty_list(self):
        respx.get(host="example.com").mock(side_effect=httpx.ConnectError("down"))

        async with HTTPClient() as client:
            result = await probe_sql_injection(client, TARGET)

        assert result.value == []
        assert not result.degraded


class TestCertificateInspection:
    """Test certificate grading and inspection."""

    def test_grade_policy(self):
        assert grade_certificate(False, 400, "TLSv1.3") == "F"
        assert grade_certificate(True, -1, "TLSv1.3") == "F"
        assert grade_certificate(True, 10, "TLSv1.3") == "C"
        assert grade_certificate(True, 60, "TLSv1.3") == "B"
        assert grade_certificate(True, 200, "TLSv1.3") == "A+"
        assert grade_certificate(True, 200, "TLSv1.2") == "A"

    def test_trusted_long_lived_certificate(self, cert_factory):
        peer = PeerCertificate(
            der=cert_factory(200.5),
            protocol="TLSv1.3",
            cipher="TLS_AES_256_GCM_SHA384",
            trusted=True,
        )
        info = build_ssl_info(peer)
        assert info.valid
        assert info.grade == "A+"
        assert info.days_until_expiry == 200
        assert info.issuer == "Test CA"
        assert info.cipher == "TLS_AES_256_GCM_SHA384"
        assert info.errors == []

    def test_expiring_soon(self, cert_factory):
        peer = PeerCertificate(
            der=cert_factory(10.5), protocol="TLSv1.2", cipher=None, trusted=True
        )
        info = build_ssl_info(peer)
        assert info.valid
        assert info.grade == "C"
        assert info.errors == ["Certificate expires soon"]

    def test_expired_certificate(self, cert_factory):
        peer = PeerCertificate(
            der=cert_factory(-5.5, days_old=400), protocol="TLSv1.3", cipher=None, trusted=False
        )
        info = build_ssl_info(peer)
        assert not info.valid
        assert info.grade == "F"
        assert info.days_until_expiry == -6
        assert "Certificate has expired" in info.errors
        assert "Certificate is invalid" in info.errors

    def test_untrusted_certificate_is_invalid(self, cert_factory):
        peer = PeerCertificate(
            der=cert_factory(300.5), protocol="TLSv1.3", cipher=None, trusted=False
        )
        info = build_ssl_info(peer)
        assert not info.valid
        assert info.grade == "F"
        assert info.errors == ["Certificate is invalid"]

    def test_trust_error_reported(self, cert_factory):
        peer = PeerCertificate(
            der=cert_factory(300.5),
            protocol="TLSv1.3",
            cipher=None,
            trusted=False,
            trust_error="self-signed certificate",
        )
        info = build_ssl_info(peer)
        assert info.errors == ["Certificate is invalid", "self-signed certificate"]

    def test_expiring_today_is_still_valid(self, cert_factory):
        peer = PeerCertificate(
            der=cert_factory(0.5), protocol="TLSv1.3", cipher=None, trusted=True
        )
        info = build_ssl_info(peer)
        assert info.days_until_expiry == 0
        assert info.valid
        assert info.grade == "C"
        assert info.errors == ["Certificate expires soon"]

    def test_issuer_falls_back_to_organization(self, cert_factory):
        der = cert_factory(100.5, issuer_cn=None, issuer_org="Example Org")
        info = build_ssl_info(PeerCertificate(der=der, protocol=None, cipher=None, trusted=True))
        assert info.issuer == "Example Org"
        assert info.protocol == "Unknown"

    async def test_inspect_uses_fetcher(self, cert_factory):
        seen = []

        async def fetch(host: str, port: int, timeout: float) -> PeerCertificate:
            seen.append((host, port, timeout))
            return PeerCertificate(
                der=cert_factory(120.5), protocol="TLSv1.3", cipher=None, trusted=True
            )

        result = await inspect_certificate("example.com", 8443, 3.0, fetch=fetch)
        assert seen == [("example.com", 8443, 3.0)]
        assert not result.degraded
        assert result.value.grade == "A+"

    async def test_connection_failure_degrades(self):
        async def fetch(host: str, port: int, timeout: float) -> PeerCertificate:
            raise ConnectionRefusedError("refused")

        result = await inspect_certificate("example.com", fetch=fetch)
        assert result.degraded
        info = result.value
        assert not info.valid
        assert info.grade == "F"
        assert info.issuer == "Unknown"
        assert info.errors == ["Failed to connect"]
        assert info.valid_from.year == 1970

    async def test_unencodable_host_name_degrades(self):
        result = await inspect_certificate("a" * 64 + ".example.com", timeout=1.0)
        assert result.degraded
        assert result.value.errors == ["Failed to connect"]
        assert result.value.grade == "F"

    async def test_handshake_error_degrades(self):
        async def fetch(host: str, port: int, timeout: float) -> PeerCertificate:
            raise ssl.SSLError("handshake failure")

        result = await inspect_certificate("example.com", fetch=fetch)
        assert result.degraded
        assert result.value.grade == "F"

    async def test_undecodable_certificate_degrades(self):
        async def fetch(host: str, port: int, timeout: float) -> PeerCertificate:
            return PeerCertificate(
                der=b"not a certificate", protocol="TLSv1.3", cipher=None, trusted=True
            )

        result = await inspect_certificate("example.com", fetch=fetch)
        assert result.degraded
        assert result.value.grade == "F"
        assert result.value.errors[0].startswith("Unreadable certificate")


class TestPortProbe:
    """Test the port exposure probe."""

    async def test_disabled_returns_empty(self):
        async def connect(host: str, port: int, timeout: float) -> str:
            raise AssertionError("should not connect")

        result = await scan_ports("example.com", enabled=False, connect=connect)
        assert result.value == []
        assert not result.degraded

    async def test_only_open_ports_reported(self):
        states = {22: "open", 23: "filtered", 443: "open", 3306: "closed"}

        async def connect(host: str, port: int, timeout: float) -> str:
            return states.get(port, "closed")

        result = await scan_ports("example.com", enabled=True, connect=connect)
        ports = {p.port: p for p in result.value}
        assert sorted(ports) == [22, 443]
        assert ports[22].service == "ssh"
        assert ports[22].risk == "medium"
        assert ports[443].risk == "info"
        assert ports[22].state == "open"
        assert ports[22].version is None

    async def test_concurrency_is_bounded(self):
        import asyncio

        running = 0
        peak = 0

        async def connect(host: str, port: int, timeout: float) -> str:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return "closed"

        await scan_ports("example.com", enabled=True, concurrency=3, connect=connect)
        assert peak <= 3

    async def test_unencodable_host_name_degrades(self):
        result = await scan_ports("a" * 64 + ".example.com", enabled=True, ports=(443,))
        assert result.degraded
        assert result.value == []

    async def test_resolution_failure_degrades(self):
        async def connect(host: str, port: int, timeout: float) -> str:
            raise socket.gaierror("Name or service not known")

        result = await scan_ports("nowhere.invalid", enabled=True, connect=connect)
        assert result.degraded
        assert result.value == []


class TestLiveConnections:
    """Handshakes and connects against local sockets."""

    async def test_expired_certificate_over_tls(self, expired_tls_server: int):
        peer = await fetch_peer_certificate_async("127.0.0.1", expired_tls_server, 5.0)
        assert peer.der
        assert peer.trusted is False
        assert peer.trust_error

        result = await inspect_certificate("127.0.0.1", expired_tls_server, 5.0)
        assert not result.degraded
        info = result.value
        assert info.valid is False
        assert info.grade == "F"
        assert info.days_until_expiry < 0
        assert info.issuer == "Test CA"
        assert "Certificate is invalid" in info.errors
        assert "Certificate has expired" in info.errors

    async def test_open_and_closed_ports(self):
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen()
        open_port = listener.getsockname()[1]

        spare = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        spare.bind(("127.0.0.1", 0))
        closed_port = spare.getsockname()[1]
        spare.close()

        try:
            assert await tcp_connect_state("127.0.0.1", open_port, 2.0) == "open"
            assert await tcp_connect_state("127.0.0.1", closed_port, 2.0) == "closed"
        finally:
            listener.close()
