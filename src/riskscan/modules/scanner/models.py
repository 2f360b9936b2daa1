"""Data models for probe results, vulnerabilities and the findings bundle."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

SEVERITIES = ("critical", "high", "medium", "low", "info")
VULNERABILITY_TYPES = ("ssl", "headers", "xss", "sql", "cms", "ports", "other")
SSL_GRADES = ("A+", "A", "B", "C", "D", "F")
CMS_TYPES = ("wordpress", "drupal", "joomla", "magento", "other")
PORT_STATES = ("open", "closed", "filtered")

# Stand-in for "no date" in degraded certificate results.
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class ProbeResult[T]:
    """A probe's value, tagged with whether it is a degraded stand-in."""

    value: T
    degraded: bool = False
    reason: str | None = None

    @classmethod
    def ok(cls, value: T) -> "ProbeResult[T]":
        return cls(value=value)

    @classmethod
    def degrade(cls, value: T, reason: str) -> "ProbeResult[T]":
        return cls(value=value, degraded=True, reason=reason)


@dataclass(frozen=True)
class Vulnerability:
    """A uniform finding synthesized from probe results."""

    id: str
    type: str  # ssl, headers, xss, sql, cms, ports, other
    severity: str  # critical, high, medium, low, info
    title: str
    description: str
    recommendation: str
    affected_resource: str
    cve_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
            "affectedResource": self.affected_resource,
            "cveId": self.cve_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vulnerability":
        return cls(
            id=data["id"],
            type=data["type"],
            severity=data["severity"],
            title=data["title"],
            description=data["description"],
            recommendation=data["recommendation"],
            affected_resource=data["affectedResource"],
            cve_id=data.get("cveId"),
        )


@dataclass
class SSLInfo:
    """Certificate inspection result."""

    valid: bool
    issuer: str
    valid_from: datetime
    valid_to: datetime
    days_until_expiry: int
    protocol: str
    cipher: str | None
    grade: str  # A+, A, B, C, D, F
    errors: list[str] = field(default_factory=list)

    @classmethod
    def connection_failed(cls) -> "SSLInfo":
        return cls(
            valid=False,
            issuer="Unknown",
            valid_from=EPOCH,
            valid_to=EPOCH,
            days_until_expiry=0,
            protocol="Unknown",
            cipher=None,
            grade="F",
            errors=["Failed to connect"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "issuer": self.issuer,
            "validFrom": _iso(self.valid_from),
            "validTo": _iso(self.valid_to),
            "daysUntilExpiry": self.days_until_expiry,
            "protocol": self.protocol,
            "cipher": self.cipher,
            "grade": self.grade,
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SSLInfo":
        return cls(
            valid=data["valid"],
            issuer=data["issuer"],
            valid_from=_parse_dt(data.get("validFrom")) or EPOCH,
            valid_to=_parse_dt(data.get("validTo")) or EPOCH,
            days_until_expiry=data["daysUntilExpiry"],
            protocol=data["protocol"],
            cipher=data.get("cipher"),
            grade=data["grade"],
            errors=list(data.get("errors", [])),
        )


@dataclass
class SecurityHeaders:
    """Presence of the seven checked security headers."""

    strict_transport_security: bool = False
    x_frame_options: bool = False
    x_content_type_options: bool = False
    content_security_policy: bool = False
    x_xss_protection: bool = False
    referrer_policy: bool = False
    permissions_policy: bool = False
    missing_headers: list[str] = field(default_factory=list)
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "strictTransportSecurity": self.strict_transport_security,
            "xFrameOptions": self.x_frame_options,
            "xContentTypeOptions": self.x_content_type_options,
            "contentSecurityPolicy": self.content_security_policy,
            "xXSSProtection": self.x_xss_protection,
            "referrerPolicy": self.referrer_policy,
            "permissionsPolicy": self.permissions_policy,
            "missingHeaders": list(self.missing_headers),
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecurityHeaders":
        return cls(
            strict_transport_security=data["strictTransportSecurity"],
            x_frame_options=data["xFrameOptions"],
            x_content_type_options=data["xContentTypeOptions"],
            content_security_policy=data["contentSecurityPolicy"],
            x_xss_protection=data["xXSSProtection"],
            referrer_policy=data["referrerPolicy"],
            permissions_policy=data["permissionsPolicy"],
            missing_headers=list(data.get("missingHeaders", [])),
            score=data["score"],
        )


@dataclass
class CMSInfo:
    """CMS fingerprinting result. Version and vulnerabilities are never filled."""

    detected: bool
    cms_type: str | None = None  # wordpress, drupal, joomla, magento, other
    version: str | None = None
    vulnerabilities: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "detected": self.detected,
            "cmsType": self.cms_type,
            "version": self.version,
            "vulnerabilities": list(self.vulnerabilities),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CMSInfo":
        return cls(
            detected=data["detected"],
            cms_type=data.get("cmsType"),
            version=data.get("version"),
            vulnerabilities=list(data.get("vulnerabilities", [])),
        )


@dataclass
class ProbeOutcome:
    """One evaluated injection payload."""

    test_type: str
    vulnerable: bool
    payload: str
    location: str
    severity: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "testType": self.test_type,
            "vulnerable": self.vulnerable,
            "payload": self.payload,
            "location": self.location,
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProbeOutcome":
        return cls(
            test_type=data["testType"],
            vulnerable=data["vulnerable"],
            payload=data["payload"],
            location=data["location"],
            severity=data["severity"],
        )


@dataclass
class PortInfo:
    """State of one candidate port."""

    port: int
    state: str  # open, closed, filtered
    service: str | None = None
    version: str | None = None
    risk: str = "info"

    def to_dict(self) -> dict[str, Any]:
        return {
            "port": self.port,
            "state": self.state,
            "service": self.service,
            "version": self.version,
            "risk": self.risk,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PortInfo":
        return cls(
            port=data["port"],
            state=data["state"],
            service=data.get("service"),
            version=data.get("version"),
            risk=data.get("risk", "info"),
        )


@dataclass
class Findings:
    """Everything a completed scan produced."""

    vulnerabilities: list[Vulnerability]
    ssl_info: SSLInfo | None
    security_headers: SecurityHeaders
    cms_detection: CMSInfo | None
    xss_tests: list[ProbeOutcome] = field(default_factory=list)
    sql_injection_tests: list[ProbeOutcome] = field(default_factory=list)
    open_ports: list[PortInfo] = field(default_factory=list)
    degraded_probes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "sslInfo": self.ssl_info.to_dict() if self.ssl_info else None,
            "securityHeaders": self.security_headers.to_dict(),
            "cmsDetection": self.cms_detection.to_dict() if self.cms_detection else None,
            "xssTests": [t.to_dict() for t in self.xss_tests],
            "sqlInjectionTests": [t.to_dict() for t in self.sql_injection_tests],
            "openPorts": [p.to_dict() for p in self.open_ports],
            "degradedProbes": dict(self.degraded_probes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Findings":
        ssl_info = data.get("sslInfo")
        cms = data.get("cmsDetection")
        return cls(
            vulnerabilities=[Vulnerability.from_dict(v) for v in data.get("vulnerabilities", [])],
            ssl_info=SSLInfo.from_dict(ssl_info) if ssl_info else None,
            security_headers=SecurityHeaders.from_dict(data["securityHeaders"]),
            cms_detection=CMSInfo.from_dict(cms) if cms else None,
            xss_tests=[ProbeOutcome.from_dict(t) for t in data.get("xssTests", [])],
            sql_injection_tests=[
                ProbeOutcome.from_dict(t) for t in data.get("sqlInjectionTests", [])
            ],
            open_ports=[PortInfo.from_dict(p) for p in data.get("openPorts", [])],
            degraded_probes=dict(data.get("degradedProbes", {})),
        )
