"""Scanner module - target normalization, probes, aggregation and scoring."""

from .aggregate import build_vulnerabilities
from .certificate import grade_certificate, inspect_certificate
from .cms import detect_cms, fingerprint_cms
from .headers import analyze_security_headers, header_score
from .injection import probe_sql_injection, probe_xss
from .models import (
    CMSInfo,
    Findings,
    PortInfo,
    ProbeOutcome,
    ProbeResult,
    SecurityHeaders,
    SSLInfo,
    Vulnerability,
)
from .ports import scan_ports
from .rules import DEFAULT_RULES, RuleSet, load_rules
from .scoring import calculate_risk_score
from .target import normalize_target, target_host

__all__ = [
    "CMSInfo",
    "DEFAULT_RULES",
    "Findings",
    "PortInfo",
    "ProbeOutcome",
    "ProbeResult",
    "RuleSet",
    "SSLInfo",
    "SecurityHeaders",
    "Vulnerability",
    "analyze_security_headers",
    "build_vulnerabilities",
    "calculate_risk_score",
    "detect_cms",
    "fingerprint_cms",
    "grade_certificate",
    "header_score",
    "inspect_certificate",
    "load_rules",
    "normalize_target",
    "probe_sql_injection",
    "probe_xss",
    "scan_ports",
    "target_host",
]
