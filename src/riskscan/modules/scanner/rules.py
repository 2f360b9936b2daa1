"""Detection rule tables.

Header checklist, CMS signatures, injection payloads and port risk levels
are data, not control flow. Defaults live here; a YAML rules file can
replace any table without touching the probes.
"""

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from riskscan.errors import RiskScanError

# Canonical check order; missing headers are reported in this order.
SECURITY_HEADERS: tuple[str, ...] = (
    "Strict-Transport-Security",
    "X-Frame-Options",
    "X-Content-Type-Options",
    "Content-Security-Policy",
    "X-XSS-Protection",
    "Referrer-Policy",
    "Permissions-Policy",
)

# Evaluated in this order; the first CMS reaching the threshold wins.
CMS_SIGNATURES: dict[str, tuple[str, ...]] = {
    "wordpress": (r"wp-content", r"wp-includes", r"wordpress", r"wp-json"),
    "drupal": (r"drupal", r"sites/default", r"core/misc"),
    "joomla": (r"joomla", r"components/com_", r"administrator"),
    "magento": (r"magento", r"static/version", r"skin/frontend"),
}

XSS_PAYLOADS: tuple[str, ...] = (
    '<script>alert("XSS")</script>',
    '<img src=x onerror=alert("XSS")>',
    '<svg/onload=alert("XSS")>',
    'javascript:alert("XSS")',
)

SQL_PAYLOADS: tuple[str, ...] = (
    "' OR '1'='1",
    "' OR 1=1--",
    "1' UNION SELECT NULL--",
    "admin'--",
)

# Case-sensitive substrings.
SQL_ERROR_SIGNATURES: tuple[str, ...] = ("SQL syntax", "mysql", "database error")
XSS_MARKERS: tuple[str, ...] = ("alert",)

CANDIDATE_PORTS: tuple[int, ...] = (21, 22, 23, 25, 53, 80, 110, 143, 443, 3306, 3389, 5432, 8080)

PORT_RISKS: dict[int, tuple[str, str]] = {
    21: ("ftp", "high"),
    22: ("ssh", "medium"),
    23: ("telnet", "high"),
    25: ("smtp", "medium"),
    53: ("dns", "low"),
    80: ("http", "info"),
    110: ("pop3", "medium"),
    143: ("imap", "medium"),
    443: ("https", "info"),
    3306: ("mysql", "critical"),
    3389: ("rdp", "critical"),
    5432: ("postgresql", "critical"),
    8080: ("http-alt", "low"),
}


@dataclass(frozen=True)
class CMSRule:
    """Signature patterns for one CMS."""

    name: str
    patterns: tuple[re.Pattern[str], ...]


def compile_cms_rules(table: dict[str, Any]) -> tuple[CMSRule, ...]:
    rules = []
    for name, patterns in table.items():
        compiled = tuple(re.compile(str(p), re.IGNORECASE) for p in patterns)
        rules.append(CMSRule(name=str(name), patterns=compiled))
    return tuple(rules)


@dataclass(frozen=True)
class RuleSet:
    """All data-driven detection tables used by the probes."""

    security_headers: tuple[str, ...] = SECURITY_HEADERS
    cms_rules: tuple[CMSRule, ...] = field(default_factory=lambda: compile_cms_rules(CMS_SIGNATURES))
    cms_match_threshold: int = 2
    xss_payloads: tuple[str, ...] = XSS_PAYLOADS
    xss_markers: tuple[str, ...] = XSS_MARKERS
    sql_payloads: tuple[str, ...] = SQL_PAYLOADS
    sql_error_signatures: tuple[str, ...] = SQL_ERROR_SIGNATURES
    candidate_ports: tuple[int, ...] = CANDIDATE_PORTS
    port_risks: dict[int, tuple[str, str]] = field(default_factory=lambda: dict(PORT_RISKS))


DEFAULT_RULES = RuleSet()


def _str_tuple(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RiskScanError(f"Rules key '{key}' must be a list of strings")
    return tuple(value)


def rules_from_mapping(data: dict[str, Any], base: RuleSet = DEFAULT_RULES) -> RuleSet:
    """Overlay a rules mapping onto *base*; absent keys keep base tables."""
    overrides: dict[str, Any] = {}
    for key in (
        "security_headers",
        "xss_payloads",
        "xss_markers",
        "sql_payloads",
        "sql_error_signatures",
    ):
        if key in data:
            overrides[key] = _str_tuple(data, key)

    try:
        if "cms_signatures" in data:
            overrides["cms_rules"] = compile_cms_rules(dict(data["cms_signatures"]))
        if "cms_match_threshold" in data:
            overrides["cms_match_threshold"] = int(data["cms_match_threshold"])
        if "candidate_ports" in data:
            overrides["candidate_ports"] = tuple(int(p) for p in data["candidate_ports"])
        if "port_risks" in data:
            overrides["port_risks"] = {
                int(port): (str(entry["service"]), str(entry["risk"]))
                for port, entry in dict(data["port_risks"]).items()
            }
    except (TypeError, ValueError, KeyError, re.error) as exc:
        raise RiskScanError(f"Malformed rules: {exc}") from exc

    return replace(base, **overrides)


def load_rules(path: Path | None) -> RuleSet:
    """Load a YAML rules file, or the defaults when *path* is None."""
    if path is None:
        return DEFAULT_RULES
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise RiskScanError(f"Cannot read rules file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RiskScanError(f"Rules file {path} must contain a mapping")
    return rules_from_mapping(data)
