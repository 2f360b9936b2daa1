"""Scan report rendering for the console."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .models import Findings

SEVERITY_ORDER = ["critical", "high", "medium", "low", "info"]
SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
    "info": "dim",
}


def score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def vulnerability_table(findings: Findings) -> Table:
    """Vulnerabilities sorted by severity, most severe first."""
    table = Table(title="Vulnerabilities", show_lines=False)
    table.add_column("Severity")
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Recommendation", overflow="fold")

    ranked = sorted(
        findings.vulnerabilities,
        key=lambda v: SEVERITY_ORDER.index(v.severity) if v.severity in SEVERITY_ORDER else 99,
    )
    for vuln in ranked:
        style = SEVERITY_STYLES.get(vuln.severity, "")
        table.add_row(
            f"[{style}]{vuln.severity.upper()}[/{style}]",
            vuln.type,
            vuln.title,
            vuln.recommendation,
        )
    return table


def print_findings_summary(
    console: Console,
    target: str,
    risk_score: int | None,
    findings: Findings | None,
) -> None:
    """Print the score, probe summaries and vulnerabilities of a finished scan."""
    if risk_score is not None:
        style = score_style(risk_score)
        console.print(f"[bold]Risk score for {target}:[/bold] [{style}]{risk_score}/100[/{style}]")

    if findings is None:
        return

    summary = Table(title="Probes", show_header=False)
    summary.add_column("Probe", style="bold")
    summary.add_column("Result")

    ssl = findings.ssl_info
    if ssl is not None:
        ssl_text = f"grade {ssl.grade}, {ssl.days_until_expiry} days left, {ssl.protocol}"
        if ssl.errors:
            ssl_text += f" ({'; '.join(ssl.errors)})"
        summary.add_row("SSL", ssl_text)

    headers = findings.security_headers
    summary.add_row(
        "Headers",
        f"score {headers.score}, missing: {', '.join(headers.missing_headers) or 'none'}",
    )

    cms = findings.cms_detection
    summary.add_row("CMS", cms.cms_type if cms and cms.detected else "not detected")

    xss_hits = sum(1 for t in findings.xss_tests if t.vulnerable)
    sql_hits = sum(1 for t in findings.sql_injection_tests if t.vulnerable)
    summary.add_row("XSS", f"{xss_hits}/{len(findings.xss_tests)} payloads reflected")
    summary.add_row("SQLi", f"{sql_hits}/{len(findings.sql_injection_tests)} payloads errored")

    if findings.open_ports:
        ports = ", ".join(f"{p.port}/{p.service or '?'} ({p.risk})" for p in findings.open_ports)
        summary.add_row("Open ports", ports)

    for probe, reason in findings.degraded_probes.items():
        summary.add_row(f"[yellow]{probe}[/yellow]", f"[yellow]degraded: {reason}[/yellow]")

    console.print(summary)

    if not findings.vulnerabilities:
        console.print("[green]No vulnerabilities found.[/green]")
        return
    console.print(vulnerability_table(findings))
