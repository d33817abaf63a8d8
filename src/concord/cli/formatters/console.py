# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output for correlation reports.

Everything here goes to stderr; stdout is reserved for the JSON document.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from concord import __version__
from concord.adapters import AdapterRegistry
from concord.core.constants import SEVERITY_ORDER, Severity
from concord.models.report import CorrelationReport

console = Console(stderr=True)

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "dim",
}

MAX_LISTED_FINDINGS = 20


def format_report_summary(report: CorrelationReport) -> None:
    """Print a short human summary of a report."""
    summary = report.summary
    console.print()
    console.print(f"[bold]concord v{__version__}[/bold] - Security findings correlation")
    console.print()

    reduction = summary.raw_findings - summary.total_findings
    console.print(
        Panel(
            f"{summary.raw_findings} raw findings from {summary.reports_parsed} reports"
            f" -> {summary.total_findings} findings"
            f"  ({summary.corroborated_findings} corroborated, {reduction} duplicates merged)",
            style="bold green" if not report.has_failures else "yellow",
        )
    )

    if report.findings:
        table = Table(title="Findings", show_lines=False)
        table.add_column("Severity", no_wrap=True)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Category")
        table.add_column("Locator")
        table.add_column("Tools")
        for finding in report.findings[:MAX_LISTED_FINDINGS]:
            color = SEVERITY_COLORS.get(finding.severity, "white")
            table.add_row(
                Text(finding.severity.upper(), style=color),
                finding.id,
                finding.category,
                finding.resource_locator,
                ", ".join(finding.source_tools),
            )
        console.print(table)
        hidden = len(report.findings) - MAX_LISTED_FINDINGS
        if hidden > 0:
            console.print(f"  ... and {hidden} more", style="dim")
    else:
        console.print("  No findings.", style="bold green")

    counts = summary.by_severity
    parts = [f"{counts[str(sev)]} {sev}" for sev in SEVERITY_ORDER if counts.get(str(sev))]
    console.print(f"  Severity: {', '.join(parts) if parts else '0 findings'}")

    for failure in summary.parse_failures:
        console.print(
            f"  Failed: {failure.tool}:{failure.file} ({failure.error_type}) {failure.error}",
            style="red",
        )
    console.print()


def format_tools() -> None:
    """Print the registered adapters."""
    table = Table(title="Supported tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name in AdapterRegistry.names():
        table.add_row(name, AdapterRegistry.get(name).description)
    console.print(table)
