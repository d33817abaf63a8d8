# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Assemble and serialize the unified correlation report."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from concord.core.constants import SEVERITY_ORDER, SEVERITY_RANK, Category
from concord.models.finding import Finding
from concord.models.report import (
    CorrelationReport,
    ParseFailure,
    ReportMetadata,
    ReportSummary,
)

logger = logging.getLogger("concord.report.emitter")


def sort_findings(findings: Sequence[Finding]) -> list[Finding]:
    """Most severe first, then by ID."""
    return sorted(findings, key=lambda f: (-SEVERITY_RANK[f.severity], f.id))


def summarize(
    findings: Sequence[Finding],
    *,
    raw_findings: int,
    reports_parsed: int,
    parse_failures: Sequence[ParseFailure] = (),
) -> ReportSummary:
    by_severity = {str(sev): 0 for sev in SEVERITY_ORDER}
    by_category = {str(cat): 0 for cat in Category}
    for finding in findings:
        by_severity[str(finding.severity)] += 1
        by_category[str(finding.category)] += 1
    return ReportSummary(
        total_findings=len(findings),
        raw_findings=raw_findings,
        reports_parsed=reports_parsed,
        corroborated_findings=sum(1 for f in findings if f.is_corroborated),
        by_severity=by_severity,
        by_category=by_category,
        parse_failures=list(parse_failures),
    )


def build_report(
    findings: Sequence[Finding],
    *,
    raw_findings: int | None = None,
    reports_parsed: int = 0,
    parse_failures: Sequence[ParseFailure] = (),
    include_metadata: bool = False,
    generator: str | None = None,
) -> CorrelationReport:
    """Build the report document from correlated findings.

    ``raw_findings`` defaults to the number of raw references carried by the
    findings. Metadata is only attached when *include_metadata* is set.
    """
    if raw_findings is None:
        raw_findings = sum(len(f.raw_refs) for f in findings)

    metadata = None
    if include_metadata:
        if generator is None:
            from concord import __version__

            generator = f"concord {__version__}"
        metadata = ReportMetadata(generated_at=datetime.now(UTC), generator=generator)

    return CorrelationReport(
        findings=sort_findings(findings),
        summary=summarize(
            findings,
            raw_findings=raw_findings,
            reports_parsed=reports_parsed,
            parse_failures=parse_failures,
        ),
        metadata=metadata,
    )


def report_to_dict(report: CorrelationReport, *, include_metadata: bool = True) -> dict[str, Any]:
    data = report.model_dump(mode="json", by_alias=True)
    if not include_metadata or data.get("metadata") is None:
        data.pop("metadata", None)
    return data


def render_json(report: CorrelationReport) -> str:
    """Serialize the report; identical reports always give identical text."""
    return _dump(report_to_dict(report))


def canonical_json(report: CorrelationReport) -> str:
    """Serialize the deterministic part of the report (no metadata)."""
    return _dump(report_to_dict(report, include_metadata=False))


def _dump(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_report(report: CorrelationReport, destination: str | Path) -> Path:
    """Write the rendered report to *destination*, creating parent directories."""
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_json(report), encoding="utf-8")
    logger.info("Wrote %d findings to %s", len(report.findings), path)
    return path
