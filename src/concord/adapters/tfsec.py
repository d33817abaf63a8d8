# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""tfsec JSON output (``tfsec --format json``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from concord.adapters.base import ScannerAdapter, leftover
from concord.adapters.registry import adapter
from concord.core.constants import FindingKind
from concord.core.exceptions import ParseError
from concord.models.finding import Locator, RawFinding


class TfsecLocation(BaseModel):
    model_config = ConfigDict(extra="allow")

    filename: str | None = None
    start_line: int | None = None
    end_line: int | None = None


class TfsecResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    rule_id: str | None = None
    long_id: str | None = None
    rule_description: str = ""
    description: str = ""
    severity: str | None = None
    resource: str | None = None
    location: TfsecLocation | None = None


class TfsecReport(BaseModel):
    model_config = ConfigDict(extra="allow")

    # tfsec prints ``"results": null`` when nothing failed
    results: list[TfsecResult] | None


@adapter
class TfsecAdapter(ScannerAdapter):
    tool_name = "tfsec"
    description = "tfsec Terraform static analyzer"

    def extract(self, data: Any) -> list[RawFinding]:
        if not isinstance(data, dict) or "results" not in data:
            raise ParseError("tfsec report must be an object with a 'results' key")
        report = self.validate(TfsecReport, data)

        findings: list[RawFinding] = []
        for i, result in enumerate(report.results or []):
            rule_id = result.long_id or result.rule_id
            if not rule_id:
                raise ParseError(f"tfsec result {i} has neither long_id nor rule_id")
            location = result.location or TfsecLocation()
            extra = leftover(result)
            if result.long_id and result.rule_id:
                extra["rule_id"] = result.rule_id
            findings.append(
                RawFinding(
                    source_tool=self.tool_name,
                    rule_id=rule_id,
                    raw_severity=result.severity,
                    locator=Locator(
                        path=location.filename,
                        start_line=location.start_line,
                        end_line=location.end_line,
                        resource=result.resource,
                    ),
                    title=result.rule_description,
                    message=result.description or result.rule_description,
                    kind=FindingKind.MISCONFIGURATION,
                    extra=extra,
                )
            )
        return findings
