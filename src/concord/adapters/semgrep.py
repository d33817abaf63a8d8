# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Semgrep JSON output (``semgrep --json``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from concord.adapters.base import ScannerAdapter, leftover
from concord.adapters.registry import adapter
from concord.core.constants import FindingKind
from concord.core.exceptions import ParseError
from concord.models.finding import Locator, RawFinding

_ALLOW = ConfigDict(extra="allow")


class SemgrepPosition(BaseModel):
    model_config = _ALLOW

    line: int | None = None


class SemgrepExtra(BaseModel):
    model_config = _ALLOW

    message: str = ""
    severity: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class SemgrepResult(BaseModel):
    model_config = _ALLOW

    check_id: str = Field(min_length=1)
    path: str
    start: SemgrepPosition = Field(default_factory=SemgrepPosition)
    end: SemgrepPosition = Field(default_factory=SemgrepPosition)
    extra: SemgrepExtra = Field(default_factory=SemgrepExtra)


class SemgrepReport(BaseModel):
    model_config = _ALLOW

    results: list[SemgrepResult]


def _title(check_id: str, metadata: dict[str, Any]) -> str:
    title = metadata.get("title")
    if isinstance(title, str) and title:
        return title
    return check_id.rsplit(".", 1)[-1].replace("-", " ")


@adapter
class SemgrepAdapter(ScannerAdapter):
    tool_name = "semgrep"
    description = "Semgrep static analysis"

    def extract(self, data: Any) -> list[RawFinding]:
        if not isinstance(data, dict) or "results" not in data:
            raise ParseError("Semgrep report must be an object with a 'results' key")
        report = self.validate(SemgrepReport, data)

        findings: list[RawFinding] = []
        for result in report.results:
            extra = leftover(result)
            nested = leftover(result.extra)
            if result.extra.metadata:
                nested["metadata"] = result.extra.metadata
            if nested:
                extra["extra"] = nested
            secret = result.check_id.startswith("generic.secrets.")
            findings.append(
                RawFinding(
                    source_tool=self.tool_name,
                    rule_id=result.check_id,
                    raw_severity=result.extra.severity,
                    locator=Locator(
                        path=result.path,
                        start_line=result.start.line,
                        end_line=result.end.line,
                    ),
                    title=_title(result.check_id, result.extra.metadata),
                    message=result.extra.message,
                    kind=FindingKind.SECRET if secret else FindingKind.CODE,
                    extra=extra,
                )
            )
        return findings
