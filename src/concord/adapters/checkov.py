# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Checkov JSON output (``checkov -o json``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from concord.adapters.base import ScannerAdapter, leftover
from concord.adapters.registry import adapter
from concord.core.constants import FindingKind
from concord.core.exceptions import ParseError
from concord.models.finding import Locator, RawFinding


class CheckovCheck(BaseModel):
    model_config = ConfigDict(extra="allow")

    check_id: str = Field(min_length=1)
    check_name: str = ""
    severity: str | None = None
    file_path: str | None = None
    file_line_range: list[int] | None = None
    resource: str | None = None


class CheckovResults(BaseModel):
    model_config = ConfigDict(extra="allow")

    failed_checks: list[CheckovCheck] = Field(default_factory=list)


class CheckovBlock(BaseModel):
    """Output for one framework (terraform, secrets, ...)."""

    model_config = ConfigDict(extra="allow")

    check_type: str | None = None
    results: CheckovResults


def _is_summary_only(block: dict[str, Any]) -> bool:
    # A clean run prints only the counters
    return "results" not in block and "failed" in block and "passed" in block


@adapter
class CheckovAdapter(ScannerAdapter):
    tool_name = "checkov"
    description = "Checkov infrastructure-as-code scanner"

    def extract(self, data: Any) -> list[RawFinding]:
        if isinstance(data, dict):
            blocks = [data]
        elif isinstance(data, list):
            blocks = data
        else:
            raise ParseError(f"Expected an object or array, got {type(data).__name__}")

        findings: list[RawFinding] = []
        for i, block in enumerate(blocks):
            if not isinstance(block, dict):
                raise ParseError(f"Checkov block {i} is not an object")
            if _is_summary_only(block):
                continue
            parsed = self.validate(CheckovBlock, block, what=f"block {i}")
            for check in parsed.results.failed_checks:
                findings.append(self._to_raw(check, parsed.check_type))
        return findings

    def _to_raw(self, check: CheckovCheck, check_type: str | None) -> RawFinding:
        start = end = None
        if check.file_line_range:
            start = check.file_line_range[0]
            end = check.file_line_range[-1]
        extra = leftover(check)
        if check_type:
            extra.setdefault("check_type", check_type)
        return RawFinding(
            source_tool=self.tool_name,
            rule_id=check.check_id,
            raw_severity=check.severity,
            locator=Locator(
                path=check.file_path,
                start_line=start,
                end_line=end,
                resource=check.resource,
            ),
            title=check.check_name,
            message=check.check_name,
            kind=FindingKind.SECRET if check_type == "secrets" else FindingKind.MISCONFIGURATION,
            extra=extra,
        )
