# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Concord's own minimal interchange format, for tools without an adapter.

    {"tool": "mytool",
     "findings": [{"ruleId": "R1", "severity": "high",
                   "locator": "main.tf:10-14", "message": "..."}]}

``locator`` may also be an object with ``path``, ``startLine``, ``endLine``
and ``resource``.

The ``tool`` name is stripped and lowercased like every other source tool, so
``"ToolA"`` is reported as ``toola``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from concord.adapters.base import ScannerAdapter, leftover
from concord.adapters.registry import adapter
from concord.core.constants import FindingKind
from concord.core.exceptions import ParseError
from concord.correlation.locator import parse_locator
from concord.models.finding import Locator, RawFinding


class GenericFinding(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    rule_id: str = Field(alias="ruleId", min_length=1)
    severity: str | None = None
    locator: str | Locator | None = None
    title: str = ""
    message: str = ""
    kind: FindingKind = FindingKind.GENERIC


class GenericReport(BaseModel):
    model_config = ConfigDict(extra="allow")

    tool: str = Field(min_length=1)
    findings: list[GenericFinding]

    @field_validator("tool")
    @classmethod
    def _check_tool(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "tool must not be blank"
            raise ValueError(msg)
        return v


@adapter
class GenericAdapter(ScannerAdapter):
    tool_name = "generic"
    description = "Concord generic findings format"

    def extract(self, data: Any) -> list[RawFinding]:
        if not isinstance(data, dict) or "findings" not in data:
            raise ParseError("Generic report must be an object with a 'findings' key")
        report = self.validate(GenericReport, data)
        tool = report.tool.strip().lower()

        findings: list[RawFinding] = []
        for item in report.findings:
            if isinstance(item.locator, str):
                locator = parse_locator(item.locator)
            else:
                locator = item.locator or Locator()
            findings.append(
                RawFinding(
                    source_tool=tool,
                    rule_id=item.rule_id,
                    raw_severity=item.severity,
                    locator=locator,
                    title=item.title,
                    message=item.message or item.title,
                    kind=item.kind,
                    extra=leftover(item),
                )
            )
        return findings
