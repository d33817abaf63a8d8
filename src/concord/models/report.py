# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unified correlation report models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from concord.core.constants import REPORT_SCHEMA_VERSION
from concord.models.finding import Finding

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParseFailure(BaseModel):
    """A report that could not be turned into raw findings."""

    model_config = _CAMEL

    tool: str
    file: str
    error: str
    error_type: str = "ParseError"


class ReportSummary(BaseModel):
    model_config = _CAMEL

    total_findings: int = 0
    raw_findings: int = 0
    reports_parsed: int = 0
    corroborated_findings: int = 0
    by_severity: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    parse_failures: list[ParseFailure] = Field(default_factory=list)


class ReportMetadata(BaseModel):
    """Run-specific data kept outside the deterministic document."""

    model_config = _CAMEL

    generated_at: datetime
    generator: str


class CorrelationReport(BaseModel):
    """The single output document of a correlation run."""

    model_config = _CAMEL

    schema_version: str = REPORT_SCHEMA_VERSION
    findings: list[Finding] = Field(default_factory=list)
    summary: ReportSummary = Field(default_factory=ReportSummary)
    metadata: ReportMetadata | None = None

    @property
    def has_failures(self) -> bool:
        return bool(self.summary.parse_failures)
