# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Raw and reconciled finding models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from concord.core.constants import Category, FindingKind, Severity


class Locator(BaseModel):
    """Where a scanner says the issue lives, as the scanner reported it."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    path: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    resource: str | None = None

    def __str__(self) -> str:
        base = self.path or self.resource or ""
        if self.path and self.start_line is not None:
            end = self.end_line if self.end_line is not None else self.start_line
            if end != self.start_line:
                return f"{base}:{self.start_line}-{end}"
            return f"{base}:{self.start_line}"
        if self.path and self.resource:
            return f"{base}#{self.resource}"
        return base


class RawFinding(BaseModel):
    """A single unreconciled record emitted by one scanner adapter."""

    model_config = ConfigDict(frozen=True)

    source_tool: str
    rule_id: str
    raw_severity: str | None = None
    locator: Locator = Field(default_factory=Locator)
    title: str = ""
    message: str = ""
    kind: FindingKind = FindingKind.GENERIC
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Native fields the adapter did not consume; never interpreted",
    )
    origin: str = Field(default="", description="Report file this record came from")
    position: int = Field(default=0, ge=0, description="Index of the record in its report")


class RawRef(BaseModel):
    """Audit reference from a reconciled finding back to one raw record."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    tool: str
    rule_id: str
    severity: str | None
    locator: str
    title: str
    message: str
    kind: FindingKind
    report: str
    position: int
    extra: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: RawFinding) -> RawRef:
        return cls(
            tool=raw.source_tool,
            rule_id=raw.rule_id,
            severity=raw.raw_severity,
            locator=str(raw.locator),
            title=raw.title,
            message=raw.message,
            kind=raw.kind,
            report=raw.origin,
            position=raw.position,
            extra=raw.extra,
        )


class Finding(BaseModel):
    """One reconciled, tool-agnostic security issue."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Deterministic ID, e.g. CONCORD-3f2a9c0d1b7e4a65")
    source_tools: list[str] = Field(min_length=1)
    rule_ids: dict[str, list[str]] = Field(alias="ruleId")
    resource_locator: str
    category: Category
    severity: Severity
    description: str
    match_score: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Weakest member attachment score; None for single-record findings",
    )
    raw_refs: list[RawRef] = Field(min_length=1)

    @property
    def is_corroborated(self) -> bool:
        return len(self.source_tools) > 1
