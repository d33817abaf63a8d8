# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SARIF 2.1.0 input models.

Only the parts of the log that the SARIF adapter reads are declared; all
other properties are kept on ``model_extra``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _SarifModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class SarifMessage(_SarifModel):
    text: str = ""


class SarifArtifactLocation(_SarifModel):
    uri: str = ""


class SarifRegion(_SarifModel):
    startLine: int | None = None
    endLine: int | None = None


class SarifPhysicalLocation(_SarifModel):
    artifactLocation: SarifArtifactLocation | None = None
    region: SarifRegion | None = None


class SarifLogicalLocation(_SarifModel):
    name: str | None = None
    fullyQualifiedName: str | None = None


class SarifLocation(_SarifModel):
    physicalLocation: SarifPhysicalLocation | None = None
    logicalLocations: list[SarifLogicalLocation] = Field(default_factory=list)


class SarifRuleConfig(_SarifModel):
    level: str | None = None


class SarifRule(_SarifModel):
    id: str
    name: str | None = None
    shortDescription: SarifMessage | None = None
    defaultConfiguration: SarifRuleConfig | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class SarifDriver(_SarifModel):
    name: str
    rules: list[SarifRule] = Field(default_factory=list)


class SarifTool(_SarifModel):
    driver: SarifDriver


class SarifResult(_SarifModel):
    ruleId: str | None = None
    ruleIndex: int | None = None
    level: str | None = None
    kind: str | None = None
    message: SarifMessage = Field(default_factory=SarifMessage)
    locations: list[SarifLocation] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)


class SarifRun(_SarifModel):
    tool: SarifTool
    results: list[SarifResult] | None = None


class SarifLog(_SarifModel):
    version: str | None = None
    runs: list[SarifRun]
