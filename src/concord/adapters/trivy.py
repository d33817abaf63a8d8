# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Trivy JSON output (``trivy ... --format json``).

One report may mix vulnerabilities, misconfigurations and secrets, each
under its own key of every ``Results`` entry.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from concord.adapters.base import ScannerAdapter, leftover
from concord.adapters.registry import adapter
from concord.core.constants import FindingKind
from concord.core.exceptions import ParseError
from concord.models.finding import Locator, RawFinding

_ALLOW = ConfigDict(extra="allow")


class TrivyVulnerability(BaseModel):
    model_config = _ALLOW

    VulnerabilityID: str = Field(min_length=1)
    PkgName: str = ""
    InstalledVersion: str = ""
    Title: str = ""
    Description: str = ""
    Severity: str | None = None


class TrivyCauseMetadata(BaseModel):
    model_config = _ALLOW

    Resource: str | None = None
    StartLine: int | None = None
    EndLine: int | None = None


class TrivyMisconfiguration(BaseModel):
    model_config = _ALLOW

    ID: str | None = None
    AVDID: str | None = None
    Title: str = ""
    Description: str = ""
    Message: str = ""
    Severity: str | None = None
    Status: str = "FAIL"
    CauseMetadata: TrivyCauseMetadata = Field(default_factory=TrivyCauseMetadata)


class TrivySecret(BaseModel):
    model_config = _ALLOW

    RuleID: str = Field(min_length=1)
    Title: str = ""
    Severity: str | None = None
    StartLine: int | None = None
    EndLine: int | None = None


class TrivyResult(BaseModel):
    model_config = _ALLOW

    Target: str = ""
    Vulnerabilities: list[TrivyVulnerability] | None = None
    Misconfigurations: list[TrivyMisconfiguration] | None = None
    Secrets: list[TrivySecret] | None = None


class TrivyReport(BaseModel):
    model_config = _ALLOW

    SchemaVersion: int
    ArtifactName: str | None = None
    Results: list[TrivyResult] | None = None


@adapter
class TrivyAdapter(ScannerAdapter):
    tool_name = "trivy"
    description = "Trivy vulnerability, misconfiguration and secret scanner"

    def extract(self, data: Any) -> list[RawFinding]:
        if not isinstance(data, dict) or "SchemaVersion" not in data:
            raise ParseError("Trivy report must be an object with a 'SchemaVersion' key")
        report = self.validate(TrivyReport, data)

        findings: list[RawFinding] = []
        for result in report.Results or []:
            for vuln in result.Vulnerabilities or []:
                findings.append(self._vulnerability(result.Target, vuln))
            for misconfig in result.Misconfigurations or []:
                if misconfig.Status.upper() != "FAIL":
                    continue
                findings.append(self._misconfiguration(result.Target, misconfig))
            for secret in result.Secrets or []:
                findings.append(self._secret(result.Target, secret))
        return findings

    def _vulnerability(self, target: str, vuln: TrivyVulnerability) -> RawFinding:
        package = vuln.PkgName
        if package and vuln.InstalledVersion:
            package = f"{package}@{vuln.InstalledVersion}"
        return RawFinding(
            source_tool=self.tool_name,
            rule_id=vuln.VulnerabilityID,
            raw_severity=vuln.Severity,
            locator=Locator(path=target or None, resource=package or None),
            title=vuln.Title,
            message=vuln.Title or vuln.Description,
            kind=FindingKind.VULNERABILITY,
            extra=leftover(vuln),
        )

    def _misconfiguration(self, target: str, misconfig: TrivyMisconfiguration) -> RawFinding:
        rule_id = misconfig.AVDID or misconfig.ID
        if not rule_id:
            raise ParseError(f"Trivy misconfiguration in {target!r} has no ID")
        extra = leftover(misconfig)
        if misconfig.ID and misconfig.ID != rule_id:
            extra["ID"] = misconfig.ID
        cause = misconfig.CauseMetadata
        return RawFinding(
            source_tool=self.tool_name,
            rule_id=rule_id,
            raw_severity=misconfig.Severity,
            locator=Locator(
                path=target or None,
                start_line=cause.StartLine,
                end_line=cause.EndLine,
                resource=cause.Resource,
            ),
            title=misconfig.Title,
            message=misconfig.Message or misconfig.Description or misconfig.Title,
            kind=FindingKind.MISCONFIGURATION,
            extra=extra,
        )

    def _secret(self, target: str, secret: TrivySecret) -> RawFinding:
        return RawFinding(
            source_tool=self.tool_name,
            rule_id=secret.RuleID,
            raw_severity=secret.Severity,
            locator=Locator(
                path=target or None,
                start_line=secret.StartLine,
                end_line=secret.EndLine,
            ),
            title=secret.Title,
            message=secret.Title,
            kind=FindingKind.SECRET,
            extra=leftover(secret),
        )
