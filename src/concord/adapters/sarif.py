# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SARIF 2.1.0 logs from any producing tool.

The source tool of each record is taken from the run's driver name, so a
SARIF log written by Checkov correlates the same way as Checkov's own JSON.
"""

from __future__ import annotations

from typing import Any

from concord.adapters.base import ScannerAdapter, leftover
from concord.adapters.registry import adapter
from concord.core.constants import FindingKind
from concord.core.exceptions import ParseError
from concord.models.finding import Locator, RawFinding
from concord.models.sarif import SarifLog, SarifResult, SarifRule, SarifRun

_SECURITY_SEVERITY = "security-severity"
_DEFAULT_LEVEL = "warning"

_TOOL_KINDS: dict[str, FindingKind] = {
    "checkov": FindingKind.MISCONFIGURATION,
    "tfsec": FindingKind.MISCONFIGURATION,
    "kics": FindingKind.MISCONFIGURATION,
    "semgrep": FindingKind.CODE,
    "codeql": FindingKind.CODE,
    "bandit": FindingKind.CODE,
    "gitleaks": FindingKind.SECRET,
}


def driver_tool_name(run: SarifRun) -> str:
    """``"Semgrep OSS"`` -> ``"semgrep"``."""
    words = run.tool.driver.name.split()
    return words[0].lower() if words else "sarif"


@adapter
class SarifAdapter(ScannerAdapter):
    tool_name = "sarif"
    description = "SARIF 2.1.0 log from any tool"

    def extract(self, data: Any) -> list[RawFinding]:
        if not isinstance(data, dict) or "runs" not in data:
            raise ParseError("SARIF log must be an object with a 'runs' key")
        log = self.validate(SarifLog, data)

        findings: list[RawFinding] = []
        for run in log.runs:
            tool = driver_tool_name(run)
            rules = run.tool.driver.rules
            rules_by_id = {r.id: r for r in rules}
            for i, result in enumerate(run.results or []):
                rule = _resolve_rule(result, rules, rules_by_id)
                rule_id = result.ruleId or (rule.id if rule else None)
                if not rule_id:
                    raise ParseError(f"SARIF result {i} of {tool} has no ruleId")
                findings.append(self._to_raw(tool, rule_id, result, rule))
        return findings

    def _to_raw(
        self,
        tool: str,
        rule_id: str,
        result: SarifResult,
        rule: SarifRule | None,
    ) -> RawFinding:
        title = ""
        if rule is not None:
            if rule.shortDescription and rule.shortDescription.text:
                title = rule.shortDescription.text
            elif rule.name:
                title = rule.name
        message = result.message.text or title
        extra = leftover(result)
        if result.properties:
            extra["properties"] = result.properties
        return RawFinding(
            source_tool=tool,
            rule_id=rule_id,
            raw_severity=_severity(result, rule),
            locator=_locator(result),
            title=title,
            message=message,
            kind=_TOOL_KINDS.get(tool, FindingKind.GENERIC),
            extra=extra,
        )


def _resolve_rule(
    result: SarifResult,
    rules: list[SarifRule],
    rules_by_id: dict[str, SarifRule],
) -> SarifRule | None:
    if result.ruleId and result.ruleId in rules_by_id:
        return rules_by_id[result.ruleId]
    if result.ruleIndex is not None and 0 <= result.ruleIndex < len(rules):
        return rules[result.ruleIndex]
    return None


def _severity(result: SarifResult, rule: SarifRule | None) -> str:
    """A numeric ``security-severity`` wins over the result or rule level."""
    for props in (result.properties, rule.properties if rule else {}):
        score = props.get(_SECURITY_SEVERITY)
        if score is not None and str(score).strip():
            return str(score).strip()
    if result.level:
        return result.level
    if rule is not None and rule.defaultConfiguration and rule.defaultConfiguration.level:
        return rule.defaultConfiguration.level
    return _DEFAULT_LEVEL


def _locator(result: SarifResult) -> Locator:
    if not result.locations:
        return Locator()
    location = result.locations[0]
    resource = None
    if location.logicalLocations:
        logical = location.logicalLocations[0]
        resource = logical.fullyQualifiedName or logical.name

    physical = location.physicalLocation
    if physical is None:
        return Locator(resource=resource)
    path = physical.artifactLocation.uri if physical.artifactLocation else None
    start = end = None
    if physical.region is not None:
        start = physical.region.startLine
        end = physical.region.endLine
    return Locator(path=path or None, start_line=start, end_line=end, resource=resource)
