# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for clustering and merging in the correlation engine."""

from __future__ import annotations

import itertools
import json
import re

import pytest

from concord.adapters import parse_report
from concord.core.config import Settings
from concord.core.constants import Category, FindingKind, Severity
from concord.correlation.engine import (
    CorrelationEngine,
    UnionFind,
    derive_finding_id,
    max_severity,
)
from concord.models.finding import Locator, RawFinding
from concord.tables import build_tables

ID_RE = re.compile(r"^CONCORD-[0-9a-f]{16}$")

CUSTOM_TABLES = {
    "equivalences": [
        {"family": "public-ingress", "rules": {"toola": ["A-1"], "toolb": ["B-7"], "toolc": ["C-3"]}},
    ],
}


def _raw(
    tool: str = "toola",
    rule: str = "A-1",
    severity: str | None = "high",
    start: int | None = 12,
    end: int | None = None,
    message: str = "Security group allows public ingress on port 22",
    path: str | None = "main.tf",
    origin: str = "",
    position: int = 0,
) -> RawFinding:
    return RawFinding(
        source_tool=tool,
        rule_id=rule,
        raw_severity=severity,
        locator=Locator(path=path, start_line=start, end_line=end),
        message=message,
        kind=FindingKind.GENERIC,
        origin=origin or f"{tool}.json",
        position=position,
    )


def _engine(threshold: float = 0.6) -> CorrelationEngine:
    settings = Settings(_env_file=None, similarity_threshold=threshold)
    return CorrelationEngine(tables=build_tables(CUSTOM_TABLES), settings=settings)


def _dumps(findings) -> list[dict]:
    return [f.model_dump(mode="json") for f in sorted(findings, key=lambda f: f.id)]


class TestUnionFind:
    def test_groups_ordered_by_smallest_member(self):
        uf = UnionFind(5)
        uf.union(4, 1)
        uf.union(3, 0)
        assert uf.groups() == [[0, 3], [1, 4], [2]]

    def test_transitive(self):
        uf = UnionFind(3)
        uf.union(0, 1)
        uf.union(1, 2)
        assert uf.find(2) == 0
        assert uf.groups() == [[0, 1, 2]]


class TestConcreteScenario:
    """ToolA main.tf:12 high + ToolB main.tf:10-14 critical, equivalent rules."""

    def test_merged_into_one_finding(self):
        findings = _engine().correlate([
            _raw(tool="toola", rule="A-1", severity="high", start=12,
                 message="Security group allows public ingress on port 22"),
            _raw(tool="toolb", rule="B-7", severity="critical", start=10, end=14,
                 message="Public ingress from 0.0.0.0/0 to port 22"),
        ])
        assert len(findings) == 1
        finding = findings[0]
        assert finding.severity == Severity.CRITICAL
        assert finding.source_tools == ["toola", "toolb"]
        assert finding.rule_ids == {"toola": ["A-1"], "toolb": ["B-7"]}
        assert finding.resource_locator == "main.tf:10-14"
        assert finding.category == Category.UNCATEGORIZED
        assert finding.description == "Public ingress from 0.0.0.0/0 to port 22"
        assert [ref.tool for ref in finding.raw_refs] == ["toola", "toolb"]
        assert finding.match_score is not None
        assert finding.match_score >= 0.6
        assert finding.is_corroborated


class TestMergeRules:
    """Properties every merged finding must satisfy."""

    def test_fail_safe_severity(self):
        findings = _engine().correlate([
            _raw(tool="toola", severity="low"),
            _raw(tool="toolb", rule="B-7", severity="low"),
            _raw(tool="toolc", rule="C-3", severity="critical"),
        ])
        assert len(findings) == 1
        assert findings[0].severity == Severity.CRITICAL

    def test_source_tools_match_raw_refs(self):
        findings = _engine().correlate([
            _raw(tool="toolb", rule="B-7"),
            _raw(tool="toola"),
        ])
        (finding,) = findings
        assert finding.source_tools == sorted({ref.tool for ref in finding.raw_refs})

    def test_description_tie_breaks_on_tool_name(self):
        findings = _engine().correlate([
            _raw(tool="toolb", rule="B-7", message="public ingress port 22 from toolb"),
            _raw(tool="toola", message="public ingress port 22 from toola"),
        ])
        (finding,) = findings
        assert finding.description == "public ingress port 22 from toola"

    def test_single_tool_records_pass_through(self):
        raws = [
            _raw(start=3, message="one"),
            _raw(start=30, message="two"),
            _raw(rule="A-9", path="other.tf", message="three"),
        ]
        findings = _engine().correlate(raws)
        assert len(findings) == 3
        for finding in findings:
            assert finding.source_tools == ["toola"]
            assert finding.match_score is None
            assert len(finding.raw_refs) == 1

    def test_same_tool_repeat_is_merged(self):
        findings = _engine().correlate([_raw(position=0), _raw(position=1)])
        (finding,) = findings
        assert finding.source_tools == ["toola"]
        assert finding.rule_ids == {"toola": ["A-1"]}
        assert [ref.position for ref in finding.raw_refs] == [0, 1]

    def test_locator_is_a_hard_gate(self):
        findings = _engine().correlate([
            _raw(tool="toola", start=12),
            _raw(tool="toolb", rule="B-7", start=80),
        ])
        assert len(findings) == 2
        assert {f.resource_locator for f in findings} == {"main.tf:12", "main.tf:80"}

    def test_single_link_transitivity(self):
        # a~b and b~c, while a and c score below the threshold
        findings = _engine().correlate([
            _raw(tool="toola", message="alpha beta gamma delta"),
            _raw(tool="toolb", rule="B-7", message="gamma delta epsilon zeta"),
            _raw(tool="toolc", rule="C-3", severity="medium", message="epsilon zeta eta theta"),
        ])
        assert len(findings) == 1
        assert findings[0].source_tools == ["toola", "toolb", "toolc"]
        assert findings[0].match_score == pytest.approx(0.683333, abs=1e-6)


class TestThresholdBoundary:
    """Family match, same severity, disjoint messages scores exactly 0.6."""

    @pytest.mark.parametrize(
        ("threshold", "expected_findings"),
        [(0.59, 1), (0.60, 1), (0.61, 2)],
    )
    def test_boundary(self, threshold, expected_findings):
        findings = _engine(threshold).correlate([
            _raw(tool="toola", message="alpha beta"),
            _raw(tool="toolb", rule="B-7", message="gamma delta"),
        ])
        assert len(findings) == expected_findings


class TestDeterminism:
    """Same input set, same output, whatever the order."""

    RAWS = [
        _raw(tool="toola", severity="high", start=12, position=0),
        _raw(tool="toolb", rule="B-7", severity="critical", start=10, end=14, position=0),
        _raw(tool="toolc", rule="C-3", severity="medium", start=13, position=0),
        _raw(tool="toola", rule="A-5", path="variables.tf", start=2, position=1),
    ]

    def test_ids_are_well_formed(self):
        for finding in _engine().correlate(self.RAWS):
            assert ID_RE.match(finding.id)

    def test_repeatable(self):
        assert _dumps(_engine().correlate(self.RAWS)) == _dumps(_engine().correlate(self.RAWS))

    def test_order_independent(self):
        expected = _dumps(_engine().correlate(self.RAWS))
        for permutation in itertools.permutations(self.RAWS):
            assert _dumps(_engine().correlate(list(permutation))) == expected

    def test_derive_finding_id_ignores_rule_order(self):
        a = derive_finding_id("main.tf:12", "encryption", ["b:2", "a:1"])
        b = derive_finding_id("main.tf:12", "encryption", ["a:1", "b:2", "a:1"])
        assert a == b
        assert a != derive_finding_id("main.tf:13", "encryption", ["a:1", "b:2"])

    def test_colliding_ids_are_disambiguated(self):
        # Same tool, rule and locator, but too dissimilar to merge
        findings = _engine().correlate([
            _raw(severity="info", message="alpha beta", position=0),
            _raw(severity="critical", message="gamma delta", position=1),
        ])
        assert len(findings) == 2
        ids = {f.id for f in findings}
        assert len(ids) == 2
        for finding_id in ids:
            assert ID_RE.match(finding_id)


class TestMaxSeverity:
    def test_empty_is_info(self):
        assert max_severity([]) == Severity.INFO

    def test_highest_wins(self):
        assert max_severity([Severity.LOW, Severity.HIGH, Severity.MEDIUM]) == Severity.HIGH


class TestCategorizedScenario:
    """Two tools, categorized by the tables, reported through the generic format."""

    TABLES = {
        "categories": {
            "toola": {"open-ingress": "network-exposure"},
            "toolb": {"firewall-too-permissive": "network-exposure"},
        },
        "equivalences": [
            {
                "family": "public-ingress",
                "rules": {"toola": ["open-ingress"], "toolb": ["firewall-too-permissive"]},
            },
        ],
    }

    def test_one_network_exposure_finding(self):
        tool_a = parse_report(json.dumps({
            "tool": "ToolA",
            "findings": [{
                "ruleId": "open-ingress",
                "severity": "high",
                "locator": "main.tf:12",
                "message": "Security group allows public ingress on port 22",
            }],
        }), "generic")
        tool_b = parse_report(json.dumps({
            "tool": "ToolB",
            "findings": [{
                "ruleId": "firewall-too-permissive",
                "severity": "critical",
                "locator": "main.tf:10-14",
                "message": "Public ingress from 0.0.0.0/0 to port 22",
            }],
        }), "generic")
        engine = CorrelationEngine(
            tables=build_tables(self.TABLES),
            settings=Settings(_env_file=None),
        )

        findings = engine.correlate(tool_a + tool_b)

        assert len(findings) == 1
        finding = findings[0]
        assert finding.category == Category.NETWORK_EXPOSURE
        assert finding.severity == Severity.CRITICAL
        assert finding.resource_locator == "main.tf:10-14"
        assert finding.source_tools == ["toola", "toolb"]
        assert finding.rule_ids == {
            "toola": ["open-ingress"],
            "toolb": ["firewall-too-permissive"],
        }
