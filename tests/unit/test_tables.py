# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the severity, category and rule-equivalence tables."""

from __future__ import annotations

import pytest

from concord.core.constants import Category, FindingKind, Severity
from concord.core.exceptions import ConfigurationError
from concord.tables import build_tables, load_tables, merge_documents


@pytest.fixture
def tables():
    return load_tables()


class TestNormalizeSeverity:
    """Tool severities map onto the canonical five-tier scale."""

    @pytest.mark.parametrize(
        ("tool", "raw", "expected"),
        [
            ("tfsec", "CRITICAL", Severity.CRITICAL),
            ("trivy", "HIGH", Severity.HIGH),
            ("trivy", "UNKNOWN", Severity.INFO),
            ("checkov", "LOW", Severity.LOW),
            ("sarif", "error", Severity.HIGH),
            ("sarif", "note", Severity.LOW),
            ("semgrep", "ERROR", Severity.HIGH),
            ("semgrep", "WARNING", Severity.MEDIUM),
            ("semgrep", "INFO", Severity.LOW),
        ],
    )
    def test_named_levels(self, tables, tool, raw, expected):
        assert tables.normalize_severity(tool, raw) == expected

    def test_tool_table_overrides_default(self, tables):
        assert tables.normalize_severity("semgrep", "info") == Severity.LOW
        assert tables.normalize_severity("trivy", "info") == Severity.INFO

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            ("9.8", Severity.CRITICAL),
            ("9.0", Severity.CRITICAL),
            ("7.0", Severity.HIGH),
            ("5", Severity.MEDIUM),
            ("3.1", Severity.LOW),
            ("0.0", Severity.INFO),
        ],
    )
    def test_cvss_scores(self, tables, score, expected):
        assert tables.normalize_severity("codeql", score) == expected

    def test_missing_severity_uses_tool_fallback(self, tables):
        assert tables.normalize_severity("checkov", None) == Severity.MEDIUM

    def test_unknown_severity_uses_global_fallback(self, tables):
        assert tables.normalize_severity("mystery", "bogus") == Severity.MEDIUM
        assert tables.normalize_severity("mystery", "") == Severity.MEDIUM

    def test_case_insensitive(self, tables):
        assert tables.normalize_severity("TFSEC", "  High ") == Severity.HIGH


class TestCategorize:
    """Exact rule ids, then globs, then the record kind."""

    def test_exact_rule(self, tables):
        assert tables.categorize("checkov", "CKV_AWS_24") == Category.NETWORK_EXPOSURE
        assert tables.categorize("tfsec", "aws-s3-enable-bucket-encryption") == Category.ENCRYPTION

    def test_rule_lookup_is_case_insensitive(self, tables):
        assert tables.categorize("Checkov", "ckv_aws_24") == Category.NETWORK_EXPOSURE

    def test_glob(self, tables):
        assert tables.categorize("checkov", "CKV_SECRET_2") == Category.SECRET_EXPOSURE

    def test_kind_default_for_tool(self, tables):
        assert (
            tables.categorize("semgrep", "python.lang.security.audit.eval", FindingKind.CODE)
            == Category.CODE_VULNERABILITY
        )

    def test_kind_default_for_any_tool(self, tables):
        assert (
            tables.categorize("trivy", "CVE-2021-23337", FindingKind.VULNERABILITY)
            == Category.DEPENDENCY_VULNERABILITY
        )
        assert tables.categorize("gitleaks", "aws", FindingKind.SECRET) == Category.SECRET_EXPOSURE

    def test_uncategorized(self, tables):
        assert tables.categorize("mystery", "R1", FindingKind.GENERIC) == Category.UNCATEGORIZED
        assert tables.categorize("mystery", "R1") == Category.UNCATEGORIZED


class TestEquivalence:
    """Rule-equivalence families across tools."""

    def test_family_members_are_equivalent(self, tables):
        assert tables.are_equivalent(
            "checkov", "CKV_AWS_24", "tfsec", "aws-ec2-no-public-ingress-sgr"
        )
        assert tables.are_equivalent("checkov", "CKV_AWS_24", "trivy", "AVD-AWS-0107")

    def test_unrelated_rules(self, tables):
        assert not tables.are_equivalent("checkov", "CKV_AWS_24", "tfsec", "aws-s3-enable-versioning")

    def test_identical_ids(self, tables):
        assert tables.are_equivalent("tfsec", "AVD-AWS-9999", "trivy", "AVD-AWS-9999")

    def test_families_for(self, tables):
        assert "aws-security-group-public-ingress" in tables.families_for("trivy", "avd-aws-0107")
        assert tables.families_for("trivy", "nope") == frozenset()

    def test_family_names_are_sorted_tuple(self, tables):
        assert isinstance(tables.family_names, tuple)
        assert list(tables.family_names) == sorted(tables.family_names)


class TestLoading:
    """Building, merging and loading table documents."""

    def test_load_is_cached(self):
        assert load_tables() is load_tables()

    def test_merge_documents(self):
        base = {"severity": {"default": {"high": "high"}}, "equivalences": [{"family": "a"}]}
        override = {"severity": {"default": {"p1": "critical"}}, "equivalences": [{"family": "b"}]}
        merged = merge_documents(base, override)
        assert merged["severity"]["default"] == {"high": "high", "p1": "critical"}
        assert [e["family"] for e in merged["equivalences"]] == ["a", "b"]
        assert base["severity"]["default"] == {"high": "high"}

    def test_build_tables_over_defaults(self):
        tables = build_tables({
            "equivalences": [
                {"family": "custom", "rules": {"toola": ["A-1"], "toolb": ["B-7"]}},
            ],
        })
        assert tables.are_equivalent("toola", "A-1", "toolb", "B-7")
        assert tables.are_equivalent("checkov", "CKV_AWS_24", "trivy", "AVD-AWS-0107")

    def test_build_tables_without_defaults(self):
        tables = build_tables({}, merge_defaults=False)
        assert tables.family_names == ()
        assert tables.normalize_severity("tfsec", "HIGH") == Severity.MEDIUM

    def test_invalid_severity_value(self):
        with pytest.raises(ConfigurationError):
            build_tables({"severity": {"default": {"p0": "urgent"}}})

    def test_unknown_top_level_key(self):
        with pytest.raises(ConfigurationError):
            build_tables({"colours": {}})

    def test_load_override_file(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text(
            "severity:\n  tools:\n    tfsec:\n      critical: high\n",
            encoding="utf-8",
        )
        tables = load_tables(path)
        assert tables.normalize_severity("tfsec", "CRITICAL") == Severity.HIGH
        assert tables.normalize_severity("trivy", "CRITICAL") == Severity.CRITICAL

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_tables(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("severity: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_tables(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_tables(path)
