# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unit tests for the public SDK interface."""

from __future__ import annotations

from pathlib import Path

import pytest

import concord
from concord.core.exceptions import EmptyInputError
from concord.models.report import CorrelationReport
from concord.pipeline import ReportInput
from concord.sdk import correlate_files, correlate_files_sync

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "reports"


class TestCorrelateFiles:
    """Async and sync entry points."""

    async def test_accepts_mixed_input_forms(self, settings):
        report = await correlate_files(
            [
                ReportInput(tool="checkov", path=FIXTURES_DIR / "checkov.json"),
                ("TFSEC", FIXTURES_DIR / "tfsec.json"),
                f"trivy:{FIXTURES_DIR / 'trivy.json'}",
            ],
            settings=settings,
        )
        assert isinstance(report, CorrelationReport)
        assert report.summary.reports_parsed == 3
        assert report.summary.raw_findings == 9

    async def test_empty(self, settings):
        with pytest.raises(EmptyInputError):
            await correlate_files([], settings=settings)
        report = await correlate_files([], allow_empty=True, settings=settings)
        assert report.summary.total_findings == 0

    def test_sync_wrapper(self, settings):
        report = correlate_files_sync(
            [("semgrep", FIXTURES_DIR / "semgrep.json")],
            include_metadata=True,
            settings=settings,
        )
        assert report.summary.reports_parsed == 1
        assert report.metadata is not None


class TestPackageExports:
    def test_root_exports(self):
        assert concord.correlate_files is correlate_files
        assert concord.correlate_files_sync is correlate_files_sync
        findings = concord.parse_report((FIXTURES_DIR / "tfsec.json").read_bytes(), "tfsec")
        assert len(findings) == 3
