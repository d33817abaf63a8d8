# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for concord."""

from concord.models.finding import Finding, Locator, RawFinding, RawRef
from concord.models.report import CorrelationReport, ParseFailure, ReportMetadata, ReportSummary

__all__ = [
    "CorrelationReport",
    "Finding",
    "Locator",
    "ParseFailure",
    "RawFinding",
    "RawRef",
    "ReportMetadata",
    "ReportSummary",
]
