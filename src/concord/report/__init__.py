# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Report assembly and serialization."""

from concord.report.emitter import build_report, canonical_json, render_json, write_report

__all__ = ["build_report", "canonical_json", "render_json", "write_report"]
