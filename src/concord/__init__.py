# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""concord - Security findings correlation engine for multi-scanner pipelines."""

__version__ = "0.1.0"

from concord.adapters import parse_report
from concord.sdk import correlate_files, correlate_files_sync

__all__ = [
    "__version__",
    "correlate_files",
    "correlate_files_sync",
    "parse_report",
]
