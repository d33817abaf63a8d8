# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scanner report adapters.

Importing this package registers every built-in adapter.
"""

from concord.adapters import checkov, generic, sarif, semgrep, tfsec, trivy  # noqa: F401
from concord.adapters.base import ScannerAdapter
from concord.adapters.registry import AdapterRegistry, adapter, parse_report

__all__ = ["AdapterRegistry", "ScannerAdapter", "adapter", "parse_report"]
