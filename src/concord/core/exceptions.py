# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for concord."""

from __future__ import annotations

from typing import Any


class ConcordError(Exception):
    """Base exception for all concord errors."""


class ConfigurationError(ConcordError):
    """Invalid or missing configuration (settings or lookup tables)."""


class ParseError(ConcordError):
    """A scanner report is not valid for its declared tool format."""


class UnsupportedToolError(ConcordError):
    """No adapter is registered for the requested tool name."""

    def __init__(self, tool: str, available: list[str] | None = None) -> None:
        self.tool = tool
        self.available = sorted(available or [])
        msg = f"No adapter registered for tool {tool!r}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


class EmptyInputError(ConcordError):
    """No input reports were supplied at all."""


class NoUsableInputError(ConcordError):
    """Reports were supplied but none of them could be parsed."""

    def __init__(self, failures: list[Any]) -> None:
        self.failures = list(failures)
        super().__init__(
            f"None of the {len(self.failures)} supplied reports could be parsed"
        )
