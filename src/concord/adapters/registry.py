# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Adapter registration and lookup."""

from __future__ import annotations

from typing import TypeVar

from concord.adapters.base import ScannerAdapter
from concord.core.exceptions import UnsupportedToolError
from concord.models.finding import RawFinding

T = TypeVar("T", bound=ScannerAdapter)


class AdapterRegistry:
    """Central registry of scanner adapters, keyed by tool name."""

    _adapters: dict[str, type[ScannerAdapter]] = {}

    @classmethod
    def register(cls, adapter_class: type[T]) -> type[T]:
        cls._adapters[adapter_class.tool_name.lower()] = adapter_class
        return adapter_class

    @classmethod
    def unregister(cls, tool_name: str) -> None:
        cls._adapters.pop(tool_name.lower(), None)

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._adapters)

    @classmethod
    def get(cls, tool_name: str) -> ScannerAdapter:
        adapter_class = cls._adapters.get(tool_name.strip().lower())
        if adapter_class is None:
            raise UnsupportedToolError(tool_name, cls.names())
        return adapter_class()

    @classmethod
    def is_supported(cls, tool_name: str) -> bool:
        return tool_name.strip().lower() in cls._adapters


def adapter(cls: type[T]) -> type[T]:
    """Decorator to register an adapter class."""
    return AdapterRegistry.register(cls)


def parse_report(raw_report: bytes | str, tool_name: str) -> list[RawFinding]:
    """Parse one report with the adapter registered for *tool_name*."""
    return AdapterRegistry.get(tool_name).parse(raw_report)
