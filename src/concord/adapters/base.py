# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Base class for scanner report adapters.

An adapter turns one scanner's native report into ``RawFinding`` records.
Adapters are pure: bytes in, records out. They never normalize severity or
category; that happens during correlation, against the shared tables.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from concord.core.exceptions import ParseError
from concord.models.finding import RawFinding

logger = logging.getLogger("concord.adapters")

M = TypeVar("M", bound=BaseModel)


class ScannerAdapter(ABC):
    """Parses the report format of one scanner."""

    tool_name: str = "unknown"
    description: str = ""

    def parse(self, raw_report: bytes | str) -> list[RawFinding]:
        """Decode *raw_report* and return its records in report order.

        Raises:
            ParseError: The report is not valid JSON, does not match this
                tool's format, or contains a malformed record.
        """
        data = self.decode(raw_report)
        findings = self.extract(data)
        findings = [
            f if f.position == i else f.model_copy(update={"position": i})
            for i, f in enumerate(findings)
        ]
        logger.debug("%s adapter extracted %d records", self.tool_name, len(findings))
        return findings

    def decode(self, raw_report: bytes | str) -> Any:
        if isinstance(raw_report, bytes):
            try:
                text = raw_report.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise ParseError(f"{self.tool_name} report is not UTF-8: {exc}") from exc
        else:
            text = raw_report
        if not text.strip():
            raise ParseError(f"{self.tool_name} report is empty")
        try:
            return json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise ParseError(f"{self.tool_name} report is not valid JSON: {exc}") from exc

    @abstractmethod
    def extract(self, data: Any) -> list[RawFinding]:
        """Convert decoded JSON into raw findings."""

    def validate(self, model: type[M], data: Any, what: str = "report") -> M:
        """Validate *data* against *model*, raising ``ParseError`` on mismatch."""
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ParseError(
                f"Invalid {self.tool_name} {what}: {exc.error_count()} validation "
                f"error(s); first: {_first_error(exc)}"
            ) from exc


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    where = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{where}: {error.get('msg', 'invalid')}"


def leftover(model: BaseModel) -> dict[str, Any]:
    """Native fields the schema did not declare."""
    return dict(model.model_extra or {})
