# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Correlation pipeline: parse reports concurrently, join, correlate, report."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from concord.adapters import AdapterRegistry
from concord.core.config import Settings, get_settings
from concord.core.exceptions import (
    EmptyInputError,
    NoUsableInputError,
    ParseError,
    UnsupportedToolError,
)
from concord.correlation.engine import CorrelationEngine
from concord.models.finding import RawFinding
from concord.models.report import CorrelationReport, ParseFailure
from concord.report.emitter import build_report

logger = logging.getLogger("concord.pipeline")


@dataclass(frozen=True, slots=True)
class ReportInput:
    """One scanner report to correlate, tagged with the tool that wrote it."""

    tool: str
    path: Path

    @classmethod
    def parse(cls, value: str) -> ReportInput:
        """Parse the ``TOOL:PATH`` form used on the command line."""
        tool, sep, path = value.partition(":")
        if not sep or not tool.strip() or not path.strip():
            msg = f"Expected TOOL:PATH, got {value!r}"
            raise ValueError(msg)
        return cls(tool=tool.strip().lower(), path=Path(path.strip()))

    @property
    def origin(self) -> str:
        return self.path.as_posix()


@dataclass(slots=True)
class ParseOutcome:
    """Result of parsing one input; exactly one of findings / failure is meaningful."""

    source: ReportInput
    findings: list[RawFinding] = field(default_factory=list)
    failure: ParseFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class CorrelationPipeline:
    """Parses every input report, then correlates the combined raw findings.

    Parsing runs one task per report in worker threads, bounded by
    ``max_concurrent_parsers``. Correlation starts only after every parse task
    has finished; a failed report is recorded and never aborts the run.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        engine: CorrelationEngine | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._engine = engine or CorrelationEngine(settings=self._settings)

    async def run(
        self,
        inputs: Iterable[ReportInput],
        *,
        allow_empty: bool = False,
        include_metadata: bool = False,
    ) -> CorrelationReport:
        """Correlate *inputs* into a single report.

        Raises:
            EmptyInputError: No inputs and *allow_empty* is not set.
            NoUsableInputError: Inputs were given but none could be parsed.
        """
        items = list(inputs)
        if not items:
            if not allow_empty:
                raise EmptyInputError("No input reports were supplied")
            logger.info("No input reports supplied; emitting an empty report")
            return build_report([], reports_parsed=0, include_metadata=include_metadata)

        start_time = time.monotonic()
        outcomes = await self.parse_all(items)

        failures = [o.failure for o in outcomes if o.failure is not None]
        parsed = [o for o in outcomes if o.ok]
        if not parsed:
            raise NoUsableInputError(failures)

        raw_findings = [f for outcome in parsed for f in outcome.findings]
        findings = self._engine.correlate(raw_findings)
        report = build_report(
            findings,
            raw_findings=len(raw_findings),
            reports_parsed=len(parsed),
            parse_failures=failures,
            include_metadata=include_metadata,
        )

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            "Correlation complete: reports=%d failed=%d raw=%d findings=%d duration=%dms",
            len(parsed),
            len(failures),
            len(raw_findings),
            len(findings),
            elapsed_ms,
        )
        return report

    async def parse_all(self, items: list[ReportInput]) -> list[ParseOutcome]:
        """Parse every input concurrently; outcomes keep input order."""
        semaphore = asyncio.Semaphore(self._settings.max_concurrent_parsers)
        return list(await asyncio.gather(*(self._parse_one(item, semaphore) for item in items)))

    async def _parse_one(self, item: ReportInput, semaphore: asyncio.Semaphore) -> ParseOutcome:
        async with semaphore:
            try:
                findings = await asyncio.to_thread(self._read_and_parse, item)
            except (ParseError, UnsupportedToolError) as exc:
                return self._failed(item, str(exc), type(exc).__name__)
            except OSError as exc:
                return self._failed(item, f"Cannot read report: {exc}", ParseError.__name__)
        logger.debug("Parsed %s report %s: %d records", item.tool, item.origin, len(findings))
        return ParseOutcome(source=item, findings=findings)

    @staticmethod
    def _read_and_parse(item: ReportInput) -> list[RawFinding]:
        adapter = AdapterRegistry.get(item.tool)
        raw_report = item.path.read_bytes()
        return [
            raw.model_copy(update={"origin": item.origin})
            for raw in adapter.parse(raw_report)
        ]

    @staticmethod
    def _failed(item: ReportInput, error: str, error_type: str) -> ParseOutcome:
        logger.warning("Skipping %s report %s: %s", item.tool, item.origin, error)
        return ParseOutcome(
            source=item,
            failure=ParseFailure(
                tool=item.tool,
                file=item.origin,
                error=error,
                error_type=error_type,
            ),
        )
