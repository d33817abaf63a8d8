# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Public SDK interface for embedding concord in other tools.

Usage::

    from concord import correlate_files_sync

    report = correlate_files_sync(["checkov:checkov.json", "tfsec:tfsec.json"])
    print(report.summary.total_findings)

    # Async
    report = await correlate_files([("trivy", "trivy.json")])
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from concord.core.config import Settings, get_settings
from concord.models.report import CorrelationReport
from concord.pipeline import CorrelationPipeline, ReportInput

logger = logging.getLogger("concord.sdk")

InputSpec = ReportInput | tuple[str, str | Path] | str


def _coerce_input(spec: InputSpec) -> ReportInput:
    """Accept a ``ReportInput``, a ``(tool, path)`` pair or a ``"tool:path"`` string."""
    if isinstance(spec, ReportInput):
        return spec
    if isinstance(spec, str):
        return ReportInput.parse(spec)
    tool, path = spec
    return ReportInput(tool=tool.strip().lower(), path=Path(path))


# ---------------------------------------------------------------------------
# Public async API
# ---------------------------------------------------------------------------


async def correlate_files(
    inputs: Iterable[InputSpec],
    *,
    allow_empty: bool = False,
    include_metadata: bool = False,
    settings: Settings | None = None,
) -> CorrelationReport:
    """Parse and correlate scanner reports on disk.

    Parameters
    ----------
    inputs:
        Reports to correlate, each tagged with the tool that produced it.
    allow_empty:
        Return an empty report instead of raising when *inputs* is empty.
    include_metadata:
        Attach run metadata (timestamp, generator) to the report.
    settings:
        Optional ``Settings`` override; falls back to ``get_settings()``.

    Returns
    -------
    CorrelationReport
    """
    items = [_coerce_input(spec) for spec in inputs]
    pipeline = CorrelationPipeline(settings=settings or get_settings())
    return await pipeline.run(items, allow_empty=allow_empty, include_metadata=include_metadata)


# ---------------------------------------------------------------------------
# Public sync wrappers
# ---------------------------------------------------------------------------


def correlate_files_sync(
    inputs: Iterable[InputSpec],
    *,
    allow_empty: bool = False,
    include_metadata: bool = False,
    settings: Settings | None = None,
) -> CorrelationReport:
    """Synchronous wrapper around :func:`correlate_files`.

    Calls ``asyncio.run()`` internally, so it must **not** be called from
    within an already-running event loop.
    """
    return asyncio.run(
        correlate_files(
            inputs,
            allow_empty=allow_empty,
            include_metadata=include_metadata,
            settings=settings,
        )
    )
