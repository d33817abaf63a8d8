# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer

from concord.core.exceptions import (
    ConfigurationError,
    EmptyInputError,
    NoUsableInputError,
)

app = typer.Typer(
    name="concord",
    help="Correlate and deduplicate findings from multiple security scanners",
    no_args_is_help=True,
)

EXIT_USAGE = 2


@app.command()
def correlate(
    inputs: Annotated[
        list[str] | None,
        typer.Argument(
            help="Scanner reports as TOOL:PATH, e.g. checkov:results.json",
            show_default=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the JSON report here instead of stdout"),
    ] = None,
    allow_empty: Annotated[
        bool,
        typer.Option("--allow-empty", help="Emit an empty report when no inputs are given"),
    ] = False,
    metadata: Annotated[
        bool,
        typer.Option("--metadata", help="Include run metadata (timestamp, generator)"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Do not print the summary to stderr"),
    ] = False,
) -> None:
    """Correlate scanner reports into one deduplicated findings report."""
    from concord.core.config import get_settings
    from concord.core.logging import setup_logging
    from concord.pipeline import CorrelationPipeline, ReportInput
    from concord.report.emitter import render_json, write_report

    try:
        items = [ReportInput.parse(value) for value in inputs or []]
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_USAGE) from exc

    try:
        settings = get_settings()
        setup_logging(settings.log_level, settings.log_format)
        pipeline = CorrelationPipeline(settings=settings)
        report = asyncio.run(
            pipeline.run(items, allow_empty=allow_empty, include_metadata=metadata)
        )
    except EmptyInputError as exc:
        typer.echo(f"Error: {exc} (pass --allow-empty to emit an empty report)", err=True)
        raise typer.Exit(EXIT_USAGE) from exc
    except NoUsableInputError as exc:
        typer.echo(f"Error: {exc}", err=True)
        for failure in exc.failures:
            typer.echo(f"  {failure.tool}:{failure.file}: {failure.error}", err=True)
        raise typer.Exit(EXIT_USAGE) from exc
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(EXIT_USAGE) from exc

    if output:
        write_report(report, output)
    else:
        sys.stdout.write(render_json(report))

    if not quiet:
        from concord.cli.formatters.console import format_report_summary

        format_report_summary(report)


@app.command()
def tools() -> None:
    """List the scanner formats concord can read."""
    from concord.cli.formatters.console import format_tools

    format_tools()


@app.command()
def version() -> None:
    """Show version information."""
    from concord import __version__

    typer.echo(f"concord v{__version__}")
