# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Locator parsing, path normalization, and line-block collapsing."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from concord.models.finding import Locator

_LINE_SUFFIX_RE = re.compile(r"^(?P<path>.+?):L?(?P<start>\d+)(?:-L?(?P<end>\d+))?$")


def parse_locator(text: str) -> Locator:
    """Parse ``path``, ``path:12``, ``path:10-14`` or ``path:L10-L14``."""
    text = text.strip()
    match = _LINE_SUFFIX_RE.match(text)
    if match is None:
        return Locator(path=text or None)
    start = int(match.group("start"))
    end = int(match.group("end")) if match.group("end") else start
    return Locator(path=match.group("path"), start_line=start, end_line=end)


def normalize_path(path: str, base_dir: str | None = None) -> str:
    """Return a relative, POSIX-style path.

    ``file://`` URIs are unwrapped, ``.`` and ``..`` segments collapsed, and an
    absolute path under *base_dir* is made relative to it. Any remaining leading
    slash is dropped so ``/main.tf`` (Checkov) and ``main.tf`` (tfsec) agree.
    """
    value = path.strip().replace("\\", "/")
    if value.startswith("file:"):
        value = unquote(urlparse(value).path)
    if not value:
        return ""

    value = posixpath.normpath(value)
    if base_dir:
        base = posixpath.normpath(str(base_dir).replace("\\", "/"))
        candidate = PurePosixPath(value)
        if candidate.is_absolute() and candidate.is_relative_to(base):
            value = candidate.relative_to(base).as_posix()
    value = value.lstrip("/")
    if value in ("", "."):
        return "."
    return value


def normalize_lines(start: int | None, end: int | None) -> tuple[int, int] | None:
    """Validate a line range; ``None`` when the record carries no usable line."""
    if start is None or start < 1:
        if end is not None and end >= 1:
            return (end, end)
        return None
    if end is None or end < 1:
        return (start, start)
    return (start, end) if start <= end else (end, start)


def anchor_for(
    locator: Locator,
    base_dir: str | None = None,
    *,
    include_resource: bool = True,
) -> str:
    """Stable identity of the artifact, without line information.

    Line-addressed records are anchored on the file alone; tools disagree on
    resource naming but agree on files.
    """
    path = normalize_path(locator.path, base_dir) if locator.path else ""
    resource = (locator.resource or "").strip()
    if path and resource and include_resource:
        return f"{path}#{resource}"
    return path or resource


def collapse_ranges(
    ranges: Iterable[tuple[int, int]],
    gap_tolerance: int = 0,
) -> list[tuple[int, int]]:
    """Merge overlapping (or near, within *gap_tolerance* lines) ranges."""
    blocks: list[tuple[int, int]] = []
    for start, end in sorted(set(ranges)):
        if blocks and start <= blocks[-1][1] + gap_tolerance:
            prev_start, prev_end = blocks[-1]
            blocks[-1] = (prev_start, max(prev_end, end))
        else:
            blocks.append((start, end))
    return blocks


def enclosing_block(
    lines: tuple[int, int],
    blocks: list[tuple[int, int]],
) -> tuple[int, int]:
    for block in blocks:
        if block[0] <= lines[0] and lines[1] <= block[1]:
            return block
    return lines


def format_locator(anchor: str, block: tuple[int, int] | None) -> str:
    if block is None:
        return anchor
    start, end = block
    if start == end:
        return f"{anchor}:{start}"
    return f"{anchor}:{start}-{end}"
