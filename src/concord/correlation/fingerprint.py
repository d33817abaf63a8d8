# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fingerprints and pairwise similarity for raw findings.

A fingerprint pairs a *primary key* (normalized locator + category), which
decides which findings may ever be compared, with the features the secondary
similarity score is computed from.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from concord.core.config import Settings
from concord.core.constants import (
    MAX_SEVERITY_DISTANCE,
    SCORE_PRECISION,
    SEVERITY_RANK,
    Category,
    Severity,
)
from concord.correlation.locator import (
    anchor_for,
    collapse_ranges,
    enclosing_block,
    format_locator,
    normalize_lines,
)
from concord.models.finding import RawFinding
from concord.tables import RuleTables

logger = logging.getLogger("concord.correlation.fingerprint")

_WORD_RE = re.compile(r"[a-z0-9]+")

UNLOCATED = "(unlocated)"

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "be", "by", "for", "from", "has", "in", "is",
    "it", "its", "not", "of", "on", "or", "that", "the", "this", "to", "with",
    "ensure", "should",
})


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """Everything the correlation engine needs to know about one raw finding."""

    index: int
    raw: RawFinding
    locator: str
    category: Category
    severity: Severity
    tokens: frozenset[str]

    @property
    def primary_key(self) -> str:
        return f"{self.locator}|{self.category}"

    @property
    def tool(self) -> str:
        return self.raw.source_tool

    @property
    def rule_id(self) -> str:
        return self.raw.rule_id


@dataclass(frozen=True, slots=True)
class SimilarityWeights:
    message: float
    rule: float
    severity: float

    @classmethod
    def from_settings(cls, settings: Settings) -> SimilarityWeights:
        return cls(
            message=settings.weight_message,
            rule=settings.weight_rule,
            severity=settings.weight_severity,
        )

    @property
    def total(self) -> float:
        return self.message + self.rule + self.severity


@dataclass(frozen=True, slots=True)
class SimilarityScore:
    message: float
    rule: float
    severity: float
    total: float


# ---------------------------------------------------------------------------
# Feature helpers
# ---------------------------------------------------------------------------


def tokenize(text: str) -> frozenset[str]:
    """Lowercased word set with stop words and single characters removed."""
    return frozenset(
        word
        for word in _WORD_RE.findall(text.lower())
        if len(word) > 1 and word not in STOP_WORDS
    )


def jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


def severity_proximity(a: Severity, b: Severity) -> float:
    distance = abs(SEVERITY_RANK[a] - SEVERITY_RANK[b])
    return 1.0 - distance / MAX_SEVERITY_DISTANCE


def rule_overlap(a: Fingerprint, b: Fingerprint, tables: RuleTables) -> float:
    """1.0 when both records denote the same check, else 0.0.

    Within one tool only an identical rule id counts; distinct rules from the
    same scanner are distinct checks even when they share a family.
    """
    if a.tool.casefold() == b.tool.casefold():
        return 1.0 if a.rule_id.casefold() == b.rule_id.casefold() else 0.0
    return 1.0 if tables.are_equivalent(a.tool, a.rule_id, b.tool, b.rule_id) else 0.0


def similarity(
    a: Fingerprint,
    b: Fingerprint,
    tables: RuleTables,
    weights: SimilarityWeights,
) -> SimilarityScore:
    """Weighted similarity of two fingerprints in ``[0, 1]``.

    Fingerprints with different primary keys always score zero.
    """
    if a.primary_key != b.primary_key:
        return SimilarityScore(message=0.0, rule=0.0, severity=0.0, total=0.0)

    message = jaccard(a.tokens, b.tokens)
    rule = rule_overlap(a, b, tables)
    severity = severity_proximity(a.severity, b.severity)
    weighted = (
        weights.message * message + weights.rule * rule + weights.severity * severity
    ) / weights.total
    return SimilarityScore(
        message=round(message, SCORE_PRECISION),
        rule=rule,
        severity=round(severity, SCORE_PRECISION),
        total=round(weighted, SCORE_PRECISION),
    )


# ---------------------------------------------------------------------------
# Fingerprint construction
# ---------------------------------------------------------------------------


def build_fingerprints(
    raw_findings: Sequence[RawFinding],
    tables: RuleTables,
    settings: Settings,
) -> list[Fingerprint]:
    """Normalize every raw finding into a fingerprint.

    Needs the whole batch: line ranges reported for the same file and category
    are collapsed to their enclosing block before keys are formed, so a tool
    reporting ``main.tf:12`` and another reporting ``main.tf:10-14`` land in
    the same bucket.
    """
    base_dir = str(settings.base_dir) if settings.base_dir else None

    prepared: list[tuple[RawFinding, Severity, Category, str, tuple[int, int] | None]] = []
    ranges: dict[tuple[str, Category], list[tuple[int, int]]] = {}
    for raw in raw_findings:
        severity = tables.normalize_severity(raw.source_tool, raw.raw_severity)
        category = tables.categorize(raw.source_tool, raw.rule_id, raw.kind)
        lines = normalize_lines(raw.locator.start_line, raw.locator.end_line)
        if not raw.locator.path:
            lines = None
        anchor = anchor_for(raw.locator, base_dir, include_resource=lines is None)
        if not anchor:
            anchor = UNLOCATED
        prepared.append((raw, severity, category, anchor, lines))
        if lines is not None:
            ranges.setdefault((anchor, category), []).append(lines)

    blocks = {
        group: collapse_ranges(group_ranges, settings.line_gap_tolerance)
        for group, group_ranges in ranges.items()
    }

    fingerprints: list[Fingerprint] = []
    for index, (raw, severity, category, anchor, lines) in enumerate(prepared):
        block = enclosing_block(lines, blocks[(anchor, category)]) if lines else None
        fingerprints.append(
            Fingerprint(
                index=index,
                raw=raw,
                locator=format_locator(anchor, block),
                category=category,
                severity=severity,
                tokens=tokenize(f"{raw.title} {raw.message}"),
            )
        )

    logger.debug(
        "Built %d fingerprints across %d line-addressed groups",
        len(fingerprints),
        len(blocks),
    )
    return fingerprints
