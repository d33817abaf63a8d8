# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Correlation engine: cluster raw findings and merge each cluster.

Raw findings are bucketed by primary key. Inside a bucket every pair is
scored and pairs at or above the threshold are unioned (single-link), so
cluster membership depends only on the set of findings, never on their order.
Buckets are processed in lexicographic key order and clusters within a bucket
by first-seen input order.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from concord.core.config import Settings, get_settings
from concord.core.constants import FINDING_ID_PREFIX, SEVERITY_RANK, Category, Severity
from concord.correlation.fingerprint import (
    Fingerprint,
    SimilarityWeights,
    build_fingerprints,
    similarity,
)
from concord.models.finding import Finding, RawFinding, RawRef
from concord.tables import RuleTables, load_tables

logger = logging.getLogger("concord.correlation.engine")


class UnionFind:
    """Disjoint sets over ``0..size-1``; the smallest index is always the root."""

    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, item: int) -> int:
        while self._parent[item] != item:
            self._parent[item] = self._parent[self._parent[item]]
            item = self._parent[item]
        return item

    def union(self, a: int, b: int) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if root_b < root_a:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a

    def groups(self) -> list[list[int]]:
        """Members per set, sets ordered by their smallest member."""
        by_root: dict[int, list[int]] = {}
        for item in range(len(self._parent)):
            by_root.setdefault(self.find(item), []).append(item)
        return [by_root[root] for root in sorted(by_root)]


@dataclass(frozen=True, slots=True)
class Cluster:
    """Raw findings judged to describe one underlying issue."""

    primary_key: str
    members: tuple[Fingerprint, ...]
    match_score: float | None = None

    @property
    def locator(self) -> str:
        return self.members[0].locator

    @property
    def category(self) -> Category:
        return self.members[0].category


def derive_finding_id(
    locator: str,
    category: str,
    rule_keys: Sequence[str],
    member_digests: Sequence[str] = (),
) -> str:
    """Deterministic finding ID from locator, category and contributing rules."""
    material = "|".join([locator, str(category), ",".join(sorted(set(rule_keys)))])
    if member_digests:
        material += "|" + ",".join(sorted(member_digests))
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()[:16]
    return f"{FINDING_ID_PREFIX}{digest}"


def _member_digest(fp: Fingerprint) -> str:
    raw = fp.raw
    material = "\0".join(
        [raw.source_tool, raw.rule_id, raw.origin, str(raw.position), raw.message]
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:16]


def _rule_key(fp: Fingerprint) -> str:
    return f"{fp.tool}:{fp.rule_id}"


def max_severity(severities: Sequence[Severity]) -> Severity:
    """Fail-safe aggregation: the highest severity wins."""
    if not severities:
        return Severity.INFO
    return max(severities, key=SEVERITY_RANK.__getitem__)


def _representative(members: Sequence[Fingerprint]) -> Fingerprint:
    """Highest-severity member; ties go to the lexicographically first tool."""
    top = max_severity([m.severity for m in members])
    candidates = [m for m in members if m.severity == top]
    return min(candidates, key=lambda m: (m.tool, m.rule_id, m.raw.message, m.raw.title))


def merge_cluster(cluster: Cluster) -> Finding:
    """Synthesize the reconciled finding for one cluster."""
    members = cluster.members
    rule_ids: dict[str, set[str]] = {}
    for member in members:
        rule_ids.setdefault(member.tool, set()).add(member.rule_id)

    representative = _representative(members)
    raw = representative.raw
    description = raw.message or raw.title or raw.rule_id

    raw_refs = sorted(
        (RawRef.from_raw(m.raw) for m in members),
        key=lambda ref: (ref.tool, ref.report, ref.position, ref.rule_id),
    )

    return Finding(
        id=derive_finding_id(cluster.locator, cluster.category, [_rule_key(m) for m in members]),
        source_tools=sorted(rule_ids),
        rule_ids={tool: sorted(rule_ids[tool]) for tool in sorted(rule_ids)},
        resource_locator=cluster.locator,
        category=cluster.category,
        severity=max_severity([m.severity for m in members]),
        description=description,
        match_score=cluster.match_score,
        raw_refs=raw_refs,
    )


class CorrelationEngine:
    """Groups raw findings into duplicate clusters and reconciles them."""

    def __init__(
        self,
        tables: RuleTables | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._tables = tables or load_tables(self._settings.tables_path)
        self._weights = SimilarityWeights.from_settings(self._settings)
        self._threshold = self._settings.similarity_threshold

    def fingerprint(self, raw_findings: Sequence[RawFinding]) -> list[Fingerprint]:
        return build_fingerprints(raw_findings, self._tables, self._settings)

    def correlate(self, raw_findings: Sequence[RawFinding]) -> list[Finding]:
        """Run fingerprinting, clustering and merging over the full batch.

        Returns findings in processing order (bucket key, then first-seen).
        """
        fingerprints = self.fingerprint(raw_findings)
        clusters = self.cluster(fingerprints)
        findings = [merge_cluster(cluster) for cluster in clusters]
        findings = self._disambiguate_ids(findings, clusters)

        logger.info(
            "Correlated %d raw findings into %d findings (%d corroborated)",
            len(raw_findings),
            len(findings),
            sum(1 for f in findings if f.is_corroborated),
        )
        return findings

    def cluster(self, fingerprints: Sequence[Fingerprint]) -> list[Cluster]:
        buckets: dict[str, list[Fingerprint]] = {}
        for fp in fingerprints:
            buckets.setdefault(fp.primary_key, []).append(fp)

        clusters: list[Cluster] = []
        for key in sorted(buckets):
            members = sorted(buckets[key], key=lambda fp: fp.index)
            clusters.extend(self._cluster_bucket(key, members))
        return clusters

    def _cluster_bucket(self, key: str, members: list[Fingerprint]) -> list[Cluster]:
        if len(members) == 1:
            return [Cluster(primary_key=key, members=(members[0],))]

        uf = UnionFind(len(members))
        scores: dict[tuple[int, int], float] = {}
        for i in range(len(members)):
            for j in range(i + 1, len(members)):
                score = similarity(members[i], members[j], self._tables, self._weights).total
                scores[(i, j)] = score
                if score >= self._threshold:
                    uf.union(i, j)

        clusters: list[Cluster] = []
        for group in uf.groups():
            match_score = None
            if len(group) > 1:
                match_score = min(
                    max(scores[(min(i, j), max(i, j))] for j in group if j != i)
                    for i in group
                )
            clusters.append(
                Cluster(
                    primary_key=key,
                    members=tuple(members[i] for i in group),
                    match_score=match_score,
                )
            )
        return clusters

    @staticmethod
    def _disambiguate_ids(findings: list[Finding], clusters: list[Cluster]) -> list[Finding]:
        """Re-derive IDs shared by several clusters using their member digests."""
        seen: dict[str, list[int]] = {}
        for position, finding in enumerate(findings):
            seen.setdefault(finding.id, []).append(position)

        result = list(findings)
        taken = set(seen)
        for finding_id, positions in seen.items():
            if len(positions) < 2:
                continue
            logger.debug("Finding ID %s shared by %d clusters", finding_id, len(positions))
            for position in positions:
                cluster = clusters[position]
                new_id = derive_finding_id(
                    cluster.locator,
                    cluster.category,
                    [_rule_key(m) for m in cluster.members],
                    [_member_digest(m) for m in cluster.members],
                )
                suffix = 2
                candidate = new_id
                while candidate in taken:
                    candidate = f"{new_id}-{suffix}"
                    suffix += 1
                taken.add(candidate)
                result[position] = findings[position].model_copy(update={"id": candidate})
        return result
