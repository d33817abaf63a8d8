# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fingerprinting, clustering, and merging of raw findings."""

from concord.correlation.engine import CorrelationEngine, derive_finding_id, merge_cluster
from concord.correlation.fingerprint import Fingerprint, SimilarityWeights, similarity
from concord.correlation.locator import normalize_path, parse_locator

__all__ = [
    "CorrelationEngine",
    "Fingerprint",
    "SimilarityWeights",
    "derive_finding_id",
    "merge_cluster",
    "normalize_path",
    "parse_locator",
    "similarity",
]
