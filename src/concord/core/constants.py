# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, severity ranks, and correlation defaults."""

from enum import StrEnum


class Severity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class Category(StrEnum):
    NETWORK_EXPOSURE = "network-exposure"
    ACCESS_CONTROL = "access-control"
    SECRET_EXPOSURE = "secret-exposure"
    DEPENDENCY_VULNERABILITY = "dependency-vulnerability"
    MISCONFIGURATION = "misconfiguration"
    ENCRYPTION = "encryption"
    LOGGING = "logging"
    CODE_VULNERABILITY = "code-vulnerability"
    UNCATEGORIZED = "uncategorized"


class FindingKind(StrEnum):
    """Report section a raw record was read from."""

    MISCONFIGURATION = "misconfiguration"
    VULNERABILITY = "vulnerability"
    SECRET = "secret"
    CODE = "code"
    GENERIC = "generic"


SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

# Highest rank first; used for summaries and console output.
SEVERITY_ORDER: list[Severity] = sorted(SEVERITY_RANK, key=SEVERITY_RANK.__getitem__, reverse=True)

MAX_SEVERITY_DISTANCE = max(SEVERITY_RANK.values()) - min(SEVERITY_RANK.values())

FINDING_ID_PREFIX = "CONCORD-"

REPORT_SCHEMA_VERSION = "1.0"

DEFAULT_SIMILARITY_THRESHOLD = 0.6
DEFAULT_WEIGHT_MESSAGE = 0.4
DEFAULT_WEIGHT_RULE = 0.4
DEFAULT_WEIGHT_SEVERITY = 0.2

# Scores are rounded before threshold comparison so float noise cannot flip a merge.
SCORE_PRECISION = 6
