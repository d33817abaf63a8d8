# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Load, validate, and freeze the severity / category / rule-equivalence tables.

The tables are process-wide lookup configuration: they are read once, then
exposed through :class:`RuleTables`, which offers only read access.
"""

from __future__ import annotations

import copy
import fnmatch
import functools
import logging
import math
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from concord.core.constants import Category, FindingKind, Severity
from concord.core.exceptions import ConfigurationError

logger = logging.getLogger("concord.tables")

ANY_TOOL = "*"


# ---------------------------------------------------------------------------
# Document schema
# ---------------------------------------------------------------------------


class CvssBand(BaseModel):
    min: float = Field(ge=0.0, le=10.0)
    severity: Severity


class SeverityTables(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fallback: Severity = Severity.MEDIUM
    default: dict[str, Severity] = Field(default_factory=dict)
    tools: dict[str, dict[str, Severity]] = Field(default_factory=dict)
    tool_fallbacks: dict[str, Severity] = Field(default_factory=dict)
    cvss: list[CvssBand] = Field(default_factory=list)


class EquivalenceFamily(BaseModel):
    family: str = Field(min_length=1)
    rules: dict[str, list[str]]


class TablesDocument(BaseModel):
    """Top-level schema of a tables YAML file."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    severity: SeverityTables = Field(default_factory=SeverityTables)
    categories: dict[str, dict[str, Category]] = Field(default_factory=dict)
    kinds: dict[str, dict[FindingKind, Category]] = Field(default_factory=dict)
    equivalences: list[EquivalenceFamily] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Frozen runtime view
# ---------------------------------------------------------------------------


def _key(value: str) -> str:
    return value.strip().casefold()


class RuleTables:
    """Read-only lookups built from a validated :class:`TablesDocument`."""

    def __init__(self, document: TablesDocument) -> None:
        sev = document.severity
        self._severity_fallback = sev.fallback
        self._severity_default = MappingProxyType({_key(k): v for k, v in sev.default.items()})
        self._severity_tools = MappingProxyType({
            _key(tool): MappingProxyType({_key(k): v for k, v in mapping.items()})
            for tool, mapping in sev.tools.items()
        })
        self._severity_tool_fallbacks = MappingProxyType(
            {_key(tool): v for tool, v in sev.tool_fallbacks.items()}
        )
        self._cvss_bands = tuple(
            (band.min, band.severity)
            for band in sorted(sev.cvss, key=lambda b: b.min, reverse=True)
        )

        exact: dict[str, MappingProxyType] = {}
        globs: dict[str, tuple[tuple[str, Category], ...]] = {}
        for tool, mapping in document.categories.items():
            tool_exact: dict[str, Category] = {}
            tool_globs: list[tuple[str, Category]] = []
            for rule_pattern, category in mapping.items():
                if any(ch in rule_pattern for ch in "*?["):
                    tool_globs.append((_key(rule_pattern), category))
                else:
                    tool_exact[_key(rule_pattern)] = category
            exact[_key(tool)] = MappingProxyType(tool_exact)
            globs[_key(tool)] = tuple(tool_globs)
        self._category_exact = MappingProxyType(exact)
        self._category_globs = MappingProxyType(globs)

        self._kind_defaults = MappingProxyType({
            _key(tool): MappingProxyType(dict(mapping))
            for tool, mapping in document.kinds.items()
        })

        families: dict[tuple[str, str], set[str]] = {}
        for entry in document.equivalences:
            for tool, rule_ids in entry.rules.items():
                for rule_id in rule_ids:
                    families.setdefault((_key(tool), _key(rule_id)), set()).add(entry.family)
        self._families = MappingProxyType(
            {member: frozenset(names) for member, names in families.items()}
        )
        self.family_names: tuple[str, ...] = tuple(
            sorted({entry.family for entry in document.equivalences})
        )

    # ------------------------------------------------------------------
    # Severity
    # ------------------------------------------------------------------

    def normalize_severity(self, tool: str, raw: str | None) -> Severity:
        """Map a tool's own severity string onto the canonical scale.

        Lookup order: the tool's table, the shared default table, a numeric
        CVSS-style score, then the tool fallback or the global fallback.
        """
        tool_key = _key(tool)
        fallback = self._severity_tool_fallbacks.get(tool_key, self._severity_fallback)
        if raw is None:
            return fallback
        raw_key = _key(str(raw))
        if not raw_key:
            return fallback

        tool_map = self._severity_tools.get(tool_key)
        if tool_map is not None and raw_key in tool_map:
            return tool_map[raw_key]
        if raw_key in self._severity_default:
            return self._severity_default[raw_key]

        score = _parse_score(raw_key)
        if score is not None:
            for minimum, severity in self._cvss_bands:
                if score >= minimum:
                    return severity

        logger.debug("Unmapped severity %r from %s, using %s", raw, tool, fallback)
        return fallback

    # ------------------------------------------------------------------
    # Category
    # ------------------------------------------------------------------

    def categorize(self, tool: str, rule_id: str, kind: FindingKind | str | None = None) -> Category:
        """Classify a rule: exact id, then globs in file order, then kind default."""
        tool_key = _key(tool)
        rule_key = _key(rule_id)

        exact = self._category_exact.get(tool_key)
        if exact is not None and rule_key in exact:
            return exact[rule_key]
        for pattern, category in self._category_globs.get(tool_key, ()):
            if fnmatch.fnmatchcase(rule_key, pattern):
                return category

        if kind is not None:
            for scope in (tool_key, ANY_TOOL):
                defaults = self._kind_defaults.get(scope)
                if defaults is not None and kind in defaults:
                    return defaults[kind]
        return Category.UNCATEGORIZED

    # ------------------------------------------------------------------
    # Rule equivalence
    # ------------------------------------------------------------------

    def families_for(self, tool: str, rule_id: str) -> frozenset[str]:
        return self._families.get((_key(tool), _key(rule_id)), frozenset())

    def are_equivalent(self, tool_a: str, rule_a: str, tool_b: str, rule_b: str) -> bool:
        """True when two rules from different tools denote the same check."""
        if _key(rule_a) == _key(rule_b):
            return True
        return bool(self.families_for(tool_a, rule_a) & self.families_for(tool_b, rule_b))


def _parse_score(value: str) -> float | None:
    try:
        score = float(value)
    except ValueError:
        return None
    if math.isnan(score) or score < 0:
        return None
    return score


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_default_document() -> dict[str, Any]:
    text = resources.files("concord").joinpath("data/tables.yaml").read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def _read_yaml_file(path: Path) -> dict[str, Any]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read tables file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML syntax in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at top level in {path}, got {type(data).__name__}"
        )
    return data


def merge_documents(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* onto *base*.

    Nested mappings merge key by key, ``equivalences`` lists are appended and
    every other value in *override* replaces the one in *base*.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if key == "equivalences" and isinstance(current, list) and isinstance(value, list):
            merged[key] = current + copy.deepcopy(value)
        elif isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_documents(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def build_tables(data: Mapping[str, Any], *, merge_defaults: bool = True) -> RuleTables:
    """Validate a tables mapping (optionally layered over the defaults)."""
    raw = merge_documents(_read_default_document(), data) if merge_defaults else dict(data)
    try:
        document = TablesDocument.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid normalization tables: {exc}") from exc
    return RuleTables(document)


@functools.lru_cache(maxsize=8)
def load_tables(path: Path | None = None) -> RuleTables:
    """Return the process-wide tables, with *path* merged over the defaults."""
    override = _read_yaml_file(path) if path is not None else {}
    tables = build_tables(override)
    logger.info(
        "Loaded normalization tables (%d equivalence families%s)",
        len(tables.family_names),
        f", overrides from {path}" if path is not None else "",
    )
    return tables
