# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from concord.core.constants import (
    DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_WEIGHT_MESSAGE,
    DEFAULT_WEIGHT_RULE,
    DEFAULT_WEIGHT_SEVERITY,
)
from concord.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CONCORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Similarity scoring
    similarity_threshold: float = Field(default=DEFAULT_SIMILARITY_THRESHOLD, ge=0.0, le=1.0)
    weight_message: float = Field(default=DEFAULT_WEIGHT_MESSAGE, ge=0.0)
    weight_rule: float = Field(default=DEFAULT_WEIGHT_RULE, ge=0.0)
    weight_severity: float = Field(default=DEFAULT_WEIGHT_SEVERITY, ge=0.0)

    # Locator normalization. Absolute paths are only made relative when they
    # sit under base_dir; set it to the scanned checkout when any tool reports
    # absolute paths (tfsec, file:// URIs in SARIF), otherwise they keep their
    # full prefix and never meet the relative paths of other tools.
    line_gap_tolerance: int = Field(default=0, ge=0)
    base_dir: Path | None = None

    # Lookup tables (YAML merged over the packaged defaults)
    tables_path: Path | None = None

    # Pipeline
    max_concurrent_parsers: int = Field(default=8, ge=1)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "text"):
            msg = f"log_format must be 'json' or 'text', got {v!r}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def _check_weights(self) -> "Settings":
        if self.weight_message + self.weight_rule + self.weight_severity <= 0:
            msg = "At least one similarity weight must be positive"
            raise ValueError(msg)
        return self


def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
