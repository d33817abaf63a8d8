# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from pathlib import Path

import pytest

from concord.core.config import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "reports"

# Absolute prefix tfsec writes into its report fixture
SCAN_ROOT = Path("/workspace/infra")


@pytest.fixture
def reports_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the developer's environment."""
    return Settings(_env_file=None, base_dir=SCAN_ROOT)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Strip CONCORD_* variables so tests see the documented defaults."""
    import os

    for name in list(os.environ):
        if name.startswith("CONCORD_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _clear_tables_cache():
    """Reset the process-wide tables cache between tests."""
    from concord.tables import load_tables

    load_tables.cache_clear()
    yield
    load_tables.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by setup_logging() during a test."""
    import logging

    yield
    logger = logging.getLogger("concord")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
