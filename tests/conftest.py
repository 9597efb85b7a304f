"""Pytest configuration and fixtures."""

import os

import pytest

from polymarket_fresh_wallet.config import clear_settings_cache
from polymarket_fresh_wallet.detector.fresh_wallet import FreshnessEvaluator
from polymarket_fresh_wallet.detector.thresholds import ThresholdCatalog, default_catalog


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from FRESH_WALLET_* variables set in the host environment."""
    for key in list(os.environ):
        if key.startswith("FRESH_WALLET_") or key == "LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def catalog() -> ThresholdCatalog:
    """Catalog with the built-in thresholds."""
    return default_catalog()


@pytest.fixture
def evaluator(catalog: ThresholdCatalog) -> FreshnessEvaluator:
    """Evaluator over the built-in catalog."""
    return FreshnessEvaluator(catalog)
