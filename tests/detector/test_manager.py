"""Tests for the fresh wallet config manager."""

import logging
import threading
from decimal import Decimal
from unittest.mock import patch

import pytest

from polymarket_fresh_wallet.config import FreshWalletSettings
from polymarket_fresh_wallet.detector.errors import ConfigurationError, InvalidInputError
from polymarket_fresh_wallet.detector.fresh_wallet import FreshnessEvaluator
from polymarket_fresh_wallet.detector.manager import FreshWalletConfigManager
from polymarket_fresh_wallet.detector.models import (
    MarketCategory,
    Severity,
    ThresholdSet,
    TradeSizeTier,
    WalletSignal,
)
from polymarket_fresh_wallet.detector.thresholds import (
    ThresholdCatalog,
    TradeSizeThresholds,
    default_catalog,
)


@pytest.fixture
def manager(catalog) -> FreshWalletConfigManager:
    return FreshWalletConfigManager(catalog)


def make_signal(**overrides) -> WalletSignal:
    fields = {
        "wallet_age_days": 20,
        "transaction_count": 6,
        "polymarket_trade_count": 4,
        "market_category": None,
    }
    fields.update(overrides)
    return WalletSignal(**fields)


class TestEvaluateWallet:
    def test_delegates_to_evaluator(self, manager, catalog):
        signal = make_signal()
        expected = FreshnessEvaluator(catalog).evaluate(signal)

        assert manager.evaluate_wallet(signal) == expected

    def test_near_close(self, manager):
        result = manager.evaluate_wallet(make_signal(hours_until_close=12))

        assert result.applied_thresholds.max_age_days == 15
        assert result.is_fresh is False

    def test_no_caching(self, manager):
        """Every call produces a new, equal result object."""
        signal = make_signal()
        first = manager.evaluate_wallet(signal)
        second = manager.evaluate_wallet(signal)

        assert first == second
        assert first is not second

    def test_invalid_input_propagates(self, manager):
        with pytest.raises(InvalidInputError):
            manager.evaluate_wallet(make_signal(transaction_count=-1))


class TestReplaceCatalog:
    def test_replace_changes_future_evaluations(self, manager):
        strict = ThresholdCatalog(ThresholdSet(10, 5, 3))

        before = manager.evaluate_wallet(make_signal())
        previous = manager.replace_catalog(strict)
        after = manager.evaluate_wallet(make_signal())

        assert before.is_fresh is True
        assert after.is_fresh is False
        assert previous == default_catalog()
        assert manager.catalog is strict

    def test_replace_rejects_non_catalog(self, manager, catalog):
        with pytest.raises(ConfigurationError, match="ThresholdCatalog"):
            manager.replace_catalog({"default": {}})  # type: ignore[arg-type]
        assert manager.catalog is catalog

    def test_constructor_rejects_non_catalog(self):
        with pytest.raises(ConfigurationError):
            FreshWalletConfigManager(None)  # type: ignore[arg-type]

    def test_in_flight_evaluation_completes_against_captured_catalog(self, manager, catalog):
        """A swap during an evaluation does not affect that evaluation."""
        strict = ThresholdCatalog(ThresholdSet(1, 5, 3))
        original_adjusted = ThresholdCatalog.adjusted_thresholds

        def swap_then_lookup(self, category, hours_until_close=None):
            manager.replace_catalog(strict)
            return original_adjusted(self, category, hours_until_close)

        with patch.object(ThresholdCatalog, "adjusted_thresholds", swap_then_lookup):
            result = manager.evaluate_wallet(make_signal())

        assert result.applied_thresholds == catalog.default
        assert result.is_fresh is True
        assert manager.catalog is strict

    def test_concurrent_readers_see_whole_catalogs(self, manager, catalog):
        """Readers racing a writer only ever observe one of the two catalogs."""
        strict = ThresholdCatalog(ThresholdSet(10, 50, 30))
        allowed = {catalog.default, strict.default}
        observed: list[ThresholdSet] = []
        stop = threading.Event()

        def writer() -> None:
            while not stop.is_set():
                manager.replace_catalog(strict)
                manager.replace_catalog(catalog)

        def reader() -> None:
            for _ in range(500):
                observed.append(manager.evaluate_wallet(make_signal()).applied_thresholds)

        writer_thread = threading.Thread(target=writer)
        readers = [threading.Thread(target=reader) for _ in range(4)]
        with patch("polymarket_fresh_wallet.detector.manager.logger"):
            writer_thread.start()
            for t in readers:
                t.start()
            for t in readers:
                t.join()
            stop.set()
            writer_thread.join()

        assert len(observed) == 2000
        assert set(observed) <= allowed

    def test_replace_logs(self, manager, caplog):
        with caplog.at_level(logging.INFO, logger="polymarket_fresh_wallet.detector.manager"):
            manager.replace_catalog(default_catalog())
        assert "Replaced threshold catalog" in caplog.text


class TestTradeSizeGating:
    def test_default_tiers(self, manager):
        assert manager.trade_size_tier(Decimal("50")) is TradeSizeTier.BELOW_MINIMUM
        assert manager.trade_size_tier(Decimal("5000")) is TradeSizeTier.LARGE

    def test_should_evaluate_trade(self, manager):
        assert manager.should_evaluate_trade(Decimal("100")) is True
        assert manager.should_evaluate_trade(Decimal("99")) is False

    def test_disabled_manager_skips_trades(self, catalog):
        manager = FreshWalletConfigManager(catalog, enabled=False)

        assert manager.enabled is False
        assert manager.should_evaluate_trade(Decimal("50000")) is False

    def test_custom_thresholds(self, catalog):
        manager = FreshWalletConfigManager(
            catalog,
            trade_size_thresholds=TradeSizeThresholds(
                min_trade_size=Decimal("1000"),
                large_trade_size=Decimal("5000"),
                whale_trade_size=Decimal("50000"),
            ),
        )

        assert manager.should_evaluate_trade(Decimal("500")) is False
        assert manager.trade_size_tier(Decimal("5000")) is TradeSizeTier.LARGE


class TestFromSettings:
    def test_defaults(self):
        manager = FreshWalletConfigManager.from_settings(FreshWalletSettings())

        assert manager.catalog == default_catalog()
        assert manager.enabled is True
        assert manager.trade_size_thresholds == TradeSizeThresholds()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FRESH_WALLET_MAX_AGE_DAYS", "10")
        monkeypatch.setenv("FRESH_WALLET_DETECTION_ENABLED", "false")
        monkeypatch.setenv("FRESH_WALLET_MIN_TRADE_SIZE", "500")

        manager = FreshWalletConfigManager.from_settings(FreshWalletSettings())

        assert manager.catalog.default.max_age_days == 10
        assert manager.catalog.thresholds_for(MarketCategory.POLITICS).max_age_days == 60
        assert manager.enabled is False
        assert manager.trade_size_thresholds.min_trade_size == Decimal("500")

    def test_evaluates_with_settings_catalog(self, monkeypatch):
        monkeypatch.setenv("FRESH_WALLET_INCREASE_NEAR_CLOSE", "false")

        manager = FreshWalletConfigManager.from_settings(FreshWalletSettings())
        result = manager.evaluate_wallet(make_signal(hours_until_close=1, transaction_count=0, polymarket_trade_count=0))

        assert result.applied_thresholds.max_age_days == 30
        assert result.severity is Severity.HIGH
