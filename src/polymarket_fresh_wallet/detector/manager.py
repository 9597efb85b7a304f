"""Runtime holder for the fresh wallet threshold catalog.

FreshWalletConfigManager is the single entry point callers use to evaluate
wallets. It holds one ThresholdCatalog reference that can be swapped at
runtime (configuration reload, tests) without locking: a swap is a single
reference assignment, and each evaluation captures the reference once.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from polymarket_fresh_wallet.detector.age import AgeClassifier
from polymarket_fresh_wallet.detector.errors import ConfigurationError
from polymarket_fresh_wallet.detector.fresh_wallet import FreshnessEvaluator
from polymarket_fresh_wallet.detector.models import EvaluationResult, TradeSizeTier, WalletSignal
from polymarket_fresh_wallet.detector.thresholds import ThresholdCatalog, TradeSizeThresholds

if TYPE_CHECKING:
    from polymarket_fresh_wallet.config import FreshWalletSettings

logger = logging.getLogger(__name__)


class FreshWalletConfigManager:
    """Stateful facade over FreshnessEvaluator.

    Results are never cached; every call re-evaluates against the catalog
    held at the time of the call.

    Example:
        ```python
        manager = FreshWalletConfigManager.from_settings(get_settings().fresh_wallet)
        result = manager.evaluate_wallet(signal)

        # Hot reload
        manager.replace_catalog(ThresholdCatalog.from_json(text))
        ```
    """

    def __init__(
        self,
        catalog: ThresholdCatalog,
        *,
        enabled: bool = True,
        trade_size_thresholds: TradeSizeThresholds | None = None,
        age_classifier: AgeClassifier | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            catalog: Initial threshold catalog.
            enabled: Whether fresh wallet detection is enabled.
            trade_size_thresholds: Trade notional tiers (defaults if omitted).
            age_classifier: Age bucket classifier shared by all evaluations.

        Raises:
            ConfigurationError: If catalog is not a ThresholdCatalog.
        """
        self._check_catalog(catalog)
        self._catalog = catalog
        self._enabled = enabled
        self._trade_size_thresholds = trade_size_thresholds or TradeSizeThresholds()
        self._age_classifier = age_classifier or AgeClassifier()

    @classmethod
    def from_settings(cls, settings: FreshWalletSettings) -> FreshWalletConfigManager:
        """Build a manager from validated environment settings.

        Raises:
            ConfigurationError: If the settings describe an invalid catalog.
        """
        from polymarket_fresh_wallet.config import (
            build_threshold_catalog,
            build_trade_size_thresholds,
        )

        catalog = build_threshold_catalog(settings)
        manager = cls(
            catalog,
            enabled=settings.enabled,
            trade_size_thresholds=build_trade_size_thresholds(settings),
        )
        logger.info(
            "Fresh wallet manager configured: enabled=%s, default_max_age_days=%d, categories=%d",
            settings.enabled,
            catalog.default.max_age_days,
            len(catalog.categories),
        )
        return manager

    @property
    def catalog(self) -> ThresholdCatalog:
        """The catalog currently used for evaluations."""
        return self._catalog

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def trade_size_thresholds(self) -> TradeSizeThresholds:
        return self._trade_size_thresholds

    def evaluate_wallet(self, signal: WalletSignal) -> EvaluationResult:
        """Evaluate a wallet against the current catalog.

        Args:
            signal: Resolved wallet attributes.

        Returns:
            A fresh EvaluationResult.

        Raises:
            InvalidInputError: If the signal violates the input contract.
        """
        catalog = self._catalog
        evaluator = FreshnessEvaluator(catalog, age_classifier=self._age_classifier)
        return evaluator.evaluate(signal)

    def replace_catalog(self, new_catalog: ThresholdCatalog) -> ThresholdCatalog:
        """Swap the held catalog.

        Evaluations that already captured the previous catalog complete
        against it.

        Args:
            new_catalog: Fully constructed replacement catalog.

        Returns:
            The catalog that was replaced.

        Raises:
            ConfigurationError: If new_catalog is not a ThresholdCatalog.
        """
        self._check_catalog(new_catalog)
        previous = self._catalog
        self._catalog = new_catalog
        logger.info("Replaced threshold catalog: %r", new_catalog)
        return previous

    def trade_size_tier(self, notional: Decimal) -> TradeSizeTier:
        return self._trade_size_thresholds.tier(notional)

    def should_evaluate_trade(self, notional: Decimal) -> bool:
        """Return True if detection is enabled and the trade meets the minimum size."""
        if not self._enabled:
            return False
        return self.trade_size_tier(notional) is not TradeSizeTier.BELOW_MINIMUM

    @staticmethod
    def _check_catalog(catalog: object) -> None:
        if not isinstance(catalog, ThresholdCatalog):
            raise ConfigurationError(
                f"Expected ThresholdCatalog, got {type(catalog).__name__}"
            )
