"""Fresh wallet classification algorithm.

This module provides the FreshnessEvaluator class that decides whether a
wallet trading on a market should be treated as freshly created, and
grades the verdict with a severity used for alert prioritization.
"""

import logging

from polymarket_fresh_wallet.detector.age import AgeClassifier
from polymarket_fresh_wallet.detector.errors import InvalidInputError
from polymarket_fresh_wallet.detector.models import (
    EvaluationResult,
    MarketCategory,
    Severity,
    ThresholdSet,
    TriggeredBy,
    WalletSignal,
)
from polymarket_fresh_wallet.detector.thresholds import ThresholdCatalog, validate_hours_until_close

logger = logging.getLogger(__name__)


class FreshnessEvaluator:
    """Pure decision function for fresh wallet classification.

    A wallet is fresh if its age is unknown or at or below the applied
    `max_age_days`. Activity floors never change the verdict; they only
    grade its severity:

    - Unknown age: CRITICAL (an undiscoverable age is itself a risk signal)
    - Fresh, below both activity floors: HIGH
    - Fresh, one floor met: MEDIUM
    - Fresh, both floors met: LOW
    - Not fresh: LOW (not actionable, see `EvaluationResult.should_alert`)

    The evaluator holds no mutable state and reads no clock, so identical
    signals always produce equal results.

    Example:
        ```python
        evaluator = FreshnessEvaluator(default_catalog())
        result = evaluator.evaluate(
            WalletSignal(
                wallet_age_days=5,
                transaction_count=2,
                polymarket_trade_count=0,
                market_category=MarketCategory.POLITICS,
            )
        )
        result.is_fresh, result.severity  # (True, Severity.HIGH)
        ```
    """

    def __init__(
        self,
        catalog: ThresholdCatalog,
        *,
        age_classifier: AgeClassifier | None = None,
    ) -> None:
        """Initialize the evaluator.

        Args:
            catalog: Threshold catalog to evaluate against.
            age_classifier: Classifier for age buckets (default boundaries
                if omitted).
        """
        self._catalog = catalog
        self._age_classifier = age_classifier or AgeClassifier()

    @property
    def catalog(self) -> ThresholdCatalog:
        return self._catalog

    def evaluate(self, signal: WalletSignal) -> EvaluationResult:
        """Classify a wallet signal.

        Args:
            signal: Resolved wallet attributes for one market.

        Returns:
            EvaluationResult with verdict, severity, age category and the
            thresholds that were applied.

        Raises:
            InvalidInputError: If the signal violates the input contract.
        """
        category = self._validate(signal)
        age = signal.wallet_age_days

        age_category = self._age_classifier.classify(age)
        applied = self._catalog.adjusted_thresholds(category, signal.hours_until_close)

        no_history = age is None
        age_trigger = age is not None and age <= applied.max_age_days
        is_fresh = no_history or age_trigger

        below_tx_floor = signal.transaction_count < applied.min_transaction_count
        below_trade_floor = signal.polymarket_trade_count < applied.min_polymarket_trades

        severity = self.determine_severity(signal, applied, is_fresh=is_fresh)

        logger.debug(
            "Evaluated wallet: age=%s, tx=%d, trades=%d, category=%s, hours_until_close=%s, "
            "max_age_days=%d, fresh=%s, severity=%s",
            age,
            signal.transaction_count,
            signal.polymarket_trade_count,
            category.value if category else None,
            signal.hours_until_close,
            applied.max_age_days,
            is_fresh,
            severity.name,
        )

        return EvaluationResult(
            is_fresh=is_fresh,
            severity=severity,
            age_category=age_category,
            applied_thresholds=applied,
            triggered_by=TriggeredBy(
                age=age_trigger,
                no_history=no_history,
                transaction_floor=below_tx_floor,
                trade_floor=below_trade_floor,
            ),
            market_category=category,
            wallet_age_days=age,
            transaction_count=signal.transaction_count,
            polymarket_trade_count=signal.polymarket_trade_count,
        )

    @staticmethod
    def determine_severity(
        signal: WalletSignal,
        applied: ThresholdSet,
        *,
        is_fresh: bool,
    ) -> Severity:
        """Grade a verdict from age and activity floors.

        Args:
            signal: The evaluated wallet signal.
            applied: Thresholds after near-close tightening.
            is_fresh: The freshness verdict for the signal.

        Returns:
            The Severity for the verdict.
        """
        if signal.wallet_age_days is None:
            return Severity.CRITICAL
        if not is_fresh:
            return Severity.LOW

        floors_met = sum(
            (
                signal.transaction_count >= applied.min_transaction_count,
                signal.polymarket_trade_count >= applied.min_polymarket_trades,
            )
        )
        if floors_met == 0:
            return Severity.HIGH
        if floors_met == 1:
            return Severity.MEDIUM
        return Severity.LOW

    @staticmethod
    def _validate(signal: WalletSignal) -> MarketCategory | None:
        """Check the signal contract and return its normalized category."""
        if not isinstance(signal, WalletSignal):
            raise InvalidInputError(f"Expected WalletSignal, got {type(signal).__name__}")

        age = signal.wallet_age_days
        if age is not None and (isinstance(age, bool) or not isinstance(age, int) or age < 0):
            raise InvalidInputError(
                f"wallet_age_days must be a non-negative integer or None, got {age!r}"
            )

        for name in ("transaction_count", "polymarket_trade_count"):
            value = getattr(signal, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidInputError(f"{name} must be a non-negative integer, got {value!r}")

        validate_hours_until_close(signal.hours_until_close)

        return MarketCategory.parse(signal.market_category)
