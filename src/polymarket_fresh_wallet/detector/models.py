"""Data models for the detector module."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum

from polymarket_fresh_wallet.detector.errors import InvalidInputError


class MarketCategory(str, Enum):
    """Classification of a prediction market driving its risk tolerance."""

    POLITICS = "politics"
    CRYPTO = "crypto"
    SPORTS = "sports"
    TECH = "tech"
    BUSINESS = "business"
    SCIENCE = "science"
    ENTERTAINMENT = "entertainment"
    WEATHER = "weather"
    GEOPOLITICS = "geopolitics"
    LEGAL = "legal"
    HEALTH = "health"
    ECONOMY = "economy"
    CULTURE = "culture"
    OTHER = "other"

    @classmethod
    def parse(cls, value: MarketCategory | str | None) -> MarketCategory | None:
        """Normalize a category value.

        Args:
            value: A MarketCategory, its (case-insensitive) value or name,
                or None for an unspecified category.

        Returns:
            The matching MarketCategory, or None when unspecified.

        Raises:
            InvalidInputError: If the value is not a known category.
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidInputError(f"Unknown market category: {value!r}")


class AgeCategory(IntEnum):
    """Ordered wallet age buckets, most suspicious first.

    NEW is reserved for wallets whose age could not be determined.
    """

    NEW = 0
    VERY_FRESH = 1
    FRESH = 2
    RECENT = 3
    ESTABLISHED = 4
    MATURE = 5


class Severity(IntEnum):
    """Ordered risk grade attached to a freshness verdict."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3


class TradeSizeTier(IntEnum):
    """Trade notional bucket used to decide how much scrutiny a trade gets."""

    BELOW_MINIMUM = 0
    STANDARD = 1
    LARGE = 2
    WHALE = 3


@dataclass(frozen=True)
class ThresholdSet:
    """Freshness policy for one market category.

    Attributes:
        max_age_days: Wallets at or below this age are freshness candidates.
        min_transaction_count: On-chain activity floor used for severity.
        min_polymarket_trades: Platform trade floor used for severity.
    """

    max_age_days: int
    min_transaction_count: int
    min_polymarket_trades: int

    def with_overrides(self, **changes: int) -> ThresholdSet:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, int]:
        return {
            "max_age_days": self.max_age_days,
            "min_transaction_count": self.min_transaction_count,
            "min_polymarket_trades": self.min_polymarket_trades,
        }


@dataclass(frozen=True)
class WalletSignal:
    """Observed attributes of a wallet trading on a market.

    Built by the acquisition layer once wallet age and activity counts have
    been resolved. Validation happens at evaluation time.

    Attributes:
        wallet_age_days: Days since first on-chain activity, None if unknown.
        transaction_count: Total on-chain transactions observed.
        polymarket_trade_count: Trades placed on the monitored platform.
        market_category: Category of the traded market, None if unspecified.
        hours_until_close: Hours until the market closes, None when the
            trade is not evaluated near a close.
    """

    wallet_age_days: int | None
    transaction_count: int
    polymarket_trade_count: int
    market_category: MarketCategory | str | None = None
    hours_until_close: float | None = None


@dataclass(frozen=True)
class TriggeredBy:
    """Which criteria fired during an evaluation."""

    age: bool
    no_history: bool
    transaction_floor: bool
    trade_floor: bool

    def to_dict(self) -> dict[str, bool]:
        return {
            "age": self.age,
            "no_history": self.no_history,
            "transaction_floor": self.transaction_floor,
            "trade_floor": self.trade_floor,
        }


@dataclass(frozen=True)
class EvaluationResult:
    """Verdict produced for a single WalletSignal.

    Results carry no timestamp, so evaluating the same signal twice yields
    equal results.

    Attributes:
        is_fresh: Whether the wallet is treated as freshly created.
        severity: Risk grade. LOW for wallets that are not fresh.
        age_category: Age bucket derived from the wallet age alone.
        applied_thresholds: Thresholds used, after near-close tightening.
        triggered_by: Criteria that fired, for auditing.
        market_category: Normalized market category, None if unspecified.
        wallet_age_days: Wallet age from the signal.
        transaction_count: Transaction count from the signal.
        polymarket_trade_count: Platform trade count from the signal.
    """

    is_fresh: bool
    severity: Severity
    age_category: AgeCategory
    applied_thresholds: ThresholdSet
    triggered_by: TriggeredBy
    market_category: MarketCategory | None = None
    wallet_age_days: int | None = None
    transaction_count: int = 0
    polymarket_trade_count: int = 0

    @property
    def should_alert(self) -> bool:
        """Return True if the verdict is actionable downstream."""
        return self.is_fresh

    @property
    def is_high_severity(self) -> bool:
        """Return True for HIGH and CRITICAL verdicts."""
        return self.is_fresh and self.severity >= Severity.HIGH

    def to_dict(self) -> dict[str, object]:
        """Serialize to dictionary for stream publishing."""
        return {
            "is_fresh": self.is_fresh,
            "severity": self.severity.name,
            "age_category": self.age_category.name,
            "applied_thresholds": self.applied_thresholds.to_dict(),
            "triggered_by": self.triggered_by.to_dict(),
            "market_category": self.market_category.value if self.market_category else None,
            "wallet_age_days": self.wallet_age_days,
            "transaction_count": self.transaction_count,
            "polymarket_trade_count": self.polymarket_trade_count,
        }
