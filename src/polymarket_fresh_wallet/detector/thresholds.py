"""Per-category freshness thresholds.

This module provides the ThresholdCatalog, an immutable table of
ThresholdSets keyed by MarketCategory with a default entry for
uncategorized markets, together with the near-close tightening rule and
the trade size tiers used to gate evaluation.

Catalogs are never mutated after construction. Changing a category or the
near-close rule produces a new catalog that can be swapped in atomically.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, fields
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from polymarket_fresh_wallet.detector.errors import ConfigurationError, InvalidInputError
from polymarket_fresh_wallet.detector.models import MarketCategory, ThresholdSet, TradeSizeTier

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_MAX_AGE_DAYS = 30
DEFAULT_MIN_TRANSACTION_COUNT = 5
DEFAULT_MIN_POLYMARKET_TRADES = 3

DEFAULT_THRESHOLDS = ThresholdSet(
    max_age_days=DEFAULT_MAX_AGE_DAYS,
    min_transaction_count=DEFAULT_MIN_TRANSACTION_COUNT,
    min_polymarket_trades=DEFAULT_MIN_POLYMARKET_TRADES,
)

# Politics and geopolitics draw more manipulation, so freshness reaches further back.
# Crypto traders legitimately rotate wallets often.
DEFAULT_CATEGORY_THRESHOLDS: Mapping[MarketCategory, ThresholdSet] = MappingProxyType(
    {
        MarketCategory.POLITICS: ThresholdSet(60, 10, 5),
        MarketCategory.GEOPOLITICS: ThresholdSet(60, 10, 5),
        MarketCategory.CRYPTO: ThresholdSet(14, 3, 2),
        MarketCategory.SPORTS: ThresholdSet(30, 5, 3),
    }
)

DEFAULT_CLOSE_WINDOW_HOURS = 24.0
DEFAULT_CLOSE_MULTIPLIER = 0.5

DEFAULT_MIN_TRADE_SIZE = Decimal("100")
DEFAULT_LARGE_TRADE_SIZE = Decimal("1000")
DEFAULT_WHALE_TRADE_SIZE = Decimal("10000")

_THRESHOLD_FIELDS = frozenset(f.name for f in fields(ThresholdSet))


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_hours_until_close(hours: object) -> None:
    """Check an hours-until-close value.

    Raises:
        InvalidInputError: If hours is not None or a finite, non-negative number.
    """
    if hours is not None and (not _is_number(hours) or not math.isfinite(hours) or hours < 0):
        raise InvalidInputError(
            f"hours_until_close must be a non-negative number or None, got {hours!r}"
        )


def validate_threshold_set(name: str, thresholds: ThresholdSet) -> None:
    """Check a ThresholdSet against the catalog invariants.

    Raises:
        ConfigurationError: If max_age_days is not a positive integer or an
            activity floor is not a non-negative integer.
    """
    if not isinstance(thresholds, ThresholdSet):
        raise ConfigurationError(f"{name}: expected ThresholdSet, got {type(thresholds).__name__}")
    if not _is_int(thresholds.max_age_days) or thresholds.max_age_days <= 0:
        raise ConfigurationError(
            f"{name}: max_age_days must be a positive integer, got {thresholds.max_age_days!r}"
        )
    for floor_name in ("min_transaction_count", "min_polymarket_trades"):
        value = getattr(thresholds, floor_name)
        if not _is_int(value) or value < 0:
            raise ConfigurationError(
                f"{name}: {floor_name} must be a non-negative integer, got {value!r}"
            )


def merge_thresholds(base: ThresholdSet, overrides: Mapping[str, Any]) -> ThresholdSet:
    """Apply a partial override mapping on top of a base ThresholdSet.

    Raises:
        ConfigurationError: If the mapping names an unknown field.
    """
    if not isinstance(overrides, Mapping):
        raise ConfigurationError(f"Threshold overrides must be a mapping, got {overrides!r}")
    unknown = set(overrides) - _THRESHOLD_FIELDS
    if unknown:
        raise ConfigurationError(f"Unknown threshold fields: {sorted(unknown)}")
    return base.with_overrides(**{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class NearCloseRule:
    """Tightening applied when a market is about to close.

    Within `window_hours` of close, max_age_days is scaled by `multiplier`
    (rounded down, never below 1) and the activity floors are divided by it
    (rounded up).
    """

    enabled: bool = True
    window_hours: float = DEFAULT_CLOSE_WINDOW_HOURS
    multiplier: float = DEFAULT_CLOSE_MULTIPLIER

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ConfigurationError(f"enabled must be a boolean, got {self.enabled!r}")
        if not _is_number(self.window_hours) or not math.isfinite(self.window_hours):
            raise ConfigurationError(f"window_hours must be a finite number, got {self.window_hours!r}")
        if self.window_hours < 0:
            raise ConfigurationError(f"window_hours must be non-negative, got {self.window_hours}")
        if not _is_number(self.multiplier) or not 0 < self.multiplier <= 1:
            raise ConfigurationError(f"multiplier must be in (0, 1], got {self.multiplier!r}")

    def applies(self, hours_until_close: float | None) -> bool:
        """Return True if thresholds should be tightened."""
        return (
            self.enabled
            and hours_until_close is not None
            and hours_until_close <= self.window_hours
        )

    def tighten(self, thresholds: ThresholdSet) -> ThresholdSet:
        """Derive the near-close ThresholdSet from a base set."""
        return ThresholdSet(
            max_age_days=max(1, math.floor(thresholds.max_age_days * self.multiplier)),
            min_transaction_count=math.ceil(thresholds.min_transaction_count / self.multiplier),
            min_polymarket_trades=math.ceil(thresholds.min_polymarket_trades / self.multiplier),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "enabled": self.enabled,
            "window_hours": self.window_hours,
            "multiplier": self.multiplier,
        }


DEFAULT_NEAR_CLOSE_RULE = NearCloseRule()


@dataclass(frozen=True)
class TradeSizeThresholds:
    """Trade notional (USDC) boundaries for scrutiny tiers.

    Each boundary is inclusive for the tier it opens.
    """

    min_trade_size: Decimal = DEFAULT_MIN_TRADE_SIZE
    large_trade_size: Decimal = DEFAULT_LARGE_TRADE_SIZE
    whale_trade_size: Decimal = DEFAULT_WHALE_TRADE_SIZE

    def __post_init__(self) -> None:
        if self.min_trade_size < 0:
            raise ConfigurationError("min_trade_size must be non-negative")
        if self.large_trade_size <= self.min_trade_size:
            raise ConfigurationError("large_trade_size must be greater than min_trade_size")
        if self.whale_trade_size <= self.large_trade_size:
            raise ConfigurationError("whale_trade_size must be greater than large_trade_size")

    def tier(self, notional: Decimal) -> TradeSizeTier:
        """Classify a trade notional value."""
        if notional >= self.whale_trade_size:
            return TradeSizeTier.WHALE
        if notional >= self.large_trade_size:
            return TradeSizeTier.LARGE
        if notional >= self.min_trade_size:
            return TradeSizeTier.STANDARD
        return TradeSizeTier.BELOW_MINIMUM


class ThresholdCatalog:
    """Immutable mapping of market category to ThresholdSet.

    Lookups for an unspecified category, or a category with no entry, fall
    back to the default set. Adding a category is a data change: pass it in
    `categories`.

    Example:
        ```python
        catalog = ThresholdCatalog(
            DEFAULT_THRESHOLDS,
            {MarketCategory.POLITICS: ThresholdSet(60, 10, 5)},
        )
        catalog.thresholds_for(MarketCategory.POLITICS).max_age_days  # 60
        catalog.adjusted_thresholds(None, hours_until_close=12).max_age_days  # 15
        ```
    """

    __slots__ = ("_default", "_categories", "_near_close_rule")

    def __init__(
        self,
        default: ThresholdSet,
        categories: Mapping[MarketCategory, ThresholdSet] | None = None,
        *,
        near_close_rule: NearCloseRule = DEFAULT_NEAR_CLOSE_RULE,
    ) -> None:
        """Build and validate a catalog.

        Args:
            default: Thresholds for unspecified or unlisted categories.
            categories: Per-category thresholds.
            near_close_rule: Tightening applied close to market close.

        Raises:
            ConfigurationError: If the default is missing or any entry
                violates the threshold invariants.
        """
        if default is None:
            raise ConfigurationError("A default ThresholdSet is required")
        validate_threshold_set("default", default)

        table: dict[MarketCategory, ThresholdSet] = {}
        for category, thresholds in (categories or {}).items():
            if not isinstance(category, MarketCategory):
                raise ConfigurationError(f"Catalog keys must be MarketCategory, got {category!r}")
            validate_threshold_set(category.value, thresholds)
            table[category] = thresholds

        if not isinstance(near_close_rule, NearCloseRule):
            raise ConfigurationError("near_close_rule must be a NearCloseRule")

        self._default = default
        self._categories: Mapping[MarketCategory, ThresholdSet] = MappingProxyType(table)
        self._near_close_rule = near_close_rule

    @property
    def default(self) -> ThresholdSet:
        return self._default

    @property
    def categories(self) -> Mapping[MarketCategory, ThresholdSet]:
        """Read-only view of the per-category entries."""
        return self._categories

    @property
    def near_close_rule(self) -> NearCloseRule:
        return self._near_close_rule

    def thresholds_for(self, category: MarketCategory | str | None) -> ThresholdSet:
        """Return the base thresholds for a market category."""
        resolved = MarketCategory.parse(category)
        if resolved is None:
            return self._default
        return self._categories.get(resolved, self._default)

    def adjusted_thresholds(
        self,
        category: MarketCategory | str | None,
        hours_until_close: float | None = None,
    ) -> ThresholdSet:
        """Return the thresholds for a category after near-close tightening.

        Args:
            category: Market category, None if unspecified.
            hours_until_close: Hours until the market closes, or None.

        Returns:
            The base ThresholdSet, or a tightened copy when the market is
            within the near-close window.

        Raises:
            InvalidInputError: If hours_until_close is not a finite,
                non-negative number.
        """
        validate_hours_until_close(hours_until_close)
        base = self.thresholds_for(category)
        if self._near_close_rule.applies(hours_until_close):
            return self._near_close_rule.tighten(base)
        return base

    def with_category(self, category: MarketCategory, thresholds: ThresholdSet) -> ThresholdCatalog:
        """Return a new catalog with one category entry added or replaced."""
        table = dict(self._categories)
        table[category] = thresholds
        return ThresholdCatalog(self._default, table, near_close_rule=self._near_close_rule)

    def with_near_close_rule(self, rule: NearCloseRule) -> ThresholdCatalog:
        """Return a new catalog using a different near-close rule."""
        return ThresholdCatalog(self._default, self._categories, near_close_rule=rule)

    def to_dict(self) -> dict[str, Any]:
        """Export the catalog as plain data."""
        return {
            "default": self._default.to_dict(),
            "replace_categories": True,
            "categories": {
                category.value: thresholds.to_dict()
                for category, thresholds in sorted(self._categories.items(), key=lambda kv: kv[0].value)
            },
            "near_close": self._near_close_rule.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ThresholdCatalog:
        """Build a catalog from plain data.

        `default` and each entry in `categories` may be partial: the default
        is merged over the built-in default set. Entries in `categories` are
        merged over the built-in category table; a partial entry fills its
        missing fields from the built-in entry for that category, or from
        the resolved default when there is none. Set `replace_categories` to
        true to start from an empty table instead. `near_close` fields are
        optional.

        Raises:
            ConfigurationError: If the data is malformed.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Catalog configuration must be a mapping")
        unknown = set(data) - {"default", "replace_categories", "categories", "near_close"}
        if unknown:
            raise ConfigurationError(f"Unknown catalog sections: {sorted(unknown)}")

        default = DEFAULT_THRESHOLDS
        if data.get("default") is not None:
            default = merge_thresholds(DEFAULT_THRESHOLDS, data["default"])

        replace_categories = data.get("replace_categories", False)
        if not isinstance(replace_categories, bool):
            raise ConfigurationError(f"replace_categories must be a boolean, got {replace_categories!r}")
        base_table = {} if replace_categories else DEFAULT_CATEGORY_THRESHOLDS
        categories = dict(base_table)

        raw_categories = data.get("categories")
        if raw_categories is not None:
            if not isinstance(raw_categories, Mapping):
                raise ConfigurationError("categories must be a mapping of category to thresholds")
            for key, overrides in raw_categories.items():
                try:
                    category = MarketCategory.parse(key)
                except InvalidInputError as e:
                    raise ConfigurationError(str(e)) from e
                if category is None:
                    raise ConfigurationError("Category keys cannot be empty")
                categories[category] = merge_thresholds(base_table.get(category, default), overrides)

        near_close = data.get("near_close")
        if near_close is None:
            near_close = {}
        elif not isinstance(near_close, Mapping):
            raise ConfigurationError(f"near_close must be a mapping, got {near_close!r}")
        try:
            rule = NearCloseRule(**near_close)
        except TypeError as e:
            raise ConfigurationError(f"Invalid near_close section: {e}") from e

        catalog = cls(default, categories, near_close_rule=rule)
        logger.debug("Loaded threshold catalog: %r", catalog)
        return catalog

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> ThresholdCatalog:
        """Build a catalog from a JSON document.

        Raises:
            ConfigurationError: If the JSON is invalid or describes an
                invalid catalog.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid catalog JSON: {e}") from e
        return cls.from_dict(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ThresholdCatalog):
            return NotImplemented
        return (
            self._default == other._default
            and dict(self._categories) == dict(other._categories)
            and self._near_close_rule == other._near_close_rule
        )

    def __hash__(self) -> int:
        return hash((self._default, frozenset(self._categories.items()), self._near_close_rule))

    def __repr__(self) -> str:
        return (
            f"ThresholdCatalog(default={self._default!r}, "
            f"categories={len(self._categories)}, near_close_rule={self._near_close_rule!r})"
        )


def default_catalog() -> ThresholdCatalog:
    """Build the catalog with the built-in thresholds."""
    return ThresholdCatalog(DEFAULT_THRESHOLDS, DEFAULT_CATEGORY_THRESHOLDS)
