"""Configuration management service with Pydantic Settings.

This module provides centralized configuration management for the fresh
wallet classification engine, loading and validating environment
variables at startup and turning them into a ThresholdCatalog.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from polymarket_fresh_wallet.detector.errors import ConfigurationError
from polymarket_fresh_wallet.detector.models import MarketCategory, ThresholdSet
from polymarket_fresh_wallet.detector.thresholds import (
    DEFAULT_CATEGORY_THRESHOLDS,
    DEFAULT_CLOSE_MULTIPLIER,
    DEFAULT_CLOSE_WINDOW_HOURS,
    DEFAULT_LARGE_TRADE_SIZE,
    DEFAULT_MAX_AGE_DAYS,
    DEFAULT_MIN_POLYMARKET_TRADES,
    DEFAULT_MIN_TRADE_SIZE,
    DEFAULT_MIN_TRANSACTION_COUNT,
    DEFAULT_WHALE_TRADE_SIZE,
    NearCloseRule,
    ThresholdCatalog,
    TradeSizeThresholds,
    merge_thresholds,
)

logger = logging.getLogger(__name__)

_ENV_FILE = ".env"
_ENV_FILE_ENCODING = "utf-8"


class CategoryThresholdOverride(BaseModel):
    """Partial thresholds for one market category.

    Unset fields inherit the built-in entry for the category, or the
    default thresholds when the category has none.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_age_days: int | None = Field(default=None, ge=1)
    min_transaction_count: int | None = Field(default=None, ge=0)
    min_polymarket_trades: int | None = Field(default=None, ge=0)


class FreshWalletSettings(BaseSettings):
    """Fresh-wallet classification configuration."""

    model_config = SettingsConfigDict(env_prefix="FRESH_WALLET_", extra="ignore")

    enabled: bool = Field(
        default=True,
        alias="FRESH_WALLET_DETECTION_ENABLED",
        description="Enable fresh wallet detection",
    )
    max_age_days: int = Field(
        default=DEFAULT_MAX_AGE_DAYS,
        alias="FRESH_WALLET_MAX_AGE_DAYS",
        ge=1,
        le=3650,
        description="Default max wallet age (days) to consider fresh",
    )
    min_tx_count: int = Field(
        default=DEFAULT_MIN_TRANSACTION_COUNT,
        alias="FRESH_WALLET_MIN_TX_COUNT",
        ge=0,
        le=1_000_000,
        description="Default on-chain transaction floor used for severity grading",
    )
    min_pm_trades: int = Field(
        default=DEFAULT_MIN_POLYMARKET_TRADES,
        alias="FRESH_WALLET_MIN_PM_TRADES",
        ge=0,
        le=1_000_000,
        description="Default Polymarket trade floor used for severity grading",
    )
    category_thresholds: dict[MarketCategory, CategoryThresholdOverride] = Field(
        default_factory=dict,
        alias="FRESH_WALLET_CATEGORY_THRESHOLDS",
        description="JSON object of per-category threshold overrides, merged over the built-in table",
    )
    replace_category_thresholds: bool = Field(
        default=False,
        alias="FRESH_WALLET_REPLACE_CATEGORY_THRESHOLDS",
        description="Drop the built-in category table and use only the configured overrides",
    )
    catalog_file: Path | None = Field(
        default=None,
        alias="FRESH_WALLET_CATALOG_FILE",
        description="JSON catalog document; when set it takes precedence over the threshold fields",
    )
    increase_near_close: bool = Field(
        default=True,
        alias="FRESH_WALLET_INCREASE_NEAR_CLOSE",
        description="Tighten thresholds for trades close to market close",
    )
    close_window_hours: float = Field(
        default=DEFAULT_CLOSE_WINDOW_HOURS,
        alias="FRESH_WALLET_CLOSE_WINDOW_HOURS",
        ge=0.0,
        le=365 * 24,
        description="Hours before market close at which thresholds tighten",
    )
    close_multiplier: float = Field(
        default=DEFAULT_CLOSE_MULTIPLIER,
        alias="FRESH_WALLET_CLOSE_MULTIPLIER",
        gt=0.0,
        le=1.0,
        description="Multiplier applied to max_age_days near close (smaller is stricter)",
    )
    min_trade_size: Decimal = Field(
        default=DEFAULT_MIN_TRADE_SIZE,
        alias="FRESH_WALLET_MIN_TRADE_SIZE",
        description="Minimum trade notional (USDC) to evaluate",
    )
    large_trade_size: Decimal = Field(
        default=DEFAULT_LARGE_TRADE_SIZE,
        alias="FRESH_WALLET_LARGE_TRADE_SIZE",
        description="Trade notional (USDC) for elevated scrutiny",
    )
    whale_trade_size: Decimal = Field(
        default=DEFAULT_WHALE_TRADE_SIZE,
        alias="FRESH_WALLET_WHALE_TRADE_SIZE",
        description="Trade notional (USDC) for maximum scrutiny",
    )

    @field_validator("min_trade_size")
    @classmethod
    def validate_min_trade_size(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("FRESH_WALLET_MIN_TRADE_SIZE must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_trade_size_order(self) -> FreshWalletSettings:
        """Trade size tiers must be strictly increasing."""
        if self.large_trade_size <= self.min_trade_size:
            raise ValueError("FRESH_WALLET_LARGE_TRADE_SIZE must be greater than FRESH_WALLET_MIN_TRADE_SIZE")
        if self.whale_trade_size <= self.large_trade_size:
            raise ValueError(
                "FRESH_WALLET_WHALE_TRADE_SIZE must be greater than FRESH_WALLET_LARGE_TRADE_SIZE"
            )
        return self


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files.

    Example:
        ```python
        from polymarket_fresh_wallet.config import get_settings

        settings = get_settings()
        print(settings.fresh_wallet.max_age_days)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding=_ENV_FILE_ENCODING,
        extra="ignore",
    )

    # NOTE: Nested BaseSettings must be given the same env_file, otherwise it
    # will only read from the process environment (and ignore `.env`).
    fresh_wallet: FreshWalletSettings = Field(
        default_factory=lambda: FreshWalletSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def summary(self) -> dict[str, str | dict[str, str]]:
        """Get a flat summary of settings for startup logging."""
        fw = self.fresh_wallet
        categories = {*_category_base(fw), *fw.category_thresholds}
        return {
            "fresh_wallet": {
                "enabled": str(fw.enabled),
                "max_age_days": str(fw.max_age_days),
                "min_tx_count": str(fw.min_tx_count),
                "min_pm_trades": str(fw.min_pm_trades),
                "categories": ",".join(sorted(c.value for c in categories)) or "(none)",
                "catalog_file": str(fw.catalog_file) if fw.catalog_file else "(not set)",
                "increase_near_close": str(fw.increase_near_close),
                "close_window_hours": str(fw.close_window_hours),
                "close_multiplier": str(fw.close_multiplier),
                "min_trade_size": str(fw.min_trade_size),
            },
            "log_level": self.log_level,
        }


def _category_base(settings: FreshWalletSettings) -> Mapping[MarketCategory, ThresholdSet]:
    if settings.replace_category_thresholds:
        return {}
    return DEFAULT_CATEGORY_THRESHOLDS


def load_catalog_file(path: Path) -> ThresholdCatalog:
    """Load a ThresholdCatalog from a JSON document on disk.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read catalog file {path}: {e}") from e
    catalog = ThresholdCatalog.from_json(text)
    logger.info("Loaded threshold catalog from %s", path)
    return catalog


def build_threshold_catalog(settings: FreshWalletSettings) -> ThresholdCatalog:
    """Build the ThresholdCatalog described by the settings.

    Category overrides are merged over the built-in category table unless
    replace_category_thresholds is set. A partial override fills its missing
    fields from the built-in entry for that category, or from the default
    thresholds. A configured catalog file takes precedence over the
    threshold fields.

    Raises:
        ConfigurationError: If the resulting catalog is invalid.
    """
    if settings.catalog_file is not None:
        return load_catalog_file(settings.catalog_file)

    default = ThresholdSet(
        max_age_days=settings.max_age_days,
        min_transaction_count=settings.min_tx_count,
        min_polymarket_trades=settings.min_pm_trades,
    )
    base_table = _category_base(settings)
    categories = dict(base_table)
    for category, override in settings.category_thresholds.items():
        categories[category] = merge_thresholds(
            base_table.get(category, default), override.model_dump(exclude_none=True)
        )
    rule = NearCloseRule(
        enabled=settings.increase_near_close,
        window_hours=settings.close_window_hours,
        multiplier=settings.close_multiplier,
    )
    return ThresholdCatalog(default, categories, near_close_rule=rule)


def build_trade_size_thresholds(settings: FreshWalletSettings) -> TradeSizeThresholds:
    return TradeSizeThresholds(
        min_trade_size=settings.min_trade_size,
        large_trade_size=settings.large_trade_size,
        whale_trade_size=settings.whale_trade_size,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Uses LRU cache to ensure settings are loaded only once and
    reused across the application.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or when environment variables change.
    """
    get_settings.cache_clear()
