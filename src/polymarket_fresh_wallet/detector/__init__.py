"""Fresh wallet detection layer - Wallet freshness classification."""

from polymarket_fresh_wallet.detector.age import AgeBoundaries, AgeClassifier
from polymarket_fresh_wallet.detector.errors import (
    ConfigurationError,
    FreshWalletError,
    InvalidInputError,
)
from polymarket_fresh_wallet.detector.fresh_wallet import FreshnessEvaluator
from polymarket_fresh_wallet.detector.manager import FreshWalletConfigManager
from polymarket_fresh_wallet.detector.models import (
    AgeCategory,
    EvaluationResult,
    MarketCategory,
    Severity,
    ThresholdSet,
    TradeSizeTier,
    TriggeredBy,
    WalletSignal,
)
from polymarket_fresh_wallet.detector.thresholds import (
    NearCloseRule,
    ThresholdCatalog,
    TradeSizeThresholds,
    default_catalog,
)

__all__ = [
    "AgeBoundaries",
    "AgeCategory",
    "AgeClassifier",
    "ConfigurationError",
    "EvaluationResult",
    "FreshWalletConfigManager",
    "FreshWalletError",
    "FreshnessEvaluator",
    "InvalidInputError",
    "MarketCategory",
    "NearCloseRule",
    "Severity",
    "ThresholdCatalog",
    "ThresholdSet",
    "TradeSizeThresholds",
    "TradeSizeTier",
    "TriggeredBy",
    "WalletSignal",
    "default_catalog",
]
