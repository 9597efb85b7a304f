"""Wallet age classification.

Age buckets are a general risk signal independent of any one market's
policy, so their boundaries live here rather than in the threshold catalog.
"""

from __future__ import annotations

from dataclasses import dataclass

from polymarket_fresh_wallet.detector.errors import ConfigurationError, InvalidInputError
from polymarket_fresh_wallet.detector.models import AgeCategory

# Inclusive upper bounds (days) for each bucket
VERY_FRESH_MAX_DAYS = 7
FRESH_MAX_DAYS = 30
RECENT_MAX_DAYS = 90
ESTABLISHED_MAX_DAYS = 365


@dataclass(frozen=True)
class AgeBoundaries:
    """Inclusive upper bounds in days for each known-age bucket.

    Ages above `established` are MATURE.
    """

    very_fresh: int = VERY_FRESH_MAX_DAYS
    fresh: int = FRESH_MAX_DAYS
    recent: int = RECENT_MAX_DAYS
    established: int = ESTABLISHED_MAX_DAYS

    def __post_init__(self) -> None:
        bounds = (self.very_fresh, self.fresh, self.recent, self.established)
        if any(isinstance(b, bool) or not isinstance(b, int) or b < 0 for b in bounds):
            raise ConfigurationError(f"Age boundaries must be non-negative integers: {bounds}")
        if not all(lower < upper for lower, upper in zip(bounds, bounds[1:])):
            raise ConfigurationError(f"Age boundaries must be strictly increasing: {bounds}")


DEFAULT_AGE_BOUNDARIES = AgeBoundaries()


class AgeClassifier:
    """Maps a wallet age in days to an AgeCategory.

    Unknown age maps to NEW: a wallet whose first activity cannot be found
    is never assumed safe.
    """

    def __init__(self, boundaries: AgeBoundaries = DEFAULT_AGE_BOUNDARIES) -> None:
        self._boundaries = boundaries

    @property
    def boundaries(self) -> AgeBoundaries:
        return self._boundaries

    def classify(self, age_days: int | None) -> AgeCategory:
        """Classify a wallet age.

        Args:
            age_days: Days since first on-chain activity, or None if unknown.

        Returns:
            The matching AgeCategory.

        Raises:
            InvalidInputError: If age_days is negative or not an integer.
        """
        if age_days is None:
            return AgeCategory.NEW
        if isinstance(age_days, bool) or not isinstance(age_days, int):
            raise InvalidInputError(f"wallet_age_days must be an integer or None, got {age_days!r}")
        if age_days < 0:
            raise InvalidInputError(f"wallet_age_days must be non-negative, got {age_days}")

        b = self._boundaries
        if age_days <= b.very_fresh:
            return AgeCategory.VERY_FRESH
        if age_days <= b.fresh:
            return AgeCategory.FRESH
        if age_days <= b.recent:
            return AgeCategory.RECENT
        if age_days <= b.established:
            return AgeCategory.ESTABLISHED
        return AgeCategory.MATURE
