"""Tests for wallet age classification."""

import pytest

from polymarket_fresh_wallet.detector.age import (
    DEFAULT_AGE_BOUNDARIES,
    ESTABLISHED_MAX_DAYS,
    FRESH_MAX_DAYS,
    RECENT_MAX_DAYS,
    VERY_FRESH_MAX_DAYS,
    AgeBoundaries,
    AgeClassifier,
)
from polymarket_fresh_wallet.detector.errors import ConfigurationError, InvalidInputError
from polymarket_fresh_wallet.detector.models import AgeCategory


@pytest.fixture
def classifier() -> AgeClassifier:
    return AgeClassifier()


class TestAgeClassifier:
    """Tests for AgeClassifier.classify."""

    def test_unknown_age_is_new(self, classifier):
        """Unknown age maps to the most suspicious bucket."""
        assert classifier.classify(None) is AgeCategory.NEW

    def test_zero_days_is_very_fresh(self, classifier):
        assert classifier.classify(0) is AgeCategory.VERY_FRESH

    @pytest.mark.parametrize(
        ("age_days", "expected"),
        [
            (VERY_FRESH_MAX_DAYS, AgeCategory.VERY_FRESH),
            (VERY_FRESH_MAX_DAYS + 1, AgeCategory.FRESH),
            (FRESH_MAX_DAYS, AgeCategory.FRESH),
            (FRESH_MAX_DAYS + 1, AgeCategory.RECENT),
            (RECENT_MAX_DAYS, AgeCategory.RECENT),
            (RECENT_MAX_DAYS + 1, AgeCategory.ESTABLISHED),
            (ESTABLISHED_MAX_DAYS, AgeCategory.ESTABLISHED),
            (ESTABLISHED_MAX_DAYS + 1, AgeCategory.MATURE),
        ],
    )
    def test_boundaries_are_inclusive(self, classifier, age_days, expected):
        """Each boundary belongs to the younger bucket."""
        assert classifier.classify(age_days) is expected

    def test_very_large_age_is_mature(self, classifier):
        assert classifier.classify(100_000) is AgeCategory.MATURE

    def test_negative_age_rejected(self, classifier):
        """Negative ages are a caller bug and are not clamped."""
        with pytest.raises(InvalidInputError, match="non-negative"):
            classifier.classify(-1)

    @pytest.mark.parametrize("age_days", [1.5, "10", True])
    def test_non_integer_age_rejected(self, classifier, age_days):
        with pytest.raises(InvalidInputError):
            classifier.classify(age_days)

    def test_categories_are_ordered(self):
        assert (
            AgeCategory.NEW
            < AgeCategory.VERY_FRESH
            < AgeCategory.FRESH
            < AgeCategory.RECENT
            < AgeCategory.ESTABLISHED
            < AgeCategory.MATURE
        )

    def test_custom_boundaries(self):
        classifier = AgeClassifier(AgeBoundaries(very_fresh=1, fresh=3, recent=10, established=20))

        assert classifier.classify(1) is AgeCategory.VERY_FRESH
        assert classifier.classify(2) is AgeCategory.FRESH
        assert classifier.classify(10) is AgeCategory.RECENT
        assert classifier.classify(20) is AgeCategory.ESTABLISHED
        assert classifier.classify(21) is AgeCategory.MATURE


class TestAgeBoundaries:
    """Tests for AgeBoundaries validation."""

    def test_defaults(self):
        assert DEFAULT_AGE_BOUNDARIES == AgeBoundaries(7, 30, 90, 365)

    def test_out_of_order_rejected(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            AgeBoundaries(very_fresh=30, fresh=7)

    def test_equal_boundaries_rejected(self):
        with pytest.raises(ConfigurationError):
            AgeBoundaries(very_fresh=7, fresh=7)

    def test_negative_rejected(self):
        with pytest.raises(ConfigurationError, match="non-negative"):
            AgeBoundaries(very_fresh=-1)
