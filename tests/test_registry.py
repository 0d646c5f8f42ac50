"""Unit tests for the canonical value registry.

Run with: pytest tests/test_registry.py -v
"""

import pytest

from demographic_cleansing.config import SEX_LABELS, RACE_LABELS
from demographic_cleansing.exceptions import ConfigurationError
from demographic_cleansing.registry import CanonicalValueRegistry, normalize_text, parse_int


class TestNormalizeText:
    """Tests for whitespace normalization."""

    def test_collapses_whitespace(self):
        assert normalize_text("  Black   or African\tAmerican ") == "Black or African American"

    def test_none_is_empty(self):
        assert normalize_text(None) == ""

    def test_parse_int(self):
        assert parse_int(" 45 ") == 45
        assert parse_int("045") == 45
        assert parse_int("45 years") is None
        assert parse_int("") is None
        assert parse_int(None) is None

    @pytest.mark.parametrize("value", ["3_2", "+32", "-32", "\u0663\u0662", "32.0", "1e2"])
    def test_parse_int_rejects_non_plain_integers(self, value):
        assert parse_int(value) is None


class TestCanonicalCheck:
    """Tests for is_canonical and canonical_form."""

    def test_every_declared_label_is_canonical(self, registry):
        for label in SEX_LABELS:
            assert registry.is_canonical("sex", label)
        for label in RACE_LABELS:
            assert registry.is_canonical("race", label)

    def test_case_insensitive_match(self, registry):
        assert registry.is_canonical("sex", "FEMALE")
        assert registry.canonical_form("sex", "FEMALE") == "Female"
        assert registry.canonical_form("race", "black or african american") == "Black or African American"

    def test_synonyms_are_not_canonical(self, registry):
        assert not registry.is_canonical("sex", "M")
        assert not registry.is_canonical("race", "Caucasian")
        assert registry.canonical_form("race", "Caucasian") is None

    def test_missing_values_are_not_canonical(self, registry):
        assert not registry.is_canonical("sex", None)
        assert not registry.is_canonical("race", "")
        assert not registry.is_canonical("age", None)

    def test_age_range_boundaries(self, registry):
        assert registry.canonical_form("age", "0") == 0
        assert registry.canonical_form("age", "120") == 120
        assert registry.canonical_form("age", "121") is None
        assert registry.canonical_form("age", "-5") is None
        assert registry.canonical_form("age", "45 years") is None

    @pytest.mark.parametrize("value", ["3_2", "+32", "\u0663\u0662"])
    def test_int_like_ages_are_not_canonical(self, registry, value):
        assert not registry.is_canonical("age", value)
        assert registry.canonical_form("age", value) is None

    def test_unknown_field_raises(self, registry):
        with pytest.raises(KeyError):
            registry.is_canonical("height", "180")
        with pytest.raises(KeyError):
            registry.labels("age")


class TestLabelsAndReview:
    """Tests for label lookups used by the cleansers and the review router."""

    def test_labels_keep_declared_order(self, registry):
        assert registry.labels("race") == tuple(RACE_LABELS)

    def test_fallback(self, registry):
        assert registry.fallback("sex") == "Unknown"
        assert registry.fallback("race") == "Unknown"

    def test_review_labels(self, registry):
        assert registry.is_review_label("Other")
        assert registry.is_review_label("unknown")
        assert not registry.is_review_label("Male")
        assert not registry.is_review_label(None)


class TestConfigurationErrors:
    """An invalid registry must fail before any record is processed."""

    def test_missing_label_set(self):
        with pytest.raises(ConfigurationError, match="Missing label set"):
            CanonicalValueRegistry(label_sets={"sex": SEX_LABELS})

    def test_empty_label_set(self):
        with pytest.raises(ConfigurationError):
            CanonicalValueRegistry(label_sets={"sex": [], "race": RACE_LABELS})

    def test_duplicate_label(self):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            CanonicalValueRegistry(label_sets={"sex": ["Male", "male", "Unknown"], "race": RACE_LABELS})

    def test_blank_label(self):
        with pytest.raises(ConfigurationError, match="Empty label"):
            CanonicalValueRegistry(label_sets={"sex": ["Male", " ", "Unknown"], "race": RACE_LABELS})

    def test_fallback_must_be_in_every_set(self):
        with pytest.raises(ConfigurationError, match="Fallback"):
            CanonicalValueRegistry(label_sets={"sex": ["Male", "Female"], "race": RACE_LABELS})

    def test_inverted_age_range(self):
        with pytest.raises(ConfigurationError):
            CanonicalValueRegistry(age_range=(120, 0))

    def test_negative_age_min(self):
        with pytest.raises(ConfigurationError):
            CanonicalValueRegistry(age_range=(-1, 120))

    def test_non_integer_bounds(self):
        with pytest.raises(ConfigurationError):
            CanonicalValueRegistry(age_range=(0, "120"))

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            CanonicalValueRegistry(age_range=(10, 5))
