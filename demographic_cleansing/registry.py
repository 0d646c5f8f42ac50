"""Canonical value registry - the single place that decides "already clean"."""

import re
from typing import Dict, FrozenSet, Iterable, Optional, Sequence, Tuple, Union

from .config import (
    SEX_FIELD, RACE_FIELD, AGE_FIELD, SEX_LABELS, RACE_LABELS,
    FALLBACK_LABEL, REVIEW_LABELS, AGE_MIN, AGE_MAX
)
from .exceptions import ConfigurationError

_DIGITS_RE = re.compile(r"\d+", re.ASCII)


def normalize_text(value: Optional[str]) -> str:
    """Collapse whitespace and strip; None becomes the empty string."""
    if value is None:
        return ""
    return " ".join(str(value).split())


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a bare run of ASCII digits, or return None if the text is anything else.

    Signs, underscores and non-ASCII digits are rejected even though ``int()`` accepts them.
    """
    text = normalize_text(value)
    if not _DIGITS_RE.fullmatch(text):
        return None
    return int(text)


class CanonicalValueRegistry:
    """Fixed label sets per categorical field plus the numeric age range.

    Membership tests are hash lookups against upper-cased labels and never
    touch the classification service.
    """

    def __init__(
        self,
        label_sets: Optional[Dict[str, Sequence[str]]] = None,
        fallback_label: str = FALLBACK_LABEL,
        review_labels: Iterable[str] = REVIEW_LABELS,
        age_range: Tuple[int, int] = (AGE_MIN, AGE_MAX),
    ):
        """Build and validate the registry.

        Args:
            label_sets: Mapping of categorical field to its ordered labels
            fallback_label: Label used when a value cannot be classified
            review_labels: Labels that send a record to human review
            age_range: Inclusive (min, max) bounds for age

        Raises:
            ConfigurationError: If any label set or the age range is invalid
        """
        if label_sets is None:
            label_sets = {SEX_FIELD: SEX_LABELS, RACE_FIELD: RACE_LABELS}

        self._labels: Dict[str, Tuple[str, ...]] = {}
        self._lookup: Dict[str, Dict[str, str]] = {}
        for field in (SEX_FIELD, RACE_FIELD):
            labels = tuple(label_sets.get(field) or ())
            if not labels:
                raise ConfigurationError(f"Missing label set for field '{field}'")
            lookup = {}
            for label in labels:
                if not isinstance(label, str) or not label.strip():
                    raise ConfigurationError(f"Empty label in '{field}' label set")
                key = normalize_text(label).upper()
                if key in lookup:
                    raise ConfigurationError(f"Duplicate label '{label}' in '{field}' label set")
                lookup[key] = label
            if fallback_label.upper() not in lookup:
                raise ConfigurationError(
                    f"Fallback label '{fallback_label}' is not in the '{field}' label set"
                )
            self._labels[field] = labels
            self._lookup[field] = lookup

        self._fallback = fallback_label
        self.review_labels: Tuple[str, ...] = tuple(review_labels)
        self._review_keys: FrozenSet[str] = frozenset(l.upper() for l in self.review_labels)

        age_min, age_max = age_range
        if not isinstance(age_min, int) or not isinstance(age_max, int):
            raise ConfigurationError(f"Age bounds must be integers, got {age_range!r}")
        if age_min < 0 or age_min > age_max:
            raise ConfigurationError(f"Invalid age range {age_range!r}")
        self.age_min = age_min
        self.age_max = age_max

    def labels(self, field: str) -> Tuple[str, ...]:
        """Ordered canonical labels for a categorical field."""
        if field not in self._labels:
            raise KeyError(f"'{field}' is not a categorical field")
        return self._labels[field]

    def fallback(self, field: str) -> str:
        return self._lookup[field][self._fallback.upper()]

    def is_review_label(self, value: Optional[str]) -> bool:
        return value is not None and str(value).upper() in self._review_keys

    def in_range(self, age: Optional[int]) -> bool:
        return age is not None and self.age_min <= age <= self.age_max

    def is_canonical(self, field: str, value: Optional[str]) -> bool:
        """Check if a raw value is already in the field's canonical vocabulary.

        Args:
            field: One of sex, race, age
            value: Raw value (may be None)

        Returns:
            True if no transformation beyond case normalization is needed
        """
        if field == AGE_FIELD:
            return self.in_range(parse_int(value))
        if field not in self._lookup:
            raise KeyError(f"Unknown field '{field}'")
        return normalize_text(value).upper() in self._lookup[field]

    def canonical_form(self, field: str, value: Optional[str]) -> Union[str, int, None]:
        """Return the canonical representation of a value, or None if not canonical.

        Categorical labels come back in their declared casing; ages as int.
        """
        if field == AGE_FIELD:
            age = parse_int(value)
            return age if self.in_range(age) else None
        return self._lookup[field].get(normalize_text(value).upper())
