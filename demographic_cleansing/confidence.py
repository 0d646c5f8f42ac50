"""Confidence tiers derived from the per-field outcomes of a record."""

from typing import Dict, Iterable, Optional

from .config import SEX_FIELD, RACE_FIELD, AGE_FIELD, REVIEW_LABELS
from .schema import Confidence, FieldOutcome, OutcomeSource, RawDemographicRecord


def is_untouched(raw_value: Optional[str], outcome: FieldOutcome) -> bool:
    """True if the field passed through and its value is textually identical to the raw input.

    Surrounding or repeated whitespace counts as a change.
    """
    if outcome.source is not OutcomeSource.PASSTHROUGH or outcome.value is None:
        return False
    return raw_value is not None and str(outcome.value) == raw_value


def is_resolved(outcome: FieldOutcome, review_labels: Iterable[str] = REVIEW_LABELS) -> bool:
    """True if a categorical outcome is valid and not a fallback/unknown label."""
    if not outcome.valid or outcome.value is None:
        return False
    return str(outcome.value).upper() not in {label.upper() for label in review_labels}


def classify_confidence(
    raw_record: RawDemographicRecord,
    outcomes: Dict[str, FieldOutcome],
    review_labels: Iterable[str] = REVIEW_LABELS,
) -> Confidence:
    """Derive the review tier of a record.

    Evaluated HIGH > MEDIUM > LOW:
      HIGH   - every field passed through unchanged and none is a fallback label
      MEDIUM - sex and race resolved to a specific label, age is valid, and
               at least one field was transformed
      LOW    - any fallback/unknown label or an invalid age
    """
    age = outcomes[AGE_FIELD]
    resolved = (
        is_resolved(outcomes[SEX_FIELD], review_labels)
        and is_resolved(outcomes[RACE_FIELD], review_labels)
        and age.valid
        and age.value is not None
    )
    # A raw "Unknown" passes through unchanged but is still unresolved
    if not resolved:
        return Confidence.LOW
    fields = (SEX_FIELD, RACE_FIELD, AGE_FIELD)
    if all(is_untouched(raw_record.raw_value(f), outcomes[f]) for f in fields):
        return Confidence.HIGH
    return Confidence.MEDIUM
