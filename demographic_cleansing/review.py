"""Review routing - decides which cleansed records go to human review."""

from typing import Dict, Optional

from .config import SEX_FIELD, RACE_FIELD, AGE_FIELD
from .registry import CanonicalValueRegistry
from .schema import CleansedRecord, FieldOutcome, ReviewEntry


def needs_review(outcomes: Dict[str, FieldOutcome], registry: Optional[CanonicalValueRegistry] = None) -> bool:
    """Check whether a record's outcomes require human review.

    Args:
        outcomes: Field → outcome mapping for one record
        registry: Registry providing review labels and the age range

    Returns:
        True if sex or race landed on Other/Unknown, or age is invalid or out of range
    """
    registry = registry or CanonicalValueRegistry()
    for field in (SEX_FIELD, RACE_FIELD):
        if registry.is_review_label(outcomes[field].value):
            return True
    age = outcomes[AGE_FIELD]
    if not age.valid or age.value is None:
        return True
    return not registry.in_range(age.value)


def build_review_entry(record: CleansedRecord) -> ReviewEntry:
    """Create a pending review entry with empty correction fields."""
    return ReviewEntry(
        record_id=record.record_id,
        sex_raw=record.sex_raw,
        race_raw=record.race_raw,
        age_raw=record.age_raw,
        cleansed_sex=record.sex.value,
        cleansed_race=record.race.value,
        cleansed_age=record.age.value,
        confidence=record.confidence,
    )


class ReviewRouter:
    """Materializes review entries for flagged records.

    Routing is additive: a flagged record stays in the cleansed output and
    additionally gets a review entry.
    """

    def __init__(self, registry: CanonicalValueRegistry):
        self.registry = registry

    def needs_review(self, outcomes: Dict[str, FieldOutcome]) -> bool:
        return needs_review(outcomes, self.registry)

    def route(self, record: CleansedRecord) -> Optional[ReviewEntry]:
        if not record.needs_review:
            return None
        return build_review_entry(record)
