"""Unit tests for confidence tiers, review routing and the run summary.

Run with: pytest tests/test_confidence_review.py -v
"""

import itertools

import pytest

from demographic_cleansing.confidence import classify_confidence, is_untouched
from demographic_cleansing.review import ReviewRouter, build_review_entry, needs_review
from demographic_cleansing.schema import (
    CleansedRecord,
    Confidence,
    FieldOutcome,
    OutcomeSource,
    RawDemographicRecord,
    ReviewStatus,
)
from demographic_cleansing.summary import summarize_run

PASS = OutcomeSource.PASSTHROUGH
AI = OutcomeSource.CLASSIFIED


def outcome(value, source=PASS, valid=True):
    return FieldOutcome(value=value, source=source, valid=valid)


def record(sex, race, age, raw=("", "", ""), confidence=Confidence.LOW, flagged=False, record_id="1"):
    return CleansedRecord(
        record_id=record_id,
        sex_raw=raw[0],
        race_raw=raw[1],
        age_raw=raw[2],
        sex=sex,
        race=race,
        age=age,
        confidence=confidence,
        needs_review=flagged,
    )


class TestConfidence:
    """Tests for classify_confidence."""

    def test_all_untouched_is_high(self):
        raw = RawDemographicRecord(record_id="1", sex_raw="Female", race_raw="White", age_raw="32")
        outcomes = {"sex": outcome("Female"), "race": outcome("White"), "age": outcome(32)}
        assert classify_confidence(raw, outcomes) is Confidence.HIGH

    def test_case_normalized_passthrough_is_medium(self):
        raw = RawDemographicRecord(record_id="1", sex_raw="male", race_raw="White", age_raw="32")
        outcomes = {"sex": outcome("Male"), "race": outcome("White"), "age": outcome(32)}
        assert not is_untouched("male", outcomes["sex"])
        assert classify_confidence(raw, outcomes) is Confidence.MEDIUM

    def test_padded_raw_value_is_not_untouched(self):
        raw = RawDemographicRecord(record_id="1", sex_raw=" Female ", race_raw="White", age_raw="32")
        outcomes = {"sex": outcome("Female"), "race": outcome("White"), "age": outcome(32)}
        assert not is_untouched(" Female ", outcomes["sex"])
        assert classify_confidence(raw, outcomes) is Confidence.MEDIUM

    def test_transformed_is_medium(self):
        raw = RawDemographicRecord(record_id="1", sex_raw="M", race_raw="White", age_raw="45 years")
        outcomes = {
            "sex": outcome("Male", AI),
            "race": outcome("White"),
            "age": outcome(45, OutcomeSource.EXTRACTED),
        }
        assert classify_confidence(raw, outcomes) is Confidence.MEDIUM

    @pytest.mark.parametrize("sex", ["Unknown", "Other"])
    def test_review_label_is_low_even_when_untouched(self, sex):
        raw = RawDemographicRecord(record_id="1", sex_raw=sex, race_raw="White", age_raw="40")
        outcomes = {"sex": outcome(sex), "race": outcome("White"), "age": outcome(40)}
        assert classify_confidence(raw, outcomes) is Confidence.LOW

    def test_invalid_age_is_low(self):
        raw = RawDemographicRecord(record_id="1", sex_raw="Male", race_raw="White", age_raw="unknown")
        outcomes = {
            "sex": outcome("Male"),
            "race": outcome("White"),
            "age": outcome(None, OutcomeSource.EXTRACTED, valid=False),
        }
        assert classify_confidence(raw, outcomes) is Confidence.LOW

    def test_degraded_field_is_never_high(self):
        values = {"sex": ["Male", "Unknown"], "race": ["Asian", "Other"], "age": [30, None]}
        for sex, race, age in itertools.product(values["sex"], values["race"], values["age"]):
            raw = RawDemographicRecord(record_id="1", sex_raw=sex, race_raw=race,
                                       age_raw=None if age is None else str(age))
            outcomes = {
                "sex": outcome(sex),
                "race": outcome(race),
                "age": outcome(age, valid=age is not None),
            }
            degraded = sex == "Unknown" or race == "Other" or age is None
            tier = classify_confidence(raw, outcomes)
            if degraded:
                assert tier is Confidence.LOW
            else:
                assert tier is Confidence.HIGH


class TestNeedsReview:
    """The review predicate, both directions."""

    def test_clean_record_not_flagged(self, registry):
        outcomes = {"sex": outcome("Male", AI), "race": outcome("White"), "age": outcome(45)}
        assert not needs_review(outcomes, registry)

    @pytest.mark.parametrize("field,value", [
        ("sex", "Unknown"), ("sex", "Other"), ("race", "Unknown"), ("race", "Other"),
    ])
    def test_review_labels_flagged(self, registry, field, value):
        outcomes = {"sex": outcome("Male"), "race": outcome("White"), "age": outcome(45)}
        outcomes[field] = outcome(value, AI)
        assert needs_review(outcomes, registry)

    def test_invalid_age_flagged(self, registry):
        outcomes = {
            "sex": outcome("Male"),
            "race": outcome("White"),
            "age": outcome(None, OutcomeSource.EXTRACTED, valid=False),
        }
        assert needs_review(outcomes, registry)

    def test_out_of_range_age_flagged_even_if_marked_valid(self, registry):
        outcomes = {"sex": outcome("Male"), "race": outcome("White"), "age": outcome(130, OutcomeSource.EXTRACTED)}
        assert needs_review(outcomes, registry)


class TestReviewRouter:
    """Tests for review entry construction."""

    def test_flagged_record_gets_pending_entry(self, registry):
        rec = record(outcome("Unknown", AI), outcome("Asian"), outcome(29),
                     raw=("X", "Asian", "29"), flagged=True, record_id="45")
        entry = ReviewRouter(registry).route(rec)
        assert entry.record_id == "45"
        assert entry.status is ReviewStatus.PENDING
        assert entry.cleansed_sex == "Unknown"
        assert entry.cleansed_age == 29
        assert entry.sex_raw == "X"
        assert entry.reviewer is None
        assert entry.corrected_sex is None
        assert entry.corrected_race is None
        assert entry.corrected_age is None
        assert entry.review_timestamp is None

    def test_unflagged_record_gets_no_entry(self, registry):
        rec = record(outcome("Male"), outcome("White"), outcome(45), flagged=False)
        assert ReviewRouter(registry).route(rec) is None

    def test_entry_row_is_json_ready(self):
        rec = record(outcome("Male"), outcome("Other", AI), outcome(None, valid=False), flagged=True)
        row = build_review_entry(rec).to_row()
        assert row["status"] == "PENDING"
        assert row["confidence"] == "LOW"
        assert isinstance(row["created_at"], str)

    def test_created_at_is_timezone_aware(self):
        rec = record(outcome("Male"), outcome("Other", AI), outcome(40), flagged=True)
        entry = build_review_entry(rec)
        assert entry.created_at.tzinfo is not None
        assert entry.created_at.utcoffset().total_seconds() == 0


class TestRunSummary:
    """Tests for summarize_run."""

    def test_counts_from_records(self):
        records = [
            record(outcome("Female"), outcome("White"), outcome(32), confidence=Confidence.HIGH, record_id="1"),
            record(outcome("Male", AI), outcome("White", AI), outcome(45, OutcomeSource.EXTRACTED),
                   confidence=Confidence.MEDIUM, record_id="2"),
            record(outcome("Unknown", AI), outcome("Unknown", AI),
                   outcome(None, OutcomeSource.EXTRACTED, valid=False),
                   confidence=Confidence.LOW, flagged=True, record_id="3"),
        ]
        summary = summarize_run(records)
        assert summary.total_records == 3
        assert summary.passthrough == {"sex": 1, "race": 1, "age": 1}
        assert summary.ai_assisted == {"sex": 2, "race": 2, "age": 2}
        assert summary.auto_accepted == 2
        assert summary.review_queue == 1
        assert summary.confidence == {"HIGH": 1, "MEDIUM": 1, "LOW": 1}

    def test_empty_run(self):
        summary = summarize_run([])
        assert summary.total_records == 0
        assert summary.confidence == {"HIGH": 0, "MEDIUM": 0, "LOW": 0}
