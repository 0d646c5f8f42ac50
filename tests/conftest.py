"""Shared fixtures: a scripted stand-in for the classification service."""

import os
import threading
import time
from typing import Dict, Optional, Sequence

import pytest

from demographic_cleansing.models.adapter import ClassifierAdapter
from demographic_cleansing.pipeline import CleansingPipeline
from demographic_cleansing.registry import CanonicalValueRegistry
from demographic_cleansing.schema import RawDemographicRecord

# Answers a real model would give for the sample data
SEX_ANSWERS = {
    "M": "Male",
    "F": "Female",
    "MAN": "Male",
    "WOMAN": "Female",
    "M.": "Male",
    "F.": "Female",
    "NON-BINARY": "Other",
    "X": "Other",
}
RACE_ANSWERS = {
    "CAUCASIAN": "White",
    "BLACK": "Black or African American",
    "AFRICAN AMERICAN": "Black or African American",
    "AA": "Black or African American",
    "HISPANIC": "Hispanic or Latino",
    "LATINO": "Hispanic or Latino",
    "NATIVE AMERICAN": "American Indian or Alaska Native",
    "MIXED": "Two or More Races",
}
AGE_ANSWERS = {
    "45 YEARS": "45",
    "32 YRS": "32",
    "FORTY-FIVE": "45",
    "35YO": "35",
    "AGE: 28": "28",
    "INFANT": "0",
    "UNKNOWN": "INVALID",
    "N/A": "INVALID",
    "": "INVALID",
    "150": "150",
    "-5": "INVALID",
}


class FakeBackend:
    """Backend with scripted answers, call counting and injectable failures.

    ``classify`` answers from a per-field table and falls back to ``Unknown``;
    ``complete`` answers from the age table and falls back to ``INVALID``.
    """

    def __init__(
        self,
        classify_answers: Optional[Dict[str, Dict[str, str]]] = None,
        complete_answers: Optional[Dict[str, str]] = None,
        classify_error: Optional[Exception] = None,
        complete_error: Optional[Exception] = None,
        fail_on: Sequence[str] = (),
        delay: float = 0.0,
    ):
        self.classify_answers = classify_answers or {"sex": SEX_ANSWERS, "race": RACE_ANSWERS}
        self.complete_answers = AGE_ANSWERS if complete_answers is None else complete_answers
        self.classify_error = classify_error
        self.complete_error = complete_error
        self.fail_on = {v.upper() for v in fail_on}
        self.delay = delay
        self.calls = []
        self.models = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def _enter(self, kind: str, value: str, model: Optional[str]):
        with self._lock:
            self.calls.append((kind, value))
            self.models.append(model)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)

    def _leave(self):
        with self._lock:
            self.in_flight -= 1

    def classify(self, value, labels, model=None, field="value"):
        self._enter("classify", value, model)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.classify_error is not None:
                raise self.classify_error
            if value.upper() in self.fail_on:
                raise TimeoutError(f"timed out classifying {value!r}")
            return self.classify_answers.get(field, {}).get(value.upper(), "Unknown")
        finally:
            self._leave()

    def complete(self, value, instruction, model=None):
        self._enter("complete", value, model)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.complete_error is not None:
                raise self.complete_error
            if value.upper() in self.fail_on:
                raise TimeoutError(f"timed out extracting {value!r}")
            return self.complete_answers.get(value.upper(), "INVALID")
        finally:
            self._leave()


class ClassifyOnlyBackend:
    """A backend without number extraction, like the zero-shot classifier."""

    def classify(self, value, labels, model=None, field="value"):
        return labels[0]


@pytest.fixture
def registry():
    return CanonicalValueRegistry()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def adapter(backend):
    return ClassifierAdapter(backend)


@pytest.fixture
def pipeline(registry, adapter):
    return CleansingPipeline(registry, adapter, max_workers=4)


def make_raw(record_id="1", sex=None, race=None, age=None) -> RawDemographicRecord:
    return RawDemographicRecord(record_id=record_id, sex_raw=sex, race_raw=race, age_raw=age)


@pytest.fixture
def raw():
    """Factory for raw records."""
    return make_raw


@pytest.fixture
def sample_csv():
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "sample_demographics.csv")
