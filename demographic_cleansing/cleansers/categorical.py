"""Closed-set cleansers for sex and race."""

from typing import Optional

from ..config import SEX_FIELD, RACE_FIELD
from ..exceptions import ServiceUnavailableError
from ..registry import normalize_text
from ..schema import FieldOutcome, OutcomeSource
from .base import FieldCleanser


class CategoricalCleanser(FieldCleanser):
    """Classifies non-canonical values into the field's label set."""

    def route(self, raw_value: Optional[str]) -> FieldOutcome:
        labels = self.registry.labels(self.field)
        fallback = self.registry.fallback(self.field)
        # Missing input is classified as the literal fallback label
        text = normalize_text(raw_value) or fallback
        try:
            label = self.adapter.classify(text, labels, fallback, model=self.model, field=self.field)
        except ServiceUnavailableError as exc:
            print(f"[cleanse][WARN] {self.field} {text!r} degraded to {fallback}: {exc}")
            return FieldOutcome(
                value=fallback,
                source=OutcomeSource.CLASSIFIED,
                valid=False,
                detail=f"service_unavailable: {exc}",
            )
        return FieldOutcome(value=label, source=OutcomeSource.CLASSIFIED, valid=True)


class SexCleanser(CategoricalCleanser):
    field = SEX_FIELD


class RaceCleanser(CategoricalCleanser):
    field = RACE_FIELD
