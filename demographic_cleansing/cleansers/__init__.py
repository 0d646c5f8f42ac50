"""Field cleansers, one per field type, sharing the ``cleanse(raw) -> FieldOutcome`` contract."""

from typing import Dict, Optional

from ..models.adapter import ClassifierAdapter
from ..registry import CanonicalValueRegistry
from ..settings import FieldModels
from .base import FieldCleanser
from .categorical import CategoricalCleanser, SexCleanser, RaceCleanser
from .age import AgeCleanser, build_age_instruction


def build_cleansers(
    registry: CanonicalValueRegistry,
    adapter: ClassifierAdapter,
    models: Optional[FieldModels] = None,
    decade_offsets: Optional[Dict[str, int]] = None,
) -> Dict[str, FieldCleanser]:
    """Create the field → cleanser mapping used by the pipeline."""
    models = models or FieldModels()
    cleansers = [
        SexCleanser(registry, adapter, models.sex),
        RaceCleanser(registry, adapter, models.race),
        AgeCleanser(registry, adapter, models.age, decade_offsets=decade_offsets),
    ]
    return {c.field: c for c in cleansers}


__all__ = [
    "FieldCleanser",
    "CategoricalCleanser",
    "SexCleanser",
    "RaceCleanser",
    "AgeCleanser",
    "build_age_instruction",
    "build_cleansers"
]
