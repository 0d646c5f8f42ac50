"""Common contract for field cleansers."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.adapter import ClassifierAdapter
from ..registry import CanonicalValueRegistry
from ..schema import FieldOutcome, OutcomeSource


class FieldCleanser(ABC):
    """Pre-check → route → post-validate for one field.

    Subclasses only decide what happens after the pre-check fails; the
    pass-through path is shared so every field canonicalizes the same way.
    """

    field: str = ""

    def __init__(self, registry: CanonicalValueRegistry, adapter: ClassifierAdapter, model: Optional[str] = None):
        self.registry = registry
        self.adapter = adapter
        self.model = model

    def cleanse(self, raw_value: Optional[str]) -> FieldOutcome:
        """Cleanse one raw value.

        Args:
            raw_value: Free-text value, possibly None or empty

        Returns:
            The field outcome; never raises for service failures
        """
        canonical = self.registry.canonical_form(self.field, raw_value)
        if canonical is not None:
            return FieldOutcome(value=canonical, source=OutcomeSource.PASSTHROUGH, valid=True)
        return self.route(raw_value)

    @abstractmethod
    def route(self, raw_value: Optional[str]) -> FieldOutcome:
        """Handle a value the pre-check did not accept."""
