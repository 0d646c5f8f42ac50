"""Numeric age cleanser and the extraction instruction it sends."""

from typing import Dict, Optional

from ..config import AGE_FIELD, AGE_DECADE_OFFSETS, INVALID_SENTINEL
from ..exceptions import ConfigurationError, ServiceUnavailableError
from ..models.adapter import ClassifierAdapter
from ..registry import CanonicalValueRegistry, normalize_text, parse_int
from ..schema import FieldOutcome, OutcomeSource
from .base import FieldCleanser


def build_age_instruction(age_min: int, age_max: int, offsets: Optional[Dict[str, int]] = None) -> str:
    """Build the extraction instruction encoding the age normalization rules.

    Args:
        age_min: Lowest accepted age
        age_max: Highest accepted age
        offsets: Position within a decade for "early", "mid" and "late"

    Returns:
        Instruction text for the extractor

    Raises:
        ConfigurationError: If the decade offsets are incomplete or out of 0-9
    """
    offsets = dict(AGE_DECADE_OFFSETS if offsets is None else offsets)
    for position in ("early", "mid", "late"):
        offset = offsets.get(position)
        if not isinstance(offset, int) or not 0 <= offset <= 9:
            raise ConfigurationError(f"Decade offset for '{position}' must be an integer 0-9, got {offset!r}")
    early, mid, late = offsets["early"], offsets["mid"], offsets["late"]

    return (
        "Extract only the numerical age from the input value.\n\n"
        "Rules:\n"
        f"- Return ONLY a bare integer from {age_min} to {age_max}, or the word {INVALID_SENTINEL}. "
        "No explanation, no units, no punctuation.\n"
        "- Strip surrounding units and prefixes such as \"years\", \"yrs\", \"yo\", \"y/o\" and \"Age:\" "
        "before interpreting the value (e.g. \"45 years\" -> 45, \"Age: 28\" -> 28, \"35yo\" -> 35).\n"
        "- Convert number words to digits (e.g. \"forty-five\" -> 45).\n"
        "- Infants and newborns are 0. An age given in months below 12 is 0.\n"
        "- A decade range maps to a point inside that decade: "
        f"\"early Ns\" -> N+{early}, \"mid-Ns\" -> N+{mid}, \"late Ns\" -> N+{late} "
        f"(e.g. \"early 20s\" -> {20 + early}, \"mid-30s\" -> {30 + mid}, \"late 40s\" -> {40 + late}).\n"
        f"- If the age is outside {age_min}-{age_max}, or you cannot confidently interpret the value "
        f"(e.g. \"unknown\", \"N/A\", empty), return {INVALID_SENTINEL}."
    )


class AgeCleanser(FieldCleanser):
    """Numeric range pre-check, LLM extraction for everything else."""

    field = AGE_FIELD

    def __init__(
        self,
        registry: CanonicalValueRegistry,
        adapter: ClassifierAdapter,
        model: Optional[str] = None,
        decade_offsets: Optional[Dict[str, int]] = None,
    ):
        super().__init__(registry, adapter, model)
        self.instruction = build_age_instruction(registry.age_min, registry.age_max, decade_offsets)

    def _invalid(self, detail: str) -> FieldOutcome:
        return FieldOutcome(value=None, source=OutcomeSource.EXTRACTED, valid=False, detail=detail)

    def route(self, raw_value: Optional[str]) -> FieldOutcome:
        text = normalize_text(raw_value)
        try:
            result = self.adapter.extract_number(text, self.instruction, model=self.model)
        except ServiceUnavailableError as exc:
            print(f"[cleanse][WARN] age {text!r} degraded to {INVALID_SENTINEL}: {exc}")
            return self._invalid(f"service_unavailable: {exc}")

        if result == INVALID_SENTINEL:
            return self._invalid("extractor_invalid")
        age = parse_int(result)
        if age is None:
            return self._invalid(f"unparseable: {result!r}")
        # The extractor is not trusted with the range
        if not self.registry.in_range(age):
            return self._invalid(f"out_of_range: {age}")
        return FieldOutcome(value=age, source=OutcomeSource.EXTRACTED, valid=True)
