"""Classifier adapter - the single boundary to the classification/extraction service."""

import re
from typing import Optional, Sequence

from ..config import INVALID_SENTINEL
from ..exceptions import ConfigurationError, MalformedServiceResponse, ServiceUnavailableError
from ..registry import normalize_text

_DIGITS_RE = re.compile(r"\d+", re.ASCII)
_NULL_TOKENS = {"NULL", "NONE", "N/A", ""}


def match_label(candidate: Optional[str], candidate_labels: Sequence[str]) -> Optional[str]:
    """Match a service answer against candidate labels, ignoring case and stray quotes.

    Returns:
        The candidate label as declared, or None if nothing matches
    """
    key = normalize_text(candidate).strip("\"'`.").upper()
    for label in candidate_labels:
        if normalize_text(label).upper() == key:
            return label
    return None


def coerce_number_response(text: Optional[str]) -> str:
    """Reduce an extraction response to a digit string or the INVALID sentinel.

    Raises:
        MalformedServiceResponse: If the text is neither digits nor a known null marker
    """
    cleaned = normalize_text(text).strip("\"'`.").strip()
    if cleaned.upper() == INVALID_SENTINEL or cleaned.upper() in _NULL_TOKENS:
        return INVALID_SENTINEL
    if _DIGITS_RE.fullmatch(cleaned):
        return cleaned
    raise MalformedServiceResponse(f"Expected digits or {INVALID_SENTINEL}", text or "")


class ClassifierAdapter:
    """Uniform interface over a classification backend and a completion backend.

    Backends expose ``classify(value, labels, model=None, field=...)`` and
    ``complete(value, instruction, model=None)``. Whatever they return, callers
    of this adapter only ever see a candidate label, a digit string or
    ``INVALID``; backend failures surface as ``ServiceUnavailableError``.
    """

    def __init__(self, classification_backend, completion_backend=None):
        """Initialize the adapter.

        Args:
            classification_backend: Backend used by ``classify``
            completion_backend: Backend used by ``extract_number``; defaults to the
                classification backend
        """
        self.classification_backend = classification_backend
        self.completion_backend = completion_backend or classification_backend
        if not hasattr(self.completion_backend, "complete"):
            raise ConfigurationError(
                f"{type(self.completion_backend).__name__} cannot run number extraction; "
                "configure an LLM completion backend"
            )

    def classify(
        self,
        value: str,
        candidate_labels: Sequence[str],
        fallback: str,
        model: Optional[str] = None,
        field: str = "value",
    ) -> str:
        """Map a free-text value to exactly one of ``candidate_labels``.

        Args:
            value: Raw value
            candidate_labels: Closed label set
            fallback: Label returned when the service answers outside the set
            model: Backend model variant for this field
            field: Field name, passed through for prompting

        Returns:
            A member of ``candidate_labels``

        Raises:
            ServiceUnavailableError: If the backend call fails
        """
        if fallback not in candidate_labels:
            raise ConfigurationError(f"Fallback '{fallback}' is not a candidate label")
        try:
            raw = self.classification_backend.classify(value, candidate_labels, model=model, field=field)
        except MalformedServiceResponse as exc:
            print(f"[adapter][WARN] Malformed {field} response for {value!r}: {exc} → {fallback}")
            return fallback
        except Exception as exc:
            raise ServiceUnavailableError(f"{field} classification failed: {exc}") from exc

        label = match_label(raw, candidate_labels)
        if label is None:
            print(f"[adapter][WARN] {field} label {raw!r} for {value!r} is outside the label set → {fallback}")
            return fallback
        return label

    def extract_number(self, value: str, instruction: str, model: Optional[str] = None) -> str:
        """Extract a bare number from free text.

        Args:
            value: Raw value
            instruction: Normalization rules for the extractor
            model: Backend model variant

        Returns:
            A string of digits, or ``INVALID``

        Raises:
            ServiceUnavailableError: If the backend call fails
        """
        try:
            raw = self.completion_backend.complete(value, instruction, model=model)
        except Exception as exc:
            raise ServiceUnavailableError(f"number extraction failed: {exc}") from exc

        try:
            return coerce_number_response(raw)
        except MalformedServiceResponse as exc:
            print(f"[adapter][WARN] Non-numeric extraction {exc.response_text[:80]!r} for {value!r} → {INVALID_SENTINEL}")
            return INVALID_SENTINEL
