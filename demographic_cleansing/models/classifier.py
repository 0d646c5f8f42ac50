"""Zero-shot text classification backend for categorical fields."""

import threading
from typing import Optional, Sequence

from ..config import DEFAULT_ZERO_SHOT_MODEL

# Optional dependency handling
try:
    from transformers import pipeline
    _TRANSFORMERS_AVAILABLE = True
except ImportError:
    _TRANSFORMERS_AVAILABLE = False


def load_zero_shot_classifier(model_name: str = DEFAULT_ZERO_SHOT_MODEL):
    """Load a zero-shot classification model.

    Args:
        model_name: HuggingFace model name

    Returns:
        Loaded classification pipeline

    Raises:
        RuntimeError: If transformers is not installed
    """
    if not _TRANSFORMERS_AVAILABLE:
        raise RuntimeError("transformers not installed.")
    return pipeline("zero-shot-classification", model=model_name, device=-1, truncation=True)


def top_label(prediction) -> str:
    """Return the highest scoring label of a zero-shot prediction."""
    if isinstance(prediction, list):
        prediction = prediction[0]
    scored = sorted(zip(prediction["labels"], prediction["scores"]), key=lambda p: p[1], reverse=True)
    return scored[0][0]


class ZeroShotClassifier:
    """Closed-set classification with a local NLI model.

    Only supports ``classify``; number extraction needs an LLM.
    """

    hypothesis_template = "The recorded {field} of this person is {{}}."

    def __init__(self, model_name: str = DEFAULT_ZERO_SHOT_MODEL, clf=None):
        self.model_name = model_name
        self.clf = clf if clf is not None else load_zero_shot_classifier(model_name)
        # HF pipelines are not safe for concurrent calls
        self._lock = threading.Lock()

    def classify(self, value: str, labels: Sequence[str], model: Optional[str] = None, field: str = "value") -> str:
        with self._lock:
            pred = self.clf(
                value,
                candidate_labels=list(labels),
                hypothesis_template=self.hypothesis_template.format(field=field),
                multi_label=False,
            )
        return top_label(pred)
