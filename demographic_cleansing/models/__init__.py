"""Classification service backends and the adapter in front of them."""

from .adapter import ClassifierAdapter, match_label, coerce_number_response
from .classifier import ZeroShotClassifier, load_zero_shot_classifier, top_label
from .llm_processor import (
    LLMProcessor,
    create_openai_client,
    parse_label_response,
    build_classify_messages,
    build_extract_messages
)

__all__ = [
    "ClassifierAdapter",
    "match_label",
    "coerce_number_response",
    "ZeroShotClassifier",
    "load_zero_shot_classifier",
    "top_label",
    "LLMProcessor",
    "create_openai_client",
    "parse_label_response",
    "build_classify_messages",
    "build_extract_messages"
]
