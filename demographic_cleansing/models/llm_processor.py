"""LLM backend for closed-set classification and number extraction."""

import os
import json
from typing import List, Dict, Any, Optional, Sequence, Tuple

from langsmith import traceable
from langsmith.wrappers import wrap_openai

from ..config import DEFAULT_OPENAI_MODEL, LLM_TIMEOUT
from ..exceptions import MalformedServiceResponse

# Optional dependency handling
try:
    from openai import OpenAI
    _OPENAI_AVAILABLE = True
except ImportError:
    _OPENAI_AVAILABLE = False


# LLM prompts
CLASSIFY_SYSTEM_PROMPT = (
    "You are a data standardization model for demographic records.\n\n"
    "You receive one free-text value recorded for a demographic field and a fixed list of allowed labels. "
    "Map the value to exactly one allowed label.\n\n"
    "Rules:\n\n"
    "    Return a label exactly as written in the allowed list.\n\n"
    "    Abbreviations, synonyms and casing variants map to the label they stand for "
    "(e.g. \"M\" -> Male, \"Caucasian\" -> White, \"AA\" -> Black or African American, "
    "\"Latina\" -> Hispanic or Latino, \"Native American\" -> American Indian or Alaska Native, "
    "\"Mixed\" -> Two or More Races).\n\n"
    "    Refusals (\"Prefer not to say\", \"Decline to state\"), blanks and unintelligible values map to Unknown.\n\n"
    "    Values that are meaningful but fit no specific label map to Other.\n\n"
    "    Do not explain your answer."
)

CLASSIFY_USER_TEMPLATE = """FIELD: {field}

ALLOWED LABELS:
{labels}

VALUE: "{value}"

Return a JSON object: {{"label": "<one allowed label>"}}
"""

EXTRACT_USER_TEMPLATE = """{instruction}

INPUT: "{value}"
"""


def build_classify_messages(value: str, labels: Sequence[str], field: str = "value") -> Tuple[str, List[Dict[str, Any]]]:
    """Return (user_payload, messages) for a classification call.

    Args:
        value: Raw value to classify
        labels: Allowed output labels
        field: Field name shown to the model

    Returns:
        Tuple of (user_payload, messages_list)
    """
    content = CLASSIFY_USER_TEMPLATE.format(
        field=field,
        labels="\n".join(f"- {label}" for label in labels),
        value=value,
    )
    messages = [
        {"role": "system", "content": CLASSIFY_SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]
    return content, messages


def build_extract_messages(value: str, instruction: str) -> Tuple[str, List[Dict[str, Any]]]:
    """Return (user_payload, messages) for an extraction call."""
    content = EXTRACT_USER_TEMPLATE.format(instruction=instruction, value=value)
    return content, [{"role": "user", "content": content}]


def parse_label_response(text: Optional[str]) -> str:
    """Parse the JSON classification response into the raw label string.

    Args:
        text: Raw response text from the LLM

    Returns:
        The label exactly as the model wrote it (not yet checked against the allowed set)

    Raises:
        MalformedServiceResponse: If the response is not a JSON object with a string label
    """
    if not text:
        raise MalformedServiceResponse("Empty classification response", "")
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedServiceResponse(f"Failed to decode LLM response as JSON: {exc}", text[:500]) from exc

    if not isinstance(obj, dict):
        raise MalformedServiceResponse(f"Expected JSON object from LLM response, got {type(obj).__name__}", text[:500])

    label = obj.get("label")
    if not isinstance(label, str) or not label.strip():
        raise MalformedServiceResponse(f"LLM response missing 'label' field: {obj}", text[:500])
    return label.strip()


def create_openai_client(enable_tracing: bool = False, api_key: Optional[str] = None):
    """Create an OpenAI client with optional tracing.

    Args:
        enable_tracing: Whether to enable LangSmith tracing
        api_key: Explicit key, defaults to OPENAI_API_KEY

    Returns:
        Configured OpenAI client

    Raises:
        RuntimeError: If the package is missing or OPENAI_API_KEY is not set
    """
    if not _OPENAI_AVAILABLE:
        raise RuntimeError("openai package not installed.")

    api_key = api_key or os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY not set.")
    client = OpenAI(api_key=api_key)
    if enable_tracing:
        client = wrap_openai(client)
        print("[llm] LangSmith tracing enabled")
    return client


class LLMProcessor:
    """Sends single demographic values to an OpenAI chat model."""

    def __init__(
        self,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = LLM_TIMEOUT,
        enable_tracing: bool = False,
        client=None,
    ):
        """Initialize the LLM processor.

        Args:
            model: Default OpenAI model name, overridable per call
            timeout: Request timeout in seconds
            enable_tracing: Whether to enable LangSmith tracing
            client: Pre-built client (skips key lookup)
        """
        self.model = model
        self.timeout = timeout
        self.client = client if client is not None else create_openai_client(enable_tracing)

    def _chat(self, messages: List[Dict[str, Any]], model: Optional[str], json_mode: bool) -> str:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        resp = self.client.chat.completions.create(
            model=model or self.model,
            temperature=0.0,
            messages=messages,
            timeout=self.timeout,
            **kwargs,
        )
        return resp.choices[0].message.content or ""

    @traceable(name="demographic_classify")
    def classify(self, value: str, labels: Sequence[str], model: Optional[str] = None, field: str = "value") -> str:
        """Ask the model for one label out of ``labels``.

        Returns:
            The raw label the model chose
        """
        _, messages = build_classify_messages(value, labels, field=field)
        return parse_label_response(self._chat(messages, model, json_mode=True))

    @traceable(name="demographic_extract")
    def complete(self, value: str, instruction: str, model: Optional[str] = None) -> str:
        """Run an open-ended extraction prompt and return the stripped response text."""
        _, messages = build_extract_messages(value, instruction)
        return self._chat(messages, model, json_mode=False).strip()
