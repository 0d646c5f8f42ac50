"""Run-time settings assembled from config defaults and CLI flags."""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from .config import (
    DEFAULT_SEX_MODEL, DEFAULT_RACE_MODEL, DEFAULT_AGE_MODEL, DEFAULT_MAX_WORKERS,
    LLM_TIMEOUT, AGE_DECADE_OFFSETS, DEFAULT_CLASSIFIER_BACKEND, DEFAULT_ZERO_SHOT_MODEL
)


class FieldModels(BaseModel):
    """Which model variant serves each field (they may differ in cost and accuracy)."""

    model_config = ConfigDict(frozen=True)

    sex: str = DEFAULT_SEX_MODEL
    race: str = DEFAULT_RACE_MODEL
    age: str = DEFAULT_AGE_MODEL

    def for_field(self, field: str) -> str:
        return getattr(self, field)


class CleansingSettings(BaseModel):
    """Validated settings for one cleansing run."""

    model_config = ConfigDict(frozen=True)

    models: FieldModels = Field(default_factory=FieldModels)
    classifier_backend: str = Field(default=DEFAULT_CLASSIFIER_BACKEND, pattern="^(openai|zero-shot)$")
    zero_shot_model: str = DEFAULT_ZERO_SHOT_MODEL
    llm_timeout: float = Field(default=LLM_TIMEOUT, gt=0)
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    age_decade_offsets: Dict[str, int] = Field(default_factory=lambda: dict(AGE_DECADE_OFFSETS))
    enable_tracing: bool = False
