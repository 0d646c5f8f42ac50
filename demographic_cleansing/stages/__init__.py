"""Processing stages for the demographic cleansing pipeline."""

from .cleanse_stage import run_stage_cleanse
from .finalize_stage import run_stage_finalize
from .analysis import analyze_adapter_failures

__all__ = [
    "run_stage_cleanse",
    "run_stage_finalize",
    "analyze_adapter_failures"
]
