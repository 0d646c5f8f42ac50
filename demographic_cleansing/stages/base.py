"""Base utilities for processing stages."""

import os

from pydantic import ValidationError

from ..config import DEFAULT_SEX_MODEL, DEFAULT_RACE_MODEL, DEFAULT_AGE_MODEL
from ..exceptions import ConfigurationError
from ..settings import CleansingSettings, FieldModels


def stage_path(args, stage_name: str) -> str:
    """Get the output path for a processing stage.
    
    Args:
        args: Argument namespace with output configuration
        stage_name: Name of the processing stage
        
    Returns:
        Full path to the stage output file
    """
    filename = f"{args.out_prefix}_{stage_name}.parquet"
    return os.path.join(args.output_dir, filename)


def build_settings(args) -> CleansingSettings:
    """Build validated run settings from the argument namespace.
    
    Args:
        args: Argument namespace with model and concurrency configuration
        
    Returns:
        CleansingSettings for the run
        
    Raises:
        ConfigurationError: If any setting is invalid
    """
    try:
        models = FieldModels(
            sex=getattr(args, "sex_model", None) or DEFAULT_SEX_MODEL,
            race=getattr(args, "race_model", None) or DEFAULT_RACE_MODEL,
            age=getattr(args, "age_model", None) or DEFAULT_AGE_MODEL,
        )
        overrides = {
            key: getattr(args, key)
            for key in ("classifier_backend", "zero_shot_model", "llm_timeout", "max_workers", "enable_tracing")
            if getattr(args, key, None) is not None
        }
        offsets = getattr(args, "age_decade_offsets", None)
        if offsets:
            overrides["age_decade_offsets"] = offsets
        return CleansingSettings(models=models, **overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
