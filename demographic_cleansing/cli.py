"""Command-line interface for the demographic cleansing pipeline."""

import os
import argparse
from typing import Dict

from .config import (
    OUT_PREFIX, LOG_DIR, DEFAULT_SEX_MODEL, DEFAULT_RACE_MODEL, DEFAULT_AGE_MODEL,
    DEFAULT_CLASSIFIER_BACKEND, DEFAULT_ZERO_SHOT_MODEL, DEFAULT_MAX_WORKERS, LLM_TIMEOUT
)
from .stages import run_stage_cleanse, run_stage_finalize, analyze_adapter_failures


def parse_decade_offsets(text: str) -> Dict[str, int]:
    """Parse "early=2,mid=5,late=8" into a dict."""
    offsets = {}
    for part in text.split(","):
        key, sep, value = part.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected position=offset, got '{part}'")
        try:
            offsets[key.strip()] = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Offset for '{key.strip()}' must be an integer") from None
    return offsets


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    ap = argparse.ArgumentParser("Stageable demographic field cleanser.")

    # Main execution options
    ap.add_argument("--stage", default="all",
                    choices=["cleanse", "finalize", "all", "analyze-failures"],
                    help="Processing stage to run")

    # Data and output configuration
    ap.add_argument("--input", default=None,
                    help="Raw demographics file (.csv, .parquet or .jsonl)")
    ap.add_argument("--output_dir", default=".",
                    help="Output directory for processed files")
    ap.add_argument("--out_prefix", default=OUT_PREFIX,
                    help="Prefix for output files")
    ap.add_argument("--log_dir", default=LOG_DIR,
                    help="Directory for log files")
    ap.add_argument("--output_jsonl", default=None,
                    help="Custom path for final JSONL output")
    ap.add_argument("--output_parquet", default=None,
                    help="Custom path for final Parquet output")
    ap.add_argument("--test-limit", type=int, default=None,
                    help="Limit processing to the first N records for testing")
    ap.add_argument("--no-resume", action="store_true",
                    help="Ignore checkpoint and re-cleanse all records")

    # Classification service configuration
    ap.add_argument("--classifier_backend", default=DEFAULT_CLASSIFIER_BACKEND, choices=["openai", "zero-shot"],
                    help="Backend for sex/race classification (age extraction always uses the LLM)")
    ap.add_argument("--sex_model", default=DEFAULT_SEX_MODEL,
                    help="OpenAI model for sex classification")
    ap.add_argument("--race_model", default=DEFAULT_RACE_MODEL,
                    help="OpenAI model for race classification")
    ap.add_argument("--age_model", default=DEFAULT_AGE_MODEL,
                    help="OpenAI model for age extraction")
    ap.add_argument("--zero_shot_model", default=DEFAULT_ZERO_SHOT_MODEL,
                    help="HuggingFace model for --classifier_backend zero-shot")
    ap.add_argument("--llm_timeout", type=float, default=LLM_TIMEOUT,
                    help="Request timeout in seconds")
    ap.add_argument("--max_workers", type=int, default=DEFAULT_MAX_WORKERS,
                    help="Maximum records (and service calls) in flight")
    ap.add_argument("--age_decade_offsets", type=parse_decade_offsets, default=None,
                    help="Offsets inside a decade for early/mid/late ranges, e.g. 'early=2,mid=5,late=8'")
    ap.add_argument("--enable_tracing", action="store_true",
                    help="Trace OpenAI calls with LangSmith")

    return ap


def process_arguments(args):
    """Process and validate command-line arguments.

    Args:
        args: Parsed argument namespace
    """
    # Convert paths to absolute
    args.output_dir = os.path.abspath(args.output_dir)
    if args.output_jsonl:
        args.output_jsonl = os.path.abspath(args.output_jsonl)
    if args.output_parquet:
        args.output_parquet = os.path.abspath(args.output_parquet)
    if args.input:
        args.input = os.path.abspath(args.input)

    from . import config
    args.log_dir = os.path.abspath(args.log_dir)
    config.LOG_DIR = args.log_dir


def run_pipeline(args):
    """Run the processing pipeline based on arguments.

    Args:
        args: Parsed and processed argument namespace
    """
    if args.stage in ("cleanse", "all") and not args.input:
        raise ValueError(f"--input is required for stage '{args.stage}'")

    if args.stage == "cleanse":
        run_stage_cleanse(args)
    elif args.stage == "finalize":
        run_stage_finalize(args)
    elif args.stage == "analyze-failures":
        analyze_adapter_failures(args.log_dir)
    elif args.stage == "all":
        run_stage_cleanse(args)
        run_stage_finalize(args)
    else:
        raise ValueError(f"Unknown stage: {args.stage}")


def main():
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args()
    process_arguments(args)
    run_pipeline(args)
