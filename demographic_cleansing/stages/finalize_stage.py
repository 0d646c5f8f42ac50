"""Finalize stage - publish the cleansed dataset, the review queue and the run summary."""

import os
from typing import List

import orjson
import pandas as pd

from ..config import FINAL_LOG
from ..review import build_review_entry
from ..schema import CleansedRecord, ReviewEntry, CLEANSED_COLUMNS, REVIEW_COLUMNS
from ..summary import summarize_run, print_summary
from ..utils.io_utils import ensure_output_dir, write_table
from ..utils.logging import ensure_logdir, reset_log, write_jsonl, log_path
from .base import stage_path


def _rows(df: pd.DataFrame) -> List[dict]:
    """DataFrame rows as dicts with NaN/NA replaced by None."""
    return df.astype(object).where(pd.notna(df), None).to_dict(orient="records")


def load_review_queue(path: str, records: List[CleansedRecord]) -> List[ReviewEntry]:
    """Load review entries, rebuilding them if they do not match the flagged records.

    Every record with needs_review=True must have exactly one entry and no
    other record may have one.
    """
    flagged = {rec.record_id: rec for rec in records if rec.needs_review}
    entries: List[ReviewEntry] = []
    if os.path.exists(path):
        entries = [ReviewEntry.model_validate(row) for row in _rows(pd.read_parquet(path))]

    entry_ids = [entry.record_id for entry in entries]
    if len(entry_ids) == len(set(entry_ids)) and set(entry_ids) == set(flagged):
        return entries

    print(f"[finalize][WARN] Review stage output out of sync with cleansed records "
          f"({len(entries)} entries, {len(flagged)} flagged). Rebuilding review queue.")
    existing = {entry.record_id: entry for entry in entries}
    return [existing.get(rid) or build_review_entry(rec) for rid, rec in flagged.items()]


def run_stage_finalize(args) -> str:
    """Run the finalize processing stage.

    Args:
        args: Argument namespace with processing configuration

    Returns:
        Path to the output parquet file
    """
    ensure_output_dir(args.output_dir)
    ensure_logdir(args.log_dir)
    reset_log(FINAL_LOG, args.log_dir)

    source_path = stage_path(args, "cleansed_stage")
    if not os.path.exists(source_path):
        raise FileNotFoundError(f"Cleansed stage output not found at {source_path}. Run stage 'cleanse' first.")

    df = pd.read_parquet(source_path)
    if "record_id" not in df.columns:
        raise ValueError("Input must have 'record_id' column. Run cleanse stage first.")
    records = [CleansedRecord.from_row(row) for row in _rows(df)]
    review_queue = load_review_queue(stage_path(args, "review_stage"), records)

    # Log final decisions (sample)
    final_logs = []
    for rec in records[:100]:  # Log first 100 for review
        final_logs.append({
            "stage": "final",
            "record_id": rec.record_id,
            "sex": rec.sex.value,
            "race": rec.race.value,
            "age": rec.age.value,
            "confidence": rec.confidence.value,
            "needs_review": rec.needs_review,
        })
    if final_logs:
        write_jsonl(log_path(FINAL_LOG, args.log_dir), final_logs)

    # Write final outputs; flagged records stay in the main dataset
    jsonl_path = getattr(args, 'output_jsonl', None) or os.path.join(args.output_dir, f"{args.out_prefix}.jsonl")
    parquet_path = getattr(args, 'output_parquet', None) or os.path.join(args.output_dir, f"{args.out_prefix}.parquet")
    write_table([rec.to_row() for rec in records], jsonl_path, parquet_path, columns=CLEANSED_COLUMNS)

    review_jsonl = os.path.join(args.output_dir, f"{args.out_prefix}_review_queue.jsonl")
    review_parquet = os.path.join(args.output_dir, f"{args.out_prefix}_review_queue.parquet")
    write_table([entry.to_row() for entry in review_queue], review_jsonl, review_parquet, columns=REVIEW_COLUMNS)

    summary = summarize_run(records)
    summary_path = os.path.join(args.output_dir, f"{args.out_prefix}_summary.json")
    with open(summary_path, "wb") as f:
        f.write(orjson.dumps(summary.model_dump(), option=orjson.OPT_INDENT_2))

    print_summary(summary, prefix="[finalize]")
    print(f"[finalize] Artifacts: {jsonl_path}, {parquet_path}")
    print(f"[finalize] Review queue: {review_jsonl}, {review_parquet}")
    print(f"[finalize] Summary: {summary_path}")
    return parquet_path
