"""Cleanse stage - canonical pre-check, AI-assisted cleansing and review routing."""

import os
import signal
import threading
import time
from typing import Optional, List, Dict, Any

import pandas as pd

from ..config import CLEANSE_LOG, ADAPTER_FAILURES_LOG, CHECKPOINT_LOG
from ..models.adapter import ClassifierAdapter
from ..pipeline import CleansingPipeline
from ..registry import CanonicalValueRegistry
from ..schema import CleansedRecord, ReviewEntry, CLEANSED_COLUMNS, REVIEW_COLUMNS
from ..summary import summarize_run, print_summary
from ..utils.io_utils import ensure_output_dir, load_raw_records
from ..utils.logging import ensure_logdir, reset_log, write_jsonl, read_jsonl, append_jsonl, log_path
from .base import stage_path, build_settings

CHECKPOINT_FLUSH_EVERY = 50


def decision_log_entry(record: CleansedRecord) -> Dict[str, Any]:
    """Audit log line for one record: raw → cleansed per field, plus the review decision."""
    entry: Dict[str, Any] = {"stage": "cleanse", "record_id": record.record_id}
    for field, outcome in record.outcomes().items():
        entry[field] = {
            "raw": record.raw_value(field),
            "cleansed": outcome.value,
            "source": outcome.source.value,
            "valid": outcome.valid,
        }
        if outcome.detail:
            entry[field]["detail"] = outcome.detail
    entry["confidence"] = record.confidence.value
    entry["needs_review"] = record.needs_review
    return entry


def _error_type(detail: str) -> str:
    text = detail.lower()
    if "timeout" in text or "timed out" in text:
        return "timeout"
    return "service_error"


def failure_log_entries(record: CleansedRecord) -> List[Dict[str, Any]]:
    """One line per field degraded by a service failure."""
    entries = []
    for field, outcome in record.outcomes().items():
        if outcome.detail and outcome.detail.startswith("service_unavailable"):
            entries.append({
                "timestamp": time.time(),
                "record_id": record.record_id,
                "field": field,
                "raw": record.raw_value(field),
                "fallback": outcome.value,
                "error_type": _error_type(outcome.detail),
                "error_detail": outcome.detail,
            })
    return entries


def load_checkpoint(path: str) -> Dict[str, CleansedRecord]:
    """Load previously completed records keyed by record id."""
    completed: Dict[str, CleansedRecord] = {}
    for row in read_jsonl(path):
        rec = CleansedRecord.from_row(row)
        completed[rec.record_id] = rec
    return completed


def run_stage_cleanse(args, adapter: Optional[ClassifierAdapter] = None) -> str:
    """Run the cleanse processing stage.

    Args:
        args: Argument namespace with processing configuration
        adapter: Pre-built classifier adapter (defaults to the configured backends)

    Returns:
        Path to the cleansed stage output file
    """
    ensure_output_dir(args.output_dir)
    ensure_logdir(args.log_dir)
    reset_log(CLEANSE_LOG, args.log_dir)
    reset_log(ADAPTER_FAILURES_LOG, args.log_dir)

    # Fail on bad configuration before touching any data
    settings = build_settings(args)
    registry = CanonicalValueRegistry()

    raw_records = load_raw_records(args.input, limit=getattr(args, "test_limit", None))
    if getattr(args, "test_limit", None):
        print(f"[cleanse][TEST] Using first {len(raw_records)} records.")
    print(f"[cleanse] Loaded {len(raw_records):,} records from {args.input}")

    # Set up checkpoint handling
    checkpoint_path = log_path(CHECKPOINT_LOG, args.log_dir)
    completed: Dict[str, CleansedRecord] = {}
    if not getattr(args, "no_resume", False) and os.path.exists(checkpoint_path):
        print(f"[cleanse] Loading checkpoint from {checkpoint_path}")
        completed = load_checkpoint(checkpoint_path)
        print(f"[cleanse] Found {len(completed):,} already cleansed records")
        # Only records of the current input rejoin the output
        input_ids = {raw.record_id for raw in raw_records}
        stale = [rid for rid in completed if rid not in input_ids]
        if stale:
            print(f"[cleanse][WARN] Dropping {len(stale):,} checkpointed records not in the current input")
            for rid in stale:
                del completed[rid]
    elif getattr(args, "no_resume", False) and os.path.exists(checkpoint_path):
        print("[cleanse] --no-resume: Clearing checkpoint and starting fresh")
        os.remove(checkpoint_path)

    pending = [raw for raw in raw_records if raw.record_id not in completed]
    skipped = len(raw_records) - len(pending)
    if skipped > 0:
        print(f"[cleanse] Skipping {skipped:,} records already in checkpoint")

    pipeline = CleansingPipeline.from_settings(settings, registry=registry, adapter=adapter)
    print(f"[cleanse] Models: sex={settings.models.sex} race={settings.models.race} age={settings.models.age} "
          f"(backend={settings.classifier_backend}, max_workers={settings.max_workers})")

    cancel_event = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        def _request_cancel(signum, frame):
            print("\n[cleanse][WARN] Interrupt received, finishing in-flight records...")
            cancel_event.set()
        previous_handler = signal.signal(signal.SIGINT, _request_cancel)

    checkpoint_batch: List[Dict[str, Any]] = []

    def _on_record(record: CleansedRecord, entry: Optional[ReviewEntry]):
        checkpoint_batch.append(record.to_row())
        if len(checkpoint_batch) >= CHECKPOINT_FLUSH_EVERY:
            append_jsonl(checkpoint_path, checkpoint_batch)
            checkpoint_batch.clear()

    start = time.time()
    try:
        result = pipeline.run(pending, cancel_event=cancel_event, on_record=_on_record)
    finally:
        if checkpoint_batch:
            append_jsonl(checkpoint_path, checkpoint_batch)
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)
    elapsed = time.time() - start
    print(f"[cleanse] Cleansed {len(result.records):,} records in {elapsed:.1f}s")

    # Records from the checkpoint rejoin the output; their review entries are rebuilt
    records: List[CleansedRecord] = list(completed.values()) + result.records
    review_queue: List[ReviewEntry] = [
        entry for entry in (pipeline.router.route(rec) for rec in completed.values()) if entry is not None
    ] + result.review_queue

    write_jsonl(log_path(CLEANSE_LOG, args.log_dir), [decision_log_entry(rec) for rec in result.records])
    failures = [entry for rec in result.records for entry in failure_log_entries(rec)]
    if failures:
        write_jsonl(log_path(ADAPTER_FAILURES_LOG, args.log_dir), failures)
        print(f"[cleanse][WARN] {len(failures):,} fields degraded by service failures, "
              f"details in {log_path(ADAPTER_FAILURES_LOG, args.log_dir)}")

    out_path = stage_path(args, "cleansed_stage")
    pd.DataFrame([rec.to_row() for rec in records], columns=CLEANSED_COLUMNS).to_parquet(out_path, index=False)
    review_path = stage_path(args, "review_stage")
    pd.DataFrame([entry.to_row() for entry in review_queue], columns=REVIEW_COLUMNS).to_parquet(review_path, index=False)

    if result.cancelled:
        remaining = len(pending) - len(result.records)
        print(f"[cleanse][WARN] Run cancelled with {remaining:,} records not scheduled.")
        print(f"[cleanse] Checkpoint preserved at {checkpoint_path}; re-run to continue.")
    elif os.path.exists(checkpoint_path):
        print("[cleanse] All records processed. Removing checkpoint file.")
        os.remove(checkpoint_path)

    print_summary(summarize_run(records), prefix="[cleanse]")
    print(f"[cleanse] Saved {out_path} and {review_path}")
    return out_path
