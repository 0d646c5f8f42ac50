"""Utility functions for logging, I/O, and data manipulation."""

from .logging import write_jsonl, reset_log, read_jsonl, append_jsonl, ensure_logdir, log_path
from .io_utils import ensure_output_dir, pick_col, read_table, load_raw_records, frame_to_raw_records, write_table
from .data_utils import batched

__all__ = [
    "write_jsonl",
    "reset_log", 
    "read_jsonl",
    "append_jsonl",
    "ensure_logdir",
    "log_path",
    "ensure_output_dir",
    "pick_col",
    "read_table",
    "load_raw_records",
    "frame_to_raw_records",
    "write_table",
    "batched"
]
