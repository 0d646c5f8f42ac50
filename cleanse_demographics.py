#!/usr/bin/env python3
"""
Cleanse sex, race and age fields with auditable, staged processing.

Stages (re-runnable):
  cleanse → finalize

Logs (default ./logs):
  01_cleanse.jsonl          # per-record field decisions (raw → cleansed, source, validity)
  adapter_failures.jsonl    # fields degraded by classification service failures
  02_final_decisions.jsonl  # sample of final records

Final artifacts (default ./):
  demographics_clean.jsonl / .parquet               # every record, needs_review flag included
  demographics_clean_review_queue.jsonl / .parquet  # records awaiting human review
  demographics_clean_summary.json
"""

from demographic_cleansing.cli import main

if __name__ == "__main__":
    main()
