#!/usr/bin/env python3
"""
Quick spot check script to review pipeline outputs.
Usage: python spot_check.py [view] [--field FIELD]
  view: cleansed, review, or decisions (default: cleansed)
  FIELD: sex, race or age (limits the decisions view to one field)
"""

import sys
import os
import json
from collections import Counter

import pandas as pd

OUT_PREFIX = "demographics_clean"


def check_cleansed():
    """Check the final cleansed dataset."""
    path = f"{OUT_PREFIX}.parquet"
    if not os.path.exists(path):
        print(f"❌ {path} not found. Run: python cleanse_demographics.py --input data/sample_demographics.csv")
        return

    df = pd.read_parquet(path)
    print(f"\n{'='*60}")
    print(f"CLEANSED DATASET: {path}")
    print(f"{'='*60}")
    print(f"Total records: {len(df):,}")
    print(f"Flagged for review: {int(df['needs_review'].sum()):,}")
    print(f"Confidence: {dict(Counter(df['confidence']))}")

    for field in ("sex", "race", "age"):
        sources = Counter(df[f"{field}_source"])
        print(f"\n{field}: {dict(sources)}")
        print(df[f"cleansed_{field}"].value_counts(dropna=False).head(10).to_string())

    print(f"\n{'='*60}")
    print("SAMPLE TRANSFORMED RECORDS:")
    print(f"{'='*60}")
    changed = df[(df["sex_source"] != "PASSTHROUGH") | (df["race_source"] != "PASSTHROUGH") | (df["age_source"] != "PASSTHROUGH")]
    for _, row in changed.head(10).iterrows():
        print(f"  [{row['record_id']}] sex {row['sex_raw']!r} → {row['cleansed_sex']}, "
              f"race {row['race_raw']!r} → {row['cleansed_race']}, "
              f"age {row['age_raw']!r} → {row['cleansed_age']} ({row['confidence']})")


def check_review():
    """Check the review queue."""
    path = f"{OUT_PREFIX}_review_queue.jsonl"
    if not os.path.exists(path):
        print(f"❌ {path} not found. Run the finalize stage first.")
        return

    with open(path, "r") as f:
        entries = [json.loads(line) for line in f if line.strip()]
    print(f"\n{'='*60}")
    print(f"REVIEW QUEUE: {path}")
    print(f"{'='*60}")
    print(f"Pending entries: {sum(1 for e in entries if e.get('status') == 'PENDING'):,} of {len(entries):,}")
    for e in entries[:20]:
        print(f"  [{e['record_id']}] sex {e['sex_raw']!r} → {e['cleansed_sex']}, "
              f"race {e['race_raw']!r} → {e['cleansed_race']}, "
              f"age {e['age_raw']!r} → {e['cleansed_age']} ({e['confidence']})")


def check_decisions(field=None):
    """Check the cleanse stage decision log."""
    log_path = "logs/01_cleanse.jsonl"
    if not os.path.exists(log_path):
        print(f"❌ {log_path} not found. Run the cleanse stage first.")
        return

    with open(log_path, "r") as f:
        logs = [json.loads(line) for line in f if line.strip()]
    fields = [field] if field else ["sex", "race", "age"]
    print(f"\n{'='*60}")
    print(f"CLEANSE DECISIONS: {log_path} ({len(logs):,} records)")
    print(f"{'='*60}")
    for name in fields:
        mappings = Counter((str(l[name]["raw"]), str(l[name]["cleansed"])) for l in logs if l[name]["source"] != "PASSTHROUGH")
        print(f"\n{name} mappings:")
        for (raw, cleansed), count in mappings.most_common(15):
            print(f"  {raw!r} → {cleansed} ({count})")
        details = Counter(l[name].get("detail") for l in logs if l[name].get("detail"))
        if details:
            print(f"  issues: {dict(details)}")


if __name__ == "__main__":
    view = sys.argv[1] if len(sys.argv) > 1 and not sys.argv[1].startswith("--") else "cleansed"
    field = None
    if "--field" in sys.argv:
        idx = sys.argv.index("--field")
        if idx + 1 < len(sys.argv):
            field = sys.argv[idx + 1]

    if view == "cleansed":
        check_cleansed()
    elif view == "review":
        check_review()
    elif view == "decisions":
        check_decisions(field)
    else:
        print(f"Unknown view '{view}'. Use cleansed, review or decisions.")
