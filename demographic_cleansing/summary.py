"""Run summary computed from the cleansed record set."""

from typing import Iterable

from .config import FIELDS
from .schema import CleansedRecord, Confidence, OutcomeSource, RunSummary


def summarize_run(records: Iterable[CleansedRecord]) -> RunSummary:
    """Count pass-through, AI-assisted, review and confidence totals.

    Args:
        records: Every CleansedRecord produced by a run

    Returns:
        RunSummary derived from the records themselves
    """
    summary = RunSummary(
        passthrough={field: 0 for field in FIELDS},
        ai_assisted={field: 0 for field in FIELDS},
        confidence={tier.value: 0 for tier in Confidence},
    )
    for rec in records:
        summary.total_records += 1
        for field, outcome in rec.outcomes().items():
            if outcome.source is OutcomeSource.PASSTHROUGH:
                summary.passthrough[field] += 1
            else:
                summary.ai_assisted[field] += 1
        summary.confidence[rec.confidence.value] += 1
        if rec.needs_review:
            summary.review_queue += 1
        else:
            summary.auto_accepted += 1
    return summary


def print_summary(summary: RunSummary, prefix: str = "[summary]"):
    """Print a run summary in the pipeline's log style."""
    total = summary.total_records
    print(f"{prefix} Records: {total:,}")
    for field in FIELDS:
        passed = summary.passthrough.get(field, 0)
        pct = (passed / total * 100) if total > 0 else 0.0
        print(f"{prefix}   {field}: pass-through={passed:,} ({pct:.1f}%) ai-assisted={summary.ai_assisted.get(field, 0):,}")
    auto_pct = (summary.auto_accepted / total * 100) if total > 0 else 0.0
    print(f"{prefix} Auto-accepted: {summary.auto_accepted:,} ({auto_pct:.1f}%)  Review queue: {summary.review_queue:,}")
    print(f"{prefix} Confidence: " + ", ".join(f"{tier}={count:,}" for tier, count in summary.confidence.items()))
