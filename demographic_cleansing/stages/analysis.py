"""Analysis utilities for processing stages."""

import os
from collections import Counter
from typing import List, Dict, Any, Optional

from ..config import ADAPTER_FAILURES_LOG
from ..utils.logging import read_jsonl, log_path


def analyze_adapter_failures(log_dir: Optional[str] = None) -> List[Dict[str, Any]]:
    """Analyze adapter failure logs to help debug classification service issues.
    
    Args:
        log_dir: Directory containing log files
        
    Returns:
        List of failure records
    """
    failures_path = log_path(ADAPTER_FAILURES_LOG, log_dir)
    
    if not os.path.exists(failures_path):
        print(f"[analyze] No adapter failures file found at {failures_path}")
        return []
    
    failed_records = read_jsonl(failures_path)
    if not failed_records:
        print(f"[analyze] No adapter failure records found")
        return []
    
    print(f"[analyze] Found {len(failed_records)} degraded fields")
    
    by_field = Counter(rec.get("field", "unknown") for rec in failed_records)
    by_error = Counter(rec.get("error_type", "unknown") for rec in failed_records)
    by_raw = Counter(str(rec.get("raw")) for rec in failed_records)
    
    print(f"[analyze] By field: {dict(by_field)}")
    print(f"[analyze] By error type: {dict(by_error)}")
    print(f"[analyze] Most frequent raw values:")
    for raw, count in by_raw.most_common(5):
        print(f"[analyze]   {raw!r}: {count} failures")
    
    # Show sample failures
    print(f"[analyze] Sample failures:")
    for i, rec in enumerate(failed_records[:3]):
        print(f"[analyze]   {i+1}. record {rec.get('record_id')} {rec.get('field')}={rec.get('raw')!r}: {str(rec.get('error_detail', ''))[:100]}")
    
    return failed_records
