"""I/O utility functions - raw record source and table sinks."""

import os
from typing import List, Dict, Any, Iterator, Optional

import orjson
import pandas as pd

from ..config import ID_COL_CANDIDATES, SEX_COL_CANDIDATES, RACE_COL_CANDIDATES, AGE_COL_CANDIDATES
from ..schema import RawDemographicRecord


def ensure_output_dir(path: str):
    """Ensure an output directory exists.
    
    Args:
        path: Directory path to create
    """
    os.makedirs(path, exist_ok=True)


def pick_col(columns: List[str], candidates: List[str]) -> Optional[str]:
    """Pick the first available column from a list of candidates (case-insensitive).
    
    Args:
        columns: Column names present in the input
        candidates: List of column names to try
        
    Returns:
        Matching column name as it appears in the input, or None if none found
    """
    by_lower = {c.lower(): c for c in columns}
    for c in candidates:
        if c.lower() in by_lower:
            return by_lower[c.lower()]
    return None


def read_table(path: str) -> pd.DataFrame:
    """Read a CSV, Parquet or JSON Lines file into a DataFrame of strings.
    
    Args:
        path: Input file path
        
    Returns:
        DataFrame; cell values are kept as text so "045" stays "045"
        
    Raises:
        FileNotFoundError: If the path does not exist
        ValueError: If the file extension is not supported
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input not found at {path}")
    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    if ext == ".parquet":
        return pd.read_parquet(path)
    if ext in (".jsonl", ".ndjson"):
        return pd.read_json(path, lines=True, dtype=False)
    raise ValueError(f"Unsupported input format '{ext}'. Use .csv, .parquet or .jsonl")


def _whole_floats_to_int(df: pd.DataFrame) -> pd.DataFrame:
    """Cast float columns holding only whole numbers to nullable ints.

    Parquet and JSON store an integer column with missing values as float, which
    would otherwise render 45 as "45.0".
    """
    df = df.copy()
    for col in df.columns:
        if pd.api.types.is_float_dtype(df[col]) and df[col].dropna().map(lambda v: float(v).is_integer()).all():
            df[col] = df[col].astype("Int64")
    return df


def _cell_text(value: Any) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value)
    return text if text.strip() else None


def frame_to_raw_records(df: pd.DataFrame) -> Iterator[RawDemographicRecord]:
    """Turn an input table into raw records.
    
    Args:
        df: Table with an id column and sex/race/age columns (names from config candidates)
        
    Yields:
        One RawDemographicRecord per row; NaN and blank cells become None
        
    Raises:
        ValueError: If no sex, race or age column can be found
    """
    columns = [str(c) for c in df.columns]
    id_col = pick_col(columns, ID_COL_CANDIDATES)
    field_cols = {
        "sex_raw": pick_col(columns, SEX_COL_CANDIDATES),
        "race_raw": pick_col(columns, RACE_COL_CANDIDATES),
        "age_raw": pick_col(columns, AGE_COL_CANDIDATES),
    }
    if not any(field_cols.values()):
        raise ValueError(f"Input has none of the sex/race/age columns. Found: {columns}")

    for pos, row in enumerate(_whole_floats_to_int(df).to_dict(orient="records")):
        record_id = _cell_text(row.get(id_col)) if id_col else None
        yield RawDemographicRecord(
            record_id=record_id if record_id is not None else str(pos),
            **{key: (_cell_text(row.get(col)) if col else None) for key, col in field_cols.items()},
        )


def load_raw_records(path: str, limit: Optional[int] = None) -> List[RawDemographicRecord]:
    """Load raw demographic records from a file.
    
    Args:
        path: CSV, Parquet or JSON Lines file
        limit: Keep only the first N rows (testing)
        
    Returns:
        List of raw records
    """
    df = read_table(path)
    if limit:
        df = df.head(limit)
    return list(frame_to_raw_records(df))


def write_table(
    rows: List[Dict[str, Any]],
    jsonl_path: str,
    parquet_path: Optional[str] = None,
    columns: Optional[List[str]] = None,
) -> pd.DataFrame:
    """Write rows to JSONL (and optionally Parquet).
    
    Args:
        rows: Flat dictionary rows
        jsonl_path: JSONL output path (overwritten)
        parquet_path: Optional Parquet output path
        columns: Column order (also used when there are no rows)
        
    Returns:
        The DataFrame that was written
    """
    ensure_output_dir(os.path.dirname(jsonl_path) or ".")
    with open(jsonl_path, "wb") as f:
        for rec in rows:
            f.write(orjson.dumps(rec, default=str))
            f.write(b"\n")
    df = pd.DataFrame(rows, columns=columns)
    if parquet_path:
        ensure_output_dir(os.path.dirname(parquet_path) or ".")
        df.to_parquet(parquet_path, index=False)
    return df
