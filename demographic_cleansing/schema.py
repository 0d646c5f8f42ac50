"""Pydantic models for raw records, field outcomes, cleansed records and review entries."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OutcomeSource(str, Enum):
    """How a field value was reached."""

    PASSTHROUGH = "PASSTHROUGH"  # Pre-check matched, no service call
    CLASSIFIED = "CLASSIFIED"  # Closed-set classification
    EXTRACTED = "EXTRACTED"  # Open-ended number extraction


class Confidence(str, Enum):
    """Review tier of a cleansed record."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ReviewStatus(str, Enum):
    """Status of an entry in the review queue."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CORRECTED = "CORRECTED"
    REJECTED = "REJECTED"


def _cell(value: Any) -> Any:
    """Map table cells that stand for "missing" (NaN, NA) to None."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if type(value).__name__ in ("NAType", "NaTType"):
        return None
    return value


def _text(value: Any) -> Optional[str]:
    value = _cell(value)
    return None if value is None else str(value)


class RawDemographicRecord(BaseModel):
    """One input row as produced by the raw data source."""

    model_config = ConfigDict(frozen=True)

    record_id: str
    sex_raw: Optional[str] = None
    race_raw: Optional[str] = None
    age_raw: Optional[str] = None

    def raw_value(self, field: str) -> Optional[str]:
        return getattr(self, f"{field}_raw")


class FieldOutcome(BaseModel):
    """Result of cleansing one field."""

    model_config = ConfigDict(frozen=True)

    value: Union[int, str, None] = None
    source: OutcomeSource
    valid: bool
    detail: Optional[str] = None  # Failure or data-quality note for the audit log


class CleansedRecord(BaseModel):
    """Raw values plus the three field outcomes and the derived review decision."""

    model_config = ConfigDict(frozen=True)

    record_id: str
    sex_raw: Optional[str] = None
    race_raw: Optional[str] = None
    age_raw: Optional[str] = None
    sex: FieldOutcome
    race: FieldOutcome
    age: FieldOutcome
    confidence: Confidence
    needs_review: bool

    def outcomes(self) -> Dict[str, FieldOutcome]:
        return {"sex": self.sex, "race": self.race, "age": self.age}

    def raw_value(self, field: str) -> Optional[str]:
        return getattr(self, f"{field}_raw")

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a single table row (one column per outcome attribute)."""
        row: Dict[str, Any] = {
            "record_id": self.record_id,
            "sex_raw": self.sex_raw,
            "race_raw": self.race_raw,
            "age_raw": self.age_raw,
        }
        for field, outcome in self.outcomes().items():
            row[f"cleansed_{field}"] = outcome.value
            row[f"{field}_source"] = outcome.source.value
            row[f"{field}_valid"] = outcome.valid
            row[f"{field}_detail"] = outcome.detail
        row["confidence"] = self.confidence.value
        row["needs_review"] = self.needs_review
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CleansedRecord":
        """Rebuild a record from a row written by ``to_row`` (e.g. read back from Parquet)."""
        outcomes = {}
        for field in ("sex", "race", "age"):
            value = _cell(row.get(f"cleansed_{field}"))
            if value is not None:
                # Parquet stores a nullable int column as float
                value = int(value) if field == "age" else str(value)
            outcomes[field] = FieldOutcome(
                value=value,
                source=OutcomeSource(row[f"{field}_source"]),
                valid=bool(row[f"{field}_valid"]),
                detail=_text(row.get(f"{field}_detail")),
            )
        return cls(
            record_id=str(row["record_id"]),
            sex_raw=_text(row.get("sex_raw")),
            race_raw=_text(row.get("race_raw")),
            age_raw=_text(row.get("age_raw")),
            confidence=Confidence(row["confidence"]),
            needs_review=bool(row["needs_review"]),
            **outcomes,
        )


class ReviewEntry(BaseModel):
    """A review queue item awaiting human correction.

    Correction fields start empty and are only filled by the review workflow.
    """

    record_id: str
    sex_raw: Optional[str] = None
    race_raw: Optional[str] = None
    age_raw: Optional[str] = None
    cleansed_sex: Optional[str] = None
    cleansed_race: Optional[str] = None
    cleansed_age: Optional[int] = None
    confidence: Confidence

    reviewer: Optional[str] = None
    status: ReviewStatus = ReviewStatus.PENDING
    corrected_sex: Optional[str] = None
    corrected_race: Optional[str] = None
    corrected_age: Optional[int] = None
    notes: Optional[str] = None
    review_timestamp: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class RunSummary(BaseModel):
    """Run statistics derived from the cleansed record set."""

    total_records: int = 0
    passthrough: Dict[str, int] = Field(default_factory=dict)
    ai_assisted: Dict[str, int] = Field(default_factory=dict)
    auto_accepted: int = 0
    review_queue: int = 0
    confidence: Dict[str, int] = Field(default_factory=dict)


CLEANSED_COLUMNS = (
    ["record_id", "sex_raw", "race_raw", "age_raw"]
    + [f"{prefix}{field}{suffix}"
       for field in ("sex", "race", "age")
       for prefix, suffix in (("cleansed_", ""), ("", "_source"), ("", "_valid"), ("", "_detail"))]
    + ["confidence", "needs_review"]
)
REVIEW_COLUMNS = list(ReviewEntry.model_fields)
