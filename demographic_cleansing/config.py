"""Configuration constants and settings for the demographic cleansing pipeline."""

# Output configuration
OUT_PREFIX = "demographics_clean"
DEFAULT_JSONL = f"{OUT_PREFIX}.jsonl"
DEFAULT_PARQUET = f"{OUT_PREFIX}.parquet"
LOG_DIR = "logs"

# Field names
SEX_FIELD = "sex"
RACE_FIELD = "race"
AGE_FIELD = "age"
FIELDS = (SEX_FIELD, RACE_FIELD, AGE_FIELD)

# Canonical vocabularies (fixed for the lifetime of a run)
SEX_LABELS = ("Male", "Female", "Other", "Unknown")
RACE_LABELS = (
    "White",
    "Black or African American",
    "Asian",
    "Hispanic or Latino",
    "American Indian or Alaska Native",
    "Native Hawaiian or Other Pacific Islander",
    "Two or More Races",
    "Other",
    "Unknown",
)
FALLBACK_LABEL = "Unknown"
REVIEW_LABELS = ("Other", "Unknown")

# Age bounds (inclusive)
AGE_MIN = 0
AGE_MAX = 120
INVALID_SENTINEL = "INVALID"

# Representative point inside a decade for "early 20s", "mid-30s", "late 40s"
AGE_DECADE_OFFSETS = {"early": 2, "mid": 5, "late": 8}

# Classification service configuration
DEFAULT_CLASSIFIER_BACKEND = "openai"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_SEX_MODEL = DEFAULT_OPENAI_MODEL
DEFAULT_RACE_MODEL = DEFAULT_OPENAI_MODEL
DEFAULT_AGE_MODEL = DEFAULT_OPENAI_MODEL
DEFAULT_ZERO_SHOT_MODEL = "typeform/distilbert-base-uncased-mnli"
LLM_TIMEOUT = 30  # Avoid hanging when no response from LLM

# Concurrency configuration
DEFAULT_MAX_WORKERS = 4  # Cap on in-flight classification calls
SCHEDULE_WINDOW_FACTOR = 2  # Records scheduled per window = max_workers * factor

# Testing configuration
DEFAULT_TEST_LIMIT = 100

# Column name candidates for input parsing
ID_COL_CANDIDATES = ["patient_id", "record_id", "id"]
SEX_COL_CANDIDATES = ["sex", "gender", "sex_raw"]
RACE_COL_CANDIDATES = ["race", "ethnicity", "race_raw"]
AGE_COL_CANDIDATES = ["age", "age_raw"]

# Log file names
CLEANSE_LOG = "01_cleanse.jsonl"
FINAL_LOG = "02_final_decisions.jsonl"
ADAPTER_FAILURES_LOG = "adapter_failures.jsonl"
CHECKPOINT_LOG = "cleanse_checkpoint.jsonl"
