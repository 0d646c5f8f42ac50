"""Pipeline orchestrator - runs the field cleansers, confidence and review routing per record."""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .cleansers import build_cleansers
from .config import DEFAULT_MAX_WORKERS, SCHEDULE_WINDOW_FACTOR
from .confidence import classify_confidence
from .exceptions import ConfigurationError
from .models.adapter import ClassifierAdapter
from .registry import CanonicalValueRegistry
from .review import ReviewRouter
from .schema import CleansedRecord, RawDemographicRecord, ReviewEntry, RunSummary
from .settings import CleansingSettings, FieldModels
from .summary import summarize_run
from .utils.data_utils import batched

RecordCallback = Callable[[CleansedRecord, Optional[ReviewEntry]], None]


class PipelineResult:
    """Accumulated output of one run. Only the orchestrator thread appends to it."""

    def __init__(self):
        self.records: List[CleansedRecord] = []
        self.review_queue: List[ReviewEntry] = []
        self.cancelled = False

    def add(self, record: CleansedRecord, entry: Optional[ReviewEntry]):
        self.records.append(record)
        if entry is not None:
            self.review_queue.append(entry)

    def summary(self) -> RunSummary:
        return summarize_run(self.records)


def build_adapter(settings: CleansingSettings) -> ClassifierAdapter:
    """Create the classifier adapter for the configured backends.

    The LLM always serves number extraction; categorical classification uses
    either the LLM or a local zero-shot model.
    """
    from .models.llm_processor import LLMProcessor

    llm = LLMProcessor(
        model=settings.models.age,
        timeout=settings.llm_timeout,
        enable_tracing=settings.enable_tracing,
    )
    if settings.classifier_backend == "zero-shot":
        from .models.classifier import ZeroShotClassifier
        return ClassifierAdapter(ZeroShotClassifier(settings.zero_shot_model), completion_backend=llm)
    return ClassifierAdapter(llm)


class CleansingPipeline:
    """Cleanses raw demographic records with a bounded worker pool."""

    def __init__(
        self,
        registry: CanonicalValueRegistry,
        adapter: ClassifierAdapter,
        models: Optional[FieldModels] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        decade_offsets: Optional[Dict[str, int]] = None,
    ):
        """Initialize the pipeline.

        Args:
            registry: Validated canonical value registry
            adapter: Classifier adapter shared by all cleansers
            models: Per-field model selection
            max_workers: Cap on records (and so service calls) in flight
            decade_offsets: Offsets for decade-range ages

        Raises:
            ConfigurationError: If max_workers is below 1
        """
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {max_workers}")
        self.registry = registry
        self.max_workers = max_workers
        self.cleansers = build_cleansers(registry, adapter, models, decade_offsets)
        self.router = ReviewRouter(registry)

    @classmethod
    def from_settings(
        cls,
        settings: CleansingSettings,
        registry: Optional[CanonicalValueRegistry] = None,
        adapter: Optional[ClassifierAdapter] = None,
    ) -> "CleansingPipeline":
        return cls(
            registry or CanonicalValueRegistry(),
            adapter or build_adapter(settings),
            models=settings.models,
            max_workers=settings.max_workers,
            decade_offsets=settings.age_decade_offsets,
        )

    def cleanse_record(self, raw: RawDemographicRecord) -> Tuple[CleansedRecord, Optional[ReviewEntry]]:
        """Cleanse all fields of one record and decide its review status."""
        outcomes = {field: cleanser.cleanse(raw.raw_value(field)) for field, cleanser in self.cleansers.items()}
        record = CleansedRecord(
            record_id=raw.record_id,
            sex_raw=raw.sex_raw,
            race_raw=raw.race_raw,
            age_raw=raw.age_raw,
            confidence=classify_confidence(raw, outcomes, self.registry.review_labels),
            needs_review=self.router.needs_review(outcomes),
            **outcomes,
        )
        return record, self.router.route(record)

    def run(
        self,
        records: Iterable[RawDemographicRecord],
        cancel_event: Optional[threading.Event] = None,
        on_record: Optional[RecordCallback] = None,
    ) -> PipelineResult:
        """Cleanse every record from the source.

        Records are scheduled in windows of ``max_workers * SCHEDULE_WINDOW_FACTOR``.
        Cancellation is checked between windows: nothing new is scheduled, records
        already submitted run to completion.

        Args:
            records: Raw record source (consumed lazily)
            cancel_event: Set to stop scheduling new records
            on_record: Called from this thread for every completed record

        Returns:
            PipelineResult with one CleansedRecord per processed input record
        """
        result = PipelineResult()
        window = self.max_workers * SCHEDULE_WINDOW_FACTOR
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="cleanse") as pool:
            for chunk in batched(records, window):
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    print("[cleanse][WARN] Cancellation requested, no new records scheduled")
                    break
                futures = [pool.submit(self.cleanse_record, raw) for raw in chunk]
                for future in as_completed(futures):
                    record, entry = future.result()
                    result.add(record, entry)
                    if on_record is not None:
                        on_record(record, entry)
        return result
