from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from fairness.processor.exceptions import EndorsementValidationError
from fairness.transformation.models import StageOutcome, StageResult


class ProcessingType(str, Enum):
    """Which stages of the bias reduction pipeline to run."""

    ANONYMIZATION = "anonymization"
    SENTIMENT_NORMALIZATION = "sentiment_normalization"
    FULL_PIPELINE = "full_pipeline"

    @classmethod
    def parse(cls, value: str | ProcessingType) -> ProcessingType:
        """Return the member for *value*.

        Raises:
            EndorsementValidationError: if *value* is not a known processing type.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = [member.value for member in cls]
            raise EndorsementValidationError(
                f"Invalid processing type {value!r}. Choose from: {supported}"
            ) from exc


class ProcessingStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class EntryScope(str, Enum):
    """Whether a log entry records a whole call or one degraded stage of it."""

    CALL = "call"
    STAGE = "stage"


@dataclass(frozen=True)
class Endorsement:
    """A peer-submitted endorsement (subset of DB columns).

    Only ``text`` and the bias reduction fields change when a record is
    processed; processed records are new instances.
    """

    id: str
    text: str
    reviewer_id: str | None = None
    subject_id: str | None = None
    star_rating: int | None = None
    created_at: datetime | None = None
    bias_reduction_applied: bool = False
    bias_reduction_timestamp: datetime | None = None


@dataclass(frozen=True)
class ProcessingLogEntry:
    """One append-only audit record.

    Each call writes one ``CALL`` entry; each stage that fell back or failed
    adds a ``STAGE`` entry.
    """

    endorsement_id: str
    original_text: str
    processing_type: ProcessingType
    status: ProcessingStatus
    duration_ms: int
    created_at: datetime
    anonymized_text: str | None = None
    normalized_text: str | None = None
    error_message: str | None = None
    anonymization_outcome: StageOutcome | None = None
    normalization_outcome: StageOutcome | None = None
    scope: EntryScope = EntryScope.CALL


@dataclass(frozen=True)
class PipelineResult:
    """Output of the text transformer for one endorsement."""

    endorsement: Endorsement
    processing_type: ProcessingType
    anonymization: StageResult | None = None
    normalization: StageResult | None = None

    @property
    def stages(self) -> list[tuple[ProcessingType, StageResult]]:
        stages: list[tuple[ProcessingType, StageResult]] = []
        if self.anonymization is not None:
            stages.append((ProcessingType.ANONYMIZATION, self.anonymization))
        if self.normalization is not None:
            stages.append((ProcessingType.SENTIMENT_NORMALIZATION, self.normalization))
        return stages

    @property
    def failed(self) -> bool:
        return any(stage.outcome is StageOutcome.FAILED for _, stage in self.stages)
