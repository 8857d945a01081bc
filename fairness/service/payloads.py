"""JSON-ready views of domain records."""

from datetime import datetime
from typing import Any

from fairness.consistency.models import ConsistencyProfile
from fairness.processor.models import Endorsement, ProcessingLogEntry


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def profile_payload(profile: ConsistencyProfile) -> dict[str, Any]:
    return {
        "reviewer_id": profile.reviewer_id,
        "total_reviews": profile.total_reviews,
        "average_rating": profile.average_rating,
        "standard_deviation": profile.standard_deviation,
        "consistency_score": profile.consistency_score,
        "is_consistent": profile.is_consistent,
        "issues": list(profile.issues),
        "message": profile.message,
        "last_analyzed_at": _iso(profile.last_analyzed_at),
    }


def log_entry_payload(entry: ProcessingLogEntry) -> dict[str, Any]:
    return {
        "endorsement_id": entry.endorsement_id,
        "original_text": entry.original_text,
        "anonymized_text": entry.anonymized_text,
        "normalized_text": entry.normalized_text,
        "processing_type": entry.processing_type.value,
        "status": entry.status.value,
        "error_message": entry.error_message,
        "duration_ms": entry.duration_ms,
        "anonymization_outcome": (
            entry.anonymization_outcome.value if entry.anonymization_outcome else None
        ),
        "normalization_outcome": (
            entry.normalization_outcome.value if entry.normalization_outcome else None
        ),
        "scope": entry.scope.value,
        "created_at": _iso(entry.created_at),
    }


def processed_text_payload(
    original_text: str,
    endorsement: Endorsement,
    entry: ProcessingLogEntry,
) -> dict[str, Any]:
    return {
        "endorsement_id": endorsement.id,
        "original_text": original_text,
        "processed_text": endorsement.text,
        "processing_type": entry.processing_type.value,
        "processing_time_ms": entry.duration_ms,
        "status": entry.status.value,
        "anonymization_outcome": (
            entry.anonymization_outcome.value if entry.anonymization_outcome else None
        ),
        "normalization_outcome": (
            entry.normalization_outcome.value if entry.normalization_outcome else None
        ),
    }


def batch_item_payload(endorsement: Endorsement) -> dict[str, Any]:
    return {
        "id": endorsement.id,
        "bias_reduction_applied": endorsement.bias_reduction_applied,
        "bias_reduction_timestamp": _iso(endorsement.bias_reduction_timestamp),
    }
