from datetime import datetime
from typing import Any

import psycopg
from psycopg.rows import dict_row

from fairness.database.connection import get_connection
from fairness.database.exceptions import PersistenceError
from fairness.processor.models import (
    EntryScope,
    ProcessingLogEntry,
    ProcessingStatus,
    ProcessingType,
)
from fairness.transformation.models import StageOutcome

_COLUMNS = """
    endorsement_id, original_text, anonymized_text, normalized_text,
    processing_type, processing_status, error_message, processing_time_ms,
    anonymization_outcome, normalization_outcome, entry_scope, created_at
"""


class ProcessingLogRepository:
    """Append-only access to the bias_reduction_logs table."""

    def append(self, entry: ProcessingLogEntry) -> None:
        """Insert one processing log entry.

        Raises:
            PersistenceError: if the entry cannot be written.
        """
        try:
            with get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO bias_reduction_logs ({_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        entry.endorsement_id,
                        entry.original_text,
                        entry.anonymized_text,
                        entry.normalized_text,
                        entry.processing_type.value,
                        entry.status.value,
                        entry.error_message,
                        entry.duration_ms,
                        _outcome_value(entry.anonymization_outcome),
                        _outcome_value(entry.normalization_outcome),
                        entry.scope.value,
                        entry.created_at,
                    ),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to append processing log: {exc}") from exc

    def list_by_endorsement(self, endorsement_id: str) -> list[ProcessingLogEntry]:
        """Return all entries for an endorsement, oldest first."""
        return self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM bias_reduction_logs
            WHERE endorsement_id = %s
            ORDER BY created_at, id
            """,
            (endorsement_id,),
        )

    def list_since(self, since: datetime, limit: int) -> list[ProcessingLogEntry]:
        """Return at most *limit* entries created at or after *since*, newest first."""
        return self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM bias_reduction_logs
            WHERE created_at >= %s
            ORDER BY created_at DESC, id DESC
            LIMIT %s
            """,
            (since, limit),
        )

    def _fetch(self, sql: str, params: tuple[Any, ...]) -> list[ProcessingLogEntry]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to read processing log: {exc}") from exc
        return [_row_to_entry(row) for row in rows]


def _outcome_value(outcome: StageOutcome | None) -> str | None:
    return outcome.value if outcome is not None else None


def _row_to_entry(row: dict[str, Any]) -> ProcessingLogEntry:
    anonymization_outcome = row["anonymization_outcome"]
    normalization_outcome = row["normalization_outcome"]
    return ProcessingLogEntry(
        endorsement_id=row["endorsement_id"],
        original_text=row["original_text"],
        anonymized_text=row["anonymized_text"],
        normalized_text=row["normalized_text"],
        processing_type=ProcessingType(row["processing_type"]),
        status=ProcessingStatus(row["processing_status"]),
        error_message=row["error_message"],
        duration_ms=row["processing_time_ms"] or 0,
        created_at=row["created_at"],
        anonymization_outcome=(
            StageOutcome(anonymization_outcome) if anonymization_outcome else None
        ),
        normalization_outcome=(
            StageOutcome(normalization_outcome) if normalization_outcome else None
        ),
        scope=EntryScope(row["entry_scope"]),
    )
