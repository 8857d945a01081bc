import time
from collections.abc import Sequence
from datetime import datetime, timezone

from fairness.config.settings import Settings
from fairness.database.exceptions import PersistenceError
from fairness.database.repositories.processing_log_repository import ProcessingLogRepository
from fairness.logging.logger import Log
from fairness.processor.exceptions import AuditLogError, EndorsementValidationError
from fairness.processor.models import (
    Endorsement,
    EntryScope,
    PipelineResult,
    ProcessingLogEntry,
    ProcessingStatus,
    ProcessingType,
)
from fairness.processor.text_transformer import TextTransformer, build_text_transformer
from fairness.transformation.models import StageOutcome


class ProcessingOrchestrator:
    """Sequences text transformation per endorsement and writes the audit log.

    Single calls propagate failures; batch calls isolate them per item and
    pace the items to respect the transformation provider's rate limits.
    """

    def __init__(
        self,
        transformer: TextTransformer,
        log_repo: ProcessingLogRepository,
        batch_item_delay_ms: int = 100,
    ) -> None:
        self._transformer = transformer
        self._log_repo = log_repo
        self._batch_item_delay_ms = max(0, batch_item_delay_ms)

    def process_one(
        self,
        endorsement: Endorsement,
        processing_type: ProcessingType | str = ProcessingType.FULL_PIPELINE,
    ) -> tuple[Endorsement, ProcessingLogEntry]:
        """Process a single endorsement and append its log entries.

        Raises:
            EndorsementValidationError: before any processing or logging.
            AuditLogError: if the log store rejects an entry; carries the result.
            Exception: any processing failure, after a failed entry is logged.
        """
        if endorsement is None:
            raise EndorsementValidationError("Endorsement is required")
        processing_type = ProcessingType.parse(processing_type)

        original_text = endorsement.text
        started = time.perf_counter()
        try:
            result = self._transformer.run(endorsement, processing_type)
        except Exception as exc:
            entry = ProcessingLogEntry(
                endorsement_id=endorsement.id,
                original_text=original_text,
                processing_type=processing_type,
                status=ProcessingStatus.FAILED,
                error_message=str(exc),
                duration_ms=self._elapsed_ms(started),
                created_at=datetime.now(timezone.utc),
            )
            Log.error(
                "Endorsement processing failed",
                endorsement_id=endorsement.id,
                processing_type=processing_type.value,
                error=exc,
            )
            self._append_after_failure(entry)
            raise

        duration_ms = self._elapsed_ms(started)
        entry = self._build_entry(result, original_text, duration_ms)
        for stage_entry in self._degraded_stage_entries(result, original_text, duration_ms):
            self._append(stage_entry, result.endorsement, entry)
        self._append(entry, result.endorsement, entry)

        Log.info(
            "Endorsement processed",
            endorsement_id=endorsement.id,
            processing_type=processing_type.value,
            status=entry.status.value,
            duration_ms=duration_ms,
        )
        return result.endorsement, entry

    def process_batch(
        self,
        endorsements: Sequence[Endorsement],
        processing_type: ProcessingType | str = ProcessingType.FULL_PIPELINE,
    ) -> list[Endorsement]:
        """Process endorsements one after another.

        Returns a list with the same length and order as the input. A failed
        item is returned unchanged; processing always continues.
        """
        processing_type = ProcessingType.parse(processing_type)
        results: list[Endorsement] = []
        failures = 0

        for index, endorsement in enumerate(endorsements):
            if index > 0:
                time.sleep(self._batch_item_delay_ms / 1000)
            try:
                processed, _entry = self.process_one(endorsement, processing_type)
            except AuditLogError as exc:
                Log.error(
                    "Batch item processed but not audited",
                    index=index,
                    endorsement_id=exc.endorsement.id,
                    error=exc,
                )
                processed = exc.endorsement
            except Exception as exc:
                failures += 1
                Log.error(
                    "Batch item failed, keeping original",
                    index=index,
                    endorsement_id=getattr(endorsement, "id", None),
                    error=exc,
                )
                processed = endorsement
            results.append(processed)

        Log.info("Batch finished", total=len(results), failed=failures)
        return results

    def _build_entry(
        self,
        result: PipelineResult,
        original_text: str,
        duration_ms: int,
    ) -> ProcessingLogEntry:
        failed_stages = [
            stage for _, stage in result.stages if stage.outcome is StageOutcome.FAILED
        ]
        return ProcessingLogEntry(
            endorsement_id=result.endorsement.id,
            original_text=original_text,
            anonymized_text=result.anonymization.text if result.anonymization else None,
            normalized_text=result.normalization.text if result.normalization else None,
            processing_type=result.processing_type,
            status=ProcessingStatus.FAILED if failed_stages else ProcessingStatus.COMPLETED,
            error_message=failed_stages[0].error_message if failed_stages else None,
            duration_ms=duration_ms,
            created_at=datetime.now(timezone.utc),
            anonymization_outcome=result.anonymization.outcome if result.anonymization else None,
            normalization_outcome=result.normalization.outcome if result.normalization else None,
        )

    @staticmethod
    def _degraded_stage_entries(
        result: PipelineResult,
        original_text: str,
        duration_ms: int,
    ) -> list[ProcessingLogEntry]:
        """One failed entry per stage whose remote attempt did not succeed."""
        entries: list[ProcessingLogEntry] = []
        for stage_type, stage in result.stages:
            if not stage.degraded:
                continue
            is_anonymization = stage_type is ProcessingType.ANONYMIZATION
            entries.append(
                ProcessingLogEntry(
                    endorsement_id=result.endorsement.id,
                    original_text=original_text,
                    processing_type=stage_type,
                    status=ProcessingStatus.FAILED,
                    error_message=stage.error_message,
                    duration_ms=duration_ms,
                    created_at=datetime.now(timezone.utc),
                    anonymization_outcome=stage.outcome if is_anonymization else None,
                    normalization_outcome=None if is_anonymization else stage.outcome,
                    scope=EntryScope.STAGE,
                )
            )
        return entries

    def _append(
        self,
        entry: ProcessingLogEntry,
        endorsement: Endorsement,
        call_entry: ProcessingLogEntry,
    ) -> None:
        try:
            self._log_repo.append(entry)
        except PersistenceError as exc:
            raise AuditLogError(
                f"Failed to append processing log for endorsement {entry.endorsement_id}: {exc}",
                endorsement=endorsement,
                log_entry=call_entry,
            ) from exc

    def _append_after_failure(self, entry: ProcessingLogEntry) -> None:
        try:
            self._log_repo.append(entry)
        except PersistenceError as exc:
            Log.error(
                "Failed to append failure log entry",
                endorsement_id=entry.endorsement_id,
                error=exc,
            )

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int(round((time.perf_counter() - started) * 1000))


def build_orchestrator(settings: Settings) -> ProcessingOrchestrator:
    """Build a ProcessingOrchestrator with all required adapters."""
    return ProcessingOrchestrator(
        transformer=build_text_transformer(settings),
        log_repo=ProcessingLogRepository(),
        batch_item_delay_ms=settings.batch_item_delay_ms,
    )
