"""Operations exposed to the controller layer.

Every operation returns an OperationResult and never raises: validation
problems, missing records, store failures and processing failures are
reported through ``error_type``.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from fairness.config.settings import Settings
from fairness.consistency.analyzer import ConsistencyAnalyzer
from fairness.consistency.models import ConsistencyProfile
from fairness.database.exceptions import PersistenceError
from fairness.database.repositories.consistency_profile_repository import (
    ConsistencyProfileRepository,
)
from fairness.database.repositories.endorsement_repository import EndorsementRepository
from fairness.database.repositories.processing_log_repository import ProcessingLogRepository
from fairness.logging.logger import Log
from fairness.processor.exceptions import AuditLogError, EndorsementValidationError
from fairness.processor.models import (
    Endorsement,
    EntryScope,
    ProcessingStatus,
    ProcessingType,
)
from fairness.processor.orchestrator import ProcessingOrchestrator, build_orchestrator
from fairness.service.models import ErrorType, OperationResult
from fairness.service.payloads import (
    batch_item_payload,
    log_entry_payload,
    processed_text_payload,
    profile_payload,
)
from fairness.transformation.models import StageOutcome


class BiasReductionService:
    """Entry points for endorsement text processing and reviewer consistency."""

    def __init__(
        self,
        *,
        orchestrator: ProcessingOrchestrator,
        analyzer: ConsistencyAnalyzer,
        endorsement_repo: EndorsementRepository,
        profile_repo: ConsistencyProfileRepository,
        log_repo: ProcessingLogRepository,
        settings: Settings,
    ) -> None:
        self._orchestrator = orchestrator
        self._analyzer = analyzer
        self._endorsement_repo = endorsement_repo
        self._profile_repo = profile_repo
        self._log_repo = log_repo
        self._settings = settings

    def process_endorsement_text(
        self,
        endorsement_id: str,
        text: str,
        processing_type: ProcessingType | str = ProcessingType.FULL_PIPELINE,
    ) -> OperationResult:
        """Run the requested pipeline stages over a single endorsement text."""
        if not endorsement_id or not isinstance(text, str) or not text:
            return OperationResult.failure(
                ErrorType.VALIDATION, "Endorsement ID and text are required"
            )
        try:
            processing_type = ProcessingType.parse(processing_type)
        except EndorsementValidationError as exc:
            return OperationResult.failure(ErrorType.VALIDATION, str(exc))

        endorsement = Endorsement(id=str(endorsement_id), text=text)
        try:
            processed, entry = self._orchestrator.process_one(endorsement, processing_type)
        except AuditLogError as exc:
            return OperationResult.failure(
                ErrorType.PERSISTENCE,
                str(exc),
                data=processed_text_payload(text, exc.endorsement, exc.log_entry),
            )
        except Exception as exc:
            Log.error("Error processing endorsement text", endorsement_id=endorsement_id, error=exc)
            return OperationResult.failure(
                ErrorType.PROCESSING, f"Error processing endorsement text: {exc}"
            )

        return OperationResult.ok(processed_text_payload(text, processed, entry))

    def analyze_reviewer_consistency(
        self,
        reviewer_id: str,
        endorsements: Iterable[Endorsement] | None = None,
    ) -> OperationResult:
        """Score a reviewer's rating history and store the resulting profile.

        When *endorsements* is omitted the reviewer's active endorsements are
        loaded from the endorsement store.
        """
        if not reviewer_id:
            return OperationResult.failure(ErrorType.VALIDATION, "Reviewer ID is required")

        if endorsements is None:
            try:
                history = self._endorsement_repo.list_by_reviewer(reviewer_id)
            except PersistenceError as exc:
                return OperationResult.failure(ErrorType.PERSISTENCE, str(exc))
        else:
            history = [
                e for e in endorsements if e.reviewer_id is None or e.reviewer_id == reviewer_id
            ]

        try:
            profile = self._analyzer.analyze_endorsements(reviewer_id, history)
        except EndorsementValidationError as exc:
            return OperationResult.failure(ErrorType.VALIDATION, str(exc))

        data = profile_payload(profile)
        try:
            self._profile_repo.upsert(profile)
        except PersistenceError as exc:
            Log.error("Failed to store consistency profile", reviewer_id=reviewer_id, error=exc)
            return OperationResult.failure(ErrorType.PERSISTENCE, str(exc), data=data)

        Log.info(
            "Reviewer consistency analyzed",
            reviewer_id=reviewer_id,
            score=profile.consistency_score,
            is_consistent=profile.is_consistent,
        )
        return OperationResult.ok(data)

    def process_batch(self, endorsement_ids: Sequence[str]) -> OperationResult:
        """Run the full pipeline over stored endorsements and write back their text."""
        if isinstance(endorsement_ids, (str, bytes)) or not endorsement_ids:
            return OperationResult.failure(
                ErrorType.VALIDATION, "A non-empty list of endorsement IDs is required"
            )

        try:
            endorsements = self._endorsement_repo.find_by_ids(list(endorsement_ids))
        except PersistenceError as exc:
            return OperationResult.failure(ErrorType.PERSISTENCE, str(exc))
        if not endorsements:
            return OperationResult.failure(ErrorType.NOT_FOUND, "No endorsements found")

        processed = self._orchestrator.process_batch(endorsements)

        failed_ids: list[str] = []
        write_errors: list[str] = []
        for original, result in zip(endorsements, processed):
            if result is original:
                failed_ids.append(original.id)
                continue
            try:
                self._endorsement_repo.update_text(result.id, result.text)
            except PersistenceError as exc:
                Log.error("Failed to store processed endorsement", endorsement_id=result.id, error=exc)
                write_errors.append(str(exc))

        data = {
            "total_processed": len(processed),
            "processed_endorsements": [batch_item_payload(e) for e in processed],
            "failed_ids": failed_ids,
        }
        if write_errors:
            return OperationResult.failure(ErrorType.PERSISTENCE, "; ".join(write_errors), data=data)
        return OperationResult.ok(data)

    def get_bias_reduction_analytics(
        self,
        days: int | None = None,
        limit: int = 100,
    ) -> OperationResult:
        """Summarize recent processing calls and stored reviewer profiles.

        Totals count call entries only; stage entries are still listed.
        """
        days = self._settings.analytics_default_days if days is None else days
        if days < 1 or limit < 1:
            return OperationResult.failure(
                ErrorType.VALIDATION, "days and limit must be positive"
            )
        since = datetime.now(timezone.utc) - timedelta(days=days)
        try:
            entries = self._log_repo.list_since(since, limit)
            profiles = self._profile_repo.list_profiles()
        except PersistenceError as exc:
            return OperationResult.failure(ErrorType.PERSISTENCE, str(exc))

        calls = [e for e in entries if e.scope is EntryScope.CALL]
        completed = [e for e in calls if e.status is ProcessingStatus.COMPLETED]
        degraded = [
            e
            for e in completed
            if StageOutcome.FALLBACK_USED
            in (e.anonymization_outcome, e.normalization_outcome)
        ]
        success_rate = len(completed) / len(calls) * 100 if calls else 0.0

        summary: dict[str, Any] = {
            "total_processed": len(calls),
            "success_rate": round(success_rate, 2),
            "fallback_runs": len(degraded),
            **self._profile_summary(profiles),
        }
        return OperationResult.ok({
            "summary": summary,
            "processing_logs": [log_entry_payload(e) for e in entries],
            "consistency_analytics": [profile_payload(p) for p in profiles],
        })

    def get_reviewer_consistency_report(self, min_reviews: int | None = None) -> OperationResult:
        """List stored reviewer profiles, least consistent first."""
        if min_reviews is None:
            min_reviews = self._settings.consistency_report_min_reviews
        try:
            profiles = self._profile_repo.list_profiles(min_reviews)
        except PersistenceError as exc:
            return OperationResult.failure(ErrorType.PERSISTENCE, str(exc))

        return OperationResult.ok({
            **self._profile_summary(profiles),
            "consistent_reviewers": sum(1 for p in profiles if p.is_consistent),
            "reviewers": [profile_payload(p) for p in profiles],
        })

    @staticmethod
    def _profile_summary(profiles: list[ConsistencyProfile]) -> dict[str, Any]:
        scores = [p.consistency_score for p in profiles if p.consistency_score is not None]
        average = sum(scores) / len(scores) if scores else 0.0
        return {
            "total_reviewers": len(profiles),
            "inconsistent_reviewers": sum(1 for p in profiles if not p.is_consistent),
            "average_consistency_score": round(average, 2),
        }


def build_service(settings: Settings) -> BiasReductionService:
    """Build a BiasReductionService with all required adapters."""
    return BiasReductionService(
        orchestrator=build_orchestrator(settings),
        analyzer=ConsistencyAnalyzer(),
        endorsement_repo=EndorsementRepository(),
        profile_repo=ConsistencyProfileRepository(),
        log_repo=ProcessingLogRepository(),
        settings=settings,
    )
