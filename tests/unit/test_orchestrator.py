from unittest.mock import MagicMock, call, patch

import pytest

from fairness.anonymization.anonymizer import Anonymizer
from fairness.database.exceptions import PersistenceError
from fairness.normalization.normalizer import SentimentNormalizer
from fairness.processor.exceptions import AuditLogError, EndorsementValidationError
from fairness.processor.models import (
    Endorsement,
    EntryScope,
    ProcessingStatus,
    ProcessingType,
)
from fairness.processor.orchestrator import ProcessingOrchestrator
from fairness.processor.text_transformer import TextTransformer
from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.models import StageOutcome, TransformationInstruction
from fairness.transformation.offline_client_adapter import OfflineClientAdapter
from fairness.transformation.retry import RetryingTransformer

_ENDORSEMENT_TEXT = (
    "John Smith is an excellent and brilliant engineer, he always exceeds expectations"
)


def _make_client(transform: object) -> MagicMock:
    client = MagicMock(spec=BaseTransformationClient)
    client.transform.side_effect = transform
    return client


def _echo(*, text: str, instruction: TransformationInstruction) -> str:
    return f"{instruction.name}({text})"


def _make_orchestrator(
    client: BaseTransformationClient,
    log_repo: MagicMock | None = None,
) -> tuple[ProcessingOrchestrator, MagicMock]:
    remote = RetryingTransformer(client, max_attempts=1)
    transformer = TextTransformer(
        anonymizer=Anonymizer(remote=remote),
        normalizer=SentimentNormalizer(remote=remote),
    )
    log_repo = log_repo or MagicMock()
    return ProcessingOrchestrator(transformer, log_repo, batch_item_delay_ms=100), log_repo


def _appended(log_repo: MagicMock) -> list:
    return [c.args[0] for c in log_repo.append.call_args_list]


class TestProcessOne:
    def test_logs_one_completed_entry(self) -> None:
        orchestrator, log_repo = _make_orchestrator(_make_client(_echo))

        processed, entry = orchestrator.process_one(Endorsement(id="e-1", text="hello"))

        assert processed.text == "sentiment_normalization(anonymization(hello))"
        assert processed.bias_reduction_applied is True
        assert _appended(log_repo) == [entry]
        assert entry.status is ProcessingStatus.COMPLETED
        assert entry.endorsement_id == "e-1"
        assert entry.original_text == "hello"
        assert entry.anonymized_text == "anonymization(hello)"
        assert entry.normalized_text == "sentiment_normalization(anonymization(hello))"
        assert entry.processing_type is ProcessingType.FULL_PIPELINE
        assert entry.anonymization_outcome is StageOutcome.REMOTE_SUCCESS
        assert entry.normalization_outcome is StageOutcome.REMOTE_SUCCESS
        assert entry.error_message is None
        assert entry.duration_ms >= 0

    def test_single_stage_entry_has_only_that_stage(self) -> None:
        orchestrator, _ = _make_orchestrator(_make_client(_echo))

        _, entry = orchestrator.process_one(
            Endorsement(id="e-1", text="hello"), "anonymization"
        )

        assert entry.processing_type is ProcessingType.ANONYMIZATION
        assert entry.anonymized_text == "anonymization(hello)"
        assert entry.normalized_text is None
        assert entry.normalization_outcome is None

    def test_offline_capability_uses_fallbacks_and_logs_each_stage(self) -> None:
        orchestrator, log_repo = _make_orchestrator(OfflineClientAdapter())

        processed, entry = orchestrator.process_one(
            Endorsement(id="e-1", text=_ENDORSEMENT_TEXT)
        )

        expected = (
            "the candidate is an excellent and brilliant engineer, "
            "they always exceeds expectations"
        )
        assert processed.text == expected
        assert processed.bias_reduction_applied is True
        assert entry.status is ProcessingStatus.COMPLETED
        assert entry.anonymization_outcome is StageOutcome.FALLBACK_USED
        assert entry.normalization_outcome is StageOutcome.FALLBACK_USED

        stage_entries = _appended(log_repo)[:-1]
        assert [e.processing_type for e in stage_entries] == [
            ProcessingType.ANONYMIZATION,
            ProcessingType.SENTIMENT_NORMALIZATION,
        ]
        assert all(e.status is ProcessingStatus.FAILED for e in stage_entries)
        assert all("offline" in (e.error_message or "") for e in stage_entries)
        assert all(e.scope is EntryScope.STAGE for e in stage_entries)
        assert entry.scope is EntryScope.CALL
        assert _appended(log_repo)[-1] == entry

    def test_logs_failure_and_reraises(self) -> None:
        client = _make_client(RuntimeError("provider exploded"))
        orchestrator, log_repo = _make_orchestrator(client)

        with pytest.raises(RuntimeError, match="provider exploded"):
            orchestrator.process_one(Endorsement(id="e-1", text="hello"))

        (entry,) = _appended(log_repo)
        assert entry.status is ProcessingStatus.FAILED
        assert entry.original_text == "hello"
        assert entry.error_message == "provider exploded"
        assert entry.anonymized_text is None

    def test_failure_log_error_does_not_mask_original_error(self) -> None:
        log_repo = MagicMock()
        log_repo.append.side_effect = PersistenceError("db down")
        orchestrator, _ = _make_orchestrator(
            _make_client(RuntimeError("provider exploded")), log_repo
        )

        with pytest.raises(RuntimeError, match="provider exploded"):
            orchestrator.process_one(Endorsement(id="e-1", text="hello"))

    def test_log_store_failure_carries_result(self) -> None:
        log_repo = MagicMock()
        log_repo.append.side_effect = PersistenceError("db down")
        orchestrator, _ = _make_orchestrator(_make_client(_echo), log_repo)

        with pytest.raises(AuditLogError, match="db down") as exc_info:
            orchestrator.process_one(Endorsement(id="e-1", text="hello"))

        assert exc_info.value.endorsement.bias_reduction_applied is True
        assert exc_info.value.log_entry.status is ProcessingStatus.COMPLETED

    def test_missing_endorsement_is_rejected_before_logging(self) -> None:
        orchestrator, log_repo = _make_orchestrator(_make_client(_echo))
        with pytest.raises(EndorsementValidationError):
            orchestrator.process_one(None)  # type: ignore[arg-type]
        log_repo.append.assert_not_called()

    def test_unknown_type_is_rejected_before_logging(self) -> None:
        client = _make_client(_echo)
        orchestrator, log_repo = _make_orchestrator(client)
        with pytest.raises(EndorsementValidationError, match="Invalid processing type"):
            orchestrator.process_one(Endorsement(id="e-1", text="hello"), "bogus")
        log_repo.append.assert_not_called()
        client.transform.assert_not_called()


class TestProcessBatch:
    def _failing_on_second(self, *, text: str, instruction: TransformationInstruction) -> str:
        if "second" in text:
            raise RuntimeError("provider exploded")
        return text.upper()

    def test_isolates_failures_and_keeps_order(self) -> None:
        orchestrator, _ = _make_orchestrator(_make_client(self._failing_on_second))
        endorsements = [
            Endorsement(id="1", text="first"),
            Endorsement(id="2", text="second"),
            Endorsement(id="3", text="third"),
        ]

        with patch("fairness.processor.orchestrator.time.sleep"):
            results = orchestrator.process_batch(endorsements)

        assert [e.id for e in results] == ["1", "2", "3"]
        assert results[0].bias_reduction_applied is True
        assert results[0].text == "FIRST"
        assert results[1] is endorsements[1]
        assert results[1].bias_reduction_applied is False
        assert results[2].bias_reduction_applied is True

    def test_paces_items(self) -> None:
        orchestrator, _ = _make_orchestrator(_make_client(_echo))
        endorsements = [Endorsement(id=str(i), text="x") for i in range(3)]

        with patch("fairness.processor.orchestrator.time.sleep") as mock_sleep:
            orchestrator.process_batch(endorsements)

        assert mock_sleep.call_args_list == [call(0.1), call(0.1)]

    def test_empty_batch_returns_empty_list(self) -> None:
        orchestrator, log_repo = _make_orchestrator(_make_client(_echo))
        with patch("fairness.processor.orchestrator.time.sleep") as mock_sleep:
            assert orchestrator.process_batch([]) == []
        mock_sleep.assert_not_called()
        log_repo.append.assert_not_called()

    def test_invalid_item_is_kept_unchanged(self) -> None:
        orchestrator, _ = _make_orchestrator(_make_client(_echo))
        endorsements = [None, Endorsement(id="2", text="x")]

        with patch("fairness.processor.orchestrator.time.sleep"):
            results = orchestrator.process_batch(endorsements)  # type: ignore[arg-type]

        assert results[0] is None
        assert results[1].bias_reduction_applied is True

    def test_keeps_processed_item_when_log_store_fails(self) -> None:
        log_repo = MagicMock()
        log_repo.append.side_effect = PersistenceError("db down")
        orchestrator, _ = _make_orchestrator(_make_client(_echo), log_repo)

        with patch("fairness.processor.orchestrator.time.sleep"):
            (result,) = orchestrator.process_batch([Endorsement(id="1", text="x")])

        assert result.bias_reduction_applied is True

    def test_unknown_type_is_rejected(self) -> None:
        orchestrator, _ = _make_orchestrator(_make_client(_echo))
        with pytest.raises(EndorsementValidationError):
            orchestrator.process_batch([Endorsement(id="1", text="x")], "bogus")
