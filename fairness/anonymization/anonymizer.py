"""Remote-first anonymizer with a deterministic local fallback."""

from fairness.anonymization.base import BaseAnonymizer
from fairness.anonymization.fallback import PatternAnonymizer
from fairness.logging.logger import Log
from fairness.transformation.exceptions import TransformationError
from fairness.transformation.instructions import anonymization_instruction
from fairness.transformation.models import StageOutcome, StageResult, TransformationInstruction
from fairness.transformation.retry import RetryingTransformer


class Anonymizer(BaseAnonymizer):
    """Asks the transformation capability to anonymize text.

    Falls back to PatternAnonymizer when the capability fails.
    """

    def __init__(
        self,
        *,
        remote: RetryingTransformer,
        fallback: PatternAnonymizer | None = None,
        instruction: TransformationInstruction | None = None,
    ) -> None:
        self._remote = remote
        self._fallback = fallback if fallback is not None else PatternAnonymizer()
        self._instruction = (
            instruction if instruction is not None else anonymization_instruction()
        )

    def anonymize(self, text: str) -> StageResult:
        if not text or not text.strip():
            return StageResult(text=text, outcome=StageOutcome.SKIPPED)

        try:
            anonymized = self._remote.transform(text, self._instruction)
        except TransformationError as exc:
            Log.warning("Remote anonymization failed, using pattern fallback", error=exc)
            return self._run_fallback(text, str(exc))

        Log.info("Text anonymized", chars_in=len(text), chars_out=len(anonymized))
        return StageResult(text=anonymized, outcome=StageOutcome.REMOTE_SUCCESS)

    def _run_fallback(self, text: str, remote_error: str) -> StageResult:
        try:
            anonymized = self._fallback.anonymize(text)
        except Exception as exc:
            Log.error("Pattern anonymization failed", error=exc)
            return StageResult(
                text=text,
                outcome=StageOutcome.FAILED,
                error_message=f"{remote_error}; fallback failed: {exc}",
            )
        return StageResult(
            text=anonymized,
            outcome=StageOutcome.FALLBACK_USED,
            error_message=remote_error,
        )
