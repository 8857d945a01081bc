"""AI-powered sentiment normalizer."""

from fairness.logging.logger import Log
from fairness.normalization.base import BaseNormalizer
from fairness.transformation.exceptions import TransformationError
from fairness.transformation.instructions import sentiment_instruction
from fairness.transformation.models import StageOutcome, StageResult, TransformationInstruction
from fairness.transformation.retry import RetryingTransformer


class SentimentNormalizer(BaseNormalizer):
    """Normalizes endorsement tone using the transformation capability.

    There is no local rewrite: when the capability fails the input is
    returned unchanged and tagged as a fallback.
    """

    def __init__(
        self,
        *,
        remote: RetryingTransformer,
        instruction: TransformationInstruction | None = None,
    ) -> None:
        self._remote = remote
        self._instruction = (
            instruction if instruction is not None else sentiment_instruction()
        )

    def normalize(self, text: str) -> StageResult:
        if not text or not text.strip():
            return StageResult(text=text, outcome=StageOutcome.SKIPPED)

        try:
            normalized = self._remote.transform(text, self._instruction)
        except TransformationError as exc:
            Log.warning("Remote sentiment normalization failed, keeping text", error=exc)
            return StageResult(
                text=text,
                outcome=StageOutcome.FALLBACK_USED,
                error_message=str(exc),
            )

        Log.info("Sentiment normalized", chars_in=len(text), chars_out=len(normalized))
        return StageResult(text=normalized, outcome=StageOutcome.REMOTE_SUCCESS)
