from dataclasses import replace
from datetime import datetime, timezone

from fairness.anonymization.anonymizer import Anonymizer
from fairness.anonymization.base import BaseAnonymizer
from fairness.config.settings import Settings
from fairness.normalization.base import BaseNormalizer
from fairness.normalization.normalizer import SentimentNormalizer
from fairness.processor.exceptions import EndorsementValidationError
from fairness.processor.models import Endorsement, PipelineResult, ProcessingType
from fairness.processor.pipeline import PipelineContext, PipelineState, PipelineStep
from fairness.processor.steps import AnonymizeStep, NormalizeSentimentStep
from fairness.transformation.factory import TransformationClientFactory
from fairness.transformation.models import StageResult


class TextTransformer:
    """Runs the bias reduction stages over endorsement text.

    Pipeline: anonymize -> normalize sentiment. Normalization always
    consumes the anonymized text. Transformation failures are absorbed by
    each stage's fallback; only contract errors raise.
    """

    def __init__(self, anonymizer: BaseAnonymizer, normalizer: BaseNormalizer) -> None:
        self._anonymizer = anonymizer
        self._normalizer = normalizer
        anonymize = AnonymizeStep(anonymizer)
        normalize = NormalizeSentimentStep(normalizer)
        self._steps: dict[ProcessingType, list[PipelineStep]] = {
            ProcessingType.ANONYMIZATION: [anonymize],
            ProcessingType.SENTIMENT_NORMALIZATION: [normalize],
            ProcessingType.FULL_PIPELINE: [anonymize, normalize],
        }

    def anonymize(self, text: str) -> StageResult:
        return self._anonymizer.anonymize(text)

    def normalize_sentiment(self, text: str) -> StageResult:
        return self._normalizer.normalize(text)

    def process_endorsement(self, endorsement: Endorsement) -> PipelineResult:
        """Run the full pipeline and mark the record as bias-reduced."""
        return self.run(endorsement, ProcessingType.FULL_PIPELINE)

    def run(
        self,
        endorsement: Endorsement,
        processing_type: ProcessingType | str = ProcessingType.FULL_PIPELINE,
    ) -> PipelineResult:
        if endorsement is None:
            raise EndorsementValidationError("Endorsement is required")
        processing_type = ProcessingType.parse(processing_type)

        context = PipelineContext(endorsement=endorsement, text=endorsement.text)
        for step in self._steps[processing_type]:
            context = step.run(context)
            if context.state is PipelineState.FAILED:
                break
        else:
            context.state = PipelineState.COMPLETED

        processed = replace(
            endorsement,
            text=context.text,
            bias_reduction_applied=True,
            bias_reduction_timestamp=datetime.now(timezone.utc),
        )
        return PipelineResult(
            endorsement=processed,
            processing_type=processing_type,
            anonymization=context.anonymization,
            normalization=context.normalization,
        )


def build_text_transformer(settings: Settings) -> TextTransformer:
    """Build a TextTransformer sharing one retrying client across both stages."""
    remote = TransformationClientFactory.create_retrying(settings)
    return TextTransformer(
        anonymizer=Anonymizer(remote=remote),
        normalizer=SentimentNormalizer(remote=remote),
    )
