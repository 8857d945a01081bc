from fairness.anonymization.base import BaseAnonymizer
from fairness.logging.logger import Log
from fairness.normalization.base import BaseNormalizer
from fairness.processor.pipeline import PipelineContext, PipelineState, PipelineStep
from fairness.transformation.models import StageOutcome


class AnonymizeStep(PipelineStep):
    def __init__(self, anonymizer: BaseAnonymizer) -> None:
        self._anonymizer = anonymizer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = PipelineState.ANONYMIZING
        result = self._anonymizer.anonymize(context.text)
        context.anonymization = result
        context.text = result.text
        if result.outcome is StageOutcome.FAILED:
            context.state = PipelineState.FAILED
        Log.debug(
            "Anonymization stage finished",
            endorsement_id=context.endorsement.id,
            outcome=result.outcome.value,
        )
        return context


class NormalizeSentimentStep(PipelineStep):
    def __init__(self, normalizer: BaseNormalizer) -> None:
        self._normalizer = normalizer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = PipelineState.NORMALIZING
        result = self._normalizer.normalize(context.text)
        context.normalization = result
        context.text = result.text
        if result.outcome is StageOutcome.FAILED:
            context.state = PipelineState.FAILED
        Log.debug(
            "Sentiment stage finished",
            endorsement_id=context.endorsement.id,
            outcome=result.outcome.value,
        )
        return context
