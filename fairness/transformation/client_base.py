from abc import ABC, abstractmethod

from fairness.transformation.models import TransformationInstruction


class BaseTransformationClient(ABC):
    """Contract for provider-specific text transformation clients."""

    @abstractmethod
    def transform(self, *, text: str, instruction: TransformationInstruction) -> str:
        """Return *text* rewritten according to *instruction*.

        Raises:
            TransformationTransientError: on retryable provider failures.
            TransformationFatalError: on any other provider failure.
        """
