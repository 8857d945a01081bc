from abc import ABC, abstractmethod

from fairness.transformation.models import StageResult


class BaseNormalizer(ABC):
    """Contract for all sentiment normalization adapters."""

    @abstractmethod
    def normalize(self, text: str) -> StageResult:
        """Rewrite endorsement text into a constructive, objective register.

        Args:
            text: Anonymized endorsement text from the anonymization step.

        Returns:
            StageResult with the normalized text and how it was produced.
            Transformation failures are absorbed, never raised.
        """
