from abc import ABC, abstractmethod

from fairness.transformation.models import StageResult


class BaseAnonymizer(ABC):
    """Contract for all anonymization adapters."""

    @abstractmethod
    def anonymize(self, text: str) -> StageResult:
        """Strip identifying and demographic language from endorsement text.

        Args:
            text: Raw endorsement text.

        Returns:
            StageResult with the anonymized text and how it was produced.
            Transformation failures are absorbed, never raised.
        """
