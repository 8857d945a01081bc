from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.exceptions import TransformationFatalError
from fairness.transformation.models import TransformationInstruction


class OfflineClientAdapter(BaseTransformationClient):
    """Adapter for running without a provider: every call is refused.

    Forces each stage onto its local fallback.
    """

    def transform(self, *, text: str, instruction: TransformationInstruction) -> str:
        _ = text
        raise TransformationFatalError(
            f"Transformation provider is offline ({instruction.name})"
        )
