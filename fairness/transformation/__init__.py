from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.factory import TransformationClientFactory
from fairness.transformation.retry import RetryingTransformer

__all__ = ["BaseTransformationClient", "RetryingTransformer", "TransformationClientFactory"]
