"""Example transformation client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseTransformationClient and register the provider in
TransformationClientFactory.
"""

from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.models import TransformationInstruction


class ExampleClientAdapter(BaseTransformationClient):
    """Example adapter that echoes the input text.

    No network calls. Useful for local development and tests.
    """

    def transform(self, *, text: str, instruction: TransformationInstruction) -> str:
        _ = instruction
        return text
