import time

from fairness.logging.logger import Log
from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.exceptions import (
    TransformationError,
    TransformationTransientError,
)
from fairness.transformation.models import TransformationInstruction


class RetryingTransformer:
    """Calls a transformation client, retrying transient failures.

    Fatal errors are re-raised on the first occurrence. After
    ``max_attempts`` transient failures the last one is re-raised.
    """

    def __init__(
        self,
        client: BaseTransformationClient,
        *,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._client = client
        self._max_attempts = max_attempts
        self._backoff_seconds = max(0.0, backoff_seconds)

    def transform(self, text: str, instruction: TransformationInstruction) -> str:
        last_error: TransformationError | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._client.transform(text=text, instruction=instruction)
            except TransformationTransientError as exc:
                last_error = exc
                Log.warning(
                    "Transient transformation failure",
                    instruction=instruction.name,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error=exc,
                )
                if attempt < self._max_attempts:
                    time.sleep(self._backoff_seconds * 2 ** (attempt - 1))

        assert last_error is not None
        raise last_error
