import httpx
import openai

from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.exceptions import (
    TransformationFatalError,
    TransformationTransientError,
)
from fairness.transformation.models import TransformationInstruction


class OpenAIClientAdapter(BaseTransformationClient):
    """Transformation client adapter built on OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        # Retries are owned by RetryingTransformer, not the SDK.
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def transform(self, *, text: str, instruction: TransformationInstruction) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=instruction.temperature,
                max_tokens=instruction.max_tokens,
                messages=[
                    {"role": "system", "content": instruction.system_prompt},
                    {"role": "user", "content": instruction.render(text)},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise TransformationTransientError(
                f"AI provider network error: {exc}"
            ) from exc
        except (openai.RateLimitError, openai.InternalServerError) as exc:
            raise TransformationTransientError(
                f"AI provider unavailable: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise TransformationFatalError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise TransformationFatalError("AI returned no choices")
        content = response.choices[0].message.content
        cleaned = self._clean(content or "")
        if not cleaned:
            raise TransformationFatalError("AI returned empty response")
        return cleaned

    @staticmethod
    def _clean(raw: str) -> str:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines).strip()
        if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] == '"':
            cleaned = cleaned[1:-1].strip()
        return cleaned
