from typing import ClassVar

from fairness.config.settings import Settings
from fairness.transformation.client_base import BaseTransformationClient
from fairness.transformation.example_client_adapter import ExampleClientAdapter
from fairness.transformation.offline_client_adapter import OfflineClientAdapter
from fairness.transformation.openai_client_adapter import OpenAIClientAdapter
from fairness.transformation.retry import RetryingTransformer


class TransformationClientFactory:
    """Creates the configured transformation client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    LOCAL_PROVIDERS: ClassVar[dict[str, type[BaseTransformationClient]]] = {
        "example": ExampleClientAdapter,
        "offline": OfflineClientAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseTransformationClient:
        """Create a transformation client from application settings."""
        provider = settings.transformation_provider.lower()
        local_cls = cls.LOCAL_PROVIDERS.get(provider)
        if local_cls is not None:
            return local_cls()
        return OpenAIClientAdapter(
            api_key=settings.transformation_api_key,
            model=settings.transformation_model_name,
            timeout_seconds=settings.transformation_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_retrying(cls, settings: Settings) -> RetryingTransformer:
        """Create the configured client wrapped in the transient-error retry policy."""
        return RetryingTransformer(
            cls.create(settings),
            max_attempts=settings.transformation_max_attempts,
            backoff_seconds=settings.transformation_retry_backoff_seconds,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        configured = (settings.transformation_base_url or "").strip()
        if provider == "openai":
            return configured or None
        if provider == "openai_compatible":
            if not configured:
                raise ValueError(
                    "transformation_base_url is required for "
                    "transformation_provider=openai_compatible"
                )
            return configured
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return configured or default_base_url
        supported = [
            *sorted(cls.LOCAL_PROVIDERS),
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown transformation provider '{provider}'. Choose from: {supported}"
        )
