from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "endorsements"
    db_username: str = "endorsements"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    transformation_provider: str = "openai"
    transformation_api_key: str = ""
    transformation_model_name: str = "gpt-3.5-turbo"
    transformation_base_url: str | None = None
    transformation_timeout_seconds: int = 30
    transformation_max_attempts: int = 3
    transformation_retry_backoff_seconds: float = 1.0

    batch_item_delay_ms: int = 100

    analytics_default_days: int = 30
    consistency_report_min_reviews: int = 3
