"""Application configuration utilities."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_destinations(raw_value: str | None) -> tuple[str, ...]:
    """Split a comma or whitespace separated list, keeping first-seen order."""

    if not raw_value:
        return ()
    candidates = [segment for segment in raw_value.replace("\n", " ").split() if segment]
    expanded: list[str] = []
    for candidate in candidates:
        for part in candidate.split(","):
            value = part.strip()
            if value and value not in expanded:
                expanded.append(value)
    return tuple(expanded)


class Settings(BaseSettings):
    """Settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./purchase_invoice.db", alias="DATABASE_URL"
    )
    approval_limit: Decimal = Field(default=Decimal("200"), alias="APPROVAL_LIMIT")
    webhook_urls_raw: str = Field(default="", alias="WEBHOOK_URLS")
    webhook_timeout_seconds: float = Field(default=5.0, alias="WEBHOOK_TIMEOUT_SECONDS")
    jwt_secret_key: str = Field(default="change-me", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expiration_minutes: int = Field(default=60, alias="JWT_EXPIRATION_MINUTES")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    redis_enabled_flag: bool = Field(default=False, alias="REDIS_ENABLED")
    product_cache_ttl_seconds: int = Field(
        default=600, alias="PRODUCT_CACHE_TTL_SECONDS"
    )
    celery_broker_url: str | None = Field(
        default=None, alias="CELERY_BROKER_URL"
    )
    celery_result_backend: str | None = Field(
        default=None, alias="CELERY_RESULT_BACKEND"
    )
    celery_task_always_eager: bool = Field(
        default=False, alias="CELERY_TASK_ALWAYS_EAGER"
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def webhook_urls(self) -> tuple[str, ...]:
        """Return the configured webhook destinations in declaration order."""

        return _split_destinations(self.webhook_urls_raw)

    @property
    def broker_url(self) -> str:
        """Return the Celery broker URL, defaulting to Redis."""

        return self.celery_broker_url or self.redis_url

    @property
    def result_backend(self) -> str:
        """Return the Celery result backend, defaulting to the Redis URL."""

        if self.celery_result_backend:
            return self.celery_result_backend
        return self.redis_url

    @property
    def redis_enabled(self) -> bool:
        """Return ``True`` when Redis integrations should be used."""

        return self.redis_enabled_flag


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
