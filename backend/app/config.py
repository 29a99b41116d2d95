from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 1500
    openai_temperature: float = 0.7
    openai_timeout_seconds: float = 60.0

    # Quota store (Vercel KV / Upstash REST API)
    # Leave both empty to run without quota enforcement
    kv_rest_api_url: str = ""
    kv_rest_api_token: str = ""

    # Alternative quota store: plain Redis (only used when the REST store is not set)
    redis_url: str = ""

    # Quotas
    # One new topic per session token per UTC day
    daily_topic_limit: int = 1
    # Model tokens per (session token, day, topic)
    token_limit_per_topic: int = 8000
    # Counters expire 24h after their last write
    quota_ttl_seconds: int = 86400
    # Charged when the provider does not report usage
    default_token_usage: int = 1200

    # CORS for frontend
    cors_origins: list[str] = ["http://localhost:3000"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def rest_store_configured(self) -> bool:
        return bool(self.kv_rest_api_url and self.kv_rest_api_token)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
