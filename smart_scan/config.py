from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys (empty string means the credential is absent)
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Vision extraction
    vision_provider: str = "openai"
    openai_vision_model: str = "gpt-4o"
    anthropic_vision_model: str = "claude-sonnet-4-20250514"
    vision_max_tokens: int = 1000
    vision_temperature: float = 0.3

    # Heuristic extraction
    default_currency: str = "USD"

    # HTTP smart backend
    scan_api_url: str = "http://localhost:8000"
    scan_api_timeout: float = 60.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
