"""Configuration settings for Tag Intake."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Dialogue responder (any OpenAI-compatible gateway)
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_api_key: str | None = None  # Unset → dialogue unavailable
    model_chat: str = "gemini-2.5-flash"

    # A turn is aborted (session untouched) if the responder exceeds this
    responder_timeout_seconds: float = Field(default=30.0, gt=0)
    responder_retries: int = Field(default=2, ge=0)

    # ── Platform catalog ─────────────────────────────────────────────────────
    # JSON payload: {"platforms": [{id, name, aliases, active, priority}, ...]}
    platforms_config_path: Path = Path("config/platforms.json")

    # ── Fuzzy resolution thresholds ──────────────────────────────────────────
    # resolve() accepts the best fuzzy match only when score > this value
    resolution_accept_threshold: float = Field(default=0.8, ge=0.0, le=1.0)

    # suggest() drops candidates with score <= this value
    suggestion_min_score: float = Field(default=0.3, ge=0.0, le=1.0)
    suggestion_limit: int = Field(default=5, gt=0)

    # Logging
    log_api_calls: bool = False
    log_level: str = "INFO"


settings = Settings()
