"""Application configuration management."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AGENT_BIO = (
    "A sharp-tongued Solana degen who reads on-chain data for breakfast, "
    "follows smart money and never forgets that every token can rug."
)


class Settings(BaseSettings):
    """Runtime configuration loaded from environment or `.env`."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    topwallets_api_key: str = Field(..., alias="TOPWALLETS_API_KEY")
    topwallets_api_url: AnyHttpUrl = Field(
        default="https://www.topwallets.ai",
        alias="TOPWALLETS_API_URL",
    )
    birdeye_api_key: str = Field(..., alias="BIRDEYE_API_KEY")
    birdeye_api_url: AnyHttpUrl = Field(
        default="https://public-api.birdeye.so",
        alias="BIRDEYE_API_URL",
    )
    dexscreener_api_url: AnyHttpUrl = Field(
        default="https://api.dexscreener.com",
        alias="DEXSCREENER_API_URL",
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        alias="HTTP_TIMEOUT_SECONDS",
        ge=1.0,
        le=120.0,
    )

    gemini_api_key: str = Field(..., alias="GEMINI_API_KEY")
    gemini_model: str = Field(
        default="gemini-1.5-pro-latest",
        alias="GEMINI_MODEL",
    )
    gemini_small_model: str = Field(
        default="gemini-1.5-flash-latest",
        alias="GEMINI_SMALL_MODEL",
    )
    enable_ai_commentary: bool = Field(default=True, alias="ENABLE_AI_COMMENTARY")
    commentary_prompt_file: Optional[Path] = Field(
        default=None,
        alias="COMMENTARY_PROMPT_FILE",
    )
    agent_name: str = Field(default="TopWallets", alias="AGENT_NAME")
    agent_bio: str = Field(default=DEFAULT_AGENT_BIO, alias="AGENT_BIO")

    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: Optional[int] = Field(default=None, alias="TELEGRAM_CHAT_ID")
    rate_limit_per_user_per_min: int = Field(
        default=10,
        alias="RATE_LIMIT_PER_USER_PER_MIN",
        ge=1,
        le=60,
    )
    history_size: int = Field(default=5, alias="HISTORY_SIZE", ge=1, le=50)

    cache_max_entries: int = Field(
        default=256,
        alias="CACHE_MAX_ENTRIES",
        ge=1,
        le=100_000,
    )
    cache_sweep_seconds: int = Field(
        default=60,
        alias="CACHE_SWEEP_SECONDS",
        ge=5,
        le=3600,
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, alias="LOG_FILE")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value in (None, ""):
            return "INFO"
        return str(value).strip().upper()

    @field_validator("telegram_bot_token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return cached Settings instance, raising a helpful message on failure."""
    try:
        return Settings()
    except (
        ValidationError
    ) as exc:  # pragma: no cover - configuration failure visible on boot
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


__all__ = ["Settings", "load_settings"]
