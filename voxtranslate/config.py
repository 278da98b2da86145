"""
voxtranslate/config.py
=======================
Service Configuration — voxtranslate

Responsibility:
    - Read all tunables and provider API keys from the environment (.env supported)
    - Validate them once, at load time
    - Expose a frozen Settings object shared by the orchestrator, the
      provider factory and the HTTP layer

Size bounds and thresholds are policy constants; tune them per deployment.
"""

import logging
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from voxtranslate.stt.languages import DEFAULT_PRIMARY_CODES, DEFAULT_SECONDARY_CODES

logger = logging.getLogger("voxtranslate.config")

# Comma-separated in the environment, e.g. PRIMARY_LANGUAGES="en-US, hi-IN"
LanguageCodes = Annotated[tuple[str, ...], NoDecode]


class Settings(BaseSettings):
    """All runtime tunables of the service, loaded from environment variables."""

    # Providers
    stt_provider: Literal["deepgram", "whisper"] = "deepgram"
    translator_provider: Literal["openai", "sarvam"] = "openai"
    deepgram_fast_model: str = "nova-2"
    deepgram_enhanced_model: str = "nova-3"
    whisper_model: str = "whisper-1"
    openai_translation_model: str = "gpt-4o-mini"

    # Provider credentials
    deepgram_api_key: str = Field(default="", repr=False)
    openai_api_key: str = Field(default="", repr=False)
    sarvam_api_key: str = Field(default="", repr=False)

    # Audio bounds
    min_audio_bytes: int = Field(default=1000, ge=0)
    max_audio_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    max_audio_seconds: float = Field(default=60.0, gt=0)
    probe_audio_duration: bool = True

    # Detection policy
    confidence_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    min_quality_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    quality_length_saturation: int = Field(default=10, ge=1)
    secondary_max_kept: int = Field(default=3, ge=1)
    early_stop_metric: Literal["quality", "confidence"] = "quality"
    probe_window: int = Field(default=1, ge=1)
    primary_languages: LanguageCodes = Field(default=DEFAULT_PRIMARY_CODES, min_length=1)
    secondary_languages: LanguageCodes = DEFAULT_SECONDARY_CODES

    # External call limits
    probe_timeout_seconds: float = Field(default=15.0, gt=0)
    translate_timeout_seconds: float = Field(default=15.0, gt=0)
    translate_max_retries: int = Field(default=2, ge=0)

    # Result forwarding
    result_webhook_url: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("stt_provider", "translator_provider", "early_stop_metric", mode="before")
    @classmethod
    def _lowercase(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("primary_languages", "secondary_languages", mode="before")
    @classmethod
    def _split_codes(cls, value):
        if isinstance(value, str):
            return tuple(code.strip() for code in value.split(",") if code.strip())
        return value

    @field_validator("result_webhook_url", mode="before")
    @classmethod
    def _blank_url_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_size_bounds(self) -> "Settings":
        if self.min_audio_bytes > self.max_audio_bytes:
            raise ValueError("MIN_AUDIO_BYTES must not exceed MAX_AUDIO_BYTES.")
        return self


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_settings() -> Settings:
    """
    Build Settings from environment variables and .env.

    Raises:
        pydantic.ValidationError (a ValueError): If any value is malformed
            or out of range.
    """
    settings = Settings()
    logger.debug(
        "Settings loaded: stt=%s translator=%s early_stop=%s window=%d",
        settings.stt_provider,
        settings.translator_provider,
        settings.early_stop_metric,
        settings.probe_window,
    )
    return settings
