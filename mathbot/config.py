"""
Unified Configuration Management for MathBot

Consolidates all configuration into a single source of truth using Pydantic BaseSettings.
All settings can be overridden via environment variables with MATHBOT_ prefix.
The model server settings also honor the plain OLLAMA_URL / OLLAMA_MODEL /
OLLAMA_VISION_MODEL variables common to Ollama setups.

Usage:
    from mathbot.config import get_settings

    settings = get_settings()
    print(settings.ollama_base_url)
    print(settings.ollama_model)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MathBotSettings(BaseSettings):
    """
    Unified configuration for MathBot

    Read once at process start; there is no hot-reload.
    Example: MATHBOT_OLLAMA_MODEL=qwen2.5:14b
    """

    model_config = SettingsConfigDict(
        env_prefix="MATHBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ============================================
    # SYSTEM SETTINGS
    # ============================================

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode (adds exception details to error responses)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # API SERVER SETTINGS
    # ============================================

    api_host: str = Field(
        default="127.0.0.1",
        description="API server host"
    )

    api_port: int = Field(
        default=3000,
        description="API server port"
    )

    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )

    # ============================================
    # OLLAMA SETTINGS
    # ============================================

    ollama_base_url: str = Field(
        default="http://localhost:11434",
        validation_alias=AliasChoices("MATHBOT_OLLAMA_BASE_URL", "OLLAMA_URL"),
        description="Ollama API base URL"
    )

    ollama_model: str = Field(
        default="qwen2.5:7b",
        validation_alias=AliasChoices("MATHBOT_OLLAMA_MODEL", "OLLAMA_MODEL"),
        description="Default text model"
    )

    ollama_vision_model: str = Field(
        default="llava",
        validation_alias=AliasChoices("MATHBOT_OLLAMA_VISION_MODEL", "OLLAMA_VISION_MODEL"),
        description="Model used when the conversation carries an image"
    )

    ollama_connect_timeout: float = Field(
        default=10.0,
        description="Connection timeout for Ollama in seconds (reads are unbounded)"
    )

    health_timeout: float = Field(
        default=2.0,
        description="Timeout for the Ollama health check in seconds"
    )

    # ============================================
    # CLIENT SETTINGS
    # ============================================

    store_path: Path = Field(
        default_factory=lambda: Path.home() / ".mathbot" / "store.json",
        description="JSON file holding client-side conversations, theme and practice stats"
    )

    @field_validator("ollama_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so endpoint paths can be appended directly"""
        return v.rstrip("/")

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache()
def get_settings() -> MathBotSettings:
    """
    Get cached settings instance (singleton pattern)

    Returns:
        MathBotSettings: Application settings
    """
    return MathBotSettings()
