"""
Configuration Management for Net Worth Dashboard

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage slot keys, the chat backend location and the LLM credentials
are all read from the environment (or a .env file) in one place.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persisted slot configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    backend: Literal["memory", "file"] = Field(
        default="memory",
        description="Slot storage backend: tab-lifetime memory or JSON files"
    )
    directory: str = Field(
        default=".networth",
        description="Directory for the file backend"
    )
    quota_bytes: Optional[int] = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Byte quota for the memory backend (None = unlimited)"
    )

    # Slot keys
    accounts_key: str = Field(
        default="financial_accounts",
        min_length=1,
        description="Slot holding the account collection"
    )
    user_details_key: str = Field(
        default="user_details",
        min_length=1,
        description="Slot holding the user profile"
    )
    chat_key: str = Field(
        default="chat_messages",
        min_length=1,
        description="Slot holding the chat transcript"
    )


class ChatBackendSettings(BaseSettings):
    """Chat backend (POST /chat) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHAT_BACKEND_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the chat backend"
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds (None = wait for the backend)"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize so that '/chat' can be appended."""
        return v.rstrip("/")


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Account defaults
    default_currency: str = Field(
        default="USD",
        pattern=r"^[A-Z]{3}$",
        description="Currency applied when a payload omits one"
    )

    # Validation thresholds
    max_reasonable_amount: float = Field(
        default=1_000_000_000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so that a missing Gemini key
    # does not prevent the stores from working.

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def chat_backend(self) -> ChatBackendSettings:
        return ChatBackendSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "chat_backend", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
