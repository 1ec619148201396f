"""
Configuration Management for the Expense Splitter

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every section has defaults, so the splitter runs with no .env at all;
environment variables only override where data lives and how links look.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITTER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".expense-splitter",
        description="Directory holding one JSON file per storage key"
    )
    friends_key: str = Field(
        default="expense-splitter-friends",
        min_length=1,
        description="Storage key for the participant roster"
    )
    expenses_key: str = Field(
        default="expense-splitter-expenses",
        min_length=1,
        description="Storage key for the expense list"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per file write before giving up"
    )

    @field_validator('friends_key', 'expenses_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so no path separators."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"Storage key cannot contain path separators: {v!r}")
        return v


class SharingSettings(BaseSettings):
    """Share-link and clipboard configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITTER_SHARING_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8501/",
        description="Public URL of the app; share tokens are appended to it"
    )
    token_param: str = Field(
        default="token",
        min_length=1,
        description="Query parameter carrying the share token"
    )
    clipboard_command: Optional[str] = Field(
        default=None,
        description="Command that reads text on stdin into the clipboard "
                    "(e.g. 'pbcopy', 'xclip -selection clipboard', 'wl-copy')"
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

    default_currency: str = Field(
        default="USD",
        max_length=10,
        description="Currency tag used when none is given"
    )
    unknown_participant_name: str = Field(
        default="Unknown",
        description="Display name for ids that are not on the roster"
    )

    # Settlement pairs whose net debt does not exceed this are dropped
    settlement_epsilon: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Noise threshold for pairwise net debts"
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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def sharing(self) -> SharingSettings:
        return SharingSettings()

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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "sharing", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
