"""
Configuration Management for Klarity

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Thresholds used by the metrics engine, the storage keys and the
backup format version all live in one place, so a reader can see every
tunable number without digging through the calculations.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KLARITY_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(memory|file)$",
        description="Key-value backend: 'memory' or 'file'"
    )
    data_dir: Path = Field(
        default=Path.home() / ".klarity",
        description="Directory holding one JSON file per key (file backend)"
    )

    # Keys within the store
    transactions_key: str = Field(
        default="klarity_transactions",
        description="Key of the transaction list"
    )
    targets_key: str = Field(
        default="klarity_targets",
        description="Key of the savings target list"
    )
    settings_key: str = Field(
        default="klarity_settings",
        description="Key of the user settings record"
    )

    # Quota for the in-memory backend (0 = unlimited)
    memory_quota_bytes: int = Field(
        default=0,
        ge=0,
        description="Maximum total bytes the memory backend may hold"
    )


class MetricsSettings(BaseSettings):
    """Thresholds and windows used by the metrics engine."""

    model_config = SettingsConfigDict(
        env_prefix="KLARITY_METRICS_",
        extra="ignore"
    )

    crisis_threshold: int = Field(
        default=20000,
        ge=0,
        description="Safe daily spend below this switches the dashboard to crisis mode"
    )
    low_safe_daily_threshold: int = Field(
        default=50000,
        ge=0,
        description="Safe daily spend below this is shown as a warning"
    )
    burn_rate_window_days: int = Field(
        default=30,
        ge=1,
        description="Trailing window used for the burn rate"
    )
    damage_projection_months: int = Field(
        default=12,
        ge=1,
        description="Multiplier applied to this month's impulse spending"
    )
    amber_progress_percent: float = Field(
        default=75.0,
        ge=0.0,
        le=100.0,
        description="Budget progress at which the bar turns amber"
    )
    rose_progress_percent: float = Field(
        default=90.0,
        ge=0.0,
        le=100.0,
        description="Budget progress above which the bar turns rose"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KLARITY_",
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
    log_level: str = Field(
        default="INFO",
        description="Level for the stdlib root logger behind structlog"
    )

    # Behaviour
    backup_version: str = Field(
        default="1.1",
        description="Version tag written into exported backups"
    )
    delayed_entry_hours: int = Field(
        default=24,
        ge=1,
        description="A transaction dated further back than this is a delayed entry"
    )
    friction_delay_seconds: int = Field(
        default=10,
        ge=0,
        le=300,
        description="Countdown shown before an impulse purchase may be recorded"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept level names the stdlib logging module knows."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def metrics(self) -> MetricsSettings:
        return MetricsSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "metrics", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
