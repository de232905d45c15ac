"""
Configuration Management for BudgetBuddy

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, alert behaviour and validation strictness are all
read from the environment (or a .env file) and validated at startup.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AlertPolicy(str, Enum):
    """
    How over-budget alerts are maintained after expense mutations.

    ACCUMULATE: alerts are only ever appended, on add, and never retracted.
    RECOMPUTE: the alert set is rebuilt from the categories currently
    over budget after every expense mutation and budget change.
    """
    ACCUMULATE = "accumulate"
    RECOMPUTE = "recompute"


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGETBUDDY_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".budgetbuddy",
        description="Directory holding the persisted user data document"
    )
    storage_key: str = Field(
        default="budgetTrackerData",
        min_length=1,
        description="Logical key of the persisted document (file stem)"
    )
    atomic_writes: bool = Field(
        default=True,
        description="Write to a temp file and rename over the previous snapshot"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failing write is attempted"
    )

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """The key becomes a file name, so it cannot contain path separators."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key cannot contain path separators: {v}")
        return v


class BudgetSettings(BaseSettings):
    """Budget behaviour and defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGETBUDDY_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="₹",
        description="Symbol used in alert and toast messages"
    )
    savings_goal: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Savings goal set on a fresh session"
    )
    current_savings: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Savings already put aside on a fresh session"
    )
    alert_policy: AlertPolicy = Field(
        default=AlertPolicy.ACCUMULATE,
        description="How over-budget alerts are maintained"
    )
    strict_validation: bool = Field(
        default=False,
        description="Reject non-positive amounts and unknown categories in the store"
    )
    recommended_budget_ratio: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Share of income suggested as the monthly budget"
    )
    min_password_length: int = Field(
        default=6,
        ge=1,
        description="Minimum password length accepted by the login form check"
    )
    recent_expense_count: int = Field(
        default=5,
        ge=1,
        description="How many expenses the dashboard lists"
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
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
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
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "budget", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
