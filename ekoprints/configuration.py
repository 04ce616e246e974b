"""Mini README: Centralised configuration models and helpers for the back office.

Structure:
    * BackOfficeSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``EKOPRINTS_`` environment variables (or a
    local ``.env`` file), pick the business time zone used for "today" and
    deadline input, and tune the countdown cadence. The configuration is
    cached so validation runs only once per process.
"""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, validator
from pydantic_settings import BaseSettings

from .logging_utils import resolve_level


class BackOfficeSettings(BaseSettings):
    """Runtime configuration for the EKO Prints back office."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the web service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the web service exposes.",
        ge=1,
        le=65535,
    )
    timezone: str = Field(
        "Africa/Kampala",
        description="IANA zone used for the local calendar day and naive deadline input.",
    )
    currency_code: str = Field(
        "UGX",
        description="Suffix appended to formatted amounts.",
    )
    export_filename_prefix: str = Field(
        "eko_prints_expenses",
        description="Prefix of downloaded CSV files; the ISO date is appended.",
    )
    countdown_interval_seconds: float = Field(
        60.0,
        description="Cadence at which task countdowns are re-evaluated.",
        gt=0,
    )
    order_option_limit: int = Field(
        10,
        description="How many recent orders are offered when linking a task.",
        ge=0,
    )
    seed_demo_data: bool = Field(
        True,
        description="Populate the in-memory repository with demo records on start.",
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level name applied by the launcher.",
    )

    class Config:
        env_prefix = "EKOPRINTS_"
        env_file = ".env"
        case_sensitive = False

    @validator("timezone")
    def _known_timezone(cls, value: str) -> str:
        """Reject zone names that zoneinfo cannot resolve."""

        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"Unknown time zone: {value}") from error
        return value

    @validator("log_level")
    def _known_log_level(cls, value: str) -> str:
        resolve_level(value)
        return value.upper()

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache()
def get_settings() -> BackOfficeSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return BackOfficeSettings()
