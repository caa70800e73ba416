# placement/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from placement.domain.exceptions import ConfigurationError


class PlacementSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PLACEMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Balancing ---
    max_migrations: int = Field(10000, ge=0)
    min_pass_interval_ms: int = Field(60000, ge=0)
    repoll_ms: int = Field(5000, ge=0)

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def load_settings(**overrides) -> PlacementSettings:
    """Build settings from env/.env plus overrides. Invalid values raise ConfigurationError."""
    try:
        return PlacementSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"invalid placement settings: {e}") from e


@lru_cache
def get_settings() -> PlacementSettings:
    return load_settings()
