from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./gamepass.db"
    database_echo: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Internal API security (observability snapshots)
    internal_api_key: str = ""

    # Game Pass season
    gamepass_timezone: str = "UTC"
    gamepass_season_length_days: int = 30
    gamepass_zen_cost_per_day: int = 100_000
    gamepass_catalog_version: int = 1
    gamepass_claim_max_attempts: int = 2

    @field_validator("gamepass_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"Unknown timezone: {value}") from error
        return value

    @field_validator("gamepass_zen_cost_per_day")
    @classmethod
    def _validate_zen_cost(cls, value: int) -> int:
        if value < 0:
            raise ValueError("gamepass_zen_cost_per_day must be non-negative")
        return value

    @field_validator("gamepass_claim_max_attempts")
    @classmethod
    def _validate_attempts(cls, value: int) -> int:
        return max(1, value)

    # Character delivery (in-game mail bridge)
    character_delivery_base_url: str | None = None
    character_delivery_api_key: str | None = None
    character_delivery_timeout_seconds: float = 10.0
    character_delivery_sender_id: int = 0


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
