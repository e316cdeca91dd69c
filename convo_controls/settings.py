import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Development mode flag - enables verbose state output in the demo CLI
    development_mode: bool = Field(default=False, alias="DEVELOPMENT_MODE")
    # Level used when more than one handler guard claims the same turn
    ambiguous_match_log_level: str = Field(default="WARNING", alias="AMBIGUOUS_MATCH_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level", "ambiguous_match_log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate a logging level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(_LOG_LEVELS))}")
        return level

    @property
    def ambiguous_match_level_no(self) -> int:
        """Numeric logging level for ambiguous match diagnostics."""
        return logging.getLevelName(self.ambiguous_match_log_level)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def is_development_mode() -> bool:
    """
    Check whether development-only behaviour is enabled.

    Returns True ONLY if DEVELOPMENT_MODE=true environment variable is set.
    """
    try:
        settings = get_settings()
        return bool(settings.development_mode)
    except ValueError:
        return False
