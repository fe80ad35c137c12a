"""Engine configuration."""

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Environment
    environment: str = "development"  # development, production

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # JSON lines for log aggregation

    # Read size when feeding files and streams into a context
    stream_chunk_size: int = 1024

    # Algorithm used by the CLI when none is named
    default_algorithm: str = "sha256"

    model_config = SettingsConfigDict(
        env_prefix="HASHENGINE_",
        env_file=".env",
        case_sensitive=False,
    )

    @field_validator("stream_chunk_size")
    @classmethod
    def _positive_chunk_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("stream_chunk_size must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
