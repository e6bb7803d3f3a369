"""Service configuration settings."""

from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "mq-case-service"
    environment: str = "development"
    port: int = 8003

    # Database configuration
    database_url: str = "sqlite+aiosqlite:///./mq_cases.db"

    # Repository backend: "inmemory" or "sql"
    storage_type: str = "inmemory"

    # Case listing is capped, there is no pagination cursor
    case_list_limit: int = 100

    # Queue numbers restart every calendar day in this timezone
    queue_timezone: str = "UTC"

    # CORS configuration
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("queue_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown queue timezone '{value}'") from e
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def uses_sql_storage(self) -> bool:
        return self.storage_type.lower() == "sql"


# Global settings instance
settings = Settings()
