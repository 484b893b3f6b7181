"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Database (optional - in-memory repository when unset)
    database_url: PostgresDsn | None = Field(
        default=None,
        description="PostgreSQL connection URL",
    )

    # Logging
    taskgraph_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    taskgraph_log_dir: str = Field(
        default="logs",
        description="Directory for rotated log files (empty disables file logging)",
    )
    taskgraph_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Layout spacing
    taskgraph_layout_column_width: int = Field(
        default=250,
        gt=0,
        description="Horizontal distance between two levels",
    )
    taskgraph_layout_row_height: int = Field(
        default=150,
        gt=0,
        description="Vertical distance between two tasks on the same level",
    )
    taskgraph_layout_origin_x: int = Field(
        default=100,
        description="X offset of level 0",
    )
    taskgraph_layout_origin_y: int = Field(
        default=100,
        description="Y offset applied to every node",
    )
    taskgraph_layout_center_y: int = Field(
        default=400,
        description="Vertical line each level is centered around",
    )

    # API server
    taskgraph_api_host: str = Field(
        default="127.0.0.1",
        description="Host the API server binds to",
    )
    taskgraph_api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port the API server listens on",
    )

    @property
    def database_url_async(self) -> str | None:
        """Get async database URL (with asyncpg driver)."""
        if self.database_url is None:
            return None
        url = str(self.database_url)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.taskgraph_layout_column_width
        250
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
