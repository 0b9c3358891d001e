from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatsearch.exceptions import ConfigError


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "chatsearch"
    env: str = "development"
    debug: bool = False
    port: int = 8000
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"


class DatabaseConfig(BaseModel):
    """Database configuration values."""

    # Local file next to the working directory; PostgreSQL URLs are accepted too
    url: str = "sqlite:///chatsearch.db"
    echo: bool = False


class SearchConfig(BaseModel):
    """Message index and result shaping configuration values."""

    # Keep the message index in RAM unless a directory is given
    index_dir: Optional[Path] = None
    snippet_chars: int = Field(default=200, gt=0)
    # None means no cap per section
    max_results_per_section: Optional[int] = Field(default=None, gt=0)


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="CHATSEARCH_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    database: DatabaseConfig = DatabaseConfig()
    search: SearchConfig = SearchConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigError(f"Invalid chatsearch configuration: {exc}") from exc
