"""
Application settings and configuration management.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from tubedex import __version__

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="tubedex")
    app_version: str = Field(default=__version__)
    log_level: str = Field(default="INFO")

    # Storage
    channels_file: Path = Field(default=Path("channels.json"))
    output_file: Path = Field(default=Path("web/data.json"))
    logs_dir: Path = Field(default=Path("./logs"))

    # HTTP identity
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    accept_language: str = Field(default="en-US,en;q=0.9")
    consent_cookie: str = Field(default="CONSENT=YES+1")
    request_timeout: float = Field(default=30.0, gt=0)

    # Retry policy (primary source)
    retry_attempts: int = Field(default=3, ge=1)
    retry_backoff: float = Field(default=0.8, ge=0)

    # Retry policy (fallback sources)
    fallback_retry_attempts: int = Field(default=2, ge=1)
    fallback_retry_backoff: float = Field(default=1.2, ge=0)

    # Pacing between references
    pacing_base_delay: float = Field(default=0.8, ge=0)
    pacing_jitter: float = Field(default=0.4, ge=0)

    # Plausibility thresholds for scraped counts
    max_plausible_videos: int = Field(default=1_000_000, ge=0)
    min_plausible_views: int = Field(default=1_000, ge=0)

    # Source priority, primary first
    source_order: Annotated[list[str], NoDecode] = Field(
        default=["youtube_about", "youtube_channel", "socialblade"]
    )

    @field_validator("source_order", mode="before")
    @classmethod
    def parse_source_order(cls, v: str | list[str]) -> list[str]:
        """Parse source order from comma-separated string or list."""
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("source_order")
    @classmethod
    def validate_source_order(cls, v: list[str]) -> list[str]:
        """Validate that at least one source is configured."""
        if not v:
            raise ValueError("source_order must name at least one source")
        return v

    @field_validator("channels_file", "output_file", "logs_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure file and directory paths are Path objects."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def request_headers(self) -> dict[str, str]:
        """Headers sent with every page request."""
        return {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
            "Accept": "text/html,*/*",
            "Cookie": self.consent_cookie,
        }

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
