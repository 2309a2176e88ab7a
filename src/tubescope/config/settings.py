"""
Application settings and configuration management.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    log_level: str = Field(default="WARNING")

    # Upstream
    base_url: str = Field(default="https://www.youtube.com")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        )
    )
    accept_language: str = Field(default="en-US,en;q=0.9")

    # Client context sent to the internal endpoint
    hl: str = Field(default="en")
    gl: str = Field(default="US")
    client_name: str = Field(default="WEB")
    client_version: str = Field(default="2.20240101.00.00")

    # Requests
    request_timeout: float = Field(default=30.0, gt=0)

    # Result limits
    default_max_results: int = Field(default=10, ge=1)
    max_results_ceiling: int = Field(default=50, ge=1)
    default_max_comments: int = Field(default=20, ge=1)
    max_comments_ceiling: int = Field(default=100, ge=1)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store the base URL without a trailing slash."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def innertube_context(self) -> dict[str, dict[str, str]]:
        """Client context envelope required by the internal endpoint."""
        return {
            "client": {
                "hl": self.hl,
                "gl": self.gl,
                "clientName": self.client_name,
                "clientVersion": self.client_version,
                "platform": "DESKTOP",
            }
        }

    model_config = SettingsConfigDict(
        env_prefix="TUBESCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
