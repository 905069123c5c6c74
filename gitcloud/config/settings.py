"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Credentials are optional at load time on purpose: the upload route reports
missing credentials as a JSON error instead of the process refusing to start.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.storage.uploader import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_RAW_CONTENT_BASE_URL,
    DEFAULT_REPO_PREFIX,
    UploadConfig,
)
from ..infrastructure.github.client import DEFAULT_API_URL, GitHubConfig

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "gitcloud"
    api_version: str = "v1"

    # GitHub Configuration
    github_token: str = Field(
        default="",
        description="GitHub access token. Needs repo scope to create private repositories."
    )
    github_user: str = Field(
        default="",
        description="Account that owns the storage repositories."
    )
    github_api_url: str = Field(
        default=DEFAULT_API_URL,
        description="GitHub REST API base URL. Override for GitHub Enterprise."
    )
    github_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-call timeout for GitHub requests. There are no retries."
    )
    github_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory GitHub instead of the real API. Enables local dev without an account."
    )

    # Storage Behavior
    max_repo_size_bytes: int = Field(
        default=0,
        ge=0,
        description="Rotate to a new repository once the current one reaches this size. 0 means unlimited. A value that is not a whole number is logged and treated as 0."
    )
    repo_prefix: str = Field(
        default=DEFAULT_REPO_PREFIX,
        min_length=1,
        description="Name prefix reserved for storage repositories."
    )
    raw_content_base_url: str = Field(
        default=DEFAULT_RAW_CONTENT_BASE_URL,
        description="Host used to build public file URLs."
    )
    commit_message: str = Field(
        default=DEFAULT_COMMIT_MESSAGE,
        description="Commit message for every uploaded image."
    )
    upload_field_name: str = Field(
        default="photo",
        description="Multipart form field that carries the image."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("max_repo_size_bytes", mode="before")
    @classmethod
    def _parse_size_threshold(cls, value):
        """
        Empty or unparseable MAX_REPO_SIZE_BYTES disables rotation.

        Negative numbers are still rejected by the field constraint.
        """
        if not isinstance(value, str):
            return value
        if not value.strip():
            return 0
        try:
            return int(value.strip())
        except ValueError:
            logger.warning(
                "Invalid MAX_REPO_SIZE_BYTES, rotation disabled",
                extra={"value": value}
            )
            return 0

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def has_github_credentials(self) -> bool:
        return bool(self.github_token and self.github_user)

    def validate_required_fields(self) -> list[str]:
        """
        Return the names of required settings that are missing.

        Both credentials are required in mock mode too, so the upload
        route behaves the same locally as in production.
        """
        missing = []

        if not self.github_token:
            missing.append("GITHUB_TOKEN")
        if not self.github_user:
            missing.append("GITHUB_USER")

        return missing

    def github_config(self) -> GitHubConfig:
        return GitHubConfig(
            token=self.github_token,
            api_url=self.github_api_url,
            timeout_seconds=self.github_timeout_seconds,
        )

    def upload_config(self) -> UploadConfig:
        """Explicit configuration struct handed to the uploader."""
        return UploadConfig(
            owner=self.github_user,
            max_repo_size_bytes=self.max_repo_size_bytes,
            repo_prefix=self.repo_prefix,
            raw_content_base_url=self.raw_content_base_url,
            commit_message=self.commit_message,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
