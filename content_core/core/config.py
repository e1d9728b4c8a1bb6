"""Application configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "Content Core"
    version: str = "0.1.0"
    api_prefix: str = "/api/v1"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Content Settings
    CONTENT_FETCH_TIMEOUT: float = Field(
        default=30.0, ge=0
    )  # Seconds one fan-out round may take, 0 disables
    CONTENT_REQUIRE_FETCH_BEFORE_RENDER: bool = True
    CONTENT_DEFAULT_ZONE: str = "main"

    # Render Settings
    RENDER_MEDIA_TYPE: str = "text/html; charset=utf-8"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def normalize_log_level(self) -> "Settings":
        """Upper-case the log level name."""
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self

    @property
    def fetch_timeout(self) -> float | None:
        """Fetch round timeout in seconds, or None when disabled."""
        return self.CONTENT_FETCH_TIMEOUT or None


# Create settings instance
settings = Settings()
