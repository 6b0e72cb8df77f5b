"""
Application Settings
===================

Service settings read from the environment (and an optional .env file)
using Pydantic Settings. Variable names match the field names, e.g.
ALLOWED_DOMAINS, BROWSER_ARGS, IGNORE_HTTPS_ERRORS, ENABLE_UI, PORT.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Renderer service settings."""

    # Application Configuration
    app_name: str = Field(default="Page Renderer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    # Browser Configuration
    browser_headless: bool = Field(default=True, description="Run browser in headless mode")
    browser_args: Optional[str] = Field(
        default=None,
        description="Extra browser launch arguments, e.g. '--lang=en --host-rules=MAP a b'",
    )
    ignore_https_errors: bool = Field(
        default=False, description="Ignore HTTPS certificate errors when loading pages"
    )
    max_concurrent_sessions: int = Field(
        default=0, ge=0, description="Maximum concurrently open page sessions (0 = unbounded)"
    )

    # Security Configuration
    allowed_domains: Optional[str] = Field(
        default=None,
        description="Comma-separated hostname globs allowed as render targets (empty = all)",
    )
    cors_allow_origins: str = Field(default="*", description="Comma-separated CORS origins")

    # UI Configuration
    enable_ui: bool = Field(default=False, description="Serve the web interface at /ui")

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    def browser_launch_args(self) -> List[str]:
        """
        Split ``browser_args`` into individual launch arguments.

        ``--`` is the separator so that argument values may contain spaces:
        ``"--host-rules=MAP localhost proxy --test"`` becomes
        ``["--host-rules=MAP localhost proxy", "--test"]``.
        """
        if not self.browser_args:
            return []
        return ["--" + part.strip() for part in self.browser_args.split("--") if part.strip()]

    def cors_origins(self) -> List[str]:
        """Parse CORS origins from the comma-separated setting."""
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Created on first access
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
