"""Configuration management using pydantic-settings"""

import os
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Bot Configuration (no token means the chat client never starts)
    bot_token: Optional[str] = None

    # Server Configuration
    port: int = 5000
    host: str = "0.0.0.0"

    # Application Configuration
    environment: str = Field(default="production", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="error", description="Log level: debug, info, warning, error (default: error for production)")

    # Storage Configuration
    seed_default_commands: bool = Field(default=True, description="Seed ping/help/uptime/stats commands on startup")

    # Keep-alive Configuration
    keep_alive_enabled: bool = Field(default=True, description="Enable periodic self health check")
    keep_alive_interval_minutes: int = Field(default=10, description="Minutes between keep-alive pings")
    keep_alive_url: Optional[str] = Field(default=None, description="URL pinged by keep-alive (default: local /api/status)")
    keep_alive_timeout: int = Field(default=10, description="Keep-alive request timeout in seconds")

    # Statistics Configuration
    stats_refresh_enabled: bool = Field(default=True, description="Periodically refresh bot statistics from the chat client")
    stats_refresh_interval_minutes: int = Field(default=1, description="Minutes between statistics refreshes")

    # Supervisor Configuration
    supervisor_keep_serving: bool = Field(
        default=True,
        description="Keep reporting healthy after an uncaught fault (false marks the process unhealthy)",
    )

    @model_validator(mode="before")
    @classmethod
    def map_node_env(cls, data: dict) -> dict:
        """Map NODE_ENV to ENVIRONMENT if ENVIRONMENT is not set"""
        if isinstance(data, dict):
            if "NODE_ENV" in data and "ENVIRONMENT" not in data:
                data["ENVIRONMENT"] = data["NODE_ENV"]
        return data

    @field_validator("bot_token", mode="before")
    @classmethod
    def validate_bot_token(cls, v):
        """Convert empty string to None for bot_token"""
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def set_environment_defaults(self) -> "Settings":
        """Set environment-specific defaults for log level"""
        if self.environment == "production" and not os.getenv("LOG_LEVEL"):
            # Default to error in production if not explicitly set
            self.log_level = "error"

        if not self.keep_alive_url:
            self.keep_alive_url = f"http://localhost:{self.port}/api/status"

        return self


# Global settings instance
settings = Settings()
