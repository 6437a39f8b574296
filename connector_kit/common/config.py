"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic BaseSettings to automatically read from .env files or system environment.
    All fields are case-insensitive when reading from env (e.g., DEBUG overrides debug).
    """

    # Application Metadata
    app_name: str = "Connector Kit"
    app_version: str = "0.1.0"
    debug: bool = False  # Enable verbose logging if True
    log_json: bool = Field(default=False, description="Render log lines as JSON instead of console output")

    # Connectivity testing
    test_wait_timeout_seconds: float = Field(
        default=30.0,
        description="How long a connectivity test waits for the first inbound message"
    )
    test_event_buffer: int = Field(
        default=16,
        description="Maximum number of undelivered test events before the producer waits"
    )

    # Registry
    connector_modules: List[str] = Field(
        default=[
            "connectors.websocket_connector",
            "connectors.blackhole_connector",
        ],
        description="Modules scanned for connector implementations at startup"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
