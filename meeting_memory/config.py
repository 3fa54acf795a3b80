"""
Configuration for the Meeting Memory service.

Settings come from environment variables (optionally a `.env` file) and are
validated by Pydantic. A single global `settings` instance is shared by the
application.
"""

from enum import Enum
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import structlog

load_dotenv()


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application settings with environment-specific defaults.

    Environment variables override defaults (case-insensitive).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )

    # API Configuration
    api_title: str = Field(
        default="Meeting Memory API",
        description="API title for OpenAPI docs",
    )
    api_version: str = Field(default="1.0.0", description="API version")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    reload: bool = Field(
        default=False, description="Enable auto-reload (development only)"
    )

    # Inference Configuration
    openai_api_key: str = Field(
        default="", description="OpenAI API key for all inference calls"
    )
    transcription_model: str = Field(
        default="whisper-1", description="Speech-to-text model"
    )
    transcription_diarize: bool = Field(
        default=False,
        description="Request speaker-labelled segments from the transcription model",
    )
    summary_model: str = Field(
        default="gpt-4o-mini", description="Model for executive summaries"
    )
    extraction_model: str = Field(
        default="gpt-4o-mini", description="Model for action item extraction"
    )
    embedding_model: str = Field(
        default="text-embedding-3-small", description="Model for chunk embeddings"
    )
    image_model: str = Field(
        default="dall-e-3", description="Model for meeting illustrations"
    )
    image_size: str = Field(default="1024x1024", description="Illustration size")
    inference_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per inference call on transient failures",
    )

    # Media + storage
    ffmpeg_path: str = Field(
        default="ffmpeg", description="Path to the ffmpeg binary"
    )
    data_path: str = Field(
        default="data/db.json", description="Persisted meeting collection"
    )
    max_upload_size_mb: int = Field(
        default=200,
        ge=1,
        le=2000,
        description="Maximum upload size in MB",
    )

    # CORS Configuration
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["*"],
        description="Allowed CORS origins (comma-separated)",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(
        default=False, description="Enable JSON logging for production"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def get_environment_display(self) -> str:
        """Get human-readable environment name."""
        return self.environment.value.title()

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    def get_cors_config(self) -> dict[str, Any]:
        """Get CORS configuration."""
        if self.is_production():
            # Restrictive CORS for production
            return {
                "allow_origins": [
                    origin for origin in self.cors_origins if origin != "*"
                ],
                "allow_credentials": True,
                "allow_methods": ["GET", "POST"],
                "allow_headers": ["*"],
            }
        return {
            "allow_origins": self.cors_origins,
            "allow_credentials": True,
            "allow_methods": ["*"],
            "allow_headers": ["*"],
        }


# Global settings instance
settings = Settings()


def configure_structlog() -> None:
    """Initialize structlog with readable console output or JSON lines."""
    import logging
    import sys

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stdout,
        force=True,
        format="%(message)s",
    )

    processors: list[Any] = [
        structlog.processors.TimeStamper(fmt="iso" if settings.log_json else "%H:%M:%S"),
        structlog.stdlib.add_log_level,
    ]
    if settings.log_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
