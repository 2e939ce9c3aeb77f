"""
Configuration management for the ClinicDesk application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

from typing import Dict, List, Optional

import json
import os
from pathlib import Path

from pydantic import Field, field_validator, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Key-value store (Redis protocol) configuration settings."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    token: str = Field(default="", description="Access token for hosted Redis (sent as the password)")
    socket_timeout: float = Field(default=5.0, description="Socket timeout in seconds")

    @validator("url")
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v:
            raise ValueError("Redis URL is required. Please set REDIS_URL environment variable.")
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with 'redis://', 'rediss://' or 'unix://'")
        return v

    @validator("socket_timeout")
    def validate_socket_timeout(cls, v: float) -> float:
        """Validate socket timeout."""
        if v <= 0:
            raise ValueError("Socket timeout must be positive")
        return v


DEFAULT_LEGACY_CLINICS: Dict[str, Dict[str, str]] = {
    "clinic1": {"name": "City Health Center", "username": "admin", "password": "admin123"},
    "clinic2": {"name": "Community Medical Clinic", "username": "admin", "password": "admin123"},
    "clinic3": {"name": "Family Care Practice", "username": "admin", "password": "admin123"},
}


class ClinicSettings(BaseSettings):
    """Multi-tenant clinic configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CLINIC_")

    legacy_default_clinic_id: str = Field(
        default="clinic1", description="Clinic that receives pre-multi-tenant data on migration"
    )
    legacy_clinics: Dict[str, Dict[str, str]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_LEGACY_CLINICS.items()},
        description="Fallback clinics used when a clinic id is not a registered one",
    )
    migrate_on_startup: bool = Field(default=True, description="Run the legacy key migration at startup")
    migration_lock_ttl_seconds: int = Field(default=60, description="Expiry of the migration lock key")

    @field_validator("legacy_clinics", mode="before")
    @classmethod
    def parse_legacy_clinics(cls, v):
        """Parse the legacy clinic table from a JSON string or mapping."""
        if isinstance(v, str):
            v = json.loads(v)
        if not isinstance(v, dict):
            raise ValueError("Legacy clinics must be a mapping of clinic id to name/username/password")
        for clinic_id, entry in v.items():
            if not isinstance(entry, dict) or not {"name", "username", "password"} <= set(entry):
                raise ValueError(f"Legacy clinic '{clinic_id}' needs name, username and password")
        return v

    @validator("legacy_default_clinic_id")
    def validate_default_clinic(cls, v: str) -> str:
        """Validate the migration target clinic."""
        if not v or not v.strip():
            raise ValueError("Legacy default clinic id cannot be empty")
        return v.strip()

    @validator("migration_lock_ttl_seconds")
    def validate_lock_ttl(cls, v: int) -> int:
        """Validate migration lock TTL."""
        if not 1 <= v <= 3600:
            raise ValueError("Migration lock TTL must be between 1 and 3600 seconds")
        return v


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )
    allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS"
    )

    @validator("allowed_origins", pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string format
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [s.strip() for s in v.split(",") if s.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v.lower() not in ["json", "text"]:
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class AudioSettings(BaseSettings):
    """Dictation audio configuration settings."""

    model_config = SettingsConfigDict(env_prefix="AUDIO_")

    max_size_mb: int = Field(default=25, description="Maximum audio upload size in MB")
    allowed_content_types: List[str] = Field(
        default=[
            "audio/webm",
            "audio/wav",
            "audio/x-wav",
            "audio/mpeg",
            "audio/mp4",
            "audio/m4a",
            "audio/ogg",
            "application/octet-stream",
        ],
        description="Accepted audio MIME types",
    )

    @validator("max_size_mb")
    def validate_max_size(cls, v: int) -> int:
        """Validate max file size."""
        if v <= 0 or v > 100:
            raise ValueError("Max file size must be between 1 and 100 MB")
        return v


class AzureOpenAISettings(BaseSettings):
    """Azure OpenAI chat configuration settings."""

    model_config = SettingsConfigDict(env_prefix="AZURE_OPENAI_")

    endpoint: str = Field(default="", description="Azure OpenAI endpoint URL")
    api_key: str = Field(default="", description="Azure OpenAI API key")
    api_version: str = Field(default="2025-01-01-preview", description="Azure OpenAI API version")
    deployment_name: str = Field(default="gpt-4o", description="Azure OpenAI chat deployment name")

    @validator("endpoint")
    def validate_endpoint(cls, v: str) -> str:
        """Validate Azure OpenAI endpoint format."""
        if v and not v.startswith("https://"):
            raise ValueError("Invalid Azure OpenAI endpoint format. Must be: https://xxx.openai.azure.com/")
        return v


class TranscriptionSettings(BaseSettings):
    """Azure OpenAI speech-to-text configuration settings."""

    model_config = SettingsConfigDict(env_prefix="TRANSCRIPTION_")

    endpoint: str = Field(default="", description="Transcription endpoint (defaults to the chat endpoint)")
    api_key: str = Field(default="", description="Transcription API key (defaults to the chat key)")
    api_version: str = Field(default="2025-03-01-preview", description="Transcription API version")
    deployment_name: str = Field(default="gpt-4o-transcribe", description="Transcription deployment name")
    language: str = Field(default="en", description="Dictation language hint")

    @validator("endpoint")
    def validate_endpoint(cls, v: str) -> str:
        """Validate transcription endpoint format."""
        if v and not v.startswith("https://"):
            raise ValueError("Invalid transcription endpoint format. Must start with https://")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="ClinicDesk", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    enable_debug_routes: Optional[bool] = Field(
        default=None, description="Mount /debug routes (defaults to on in development)"
    )
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    clinic: ClinicSettings = Field(default_factory=ClinicSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    azure_openai: AzureOpenAISettings = Field(default_factory=AzureOpenAISettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"

    @property
    def debug_routes_enabled(self) -> bool:
        """Debug routes follow the explicit flag, else the environment."""
        if self.enable_debug_routes is not None:
            return self.enable_debug_routes
        return self.is_development or self.is_testing


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    This helps in environments where the working directory isn't the project
    root and pydantic's env_file doesn't get resolved as expected.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
