"""Configuration management for BenchForge."""

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackend(str, Enum):
    """Key-value storage backend."""

    MEMORY = "memory"
    FILE = "file"


class BenchmarkServiceSettings(BaseSettings):
    """Benchmark service client configuration."""

    model_config = SettingsConfigDict(env_prefix="BENCHMARK_SERVICE_")

    url: str = Field(default="http://localhost:8003", description="Benchmark service URL")
    timeout_seconds: float = Field(default=300.0, description="Request timeout")


class AuthServiceSettings(BaseSettings):
    """Authentication service client configuration."""

    model_config = SettingsConfigDict(env_prefix="AUTH_SERVICE_")

    url: str = Field(default="http://localhost:8003", description="Auth service URL")
    timeout_seconds: float = Field(default=30.0, description="Request timeout")


class StorageSettings(BaseSettings):
    """Persisted registry storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: StorageBackend = Field(default=StorageBackend.FILE, description="Storage backend")
    directory: Path = Field(
        default=Path.home() / ".benchforge",
        description="Directory holding file-backed slots",
    )
    key: str = Field(default="model-storage", description="Slot key for the registry snapshot")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="BENCHFORGE_",
        env_nested_delimiter="__",
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    benchmark_service: BenchmarkServiceSettings = Field(default_factory=BenchmarkServiceSettings)
    auth_service: AuthServiceSettings = Field(default_factory=AuthServiceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
