"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class VectorStoreSettings(BaseSettings):
    """LanceDB vector store configuration."""

    model_config = SettingsConfigDict(env_prefix="VECTOR_STORE_")

    storage_root: Path = Field(
        default=Path.home() / ".cache" / "docvectors" / "vectors",
        description="Directory holding one LanceDB table per document",
    )
    default_dimensions: int = Field(
        default=384,
        ge=1,
        description="Vector dimensionality used when an empty batch is written",
    )
    serialize_per_document: bool = Field(
        default=True,
        description="Serialize operations touching the same document table",
    )
    table_page_size: int = Field(
        default=100,
        ge=1,
        description="Page size used when listing tables",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    # Nested settings
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
