"""Configuration management for the mail key index.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache

from cassandra import ConsistencyLevel
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the MAIL_KEY_INDEX_ prefix (e.g., MAIL_KEY_INDEX_CASSANDRA_KEYSPACE).
    List values such as contact points are given as JSON
    (e.g., MAIL_KEY_INDEX_CASSANDRA_CONTACT_POINTS='["10.0.0.1","10.0.0.2"]').
    """

    model_config = SettingsConfigDict(
        env_prefix="MAIL_KEY_INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Cassandra Configuration
    cassandra_contact_points: list[str] = Field(
        default_factory=lambda: ["127.0.0.1"],
        description="Cassandra nodes used to discover the cluster",
    )
    cassandra_port: int = Field(
        default=9042,
        description="Native protocol port of the Cassandra nodes",
    )
    cassandra_keyspace: str = Field(
        default="mail_repository",
        description="Keyspace holding the mail repository keys table",
    )
    cassandra_username: str | None = Field(
        default=None,
        description="Username for plain-text authentication (optional)",
    )
    cassandra_password: str | None = Field(
        default=None,
        description="Password for plain-text authentication (optional)",
    )
    cassandra_replication_factor: int = Field(
        default=1,
        ge=1,
        description="Replication factor used when creating the keyspace",
    )
    cassandra_consistency_level: str = Field(
        default="QUORUM",
        description="Consistency level applied to every statement (e.g. ONE, QUORUM)",
    )
    cassandra_request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Client-side deadline for a single request in seconds",
    )
    cassandra_connect_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for establishing node connections in seconds",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("cassandra_consistency_level", mode="before")
    @classmethod
    def _normalize_consistency_level(cls, v: str) -> str:
        name = str(v).strip().upper()
        if name not in ConsistencyLevel.name_to_value:
            raise ValueError(f"Unknown Cassandra consistency level: {v!r}")
        return name

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return str(v).strip().upper()

    @property
    def consistency_level_value(self) -> int:
        """Driver constant for the configured consistency level."""
        return ConsistencyLevel.name_to_value[self.cassandra_consistency_level]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
