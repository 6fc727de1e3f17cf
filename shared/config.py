"""
Shared configuration management for the Authorization Service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Root log level")

    # Role store
    role_store_backend: str = Field(default="memory", description="memory or postgres")
    postgres_dsn: str = Field(default="postgres://localhost:5432/authz")
    seed_file: Optional[str] = Field(default=None, description="YAML file with roles and items to load at start")
    role_lookup_timeout_seconds: float = Field(default=5.0)
    role_lookup_max_attempts: int = Field(default=3)

    # Role cache
    redis_url: str = Field(default="redis://localhost:6379/0")
    role_cache_enabled: bool = Field(default=False)
    role_cache_ttl_seconds: int = Field(default=300)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
