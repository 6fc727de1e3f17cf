"""
Role store selection from service configuration.
"""

from typing import Optional

from shared.config import ServiceConfig
from shared.metrics import MetricsCollector
from .base import RoleStore
from .memory import InMemoryRoleStore
from .postgres import PostgreSQLRoleStore
from .redis_cache import CachedRoleStore


def create_role_store(config: ServiceConfig, metrics: Optional[MetricsCollector] = None) -> RoleStore:
    """Build the store selected by ``role_store_backend``."""
    backend = config.role_store_backend.lower()
    if backend == "postgres":
        store: RoleStore = PostgreSQLRoleStore(
            config.postgres_dsn,
            lookup_timeout=config.role_lookup_timeout_seconds,
            max_attempts=config.role_lookup_max_attempts
        )
    elif backend == "memory":
        store = InMemoryRoleStore()
    else:
        raise ValueError(f"unknown role store backend: {config.role_store_backend}")

    if config.role_cache_enabled:
        store = CachedRoleStore(store, config.redis_url, config.role_cache_ttl_seconds, metrics=metrics)
    return store
