"""
Redis read-through cache for role documents.
"""

import json
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..rules.models import Role, RoleDocument
from .base import RoleStore

CACHE_ERRORS = (RedisError, OSError)


class CachedRoleStore(RoleStore):
    """Wraps another store; a Redis outage only costs the cache, never a lookup."""

    ROLE_PREFIX = "role:"

    def __init__(self, delegate: RoleStore, redis_url: str, ttl_seconds: int = 300,
                 metrics: Optional[MetricsCollector] = None,
                 client: Optional[redis.Redis] = None):
        self.delegate = delegate
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.metrics = metrics
        self.redis: Optional[redis.Redis] = client
        self.logger = get_logger("authz.store.redis_cache")

    async def start(self):
        await self.delegate.start()
        if self.redis is not None:
            return
        try:
            client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )
            await client.ping()
            self.redis = client
            self.logger.info("Role cache started", ttl_seconds=self.ttl_seconds)
        except CACHE_ERRORS as e:
            self.logger.warning("Role cache unavailable, continuing without it", error=str(e))
            self.redis = None

    async def stop(self):
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
        await self.delegate.stop()

    def _key(self, role_id: str) -> str:
        return f"{self.ROLE_PREFIX}{role_id}"

    def _count(self, result: str):
        if self.metrics:
            self.metrics.increment_counter("role_cache_lookups_total", result=result)

    async def resolve(self, role_id: str) -> Role:
        cached = await self._get(role_id)
        if cached is not None:
            self._count("hit")
            return cached

        self._count("miss")
        role = await self.delegate.resolve(role_id)
        await self._set(role)
        return role

    async def _get(self, role_id: str) -> Optional[Role]:
        if self.redis is None:
            return None
        try:
            data = await self.redis.get(self._key(role_id))
        except CACHE_ERRORS as e:
            self.logger.warning("Role cache read failed", role_id=role_id, error=str(e))
            return None
        if not data:
            return None
        try:
            return RoleDocument.model_validate_json(data).to_role()
        except PydanticValidationError:
            self.logger.warning("Discarding malformed cached role", role_id=role_id)
            await self.invalidate(role_id)
            return None

    async def _set(self, role: Role):
        if self.redis is None:
            return
        try:
            await self.redis.setex(self._key(role.role_id), self.ttl_seconds, json.dumps(role.to_document()))
        except CACHE_ERRORS as e:
            self.logger.warning("Role cache write failed", role_id=role.role_id, error=str(e))

    async def invalidate(self, role_id: str):
        if self.redis is None:
            return
        try:
            await self.redis.delete(self._key(role_id))
        except CACHE_ERRORS as e:
            self.logger.warning("Role cache invalidation failed", role_id=role_id, error=str(e))

    async def save_role(self, role: Role) -> None:
        await self.delegate.save_role(role)
        await self.invalidate(role.role_id)

    async def delete_role(self, role_id: str) -> bool:
        deleted = await self.delegate.delete_role(role_id)
        await self.invalidate(role_id)
        return deleted

    async def list_roles(self) -> List[Role]:
        return await self.delegate.list_roles()

    async def add_item(self, name: str, qty: int) -> None:
        await self.delegate.add_item(name, qty)

    async def count_items(self) -> int:
        return await self.delegate.count_items()

    async def health_check(self) -> bool:
        return await self.delegate.health_check()

    async def cache_health_check(self) -> bool:
        if self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except CACHE_ERRORS:
            return False
