"""
PostgreSQL role store.
"""

import asyncio
import json
from typing import Any, List, Optional

import asyncpg
from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception
from ..rules.models import Role, RoleDocument
from .base import RoleNotFoundError, RoleStore, RoleStoreError

TRANSIENT_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)


class PostgreSQLRoleStore(RoleStore):
    """Role documents kept as JSONB rows."""

    def __init__(self, dsn: str, lookup_timeout: float = 5.0, max_attempts: int = 3):
        self.dsn = dsn
        self.lookup_timeout = lookup_timeout
        self.logger = get_logger("authz.store.postgres")
        self.pool: Optional[asyncpg.Pool] = None
        self._fetch_role_row = retry_on_exception(
            TRANSIENT_ERRORS,
            RetryConfig(max_attempts=max_attempts)
        )(self._fetch_role_row_once)

    async def start(self):
        """Open the pool and create tables."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                command_timeout=30
            )
            await self._create_tables()
            self.logger.info("PostgreSQL role store started")
        except (OSError, asyncpg.PostgresError) as e:
            self.logger.error("Failed to start PostgreSQL role store", error=str(e))
            raise RoleStoreError("failed to start PostgreSQL role store", {"error": str(e)}) from e

    async def stop(self):
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL role store stopped")

    async def _create_tables(self):
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS roles (
                    role_id VARCHAR(255) PRIMARY KEY,
                    permissions JSONB NOT NULL DEFAULT '[]',
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS items (
                    id SERIAL PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    qty INTEGER NOT NULL DEFAULT 0
                );
            """)

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise RoleStoreError("PostgreSQL role store not started")
        return self.pool

    async def _fetch_role_row_once(self, role_id: str) -> Optional[asyncpg.Record]:
        pool = self._require_pool()
        return await asyncio.wait_for(
            pool.fetchrow("SELECT role_id, permissions FROM roles WHERE role_id = $1", role_id),
            timeout=self.lookup_timeout
        )

    async def resolve(self, role_id: str) -> Role:
        try:
            row = await self._fetch_role_row(role_id)
        except RetryError as e:
            self.logger.error("Role lookup failed", role_id=role_id, error=str(e.last_exception))
            raise RoleStoreError("role lookup failed", {"role_id": role_id}) from e

        if row is None:
            raise RoleNotFoundError(role_id)
        return self._row_to_role(row)

    def _row_to_role(self, row: Any) -> Role:
        permissions = row["permissions"]
        if isinstance(permissions, str):
            permissions = json.loads(permissions)
        try:
            return RoleDocument(role_id=row["role_id"], permissions=permissions).to_role()
        except PydanticValidationError as e:
            self.logger.error("Malformed role document", role_id=row["role_id"], error=str(e))
            raise RoleStoreError("malformed role document", {"role_id": row["role_id"]}) from e

    async def save_role(self, role: Role) -> None:
        document = role.to_document()
        async with self._require_pool().acquire() as conn:
            await conn.execute("""
                INSERT INTO roles (role_id, permissions, updated_at)
                VALUES ($1, $2::jsonb, NOW())
                ON CONFLICT (role_id) DO UPDATE SET
                    permissions = EXCLUDED.permissions,
                    updated_at = EXCLUDED.updated_at
            """, role.role_id, json.dumps(document["permissions"]))
        self.logger.info("Role saved", role_id=role.role_id)

    async def delete_role(self, role_id: str) -> bool:
        async with self._require_pool().acquire() as conn:
            result = await conn.execute("DELETE FROM roles WHERE role_id = $1", role_id)
        if result == "DELETE 1":
            self.logger.info("Role deleted", role_id=role_id)
            return True
        self.logger.warning("Role not found for deletion", role_id=role_id)
        return False

    async def list_roles(self) -> List[Role]:
        async with self._require_pool().acquire() as conn:
            rows = await conn.fetch("SELECT role_id, permissions FROM roles ORDER BY role_id")
        return [self._row_to_role(row) for row in rows]

    async def add_item(self, name: str, qty: int) -> None:
        async with self._require_pool().acquire() as conn:
            await conn.execute("INSERT INTO items (name, qty) VALUES ($1, $2)", name, qty)

    async def count_items(self) -> int:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.fetchval("SELECT COUNT(*) FROM items")
        except TRANSIENT_ERRORS as e:
            self.logger.error("Item count failed", error=str(e))
            raise RoleStoreError("item count failed", {"error": str(e)}) from e

    async def health_check(self) -> bool:
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except TRANSIENT_ERRORS as e:
            self.logger.warning("PostgreSQL health check failed", error=str(e))
            return False
