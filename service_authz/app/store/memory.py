"""
In-memory role store.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from shared.logging import get_logger
from ..rules.models import Role
from .base import RoleNotFoundError, RoleStore


class InMemoryRoleStore(RoleStore):
    """Dict-backed store for tests and single-process deployments."""

    def __init__(self, roles: Optional[Iterable[Role]] = None):
        self.logger = get_logger("authz.store.memory")
        self.roles: Dict[str, Role] = {}
        self.items: List[Tuple[str, int]] = []
        for role in roles or ():
            self.roles[role.role_id] = role

    async def resolve(self, role_id: str) -> Role:
        role = self.roles.get(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def save_role(self, role: Role) -> None:
        self.roles[role.role_id] = role
        self.logger.info("Role saved", role_id=role.role_id)

    async def delete_role(self, role_id: str) -> bool:
        return self.roles.pop(role_id, None) is not None

    async def list_roles(self) -> List[Role]:
        return [self.roles[role_id] for role_id in sorted(self.roles)]

    async def add_item(self, name: str, qty: int) -> None:
        self.items.append((name, qty))

    async def count_items(self) -> int:
        return len(self.items)
