"""
Role store interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from shared.errors import AccessLayerException
from ..rules.models import Role


class RoleNotFoundError(AccessLayerException):
    """No role record exists for the identifier."""

    def __init__(self, role_id: str):
        super().__init__("ROLE_NOT_FOUND", f"role '{role_id}' not found", {"role_id": role_id})
        self.role_id = role_id


class RoleStoreError(AccessLayerException):
    """The store could not answer (connection, timeout, bad document)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("ROLE_STORE_ERROR", message, details)


class RoleStore(ABC):
    """Source of role definitions.

    ``resolve`` either returns the role or raises ``RoleNotFoundError`` /
    ``RoleStoreError``; it never returns ``None``.
    """

    async def start(self):
        """Open connections."""

    async def stop(self):
        """Close connections."""

    @abstractmethod
    async def resolve(self, role_id: str) -> Role:
        """Load a role by identifier."""

    @abstractmethod
    async def save_role(self, role: Role) -> None:
        """Insert or replace a role."""

    @abstractmethod
    async def delete_role(self, role_id: str) -> bool:
        """Delete a role; False when it did not exist."""

    @abstractmethod
    async def list_roles(self) -> List[Role]:
        """All roles ordered by identifier."""

    @abstractmethod
    async def add_item(self, name: str, qty: int) -> None:
        """Insert a demo item."""

    @abstractmethod
    async def count_items(self) -> int:
        """Number of demo items."""

    async def health_check(self) -> bool:
        return True
