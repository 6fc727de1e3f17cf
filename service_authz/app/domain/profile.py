"""
Principal profile construction.
"""

from typing import List, Optional

from shared.errors import RoleResolutionError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..claims.extractor import PrincipalClaims
from ..geo.registry import GeoRegistry
from ..rules.allowed_countries import AllowedCountrySetBuilder
from ..rules.models import PrincipalProfile, Role
from ..store.base import RoleNotFoundError, RoleStore, RoleStoreError


class ProfileBuilder:
    """Resolves claimed roles and derives the allowed-country set.

    Every claimed role must resolve. One missing or unreadable role fails
    the whole build with ``RoleResolutionError``; a partial profile is never
    returned.
    """

    def __init__(self, role_store: RoleStore, registry: Optional[GeoRegistry] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.role_store = role_store
        self.countries = AllowedCountrySetBuilder(registry)
        self.metrics = metrics
        self.logger = get_logger("authz.profile")

    async def build(self, claims: PrincipalClaims) -> PrincipalProfile:
        roles: List[Role] = []
        for role_id in claims.roles:
            try:
                roles.append(await self.role_store.resolve(role_id))
            except (RoleNotFoundError, RoleStoreError) as e:
                # Real cause stays in the logs; the caller gets a generic message
                self.logger.error(
                    "Failed to resolve role",
                    role_id=role_id,
                    user_id=claims.preferred_username,
                    code=e.code,
                    error=e.message
                )
                self._count("error")
                raise RoleResolutionError() from e
            self._count("ok")

        return PrincipalProfile(
            user_id=claims.preferred_username,
            roles=tuple(roles),
            allowed_countries=self.countries.build(roles)
        )

    def _count(self, status: str):
        if self.metrics:
            self.metrics.increment_counter("role_resolutions_total", status=status)
