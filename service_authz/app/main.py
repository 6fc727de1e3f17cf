"""
Authorization service.

Serves the demo HR/admin endpoints, each guarded by a static access
requirement, plus an ad-hoc ``/authz/check`` endpoint.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .domain.access_guard import AccessGuard
from .domain.profile import ProfileBuilder
from .geo.registry import DEFAULT_GEO_REGISTRY, GeoRegistry
from .rules.engine import AccessDecisionEngine
from .rules.models import AccessCheckRequest, AccessCheckResponse, PrincipalProfile, Requirement
from .store.base import RoleStore, RoleStoreError
from .store.factory import create_role_store
from .store.seed import load_seed

PROFILE_VIEW = Requirement.of("hr:profile:view", "GLOBAL")
USER_VIEW = Requirement.of("hr:user:view", "GLOBAL")
PAYROLL_VIEW_TH = Requirement.of("hr:payroll:view", "TH")
ADMIN_ITEMS_VIEW = Requirement.of("admin:items:view", "GLOBAL")


class AuthzService(BaseService):
    """Authorization service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 role_store: Optional[RoleStore] = None,
                 registry: Optional[GeoRegistry] = None):
        super().__init__("authz", 3000, config)

        self.registry = registry or DEFAULT_GEO_REGISTRY
        self.role_store = role_store or create_role_store(self.config, self.metrics)
        self.engine = AccessDecisionEngine(self.registry)
        self.guard = AccessGuard(
            ProfileBuilder(self.role_store, self.registry, self.metrics),
            self.engine,
            self.metrics
        )

        self._setup_authz_routes()

    def _setup_authz_routes(self):
        """Set up authorization-specific routes."""

        @self.app.get("/public")
        async def public():
            """Public endpoint, no token required."""
            return {"message": "This is a public endpoint."}

        @self.app.get("/user/profile")
        async def user_profile(user: PrincipalProfile = Depends(self.guard.require(PROFILE_VIEW))):
            """Full profile of the caller."""
            return {
                "user": user.user_id,
                "roles": [role.to_document() for role in user.roles],
                "allowed_countries": sorted(user.allowed_countries)
            }

        @self.app.get("/user")
        async def user_data(user: PrincipalProfile = Depends(self.guard.require(USER_VIEW))):
            """Non-sensitive user data."""
            return {
                "username": user.user_id,
                "allowed_countries": sorted(user.allowed_countries)
            }

        @self.app.get("/user/payroll")
        async def user_payroll(user: PrincipalProfile = Depends(self.guard.require(PAYROLL_VIEW_TH))):
            """Payroll data for Thailand."""
            return {"message": "Authorized to view payroll in Thailand"}

        @self.app.get("/admin/items")
        async def admin_items(user: PrincipalProfile = Depends(self.guard.require(ADMIN_ITEMS_VIEW))):
            """Item count from the backing store."""
            try:
                count = await self.role_store.count_items()
            except RoleStoreError as e:
                self.logger.error("Error counting items", error=e.message)
                raise HTTPException(status_code=500, detail="Database count error")

            return {
                "message": "Admin access to item count",
                "itemCountDB": count
            }

        @self.app.post("/authz/check", response_model=AccessCheckResponse)
        async def check_access(request: AccessCheckRequest,
                               authorization: Optional[str] = Header(None)):
            """Evaluate an arbitrary requirement for the caller without enforcing it."""
            requirement = Requirement.of(request.path, request.country)
            profile = await self.guard.authenticate(authorization)
            return AccessCheckResponse(
                allowed=self.guard.check(profile, requirement),
                path=requirement.path_text,
                country=requirement.country
            )

    async def _check_dependencies(self):
        """Check authorization service dependencies."""
        healthy = await self.role_store.health_check()
        return {"role_store": "ok" if healthy else "error"}

    async def start(self):
        """Start the role store and load the seed file when configured."""
        await self.role_store.start()

        if self.config.seed_file:
            await self._load_seed(self.config.seed_file)

        self.logger.info("Authorization service started", backend=self.config.role_store_backend)

    async def _load_seed(self, path: str):
        # Roles are upserted on every start; items only go into an empty store
        include_items = await self.role_store.count_items() == 0
        await load_seed(self.role_store, path, include_items=include_items)

    async def stop(self):
        """Stop the role store."""
        await self.role_store.stop()
        self.logger.info("Authorization service stopped")


def create_app(config: Optional[ServiceConfig] = None, role_store: Optional[RoleStore] = None):
    """Create authorization service application."""
    service = AuthzService(config=config, role_store=role_store)
    return service.app


if __name__ == "__main__":
    service = AuthzService()
    service.run()
