"""
Request guard binding endpoints to access requirements.
"""

import time
from typing import Awaitable, Callable, Optional

from fastapi import Request

from shared.errors import AccessDeniedError
from shared.logging import get_logger, set_user_context
from shared.metrics import MetricsCollector
from ..claims.extractor import decode_claims, extract_bearer_token
from ..rules.engine import AccessDecisionEngine
from ..rules.models import PrincipalProfile, Requirement
from .profile import ProfileBuilder


class AccessGuard:
    """Authenticates the forwarded token, builds the profile and decides.

    Failures map onto the shared error types: ``AuthenticationError`` (401)
    for a missing or unreadable token, ``RoleResolutionError`` (403) when a
    role cannot be resolved and ``AccessDeniedError`` (403) for a deny.
    """

    def __init__(self, profile_builder: ProfileBuilder, engine: AccessDecisionEngine,
                 metrics: Optional[MetricsCollector] = None):
        self.profile_builder = profile_builder
        self.engine = engine
        self.metrics = metrics
        self.logger = get_logger("authz.access_guard")

    async def authenticate(self, authorization: Optional[str]) -> PrincipalProfile:
        """Turn an Authorization header into a principal profile."""
        claims = decode_claims(extract_bearer_token(authorization))
        set_user_context(claims.preferred_username)
        return await self.profile_builder.build(claims)

    def check(self, profile: PrincipalProfile, requirement: Requirement) -> bool:
        """Evaluate ``requirement`` for an already built profile."""
        start_time = time.time()
        decision = self.engine.evaluate(profile, requirement)

        if self.metrics:
            self.metrics.record_decision(decision.allowed, decision.reason, time.time() - start_time)

        if not decision.allowed:
            self.logger.info(
                "Access denied",
                user_id=profile.user_id,
                path=requirement.path_text,
                country=requirement.country,
                reason=decision.reason
            )
        return decision.allowed

    async def authorize(self, authorization: Optional[str], requirement: Requirement) -> PrincipalProfile:
        """Return the profile when ``requirement`` is met, raise otherwise."""
        profile = await self.authenticate(authorization)
        if not self.check(profile, requirement):
            raise AccessDeniedError(requirement.path_text)
        return profile

    def require(self, requirement: Requirement) -> Callable[[Request], Awaitable[PrincipalProfile]]:
        """FastAPI dependency enforcing ``requirement`` on a route."""

        async def dependency(request: Request) -> PrincipalProfile:
            profile = await self.authorize(request.headers.get("Authorization"), requirement)
            request.state.principal = profile
            return profile

        return dependency
