"""
Access decision engine for the Authorization Service.
"""

from typing import Optional

from shared.logging import get_logger
from ..geo.registry import GeoRegistry
from .allowed_countries import country_in_set
from .geo_resolver import GeoResolver
from .matcher import DEFAULT_PATH_MATCHER, PathMatcher
from .models import Decision, DecisionReason, PrincipalProfile, Requirement


class AccessDecisionEngine:
    """Combines path matching and geography across all of a principal's roles.

    Evaluation order:

    1. Unless the requirement is ``GLOBAL``, its country must be in the
       principal's ``allowed_countries``; otherwise deny without looking at
       any permission.
    2. Roles in order, permissions in order. An ``except_paths`` hit on any
       permission vetoes the whole request. A permission whose path matches
       and whose geography covers the country grants it.
    3. Nothing granted: deny.

    The engine is synchronous and keeps no state between calls, so one
    instance may serve concurrent requests.
    """

    def __init__(self, registry: Optional[GeoRegistry] = None,
                 path_matcher: Optional[PathMatcher] = None):
        self.logger = get_logger("authz.engine")
        self.path_matcher = path_matcher or DEFAULT_PATH_MATCHER
        self.geo_resolver = GeoResolver(registry)

    def is_allowed(self, principal: PrincipalProfile, requirement: Requirement) -> bool:
        """Return the boolean verdict for ``requirement``."""
        return self.evaluate(principal, requirement).allowed

    def evaluate(self, principal: PrincipalProfile, requirement: Requirement) -> Decision:
        """Evaluate ``requirement`` and report why."""
        if not requirement.is_global and not country_in_set(
            principal.allowed_countries, requirement.country
        ):
            return self._log(principal, requirement, Decision(
                allowed=False,
                reason=DecisionReason.COUNTRY_NOT_ALLOWED
            ))

        for role in principal.roles:
            for index, permission in enumerate(role.permissions):
                if self.path_matcher.matches_any(permission.except_paths, requirement.path):
                    return self._log(principal, requirement, Decision(
                        allowed=False,
                        reason=DecisionReason.PATH_EXCLUDED,
                        role_id=role.role_id,
                        permission_index=index
                    ))

                if (self.path_matcher.matches(permission.path, requirement.path)
                        and self.geo_resolver.is_permitted(requirement.country, permission)):
                    return self._log(principal, requirement, Decision(
                        allowed=True,
                        reason=DecisionReason.GRANTED,
                        role_id=role.role_id,
                        permission_index=index
                    ))

        return self._log(principal, requirement, Decision(
            allowed=False,
            reason=DecisionReason.NO_MATCHING_PERMISSION
        ))

    def _log(self, principal: PrincipalProfile, requirement: Requirement, decision: Decision) -> Decision:
        self.logger.debug(
            "Access decision",
            user_id=principal.user_id,
            path=requirement.path_text,
            country=requirement.country,
            allowed=decision.allowed,
            reason=decision.reason,
            role_id=decision.role_id,
            permission_index=decision.permission_index
        )
        return decision
