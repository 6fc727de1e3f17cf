"""
Identity claim extraction.

The upstream gateway has already verified the token signature, so the
token is only decoded here and its claims are validated into a typed
structure. Nothing downstream looks at the raw claim map.
"""

from typing import Any, Dict, List, Optional

import jwt
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from shared.errors import AuthenticationError
from shared.logging import get_logger

logger = get_logger("authz.claims")

BEARER_PREFIX = "Bearer"


class PrincipalClaims(BaseModel):
    """Claims the authorization layer relies on."""
    preferred_username: str = Field(..., min_length=1)
    roles: List[str]

    @field_validator("roles", mode="before")
    @classmethod
    def _keep_string_roles(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [role for role in value if isinstance(role, str)]
        return value


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("missing Authorization header")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_PREFIX or not parts[1]:
        raise AuthenticationError("invalid Authorization header format")

    return parts[1]


def decode_claims(token: str) -> PrincipalClaims:
    """Decode ``token`` without signature verification and validate its claims."""
    try:
        raw = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.warning("Token decode failed", error=str(e))
        raise AuthenticationError("failed to parse token") from e

    return claims_from_mapping(raw)


def claims_from_mapping(raw: Dict[str, Any]) -> PrincipalClaims:
    """Validate a decoded claim map.

    Roles come from the top-level ``roles`` claim, falling back to Keycloak's
    ``realm_access.roles``.
    """
    if not isinstance(raw.get("preferred_username"), str):
        raise AuthenticationError("preferred_username missing or not a string in token")

    roles = raw.get("roles")
    if roles is None:
        realm_access = raw.get("realm_access")
        if isinstance(realm_access, dict):
            roles = realm_access.get("roles")
    if not isinstance(roles, list):
        raise AuthenticationError("roles claim missing or in wrong format")

    try:
        return PrincipalClaims(preferred_username=raw["preferred_username"], roles=roles)
    except PydanticValidationError as e:
        raise AuthenticationError("invalid token claims", details={"errors": e.error_count()}) from e
