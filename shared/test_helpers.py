"""
Test helper functions and factory methods for the Authorization Service.
"""

import time
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

import jwt


@dataclass
class TestUser:
    """Test user data."""
    __test__ = False

    username: str
    roles: List[str] = field(default_factory=list)


class TestDataFactory:
    """Factory for creating test data."""

    @staticmethod
    def create_test_users() -> List[TestUser]:
        """Demo callers matching the seed roles."""
        return [
            TestUser(username="alice", roles=["user"]),
            TestUser(username="bob", roles=["admin"]),
        ]

    @staticmethod
    def create_test_role_documents() -> List[Dict[str, Any]]:
        """Role documents as they are kept in the store."""
        return [
            {
                "role_id": "user",
                "permissions": [
                    {
                        "path": "hr:payroll:view",
                        "regions": ["SEA"],
                        "except_countries": ["MM"]
                    }
                ]
            },
            {
                "role_id": "admin",
                "permissions": [
                    {
                        "path": "*:*:*",
                        "regions": ["GLOBAL"]
                    }
                ]
            }
        ]


class MockTokenGenerator:
    """Generate gateway-style JWTs for testing.

    The service never verifies signatures, so any secret works.
    """

    def __init__(self, issuer: str = "http://localhost:8080/realms/demo", secret: str = "mock-secret-for-tests-only-0123456789abcdef"):
        self.issuer = issuer
        self.secret = secret

    def generate_access_token(self, user: TestUser, expires_in: int = 3600,
                              extra_claims: Optional[Dict[str, Any]] = None) -> str:
        """Generate an access token carrying ``preferred_username`` and ``roles``."""
        now = int(time.time())
        payload = {
            "iss": self.issuer,
            "sub": user.username,
            "iat": now,
            "exp": now + expires_in,
            "preferred_username": user.username,
            "roles": user.roles,
        }
        payload.update(extra_claims or {})
        return jwt.encode(payload, self.secret, algorithm="HS256")

    def authorization_header(self, user: TestUser) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.generate_access_token(user)}"}


def create_mock_jwt_token(username: str, roles: List[str], **extra_claims) -> str:
    """Create a token for ``username`` holding ``roles``."""
    return mock_token_generator.generate_access_token(
        TestUser(username=username, roles=roles),
        extra_claims=extra_claims
    )


# Global instances for easy access
test_data_factory = TestDataFactory()
mock_token_generator = MockTokenGenerator()
