"""
Integration tests for the authorization flow.

The service runs in-process with the bundled seed file loaded into an
in-memory role store; callers present gateway-style tokens.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from service_authz.app.claims.extractor import PrincipalClaims
from service_authz.app.main import AuthzService, create_app
from service_authz.app.rules.models import DecisionReason, Permission, Requirement, Role
from service_authz.app.store.memory import InMemoryRoleStore
from shared.config import get_config
from shared.test_helpers import mock_token_generator, test_data_factory, TestUser

SEED_FILE = Path(__file__).resolve().parents[2] / "service_authz" / "seed" / "roles.yaml"


class TestAuthzFlow:
    """End-to-end decisions through the HTTP surface."""

    @pytest.fixture
    def role_store(self):
        return InMemoryRoleStore([
            Role("payroll-veto", (Permission.create(path="hr:payroll:view", except_paths=["hr:payroll:*"]),)),
            Role("th-hr-viewer", (Permission.create(path="hr:*:view", countries=["TH"]),)),
        ])

    @pytest.fixture
    def client(self, role_store):
        config = get_config("authz", 3000, seed_file=str(SEED_FILE))
        with TestClient(create_app(config=config, role_store=role_store)) as client:
            yield client

    @pytest.fixture
    def users(self):
        return {user.username: user for user in test_data_factory.create_test_users()}

    def check(self, client, user, path, country):
        response = client.post(
            "/authz/check",
            json={"path": path, "country": country},
            headers=mock_token_generator.authorization_header(user)
        )
        assert response.status_code == 200
        return response.json()["allowed"]

    def test_seed_loaded(self, client, role_store):
        """Test the bundled seed roles and items are present."""
        assert {"user", "admin", "payroll-veto", "th-hr-viewer"} <= set(role_store.roles)
        assert len(role_store.items) == 2

    def test_sea_payroll_in_thailand(self, client, users):
        assert self.check(client, users["alice"], "hr:payroll:view", "TH") is True

    def test_sea_payroll_in_myanmar(self, client, users):
        """Test the explicit country exclusion beats the SEA region."""
        assert self.check(client, users["alice"], "hr:payroll:view", "MM") is False

    def test_global_admin_in_us(self, client, users):
        assert self.check(client, users["bob"], "admin:items:view", "US") is True

    def test_path_veto_beats_grant(self, client):
        """Test an except_paths hit denies even though another role would grant."""
        carol = TestUser(username="carol", roles=["payroll-veto", "th-hr-viewer"])
        assert self.check(client, carol, "hr:payroll:view", "TH") is False
        assert self.check(client, carol, "hr:profile:view", "TH") is True

    def test_country_outside_allowed_set(self, client, users):
        """Test a country no role reaches is denied."""
        assert self.check(client, users["alice"], "hr:payroll:view", "US") is False

    def test_denied_endpoint_then_allowed_endpoint(self, client, users):
        """Test the same caller is denied one endpoint and served another."""
        headers = mock_token_generator.authorization_header(users["alice"])

        assert client.get("/admin/items", headers=headers).status_code == 403
        assert client.get("/user/payroll", headers=headers).status_code == 200

    def test_admin_item_count(self, client, users):
        response = client.get("/admin/items", headers=mock_token_generator.authorization_header(users["bob"]))
        assert response.json()["itemCountDB"] == 2


class TestDecisionReasons:
    """The same scenarios through the engine, checking why each decision was made."""

    @pytest.fixture
    def service(self):
        return AuthzService(config=get_config("authz", 3000, seed_file=None), role_store=InMemoryRoleStore())

    async def profile(self, service, username, roles):
        return await service.guard.profile_builder.build(PrincipalClaims(preferred_username=username, roles=roles))

    @pytest.mark.asyncio
    async def test_veto_reason(self, service):
        await service.role_store.save_role(
            Role("veto", (Permission.create(path="hr:payroll:view", except_paths=["hr:payroll:*"]),))
        )
        await service.role_store.save_role(Role("grant", (Permission.create(path="hr:*:view", countries=["TH"]),)))

        principal = await self.profile(service, "carol", ["veto", "grant"])
        decision = service.engine.evaluate(principal, Requirement.of("hr:payroll:view", "TH"))

        assert decision.allowed is False
        assert decision.reason == DecisionReason.PATH_EXCLUDED
        assert decision.role_id == "veto"

    @pytest.mark.asyncio
    async def test_pre_check_reason(self, service):
        await service.role_store.save_role(
            Role("user", (Permission.create(path="hr:payroll:view", regions=["SEA"], except_countries=["MM"]),))
        )

        principal = await self.profile(service, "alice", ["user"])
        decision = service.engine.evaluate(principal, Requirement.of("hr:payroll:view", "US"))

        assert decision.allowed is False
        assert decision.reason == DecisionReason.COUNTRY_NOT_ALLOWED
        assert decision.role_id is None
