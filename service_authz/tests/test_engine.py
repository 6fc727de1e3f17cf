"""
Unit tests for the access decision engine.
"""

import pytest

from service_authz.app.geo.registry import DEFAULT_GEO_REGISTRY
from service_authz.app.rules.allowed_countries import AllowedCountrySetBuilder
from service_authz.app.rules.engine import AccessDecisionEngine
from service_authz.app.rules.models import (
    DecisionReason, Permission, PrincipalProfile, Requirement, Role
)


def make_principal(*roles: Role, allowed_countries=None) -> PrincipalProfile:
    """Build a profile the way the profile builder does."""
    if allowed_countries is None:
        allowed_countries = AllowedCountrySetBuilder(DEFAULT_GEO_REGISTRY).build(roles)
    return PrincipalProfile(user_id="alice", roles=tuple(roles), allowed_countries=allowed_countries)


class TestAccessDecisionEngine:
    """Test cases for AccessDecisionEngine."""

    @pytest.fixture
    def engine(self):
        return AccessDecisionEngine(DEFAULT_GEO_REGISTRY)

    @pytest.fixture
    def payroll_role(self):
        return Role("user", (Permission.create(
            path="hr:payroll:view", regions=["SEA"], except_countries=["MM"]
        ),))

    @pytest.fixture
    def admin_role(self):
        return Role("admin", (Permission.create(path="*:*:*", regions=["GLOBAL"]),))

    def test_region_grant(self, engine, payroll_role):
        """Test a SEA permission grants Thailand."""
        principal = make_principal(payroll_role)
        assert engine.is_allowed(principal, Requirement.of("hr:payroll:view", "TH")) is True

    def test_excluded_country_denied(self, engine, payroll_role):
        """Test an excluded country is denied even though its region is included."""
        principal = make_principal(payroll_role)
        decision = engine.evaluate(principal, Requirement.of("hr:payroll:view", "MM"))
        assert decision.allowed is False
        assert decision.reason == DecisionReason.NO_MATCHING_PERMISSION

    def test_global_admin(self, engine, admin_role):
        """Test a universal admin may do anything anywhere."""
        principal = make_principal(admin_role)
        assert engine.is_allowed(principal, Requirement.of("admin:items:view", "US")) is True
        assert engine.is_allowed(principal, Requirement.of("admin:items:view", "GLOBAL")) is True

    def test_except_paths_veto_across_roles(self, engine):
        """Test an except_paths hit in one role vetoes a grant from another."""
        granting = Role("viewer", (Permission.create(path="hr:*:view", countries=["TH"]),))
        vetoing = Role("restricted", (Permission.create(
            path="hr:payroll:view", except_paths=["hr:payroll:*"]
        ),))

        principal = make_principal(vetoing, granting)
        decision = engine.evaluate(principal, Requirement.of("hr:payroll:view", "TH"))
        assert decision.allowed is False
        assert decision.reason == DecisionReason.PATH_EXCLUDED

    def test_veto_within_same_role(self, engine):
        """Test a vetoing permission listed before a granting one in the same role."""
        principal = make_principal(Role("mixed", (
            Permission.create(path="hr:payroll:view", except_paths=["hr:payroll:*"]),
            Permission.create(path="hr:*:view", countries=["TH"]),
        )))
        assert engine.is_allowed(principal, Requirement.of("hr:payroll:view", "TH")) is False

    def test_veto_does_not_touch_other_paths(self, engine):
        """Test except_paths only affects matching paths."""
        principal = make_principal(Role("mixed", (
            Permission.create(path="hr:payroll:view", except_paths=["hr:payroll:*"]),
            Permission.create(path="hr:*:view", countries=["TH"]),
        )))
        assert engine.is_allowed(principal, Requirement.of("hr:profile:view", "TH")) is True

    def test_veto_only_if_reached_before_grant(self, engine):
        """Test permissions are walked in order and the first verdict wins."""
        principal = make_principal(
            Role("viewer", (Permission.create(path="hr:*:view", countries=["TH"]),)),
            Role("restricted", (Permission.create(path="x:y:z", except_paths=["hr:payroll:*"]),)),
        )
        decision = engine.evaluate(principal, Requirement.of("hr:payroll:view", "TH"))
        assert decision.allowed is True
        assert decision.role_id == "viewer"

    def test_veto_reports_role(self, engine):
        """Test the veto decision names the vetoing role."""
        principal = make_principal(
            Role("restricted", (Permission.create(path="x:y:z", countries=["TH"],
                                                  except_paths=["hr:payroll:*"]),)),
            Role("viewer", (Permission.create(path="hr:*:view", countries=["TH"]),)),
        )
        decision = engine.evaluate(principal, Requirement.of("hr:payroll:view", "TH"))
        assert decision.allowed is False
        assert decision.reason == DecisionReason.PATH_EXCLUDED
        assert decision.role_id == "restricted"
        assert decision.permission_index == 0

    def test_veto_applies_for_global_requirement(self, engine, admin_role):
        """Test a veto still applies when no country is requested."""
        restricted = Role("restricted", (Permission.create(
            path="*:*:*", regions=["GLOBAL"], except_paths=["admin:*:*"]
        ),))
        principal = make_principal(restricted, admin_role)
        assert engine.is_allowed(principal, Requirement.of("admin:items:view", "GLOBAL")) is False

    def test_default_deny(self, engine, payroll_role):
        """Test a path no permission covers is denied."""
        principal = make_principal(payroll_role)
        decision = engine.evaluate(principal, Requirement.of("hr:user:view", "TH"))
        assert decision.allowed is False
        assert decision.reason == DecisionReason.NO_MATCHING_PERMISSION

    def test_no_roles_denied(self, engine):
        """Test a principal without roles is denied."""
        assert engine.is_allowed(make_principal(), Requirement.of("hr:user:view", "GLOBAL")) is False

    def test_precheck_rejects_before_permissions(self, engine):
        """Test a country outside allowed_countries is denied without evaluating permissions.

        The derived set here deliberately disagrees with the permissions to show
        the pre-check is consulted first.
        """
        role = Role("admin", (Permission.create(path="*:*:*", regions=["GLOBAL"]),))
        principal = make_principal(role, allowed_countries=frozenset({"TH"}))
        decision = engine.evaluate(principal, Requirement.of("admin:items:view", "US"))
        assert decision.allowed is False
        assert decision.reason == DecisionReason.COUNTRY_NOT_ALLOWED

    def test_precheck_country_absent_everywhere(self, engine, payroll_role):
        """Test a country no permission reaches is rejected by the pre-check."""
        principal = make_principal(payroll_role)
        decision = engine.evaluate(principal, Requirement.of("hr:payroll:view", "US"))
        assert decision.allowed is False
        assert decision.reason == DecisionReason.COUNTRY_NOT_ALLOWED

    def test_global_requirement_skips_precheck(self, engine):
        """Test GLOBAL passes the pre-check even with an empty allowed set."""
        role = Role("admin", (Permission.create(path="*:*:*", regions=["GLOBAL"]),))
        principal = make_principal(role, allowed_countries=frozenset())
        assert engine.is_allowed(principal, Requirement.of("admin:items:view", "GLOBAL")) is True

    def test_global_requirement_needs_universal_geography(self, engine, payroll_role):
        """Test a region-scoped permission does not grant a GLOBAL requirement."""
        principal = make_principal(payroll_role)
        assert engine.is_allowed(principal, Requirement.of("hr:payroll:view", "GLOBAL")) is False

    def test_wildcard_precheck_entry(self, engine, admin_role):
        """Test a wildcard in allowed_countries admits any country."""
        principal = make_principal(admin_role)
        assert "*" in principal.allowed_countries
        assert engine.is_allowed(principal, Requirement.of("hr:payroll:view", "ZZ")) is True

    def test_requirement_path_case_insensitive(self, engine, payroll_role):
        """Test requirement casing does not matter."""
        principal = make_principal(payroll_role)
        assert engine.is_allowed(principal, Requirement.of("HR:PAYROLL:VIEW", "th")) is True

    def test_segment_count_mismatch_denied(self, engine, admin_role):
        """Test *:*:* does not cover a two-segment path."""
        principal = make_principal(admin_role)
        assert engine.is_allowed(principal, Requirement.of("admin:items", "US")) is False


class TestRequirement:
    """Test cases for Requirement normalization."""

    def test_wildcard_country_is_global(self):
        assert Requirement.of("a:b:c", "*").country == "GLOBAL"

    def test_missing_country_is_global(self):
        assert Requirement.of("a:b:c", None).is_global is True

    def test_country_upper_cased(self):
        assert Requirement.of("a:b:c", "th").country == "TH"

    def test_path_text(self):
        assert Requirement.of("HR:Payroll:View").path_text == "hr:payroll:view"
