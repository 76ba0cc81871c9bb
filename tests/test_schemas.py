"""Tests for permission types and the policy table."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from community_access.config.permissions_config import ACTIONS, GRANT_ROLES, POLICY_MATRIX, ROLE_CAPABILITIES
from community_access.modules.permissions.schemas import (
    Action, GrantRole, PermissionDecision, RoleCapabilities, RoleTier, collapse_grant_role
)


def test_collapse_matches_policy_table():
    assert {r.value: collapse_grant_role(r).value for r in GrantRole} == GRANT_ROLES


def test_super_admin_collapses_to_admin():
    assert collapse_grant_role(GrantRole.SUPER_ADMIN) is RoleTier.ADMIN


def test_tier_ordering():
    assert RoleTier.GUEST.rank < RoleTier.MEMBER.rank < RoleTier.ADMIN.rank


def test_every_action_has_a_policy():
    assert {a.value for a in Action} == set(ACTIONS)


def test_every_denial_reason_is_a_sentence():
    for policy in ACTIONS.values():
        for reason in policy["denial_reasons"].values():
            if reason is not None:
                assert reason.strip()
                assert reason[0].isupper()
                assert reason.endswith(".")


def test_policy_matrix_rows():
    rows = {row["action"]: row for row in POLICY_MATRIX}
    assert rows["createPost"]["allowed_tiers"] == ["member", "admin"]
    assert rows["manageGroups"]["allowed_tiers"] == ["admin"]
    assert rows["deletePost"]["owner_tiers"] == ["member"]


def test_capability_table_fields_match_model():
    for flags in ROLE_CAPABILITIES.values():
        assert set(flags) == set(RoleCapabilities.model_fields)


def test_denied_decision_requires_reason():
    with pytest.raises(ValidationError):
        PermissionDecision(allowed=False)
    with pytest.raises(ValidationError):
        PermissionDecision(allowed=False, reason="   ")


def test_allowed_decision_has_no_reason():
    assert PermissionDecision.allow().reason is None
    with pytest.raises(ValidationError):
        PermissionDecision(allowed=True, reason="because")


def test_decisions_are_frozen():
    decision = PermissionDecision.deny("Nope.")
    with pytest.raises(ValidationError):
        decision.allowed = True
