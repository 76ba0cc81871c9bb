"""Tests for the HTTP surface — endpoints, action gates, health checks."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from community_access.config.permissions_config import GENERIC_FAILURE_REASON, UNKNOWN_ACTION_REASON
from community_access.core.dependencies import get_permission_service, require_action
from community_access.main import app
from community_access.modules.permissions.service import PermissionService
from tests.conftest import ADMIN, GUEST, MEMBER, SUPER_ADMIN


@pytest.fixture()
def client(service: PermissionService):
    app.dependency_overrides[get_permission_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def failing_client(failing_service: PermissionService):
    app.dependency_overrides[get_permission_service] = lambda: failing_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_user_role(client: TestClient):
    resp = client.get(f"/api/v1/permissions/users/{ADMIN}/role")
    assert resp.status_code == 200
    assert resp.json() == {"user_id": ADMIN, "tier": "admin", "authenticated": True}


def test_guest_role(client: TestClient):
    body = client.get(f"/api/v1/permissions/users/{GUEST}/role").json()
    assert body["tier"] == "guest"
    assert body["authenticated"] is False


def test_profile_own(client: TestClient):
    resp = client.get(f"/api/v1/permissions/users/{MEMBER}/profile", headers={"X-User-Id": MEMBER})
    assert resp.status_code == 200
    assert resp.json()["roles"] == ["user"]


def test_profile_not_found(client: TestClient):
    resp = client.get(f"/api/v1/permissions/users/{GUEST}/profile", headers={"X-User-Id": ADMIN})
    assert resp.status_code == 404


def test_capabilities(client: TestClient):
    body = client.get(f"/api/v1/permissions/users/{SUPER_ADMIN}/capabilities", headers={"X-User-Id": SUPER_ADMIN}).json()
    assert body["display"]["label"] == "Super Administrator"
    assert body["capabilities"]["can_manage_system"] is True


@pytest.mark.parametrize("path", ["profile", "capabilities"])
def test_user_records_require_sign_in(client: TestClient, path):
    resp = client.get(f"/api/v1/permissions/users/{MEMBER}/{path}")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Please sign in as an administrator to access the admin panel."


@pytest.mark.parametrize("path", ["profile", "capabilities"])
def test_member_cannot_read_other_users_records(client: TestClient, path):
    resp = client.get(f"/api/v1/permissions/users/{ADMIN}/{path}", headers={"X-User-Id": MEMBER})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Only administrators can access the admin panel."


@pytest.mark.parametrize("path", ["profile", "capabilities"])
def test_admin_can_read_other_users_records(client: TestClient, path):
    resp = client.get(f"/api/v1/permissions/users/{MEMBER}/{path}", headers={"X-User-Id": ADMIN})
    assert resp.status_code == 200


def test_user_records_fail_closed(failing_client: TestClient):
    resp = failing_client.get(f"/api/v1/permissions/users/{MEMBER}/capabilities", headers={"X-User-Id": ADMIN})
    assert resp.status_code == 403
    assert resp.json()["detail"] == GENERIC_FAILURE_REASON


def test_list_actions(client: TestClient):
    body = client.get("/api/v1/permissions/actions").json()
    assert {row["action"] for row in body} == {
        "createPost", "manageGroups", "viewMembers", "deletePost", "accessAdmin"
    }


def test_batch_check(client: TestClient):
    resp = client.post("/api/v1/permissions/check", json={
        "user_id": ADMIN,
        "actions": ["createPost", "manageGroups", "viewMembers", "unknownPermission"],
    })
    assert resp.status_code == 200
    decisions = resp.json()["decisions"]
    assert decisions["createPost"] == {"allowed": True, "reason": None}
    assert decisions["manageGroups"]["allowed"] is True
    assert decisions["unknownPermission"] == {"allowed": False, "reason": UNKNOWN_ACTION_REASON}


def test_batch_check_delete_post(client: TestClient):
    resp = client.post("/api/v1/permissions/check", json={
        "user_id": MEMBER, "actions": ["deletePost"], "resource_author_id": ADMIN,
    })
    assert resp.json()["decisions"]["deletePost"]["reason"] == "You can only delete your own posts."


def test_single_check(client: TestClient):
    resp = client.post("/api/v1/permissions/check/manageGroups", json={"user_id": MEMBER})
    assert resp.json() == {"allowed": False, "reason": "Only administrators can manage groups."}


def test_single_check_unknown_action_is_denied(client: TestClient):
    resp = client.post("/api/v1/permissions/check/launchRockets", json={"user_id": ADMIN})
    assert resp.status_code == 200
    assert resp.json()["reason"] == UNKNOWN_ACTION_REASON


def test_single_check_signed_out(client: TestClient):
    resp = client.post("/api/v1/permissions/check/createPost", json={})
    assert resp.json()["allowed"] is False


def test_failure_is_a_denial(failing_client: TestClient):
    resp = failing_client.post("/api/v1/permissions/check/viewMembers", json={"user_id": ADMIN})
    assert resp.status_code == 200
    assert resp.json() == {"allowed": False, "reason": GENERIC_FAILURE_REASON}


# -- Action gate ---------------------------------------------------------------


def test_admin_gate_allows_admin(client: TestClient):
    resp = client.get("/api/v1/permissions/admin/ping", headers={"X-User-Id": ADMIN})
    assert resp.status_code == 200
    assert resp.json()["user_id"] == ADMIN


def test_admin_gate_rejects_member_with_reason(client: TestClient):
    resp = client.get("/api/v1/permissions/admin/ping", headers={"X-User-Id": MEMBER})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Only administrators can access the admin panel."


def test_admin_gate_rejects_signed_out(client: TestClient):
    resp = client.get("/api/v1/permissions/admin/ping")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Please sign in as an administrator to access the admin panel."


def test_admin_gate_fails_closed(failing_client: TestClient):
    resp = failing_client.get("/api/v1/permissions/admin/ping", headers={"X-User-Id": ADMIN})
    assert resp.status_code == 403
    assert resp.json()["detail"] == GENERIC_FAILURE_REASON


def test_cache_invalidate_requires_admin(client: TestClient):
    assert client.post("/api/v1/permissions/cache/invalidate", headers={"X-User-Id": MEMBER}).status_code == 403
    assert client.post("/api/v1/permissions/cache/invalidate", headers={"X-User-Id": ADMIN}).status_code == 204


def test_require_action_rejects_unknown_action():
    with pytest.raises(ValueError):
        require_action("launchRockets")


# -- Health checks ---------------------------------------------------------------


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_ready_reports_configuration(client: TestClient):
    assert client.get("/ready").json()["status"] in {"ready", "unconfigured"}
