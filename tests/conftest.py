"""Shared test fixtures for community_access."""

from datetime import datetime, timedelta, timezone

import pytest

from community_access.modules.permissions.role_source import InMemoryRoleSource, RoleLookupError
from community_access.modules.permissions.schemas import RoleGrant, UserProfile
from community_access.modules.permissions.service import PermissionService

ADMIN = "admin-test-user-id"
MEMBER = "member-test-user-id"
GUEST = "guest-test-user-id"
INACTIVE = "inactive-test-user-id"
SUPER_ADMIN = "super-admin-test-user-id"
MODERATOR = "moderator-test-user-id"
EXPIRED_ADMIN = "expired-admin-test-user-id"
DISABLED_PROFILE = "disabled-profile-test-user-id"


def make_profile(user_id, *grants, is_active=True):
    return UserProfile(
        id=user_id,
        email=f"{user_id}@test.com",
        full_name=user_id.replace("-", " ").title(),
        is_active=is_active,
        grants=list(grants),
    )


class FailingRoleSource:
    """Role source whose every read fails."""

    def __init__(self, exc=None):
        self.exc = exc
        self.calls = []

    def fetch_profile(self, user_id):
        self.calls.append(user_id)
        if self.exc is not None:
            raise self.exc
        raise RoleLookupError(user_id, "connection refused")


@pytest.fixture
def yesterday():
    return datetime.now(timezone.utc) - timedelta(days=1)


@pytest.fixture
def tomorrow():
    return datetime.now(timezone.utc) + timedelta(days=1)


@pytest.fixture
def role_source(yesterday):
    """Profiles for every tier; GUEST deliberately has no profile."""
    return InMemoryRoleSource([
        make_profile(ADMIN, RoleGrant(role="admin", is_active=True)),
        make_profile(MEMBER, RoleGrant(role="user", is_active=True)),
        make_profile(INACTIVE, RoleGrant(role="user", is_active=False)),
        make_profile(SUPER_ADMIN, RoleGrant(role="super_admin"), RoleGrant(role="user")),
        make_profile(MODERATOR, RoleGrant(role="moderator")),
        make_profile(
            EXPIRED_ADMIN,
            RoleGrant(role="admin", is_active=True, expires_at=yesterday),
            RoleGrant(role="user"),
        ),
        make_profile(DISABLED_PROFILE, RoleGrant(role="admin"), is_active=False),
    ])


@pytest.fixture
def failing_source():
    return FailingRoleSource()


@pytest.fixture
def service(role_source):
    return PermissionService(role_source, enforce_expiry=True)


@pytest.fixture
def failing_service(failing_source):
    return PermissionService(failing_source, enforce_expiry=True)
