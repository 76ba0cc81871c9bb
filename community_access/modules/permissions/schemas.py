from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime, timezone
from enum import Enum

from community_access.config.permissions_config import TIERS


class GrantRole(str, Enum):
    """Raw role stored on a user_roles row."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class RoleTier(str, Enum):
    """Collapsed privilege level every permission check works with."""

    GUEST = "guest"
    MEMBER = "member"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return TIERS.index(self.value)


class Action(str, Enum):
    CREATE_POST = "createPost"
    MANAGE_GROUPS = "manageGroups"
    VIEW_MEMBERS = "viewMembers"
    DELETE_POST = "deletePost"
    ACCESS_ADMIN = "accessAdmin"


def collapse_grant_role(role: GrantRole) -> RoleTier:
    """Map a raw grant role onto its tier.

    super_admin and admin share the admin tier; the distinction survives only
    in role capabilities (see PermissionService.get_capabilities).
    """
    if role is GrantRole.SUPER_ADMIN:
        return RoleTier.ADMIN
    if role is GrantRole.ADMIN:
        return RoleTier.ADMIN
    if role is GrantRole.MODERATOR:
        return RoleTier.MEMBER
    if role is GrantRole.USER:
        return RoleTier.MEMBER
    raise ValueError(f"Unhandled grant role: {role!r}")


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RoleGrant(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: GrantRole
    is_active: bool = True
    expires_at: Optional[datetime] = None
    granted_at: Optional[datetime] = None

    @field_validator("is_active", mode="before")
    @classmethod
    def _null_is_inactive(cls, value):
        return False if value is None else value

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = _utc(now) if now is not None else datetime.now(timezone.utc)
        return _utc(self.expires_at) <= now

    def is_effective(self, now: Optional[datetime] = None, enforce_expiry: bool = True) -> bool:
        if not self.is_active:
            return False
        if enforce_expiry and self.is_expired(now):
            return False
        return True


class UserProfile(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_active: bool = True
    grants: List[RoleGrant] = Field(default_factory=list)

    @field_validator("is_active", mode="before")
    @classmethod
    def _null_is_inactive(cls, value):
        return False if value is None else value

    def effective_roles(self, now: Optional[datetime] = None, enforce_expiry: bool = True) -> List[GrantRole]:
        """Roles of the grants that currently count, in stored order."""
        return [g.role for g in self.grants if g.is_effective(now, enforce_expiry)]


class PermissionDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _reason_matches_outcome(self):
        if self.allowed and self.reason:
            raise ValueError("An allowed decision carries no reason")
        if not self.allowed and not (self.reason and self.reason.strip()):
            raise ValueError("A denied decision needs a user-facing reason")
        return self

    @classmethod
    def allow(cls) -> "PermissionDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "PermissionDecision":
        return cls(allowed=False, reason=reason)


class ActionContext(BaseModel):
    """Per-call facts for ownership-sensitive actions."""

    actor_id: Optional[str] = None
    resource_author_id: Optional[str] = None


class RoleCapabilities(BaseModel):
    can_access_admin: bool = False
    can_manage_users: bool = False
    can_manage_content: bool = False
    can_view_reports: bool = False
    can_manage_system: bool = False
    can_view_analytics: bool = False


class RoleDisplay(BaseModel):
    label: str
    color: str


# API request/response models

class PermissionCheckRequest(BaseModel):
    user_id: Optional[str] = None
    actions: List[str]
    resource_author_id: Optional[str] = None


class SingleCheckRequest(BaseModel):
    user_id: Optional[str] = None
    resource_author_id: Optional[str] = None


class PermissionCheckResponse(BaseModel):
    user_id: Optional[str] = None
    decisions: Dict[str, PermissionDecision]


class UserRoleResponse(BaseModel):
    user_id: str
    tier: RoleTier
    authenticated: bool


class UserProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_active: bool
    roles: List[GrantRole]


class CapabilitiesResponse(BaseModel):
    user_id: str
    display: RoleDisplay
    capabilities: RoleCapabilities


class ActionPolicyResponse(BaseModel):
    action: str
    description: str
    allowed_tiers: List[RoleTier]
    owner_tiers: List[RoleTier]
