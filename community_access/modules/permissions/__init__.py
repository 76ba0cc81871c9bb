"""Role resolution, permission engine and batch evaluation."""

from community_access.modules.permissions.batch import BatchEvaluator
from community_access.modules.permissions.engine import PermissionEngine
from community_access.modules.permissions.resolver import RoleLookup, RoleResolver, RoleTierCache
from community_access.modules.permissions.role_source import (
    InMemoryRoleSource, RoleLookupError, RoleSource, SupabaseRoleSource
)
from community_access.modules.permissions.schemas import (
    Action, ActionContext, GrantRole, PermissionDecision, RoleGrant, RoleTier, UserProfile
)
from community_access.modules.permissions.service import PermissionService

__all__ = [
    "Action",
    "ActionContext",
    "BatchEvaluator",
    "GrantRole",
    "InMemoryRoleSource",
    "PermissionDecision",
    "PermissionEngine",
    "PermissionService",
    "RoleGrant",
    "RoleLookup",
    "RoleLookupError",
    "RoleResolver",
    "RoleSource",
    "RoleTier",
    "RoleTierCache",
    "SupabaseRoleSource",
    "UserProfile",
]
