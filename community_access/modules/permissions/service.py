import logging
from typing import Any, Dict, Iterable, List, Optional

from community_access.config import settings
from community_access.config.permissions_config import ROLE_CAPABILITIES, ROLE_DISPLAY
from community_access.modules.permissions.batch import BatchEvaluator
from community_access.modules.permissions.engine import PermissionEngine
from community_access.modules.permissions.resolver import RoleLookup, RoleResolver, RoleTierCache
from community_access.modules.permissions.role_source import RoleSource
from community_access.modules.permissions.schemas import (
    ActionContext, GrantRole, PermissionDecision, RoleCapabilities, RoleDisplay,
    RoleTier, UserProfile
)

logger = logging.getLogger(__name__)

# Highest raw role first; used where super_admin must stay distinct from admin
_ROLE_PRECEDENCE = [GrantRole.SUPER_ADMIN, GrantRole.ADMIN, GrantRole.MODERATOR, GrantRole.USER]


def _as_id(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def capability_key(roles: Iterable[GrantRole]) -> str:
    """Key into ROLE_CAPABILITIES for a set of effective raw roles."""
    held = set(roles)
    if GrantRole.SUPER_ADMIN in held:
        return "super_admin"
    if GrantRole.ADMIN in held:
        return "admin"
    return "member"


def highest_role(roles: Iterable[GrantRole]) -> Optional[GrantRole]:
    held = set(roles)
    for role in _ROLE_PRECEDENCE:
        if role in held:
            return role
    return None


class PermissionService:
    """Role resolution, single checks and batch checks over one role source."""

    def __init__(
        self,
        source: RoleSource,
        enforce_expiry: Optional[bool] = None,
        cache: Optional[RoleTierCache] = None,
    ):
        if enforce_expiry is None:
            enforce_expiry = settings.enforce_grant_expiry
        self.resolver = RoleResolver(source, enforce_expiry=enforce_expiry, cache=cache)
        self.engine = PermissionEngine(self.resolver)
        self.batch = BatchEvaluator(self.engine)

    def get_user_role(self, user_id: Any) -> RoleTier:
        return self.resolver.resolve(user_id)

    def is_authenticated(self, user_id: Any) -> bool:
        """True when the user resolves to any tier above guest."""
        return self.get_user_role(user_id) is not RoleTier.GUEST

    def can_create_post(self, user_id: Any) -> PermissionDecision:
        return self.engine.can_create_post(user_id)

    def can_manage_groups(self, user_id: Any) -> PermissionDecision:
        return self.engine.can_manage_groups(user_id)

    def can_view_members(self, user_id: Any) -> PermissionDecision:
        return self.engine.can_view_members(user_id)

    def can_delete_post(self, user_id: Any, post_author_id: Optional[str]) -> PermissionDecision:
        return self.engine.can_delete_post(user_id, post_author_id)

    def can_access_admin(self, user_id: Any) -> PermissionDecision:
        return self.engine.can_access_admin(user_id)

    def check(
        self,
        user_id: Any,
        action: Any,
        resource_author_id: Optional[str] = None,
    ) -> PermissionDecision:
        context = ActionContext(actor_id=_as_id(user_id), resource_author_id=_as_id(resource_author_id))
        return self.engine.check_user(user_id, action, context)

    def check_multiple(
        self,
        user_id: Any,
        actions: Iterable[Any],
        resource_author_id: Optional[str] = None,
    ) -> Dict[str, PermissionDecision]:
        return self.batch.check_multiple(
            user_id, actions, ActionContext(resource_author_id=_as_id(resource_author_id))
        )

    def get_user_profile(self, user_id: Any) -> Optional[UserProfile]:
        """Profile with grants for display; None when missing or unreadable."""
        lookup = self.resolver.lookup(user_id)
        if lookup.failed:
            return None
        return lookup.profile

    def effective_roles(self, lookup: RoleLookup) -> List[GrantRole]:
        if lookup.profile is None or not lookup.profile.is_active:
            return []
        return lookup.profile.effective_roles(enforce_expiry=self.resolver.enforce_expiry)

    def get_capabilities(self, user_id: Any) -> RoleCapabilities:
        return self.capabilities_for(self.resolver.lookup(user_id))

    def get_role_display(self, user_id: Any) -> RoleDisplay:
        return self.display_for(self.resolver.lookup(user_id))

    def capabilities_for(self, lookup: RoleLookup) -> RoleCapabilities:
        if lookup.failed:
            return RoleCapabilities()
        key = capability_key(self.effective_roles(lookup))
        return RoleCapabilities(**ROLE_CAPABILITIES[key])

    def display_for(self, lookup: RoleLookup) -> RoleDisplay:
        role = highest_role(self.effective_roles(lookup))
        if role in (GrantRole.SUPER_ADMIN, GrantRole.ADMIN):
            key = role.value
        elif role is not None:
            key = "member"
        else:
            key = "guest"
        return RoleDisplay(**ROLE_DISPLAY[key])


def build_cache() -> Optional[RoleTierCache]:
    """Role cache per settings, or None when caching is disabled."""
    if not settings.role_cache_enabled:
        return None
    return RoleTierCache(settings.role_cache_ttl_sec, settings.role_cache_max_size)
