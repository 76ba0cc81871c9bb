"""
Permission engine: allow/deny decisions per community action.

``check`` is pure and works on an already resolved tier. The ``can_*``
helpers resolve the user's tier fresh on every call and then delegate to
``check``. Every path returns a PermissionDecision; nothing is raised.
"""

import logging
from typing import Any, Dict, FrozenSet, Optional, Union

from community_access.config.permissions_config import (
    ACTIONS, GENERIC_FAILURE_REASON, UNKNOWN_ACTION_REASON
)
from community_access.modules.permissions.resolver import RoleLookup, RoleResolver
from community_access.modules.permissions.schemas import (
    Action, ActionContext, PermissionDecision, RoleTier
)

logger = logging.getLogger(__name__)


class ActionPolicy:
    """One row of the action table, with tiers parsed into RoleTier sets."""

    def __init__(self, action: Action, config: Dict[str, Any]):
        self.action = action
        self.description: str = config["description"]
        self.allowed_tiers: FrozenSet[RoleTier] = frozenset(RoleTier(t) for t in config["allowed_tiers"])
        self.owner_tiers: FrozenSet[RoleTier] = frozenset(RoleTier(t) for t in config.get("owner_tiers", []))
        reasons = config["denial_reasons"]
        self.guest_reason: str = reasons["guest"]
        self.insufficient_reason: str = reasons.get("insufficient") or reasons["guest"]

    @property
    def ownership_sensitive(self) -> bool:
        return bool(self.owner_tiers)

    def denial_reason(self, tier: RoleTier) -> str:
        if tier is RoleTier.GUEST:
            return self.guest_reason
        return self.insufficient_reason


def load_policies() -> Dict[Action, ActionPolicy]:
    return {Action(name): ActionPolicy(Action(name), config) for name, config in ACTIONS.items()}


def parse_action(action: Union[Action, str, None]) -> Optional[Action]:
    if isinstance(action, Action):
        return action
    try:
        return Action(action)
    except (ValueError, TypeError):
        return None


def _parse_tier(tier: Union[RoleTier, str, None]) -> Optional[RoleTier]:
    if isinstance(tier, RoleTier):
        return tier
    try:
        return RoleTier(tier)
    except (ValueError, TypeError):
        return None


def _owns_resource(context: Optional[ActionContext]) -> bool:
    if context is None:
        return False
    actor, author = context.actor_id, context.resource_author_id
    return bool(actor) and bool(author) and actor == author


class PermissionEngine:
    def __init__(self, resolver: RoleResolver, policies: Optional[Dict[Action, ActionPolicy]] = None):
        self.resolver = resolver
        self.policies = policies if policies is not None else load_policies()

    def check(
        self,
        action: Union[Action, str],
        tier: Union[RoleTier, str],
        context: Optional[ActionContext] = None,
    ) -> PermissionDecision:
        """Decide ``action`` for an actor of ``tier``. Pure; performs no I/O."""
        try:
            parsed_action = parse_action(action)
            policy = self.policies.get(parsed_action) if parsed_action else None
            if policy is None:
                return PermissionDecision.deny(UNKNOWN_ACTION_REASON)

            parsed_tier = _parse_tier(tier)
            if parsed_tier is None:
                logger.error(f"Unrecognised role tier {tier!r} while checking {policy.action.value}")
                return PermissionDecision.deny(GENERIC_FAILURE_REASON)

            if parsed_tier in policy.allowed_tiers:
                return PermissionDecision.allow()
            if parsed_tier in policy.owner_tiers and _owns_resource(context):
                return PermissionDecision.allow()

            logger.debug(f"Denied {policy.action.value} for tier {parsed_tier.value}")
            return PermissionDecision.deny(policy.denial_reason(parsed_tier))
        except Exception as e:
            logger.error(f"Error checking {action!r} permission: {e}")
            return PermissionDecision.deny(GENERIC_FAILURE_REASON)

    def decide(
        self,
        lookup: RoleLookup,
        action: Union[Action, str],
        context: Optional[ActionContext] = None,
    ) -> PermissionDecision:
        """Decide ``action`` from a lookup result; failed lookups deny."""
        if parse_action(action) not in self.policies:
            return PermissionDecision.deny(UNKNOWN_ACTION_REASON)
        if lookup.failed:
            return PermissionDecision.deny(GENERIC_FAILURE_REASON)
        return self.check(action, lookup.tier, context)

    def check_user(
        self,
        user_id: Any,
        action: Union[Action, str],
        context: Optional[ActionContext] = None,
    ) -> PermissionDecision:
        """Resolve ``user_id`` fresh and decide ``action`` for them."""
        try:
            lookup = self.resolver.lookup(user_id)
            return self.decide(lookup, action, context)
        except Exception as e:
            logger.error(f"Error checking {action!r} permission for user {user_id}: {e}")
            return PermissionDecision.deny(GENERIC_FAILURE_REASON)

    def can_create_post(self, user_id: Any) -> PermissionDecision:
        return self.check_user(user_id, Action.CREATE_POST)

    def can_manage_groups(self, user_id: Any) -> PermissionDecision:
        return self.check_user(user_id, Action.MANAGE_GROUPS)

    def can_view_members(self, user_id: Any) -> PermissionDecision:
        return self.check_user(user_id, Action.VIEW_MEMBERS)

    def can_access_admin(self, user_id: Any) -> PermissionDecision:
        return self.check_user(user_id, Action.ACCESS_ADMIN)

    def can_delete_post(self, user_id: Any, post_author_id: Optional[str]) -> PermissionDecision:
        """Admins may delete any post; members only their own.

        The caller supplies the post's author; the engine never looks it up.
        """
        context = ActionContext(
            actor_id=user_id if isinstance(user_id, str) else None,
            resource_author_id=post_author_id if isinstance(post_author_id, str) else None,
        )
        return self.check_user(user_id, Action.DELETE_POST, context)
