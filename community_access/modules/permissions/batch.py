import logging
from typing import Any, Dict, Iterable, List, Optional

from community_access.config.permissions_config import GENERIC_FAILURE_REASON
from community_access.modules.permissions.engine import PermissionEngine
from community_access.modules.permissions.resolver import RoleLookup
from community_access.modules.permissions.schemas import ActionContext, PermissionDecision

logger = logging.getLogger(__name__)


def _distinct_names(actions: Optional[Iterable[Any]]) -> List[str]:
    names = []
    seen = set()
    for action in actions or []:
        key = action.value if hasattr(action, "value") else str(action)
        if key not in seen:
            seen.add(key)
            names.append(key)
    return names


class BatchEvaluator:
    """Evaluates several actions for one actor with a single role lookup."""

    def __init__(self, engine: PermissionEngine):
        self.engine = engine

    def check_multiple(
        self,
        user_id: Any,
        actions: Iterable[Any],
        context: Optional[ActionContext] = None,
    ) -> Dict[str, PermissionDecision]:
        """Return one decision per distinct requested action name.

        Repeated names are coalesced: the key appears once, in the position of
        its first occurrence, and is evaluated once. Unknown names are denied
        individually without affecting the other keys. When the role lookup
        fails every known action is denied with the generic failure reason.
        """
        names = _distinct_names(actions)
        if not names:
            return {}

        lookup = self.engine.resolver.lookup(user_id)
        if lookup.failed:
            logger.warning(f"Role lookup failed for batch check of user {user_id}; denying {len(names)} action(s)")
        return self.evaluate(lookup, names, context)

    def evaluate(
        self,
        lookup: RoleLookup,
        actions: Iterable[Any],
        context: Optional[ActionContext] = None,
    ) -> Dict[str, PermissionDecision]:
        """Decide every distinct action against an existing lookup."""
        names = _distinct_names(actions)
        user_id = lookup.user_id

        # ownership facts come from the caller; the actor is always this user
        context = ActionContext(
            actor_id=user_id if isinstance(user_id, str) else None,
            resource_author_id=context.resource_author_id if context is not None else None,
        )

        results: Dict[str, PermissionDecision] = {}
        for name in names:
            try:
                results[name] = self.engine.decide(lookup, name, context)
            except Exception as e:
                logger.error(f"Error checking {name!r} in batch for user {user_id}: {e}")
                results[name] = PermissionDecision.deny(GENERIC_FAILURE_REASON)
        return results
