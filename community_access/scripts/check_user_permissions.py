"""
Check User Permissions Script
Prints a user's profile, role tier, admin capabilities and the decision for
every gated action. Useful when a user reports a missing button or a
"not allowed" alert.

Usage: python -m community_access.scripts.check_user_permissions <user_id> [--author-id ID]
"""

import argparse
import logging
import sys
from typing import List, Optional

from community_access.config.permissions_config import ACTIONS
from community_access.database.supabase_client import get_supabase
from community_access.modules.permissions.role_source import RoleSource, SupabaseRoleSource
from community_access.modules.permissions.schemas import ActionContext
from community_access.modules.permissions.service import PermissionService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def report(source: RoleSource, user_id: str, author_id: Optional[str] = None) -> List[str]:
    """Build the report lines for one user"""
    service = PermissionService(source)
    lines = [f"User: {user_id}"]

    lookup = service.resolver.lookup(user_id)
    if lookup.failed:
        lines.append(f"  Lookup failed: {lookup.error.message}")
    elif lookup.profile is None:
        lines.append("  Profile: not found")
    else:
        profile = lookup.profile
        lines.append(f"  Email: {profile.email or '-'}")
        lines.append(f"  Full name: {profile.full_name or '-'}")
        lines.append(f"  Profile active: {profile.is_active}")
        for grant in profile.grants:
            expiry = grant.expires_at.isoformat() if grant.expires_at else "never"
            state = "effective" if grant.is_effective(enforce_expiry=service.resolver.enforce_expiry) else "ignored"
            lines.append(f"  Grant: {grant.role.value} (active={grant.is_active}, expires={expiry}) -> {state}")

    lines.append(f"  Tier: {lookup.tier.value}")
    display = service.display_for(lookup)
    lines.append(f"  Badge: {display.label}")

    capabilities = service.capabilities_for(lookup)
    granted = [name for name, value in capabilities.model_dump().items() if value]
    lines.append(f"  Capabilities: {', '.join(granted) if granted else 'none'}")

    # every line below comes from the one lookup above
    decisions = service.batch.evaluate(lookup, list(ACTIONS), ActionContext(resource_author_id=author_id))
    for action, decision in decisions.items():
        if decision.allowed:
            lines.append(f"  {action}: allowed")
        else:
            lines.append(f"  {action}: denied ({decision.reason})")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Show role tier and permission decisions for a user")
    parser.add_argument("user_id", help="profiles.id of the user to inspect")
    parser.add_argument("--author-id", default=None, help="post author id used for the deletePost check")
    args = parser.parse_args(argv)

    try:
        source = SupabaseRoleSource(get_supabase())
    except Exception as e:
        logger.error(f"Could not create Supabase client: {e}")
        return 1

    for line in report(source, args.user_id, args.author_id):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
