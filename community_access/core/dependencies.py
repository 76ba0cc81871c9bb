"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Header, HTTPException, status
from community_access.database.supabase_client import get_supabase
from community_access.modules.permissions.engine import parse_action
from community_access.modules.permissions.role_source import RoleSource, SupabaseRoleSource
from community_access.modules.permissions.schemas import Action
from community_access.modules.permissions.service import PermissionService, build_cache
from supabase import Client
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

# Shared across requests; None unless ROLE_CACHE_TTL_SEC is set
_role_cache = build_cache()


def get_role_source(supabase: Client = Depends(get_supabase)) -> RoleSource:
    return SupabaseRoleSource(supabase)


def get_permission_service(source: RoleSource = Depends(get_role_source)) -> PermissionService:
    return PermissionService(source, cache=_role_cache)


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Acting user id as forwarded by the upstream gateway; None when signed out."""
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


def require_action(action: Union[Action, str]):
    """Factory function to create an action gate dependency"""
    parsed = parse_action(action)
    if parsed is None:
        raise ValueError(f"Unknown action: {action!r} (valid: {[a.value for a in Action]})")

    def check_action(
        user_id: Optional[str] = Depends(get_current_user_id),
        service: PermissionService = Depends(get_permission_service)
    ) -> Optional[str]:
        """Dependency to check if the acting user may perform the action"""
        decision = service.check(user_id, parsed)
        if not decision.allowed:
            logger.info(f"Action {parsed.value} denied for user {user_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=decision.reason
            )
        return user_id
    return check_action


def require_self_or_admin(
    user_id: str,
    caller_id: Optional[str] = Depends(get_current_user_id),
    service: PermissionService = Depends(get_permission_service)
) -> Optional[str]:
    """Dependency allowing a user to read their own records, or an admin to read anyone's"""
    if caller_id is not None and caller_id == user_id:
        return caller_id
    decision = service.check(caller_id, Action.ACCESS_ADMIN)
    if not decision.allowed:
        logger.info(f"User {caller_id} denied access to records of user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=decision.reason
        )
    return caller_id


def invalidate_role_cache(user_id: Optional[str] = None) -> None:
    """Drop cached tiers, e.g. after a role grant is revoked."""
    if _role_cache is not None:
        _role_cache.invalidate(user_id)
