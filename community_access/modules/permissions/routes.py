from fastapi import APIRouter, Depends, HTTPException
from community_access.config.permissions_config import POLICY_MATRIX
from community_access.modules.permissions.schemas import (
    Action, ActionPolicyResponse, CapabilitiesResponse, PermissionCheckRequest,
    PermissionCheckResponse, PermissionDecision, SingleCheckRequest,
    RoleTier, UserProfileResponse, UserRoleResponse
)
from community_access.modules.permissions.service import PermissionService
from community_access.core.dependencies import (
    get_permission_service,
    invalidate_role_cache,
    require_action,
    require_self_or_admin,
)
from typing import Dict, List, Optional

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("/actions", response_model=List[ActionPolicyResponse])
async def list_actions():
    """List every gated action and the tiers allowed to perform it"""
    return POLICY_MATRIX


@router.get("/users/{user_id}/role", response_model=UserRoleResponse)
async def get_user_role(
    user_id: str,
    service: PermissionService = Depends(get_permission_service)
):
    """Resolve a user's role tier"""
    tier = service.get_user_role(user_id)
    return UserRoleResponse(user_id=user_id, tier=tier, authenticated=tier is not RoleTier.GUEST)


@router.get("/users/{user_id}/profile", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: str,
    service: PermissionService = Depends(get_permission_service),
    _: Optional[str] = Depends(require_self_or_admin)
):
    """Get a user's profile with their effective roles"""
    profile = service.get_user_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User profile not found")
    return UserProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        is_active=profile.is_active,
        roles=profile.effective_roles(enforce_expiry=service.resolver.enforce_expiry),
    )


@router.get("/users/{user_id}/capabilities", response_model=CapabilitiesResponse)
async def get_user_capabilities(
    user_id: str,
    service: PermissionService = Depends(get_permission_service),
    _: Optional[str] = Depends(require_self_or_admin)
):
    """Admin-panel capabilities and role badge for a user"""
    return CapabilitiesResponse(
        user_id=user_id,
        display=service.get_role_display(user_id),
        capabilities=service.get_capabilities(user_id),
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permissions(
    request: PermissionCheckRequest,
    service: PermissionService = Depends(get_permission_service)
):
    """Evaluate several actions for one user with a single role lookup"""
    decisions = service.check_multiple(
        request.user_id, request.actions, resource_author_id=request.resource_author_id
    )
    return PermissionCheckResponse(user_id=request.user_id, decisions=decisions)


@router.post("/check/{action}", response_model=PermissionDecision)
async def check_permission(
    action: str,
    request: SingleCheckRequest,
    service: PermissionService = Depends(get_permission_service)
):
    """Evaluate one action; unknown actions are denied, not rejected"""
    return service.check(request.user_id, action, resource_author_id=request.resource_author_id)


@router.get("/admin/ping")
async def admin_ping(
    user_id: Optional[str] = Depends(require_action(Action.ACCESS_ADMIN))
) -> Dict[str, Optional[str]]:
    """Cheap probe the admin UI calls before rendering admin screens"""
    return {"status": "ok", "user_id": user_id}


@router.post("/cache/invalidate", status_code=204)
async def invalidate_cache(
    user_id: Optional[str] = None,
    _: Optional[str] = Depends(require_action(Action.ACCESS_ADMIN))
):
    """Drop cached role tiers (all, or a single user's) after a role change"""
    invalidate_role_cache(user_id)
