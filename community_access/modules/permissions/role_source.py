"""
Role sources: where role grants are read from.

A source answers one question, "which profile and grants does this user have",
with three outcomes: a UserProfile, None when the user has no profile, or a
RoleLookupError when the answer could not be obtained.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from pydantic import ValidationError
from supabase import Client

from community_access.modules.permissions.schemas import RoleGrant, UserProfile

logger = logging.getLogger(__name__)

PROFILE_WITH_GRANTS = "id, email, full_name, is_active, user_roles(role, is_active, expires_at, granted_at)"


class RoleLookupError(Exception):
    """The role source could not be read or returned unusable data."""

    def __init__(self, user_id: Any, message: str):
        super().__init__(message)
        self.user_id = user_id
        self.message = message


@runtime_checkable
class RoleSource(Protocol):
    def fetch_profile(self, user_id: str) -> Optional[UserProfile]: ...


def build_profile(user_id: Any, row: Dict[str, Any]) -> UserProfile:
    """Validate a profiles row with embedded user_roles into a UserProfile."""
    try:
        grant_rows = row.get("user_roles") or []
        if isinstance(grant_rows, dict):
            grant_rows = [grant_rows]
        return UserProfile(
            id=str(row["id"]),
            email=row.get("email"),
            full_name=row.get("full_name"),
            is_active=row.get("is_active", True),
            grants=[RoleGrant(**g) for g in grant_rows],
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise RoleLookupError(user_id, f"Malformed profile record: {e}") from e


class SupabaseRoleSource:
    """Reads profiles and their user_roles rows through PostgREST."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def fetch_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            result = self.supabase.table("profiles")\
                .select(PROFILE_WITH_GRANTS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise RoleLookupError(user_id, f"Role source query failed: {e}") from e

        rows = getattr(result, "data", None)
        if not rows:
            logger.debug(f"No profile found for user {user_id}")
            return None
        if not isinstance(rows, list):
            raise RoleLookupError(user_id, f"Unexpected profile payload type: {type(rows).__name__}")
        return build_profile(user_id, rows[0])


class InMemoryRoleSource:
    """Dict-backed role source for tests, seeding and local runs."""

    def __init__(self, profiles: Optional[Iterable[UserProfile]] = None):
        self._profiles: Dict[str, UserProfile] = {}
        self.calls: List[str] = []
        for profile in profiles or []:
            self.put(profile)

    def put(self, profile: UserProfile) -> None:
        self._profiles[profile.id] = profile

    def remove(self, user_id: str) -> None:
        self._profiles.pop(user_id, None)

    def fetch_profile(self, user_id: str) -> Optional[UserProfile]:
        self.calls.append(user_id)
        return self._profiles.get(user_id)
