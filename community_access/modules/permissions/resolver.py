import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from community_access.modules.permissions.role_source import RoleLookupError, RoleSource
from community_access.modules.permissions.schemas import (
    RoleGrant, RoleTier, UserProfile, collapse_grant_role
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleLookup:
    """Outcome of one role resolution.

    ``found`` is False both for unknown users and for failed lookups; ``error``
    tells the two apart. ``tier`` is always set and is ``guest`` unless a
    profile was read successfully.
    """

    user_id: Any
    tier: RoleTier
    found: bool = False
    profile: Optional[UserProfile] = None
    error: Optional[RoleLookupError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def tier_for_grants(
    grants: Iterable[RoleGrant],
    now: Optional[datetime] = None,
    enforce_expiry: bool = True,
) -> RoleTier:
    """Collapse a grant set to its highest tier. Deterministic for a fixed input."""
    tier = RoleTier.GUEST
    for grant in grants:
        if not grant.is_effective(now, enforce_expiry):
            continue
        candidate = collapse_grant_role(grant.role)
        if candidate.rank > tier.rank:
            tier = candidate
    return tier


class RoleTierCache:
    """Bounded TTL cache of successful lookups, keyed by user id."""

    def __init__(self, ttl_sec: float, max_size: int):
        self.ttl_sec = ttl_sec
        self.max_size = max_size
        self._entries: Dict[str, Tuple[RoleLookup, float]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[RoleLookup]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            lookup, expiry = entry
            if now >= expiry:
                del self._entries[user_id]
                return None
            return lookup

    def put(self, lookup: RoleLookup) -> None:
        now = time.monotonic()
        with self._lock:
            if len(self._entries) >= self.max_size:
                self._evict_expired(now)
            if len(self._entries) < self.max_size:
                self._entries[lookup.user_id] = (lookup, now + self.ttl_sec)

    def invalidate(self, user_id: Optional[str] = None) -> None:
        with self._lock:
            if user_id is None:
                self._entries.clear()
            else:
                self._entries.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self, now: float) -> None:
        for key in [k for k, (_, expiry) in self._entries.items() if now >= expiry]:
            del self._entries[key]


class RoleResolver:
    """Turns a user id into exactly one RoleTier without ever raising."""

    def __init__(
        self,
        source: RoleSource,
        enforce_expiry: bool = True,
        cache: Optional[RoleTierCache] = None,
    ):
        self.source = source
        self.enforce_expiry = enforce_expiry
        self.cache = cache

    def lookup(self, user_id: Any) -> RoleLookup:
        if not isinstance(user_id, str) or not user_id.strip():
            return RoleLookup(user_id=user_id, tier=RoleTier.GUEST)

        if self.cache is not None:
            cached = self.cache.get(user_id)
            if cached is not None:
                return cached

        try:
            profile = self.source.fetch_profile(user_id)
        except RoleLookupError as e:
            logger.error(f"Error determining role for user {user_id}: {e.message}")
            return RoleLookup(user_id=user_id, tier=RoleTier.GUEST, error=e)
        except Exception as e:
            logger.error(f"Unexpected role source failure for user {user_id}: {e}")
            error = RoleLookupError(user_id, f"Role source failure: {e}")
            error.__cause__ = e
            return RoleLookup(user_id=user_id, tier=RoleTier.GUEST, error=error)

        if profile is None:
            logger.warning(f"User profile not found: {user_id}")
            lookup = RoleLookup(user_id=user_id, tier=RoleTier.GUEST)
        elif not profile.is_active:
            logger.warning(f"User profile inactive: {user_id}")
            lookup = RoleLookup(user_id=user_id, tier=RoleTier.GUEST, found=True, profile=profile)
        else:
            tier = tier_for_grants(profile.grants, enforce_expiry=self.enforce_expiry)
            lookup = RoleLookup(user_id=user_id, tier=tier, found=True, profile=profile)

        if self.cache is not None:
            self.cache.put(lookup)
        return lookup

    def resolve(self, user_id: Any) -> RoleTier:
        return self.lookup(user_id).tier

    def invalidate(self, user_id: Optional[str] = None) -> None:
        """Drop cached tiers so a role change applies on the next check."""
        if self.cache is not None:
            self.cache.invalidate(user_id)
