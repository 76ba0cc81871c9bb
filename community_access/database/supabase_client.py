from supabase import create_client, Client
from community_access.config import settings
from typing import Optional, Tuple

_client: Optional[Client] = None


def _credentials() -> Tuple[str, Optional[str]]:
    # service_role bypasses RLS so any user's grants are readable; anon key is the fallback
    return settings.supabase_url, settings.supabase_service_role_key or settings.supabase_key


def get_supabase() -> Client:
    global _client
    if _client is None:
        url, key = _credentials()
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and a Supabase key must be set")
        _client = create_client(url, key)
    return _client
