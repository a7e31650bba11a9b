from __future__ import annotations

from functools import lru_cache

from scm.config import settings
from scm.services.local_identity_provider import LocalIdentityProvider
from scm.services.supabase_identity_provider import SupabaseIdentityProvider


@lru_cache(maxsize=1)
def get_identity_provider():
    provider = settings.identity_provider.strip().lower()
    if provider == 'supabase':
        return SupabaseIdentityProvider()
    return LocalIdentityProvider()
