"""
Supabase Client Configuration
Provides clients for token validation and server-side table access.
"""

from functools import lru_cache

from supabase import Client, create_client

from farm_dashboard.config import settings


@lru_cache()
def get_supabase_client() -> Client:
    """Public client for token validation (uses anon key)."""
    return create_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache()
def get_supabase_admin_client() -> Client:
    """
    Admin client for server-side table access (uses service role key).

    Row level security does not apply to this client; every route that
    reaches it is gated by the role policy first.
    """
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
