# Supabase (auth / storage / REST) Integration
from integrations.supabase.client import (
    SupabaseClient,
    get_supabase_client,
    close_supabase_client,
)
from integrations.supabase.session import (
    Session,
    SessionManager,
    SessionConfigError,
    parse_callback_fragment,
)

__all__ = [
    "SupabaseClient",
    "get_supabase_client",
    "close_supabase_client",
    "Session",
    "SessionManager",
    "SessionConfigError",
    "parse_callback_fragment",
]
