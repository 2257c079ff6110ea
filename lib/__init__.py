# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - sanitize.py: Key stripping, HTML escaping and query collapsing helpers
# - rate_limit_store.py: Fixed-window request counters
# - supervisor.py: Safety net for failures outside any request
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.rate_limit_store import RateLimitStore, WindowState
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.supervisor import ProcessSupervisor

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Rate limiting
    "RateLimitStore",
    "WindowState",
    # Supervision
    "ProcessSupervisor",
]
