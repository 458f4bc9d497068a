"""DB helpers for the inspection store (Supabase PostgREST)."""

from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
    SupabaseUnavailableError,
)
from .inspection_repo import SupabaseInspectionRepository
from .supabase_client import PostgrestFilter, SupabaseClient, close_shared_async_client

__all__ = [
    "PostgrestFilter",
    "SupabaseAuthError",
    "SupabaseClient",
    "SupabaseConflictError",
    "SupabaseError",
    "SupabaseInspectionRepository",
    "SupabaseNotFoundError",
    "SupabaseUnavailableError",
    "close_shared_async_client",
]
