"""Error hierarchy for PostgREST calls against the inspection store.

These stay free of httpx types so repositories can raise and callers can
catch them without holding on to response objects (or the service key).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class SupabaseError(Exception):
    """A PostgREST request was rejected by the store.

    Mutable and hashable by identity: context managers reassign
    ``__traceback__`` on exceptions passing through them.
    """

    status_code: int
    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None

    def __str__(self) -> str:
        bits: list[str] = [f"{type(self).__name__}(status={self.status_code})", self.message]
        if self.code:
            bits.append(f"code={self.code}")
        if self.details:
            bits.append(f"details={self.details}")
        return " ".join(bits)


class SupabaseAuthError(SupabaseError):
    """401/403 from PostgREST (bad service key, RLS denial)."""


class SupabaseNotFoundError(SupabaseError):
    """404 from PostgREST (unknown table or route, not an empty result)."""


class SupabaseConflictError(SupabaseError):
    """409 from PostgREST (unique violation on share_token, etc.)."""


class SupabaseUnavailableError(SupabaseError):
    """The store could not be reached (connect failure, timeout)."""
