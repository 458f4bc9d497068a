"""Repository protocol for the inspection store.

The app factory accepts anything matching ``InspectionRepository``: the
in-memory store in local mode and tests, the Supabase repository elsewhere.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class InspectionRepository(Protocol):
    """Share-state reads and writes over inspection rows.

    Every owner-facing method filters on both ``id`` and ``inspector_id`` so
    a caller can never read or touch a row it does not own.
    """

    async def get_owned(
        self, inspection_id: str, owner_id: str,
    ) -> dict[str, Any] | None: ...

    async def update_share_state(
        self, inspection_id: str, owner_id: str, data: dict[str, Any],
    ) -> dict[str, Any] | None: ...

    async def find_shared(self, share_token: str) -> dict[str, Any] | None: ...

    async def list_selected_rooms(self, inspection_id: str) -> list[dict[str, Any]]: ...

    async def list_photos(self, inspection_id: str) -> list[dict[str, Any]]: ...
