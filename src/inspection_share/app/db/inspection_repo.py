"""Supabase-backed InspectionRepository.

Reads and updates ``public.inspections`` (plus ``rooms`` and ``photos`` on
the shared read path) through the PostgREST client.

Ownership is enforced in the query itself: owner reads and share-state
updates always carry ``inspector_id=eq.<caller>`` next to ``id=eq.<id>``.
"""

from __future__ import annotations

import uuid
from typing import Any

from .supabase_client import SupabaseClient

SHARE_COLUMNS = "id,inspector_id,share_token,share_enabled,shared_at"


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class SupabaseInspectionRepository:
    """InspectionRepository over the hosted Postgres tables."""

    INSPECTIONS = "inspections"
    ROOMS = "rooms"
    PHOTOS = "photos"

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_owned(
        self, inspection_id: str, owner_id: str,
    ) -> dict[str, Any] | None:
        # The id column is a uuid; PostgREST answers 400 for anything else.
        if not _is_uuid(inspection_id):
            return None
        rows = await self._client.select(
            self.INSPECTIONS,
            filters={
                "id": ("eq", inspection_id),
                "inspector_id": ("eq", owner_id),
            },
            columns=SHARE_COLUMNS,
            limit=1,
        )
        return rows[0] if rows else None

    async def update_share_state(
        self, inspection_id: str, owner_id: str, data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Apply ``data`` in one PATCH. Returns the row, or None if none matched."""
        if not _is_uuid(inspection_id):
            return None
        rows = await self._client.update(
            self.INSPECTIONS,
            filters={
                "id": ("eq", inspection_id),
                "inspector_id": ("eq", owner_id),
            },
            data=data,
        )
        return rows[0] if rows else None

    async def find_shared(self, share_token: str) -> dict[str, Any] | None:
        rows = await self._client.select(
            self.INSPECTIONS,
            filters={
                "share_token": ("eq", share_token),
                "share_enabled": ("is", True),
            },
            limit=1,
        )
        return rows[0] if rows else None

    async def list_selected_rooms(self, inspection_id: str) -> list[dict[str, Any]]:
        return await self._client.select(
            self.ROOMS,
            filters={
                "inspection_id": ("eq", inspection_id),
                "is_selected": ("is", True),
            },
            order="created_at.asc",
        )

    async def list_photos(self, inspection_id: str) -> list[dict[str, Any]]:
        return await self._client.select(
            self.PHOTOS,
            filters={"inspection_id": ("eq", inspection_id)},
            order="created_at.asc",
        )
