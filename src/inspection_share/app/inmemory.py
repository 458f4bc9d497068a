"""In-memory InspectionRepository for local development and tests.

Used when ENVIRONMENT=local. Rows live in dicts and vanish on restart.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any


class InMemoryInspectionRepository:
    def __init__(self) -> None:
        self._inspections: dict[str, dict[str, Any]] = {}
        self._rooms: list[dict[str, Any]] = []
        self._photos: list[dict[str, Any]] = []

    # ── Seeding (stands in for the inspection CRUD subsystem) ──────

    def add_inspection(self, data: dict[str, Any]) -> dict[str, Any]:
        inspection_id = data.get("id") or str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()
        row = {
            "id": inspection_id,
            "share_token": None,
            "share_enabled": False,
            "shared_at": None,
            "created_at": now,
            "updated_at": now,
            **data,
        }
        row["id"] = inspection_id
        self._inspections[inspection_id] = row
        return dict(row)

    def add_room(self, inspection_id: str, data: dict[str, Any]) -> dict[str, Any]:
        room = {
            "id": data.get("id") or str(uuid.uuid4()),
            "inspection_id": inspection_id,
            "is_selected": True,
            "is_completed": False,
            "created_at": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        self._rooms.append(room)
        return dict(room)

    def add_photo(
        self, inspection_id: str, room_id: str, data: dict[str, Any],
    ) -> dict[str, Any]:
        photo = {
            "id": data.get("id") or str(uuid.uuid4()),
            "inspection_id": inspection_id,
            "room_id": room_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        self._photos.append(photo)
        return dict(photo)

    def raw(self, inspection_id: str) -> dict[str, Any] | None:
        """Return a copy of the stored row, ignoring ownership."""
        row = self._inspections.get(inspection_id)
        return dict(row) if row is not None else None

    # ── InspectionRepository ───────────────────────────────────────

    async def get_owned(
        self, inspection_id: str, owner_id: str,
    ) -> dict[str, Any] | None:
        row = self._inspections.get(inspection_id)
        if row is None or row.get("inspector_id") != owner_id:
            return None
        return dict(row)

    async def update_share_state(
        self, inspection_id: str, owner_id: str, data: dict[str, Any],
    ) -> dict[str, Any] | None:
        row = self._inspections.get(inspection_id)
        if row is None or row.get("inspector_id") != owner_id:
            return None
        row.update(data)
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        return dict(row)

    async def find_shared(self, share_token: str) -> dict[str, Any] | None:
        for row in self._inspections.values():
            if row.get("share_token") == share_token and row.get("share_enabled") is True:
                return dict(row)
        return None

    async def list_selected_rooms(self, inspection_id: str) -> list[dict[str, Any]]:
        rooms = [
            dict(r) for r in self._rooms
            if r["inspection_id"] == inspection_id and r.get("is_selected") is True
        ]
        return sorted(rooms, key=lambda r: r.get("created_at") or "")

    async def list_photos(self, inspection_id: str) -> list[dict[str, Any]]:
        photos = [dict(p) for p in self._photos if p["inspection_id"] == inspection_id]
        return sorted(photos, key=lambda p: p.get("created_at") or "")
