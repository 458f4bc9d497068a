"""Read-only inspection report served to share-link holders.

Only descriptive columns leave the service: the share token, the share
flag and the inspector id are dropped from the payload.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from pydantic import BaseModel, Field

INSPECTION_TYPE_LABELS = {
    'entry': 'Move-In Inspection',
    'exit': 'Move-Out Inspection',
    'routine': 'Routine Inspection',
}
DEFAULT_INSPECTION_TYPE_LABEL = 'Property Inspection'


def inspection_type_label(inspection_type: str | None) -> str:
    return INSPECTION_TYPE_LABELS.get(inspection_type or '', DEFAULT_INSPECTION_TYPE_LABEL)


class SharedPhoto(BaseModel):
    id: str
    public_url: str | None = None
    description: str | None = None
    capture_method: str | None = None
    created_at: str | None = None


class SharedRoom(BaseModel):
    id: str
    room_name: str | None = None
    room_type: str | None = None
    is_completed: bool = False
    notes: str | None = None
    comments: str | None = None
    photos: list[SharedPhoto] = Field(default_factory=list)


class SharedInspection(BaseModel):
    id: str
    address: str | None = None
    inspection_type: str | None = None
    inspection_type_label: str = DEFAULT_INSPECTION_TYPE_LABEL
    owner_name: str | None = None
    tenant_name: str | None = None
    inspection_date: str | None = None
    status: str | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class SharedInspectionReport(BaseModel):
    inspection: SharedInspection
    rooms: list[SharedRoom]
    completed_rooms: int
    total_rooms: int
    completion_percent: int


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def completion_percent(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(completed * 100 / total)


def build_shared_report(
    inspection: dict[str, Any],
    rooms: list[dict[str, Any]],
    photos: list[dict[str, Any]],
) -> SharedInspectionReport:
    """Assemble the shared report from raw store rows.

    Photos are grouped under their room; photos whose room is not in
    ``rooms`` (unselected or deleted) are dropped.
    """
    photos_by_room: dict[str, list[SharedPhoto]] = defaultdict(list)
    for photo in photos:
        photos_by_room[str(photo.get('room_id'))].append(
            SharedPhoto(
                id=str(photo['id']),
                public_url=photo.get('public_url'),
                description=photo.get('description'),
                capture_method=photo.get('capture_method'),
                created_at=_text(photo.get('created_at')),
            )
        )

    shared_rooms = [
        SharedRoom(
            id=str(room['id']),
            room_name=room.get('room_name'),
            room_type=room.get('room_type'),
            is_completed=room.get('is_completed') is True,
            notes=room.get('notes'),
            comments=room.get('comments'),
            photos=photos_by_room.get(str(room['id']), []),
        )
        for room in rooms
    ]
    completed = sum(1 for room in shared_rooms if room.is_completed)

    summary = SharedInspection(
        id=str(inspection['id']),
        address=inspection.get('address'),
        inspection_type=inspection.get('inspection_type'),
        inspection_type_label=inspection_type_label(inspection.get('inspection_type')),
        owner_name=inspection.get('owner_name'),
        tenant_name=inspection.get('tenant_name'),
        inspection_date=_text(inspection.get('inspection_date')),
        status=inspection.get('status'),
        notes=inspection.get('notes'),
        created_at=_text(inspection.get('created_at')),
        updated_at=_text(inspection.get('updated_at')),
    )

    return SharedInspectionReport(
        inspection=summary,
        rooms=shared_rooms,
        completed_rooms=completed,
        total_rooms=len(shared_rooms),
        completion_percent=completion_percent(completed, len(shared_rooms)),
    )
