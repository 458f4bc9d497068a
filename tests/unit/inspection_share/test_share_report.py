"""Shared report aggregation."""

from __future__ import annotations

from inspection_share.app.sharing.report import (
    build_shared_report,
    completion_percent,
    inspection_type_label,
)

INSPECTION = {
    'id': 'insp-1',
    'inspector_id': 'user-1',
    'share_token': 'a' * 64,
    'share_enabled': True,
    'shared_at': '2026-10-18T12:00:00+00:00',
    'address': '12 Harbour St, Sydney',
    'inspection_type': 'entry',
    'owner_name': 'P. Owner',
    'tenant_name': None,
    'inspection_date': '2026-10-17',
    'status': 'in_progress',
    'notes': 'Keys with agent',
    'created_at': '2026-10-16T09:00:00+00:00',
}


def _rooms():
    return [
        {'id': 'room-1', 'room_name': 'Kitchen', 'room_type': 'standard', 'is_completed': True},
        {'id': 'room-2', 'room_name': 'Bathroom', 'room_type': 'standard', 'is_completed': False},
        {'id': 'room-3', 'room_name': 'Garage', 'room_type': 'custom', 'is_completed': True},
    ]


def _photos():
    return [
        {'id': 'ph-1', 'room_id': 'room-1', 'public_url': 'https://cdn/1.jpg', 'capture_method': 'camera'},
        {'id': 'ph-2', 'room_id': 'room-1', 'public_url': 'https://cdn/2.jpg', 'capture_method': 'upload'},
        {'id': 'ph-3', 'room_id': 'room-2', 'public_url': 'https://cdn/3.jpg'},
        {'id': 'ph-4', 'room_id': 'room-unselected', 'public_url': 'https://cdn/4.jpg'},
    ]


class TestInspectionTypeLabel:
    def test_known_types(self):
        assert inspection_type_label('entry') == 'Move-In Inspection'
        assert inspection_type_label('exit') == 'Move-Out Inspection'
        assert inspection_type_label('routine') == 'Routine Inspection'

    def test_unknown_or_missing(self):
        assert inspection_type_label('annual') == 'Property Inspection'
        assert inspection_type_label(None) == 'Property Inspection'


class TestCompletionPercent:
    def test_rounds(self):
        assert completion_percent(2, 3) == 67
        assert completion_percent(1, 3) == 33

    def test_bounds(self):
        assert completion_percent(0, 0) == 0
        assert completion_percent(4, 4) == 100


class TestBuildSharedReport:
    def test_groups_photos_under_rooms(self):
        report = build_shared_report(INSPECTION, _rooms(), _photos())

        by_id = {room.id: room for room in report.rooms}
        assert [p.id for p in by_id['room-1'].photos] == ['ph-1', 'ph-2']
        assert [p.id for p in by_id['room-2'].photos] == ['ph-3']
        assert by_id['room-3'].photos == []

    def test_photos_of_unknown_rooms_dropped(self):
        report = build_shared_report(INSPECTION, _rooms(), _photos())
        photo_ids = {p.id for room in report.rooms for p in room.photos}
        assert 'ph-4' not in photo_ids

    def test_room_order_preserved(self):
        report = build_shared_report(INSPECTION, _rooms(), [])
        assert [r.room_name for r in report.rooms] == ['Kitchen', 'Bathroom', 'Garage']

    def test_completion_counts(self):
        report = build_shared_report(INSPECTION, _rooms(), _photos())
        assert report.completed_rooms == 2
        assert report.total_rooms == 3
        assert report.completion_percent == 67

    def test_empty_inspection(self):
        report = build_shared_report(INSPECTION, [], [])
        assert report.rooms == []
        assert report.completion_percent == 0

    def test_summary_has_label_and_public_columns(self):
        summary = build_shared_report(INSPECTION, [], []).inspection
        assert summary.inspection_type_label == 'Move-In Inspection'
        assert summary.address == '12 Harbour St, Sydney'
        assert summary.inspection_date == '2026-10-17'

    def test_share_columns_never_leave_the_service(self):
        payload = build_shared_report(INSPECTION, _rooms(), _photos()).model_dump()
        inspection = payload['inspection']
        assert 'share_token' not in inspection
        assert 'share_enabled' not in inspection
        assert 'inspector_id' not in inspection
        assert 'a' * 64 not in repr(payload)
