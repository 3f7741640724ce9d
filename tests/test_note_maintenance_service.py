# tests/test_note_maintenance_service.py
"""Vehicle notes and maintenance schedule entries."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date

import pytest
from fleet_records.errors import NoFieldsToUpdate, NotFound, ValidationFailed
from fleet_records.schemas.maintenance import MaintenanceFilter
from fleet_records.schemas.note import NoteFilter
from fleet_records.services import maintenance_service, note_service, vehicle_service


@pytest.fixture
def vehicle(db):
    return vehicle_service.create_vehicle(db, {"vehicle_number": "T-3"})


class TestNotes:
    def test_create_and_list_newest_first(self, db, vehicle):
        first = note_service.create_note(db, {"vehicle_id": vehicle.id, "note_type": "general",
                                              "title": "Keys", "content": "Spare key in office"})
        second = note_service.create_note(db, {"vehicle_id": vehicle.id, "note_type": "incident",
                                               "title": "Dent", "content": "Rear door"})
        assert first.created_by == "System"
        notes = note_service.list_vehicle_notes(db, vehicle.id)
        assert [n.id for n in notes] == [second.id, first.id]

        incidents = note_service.list_vehicle_notes(db, vehicle.id, NoteFilter(note_type="incident"))
        assert [n.title for n in incidents] == ["Dent"]

    def test_unknown_vehicle(self, db):
        with pytest.raises(NotFound):
            note_service.create_note(db, {"vehicle_id": 404, "note_type": "general", "title": "x", "content": "y"})

    def test_bad_type(self, db, vehicle):
        with pytest.raises(ValidationFailed):
            note_service.create_note(db, {"vehicle_id": vehicle.id, "note_type": "gossip",
                                          "title": "x", "content": "y"})

    def test_update_and_delete(self, db, vehicle):
        note = note_service.create_note(db, {"vehicle_id": vehicle.id, "note_type": "general",
                                             "title": "Keys", "content": "Office"})
        updated = note_service.update_note(db, note.id, {"content": "Front desk"})
        assert updated.content == "Front desk"
        with pytest.raises(NoFieldsToUpdate):
            note_service.update_note(db, note.id, {"vehicle_id": 9})
        assert note_service.delete_note(db, note.id) is True
        with pytest.raises(NotFound):
            note_service.get_note(db, note.id)

    def test_update_rejects_blank_text(self, db, vehicle):
        note = note_service.create_note(db, {"vehicle_id": vehicle.id, "note_type": "general",
                                             "title": "Keys", "content": "Office"})
        with pytest.raises(ValidationFailed):
            note_service.update_note(db, note.id, {"title": "   ", "content": ""})
        assert note_service.get_note(db, note.id).title == "Keys"


class TestMaintenance:
    def test_default_status_and_due_date_order(self, db, vehicle):
        later = maintenance_service.create_maintenance_item(db, {
            "vehicle_id": vehicle.id, "maintenance_type": "Brake service", "next_due_date": date(2024, 9, 1)})
        sooner = maintenance_service.create_maintenance_item(db, {
            "vehicle_id": vehicle.id, "maintenance_type": "Oil change", "next_due_date": date(2024, 5, 1),
            "interval_miles": 5000})
        assert sooner.status == "scheduled"
        items = maintenance_service.list_vehicle_maintenance(db, vehicle.id)
        assert [i.id for i in items] == [sooner.id, later.id]

    def test_status_filter_and_update(self, db, vehicle):
        item = maintenance_service.create_maintenance_item(db, {"vehicle_id": vehicle.id, "maintenance_type": "Tires"})
        maintenance_service.update_maintenance_item(db, item.id, {"status": "overdue"})
        overdue = maintenance_service.list_vehicle_maintenance(db, vehicle.id, MaintenanceFilter(status="overdue"))
        assert [i.id for i in overdue] == [item.id]
        assert vehicle_service.get_vehicle_summary(db, vehicle.id).stats.overdue_maintenance_count == 1

    def test_rejects_negative_interval(self, db, vehicle):
        with pytest.raises(ValidationFailed):
            maintenance_service.create_maintenance_item(db, {
                "vehicle_id": vehicle.id, "maintenance_type": "Oil", "interval_days": -30})

    def test_missing_item(self, db):
        with pytest.raises(NotFound):
            maintenance_service.update_maintenance_item(db, 404, {"status": "completed"})

    def test_update_rejects_blank_type(self, db, vehicle):
        item = maintenance_service.create_maintenance_item(db, {"vehicle_id": vehicle.id, "maintenance_type": "Tires"})
        with pytest.raises(ValidationFailed):
            maintenance_service.update_maintenance_item(db, item.id, {"maintenance_type": "  "})
        assert maintenance_service.get_maintenance_item(db, item.id).maintenance_type == "Tires"
