# tests/test_document_service.py
"""Document upload/download round trip, metadata updates, stats and sweeping."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date

import pytest
from fleet_records.errors import ConstraintViolation, NotFound, ValidationFailed
from fleet_records.schemas.document import DocumentFilter
from fleet_records.services import document_service, vehicle_service
from conftest import stage

CONTENT = b"%PDF-1.4\n" + bytes(range(256))


@pytest.fixture
def vehicle(db):
    return vehicle_service.create_vehicle(db, {"vehicle_number": "T-9"})


def upload(db, attachments, vehicle, category="invoice", title="Invoice", content=b"data", name="a.pdf", **meta):
    return document_service.upload_document(db, attachments, vehicle.id, category, title,
                                            stage(attachments, content, name), meta)


class TestUpload:
    def test_round_trip(self, db, attachments, vehicle):
        doc = upload(db, attachments, vehicle, content=CONTENT, name="brake invoice.pdf",
                     cost=120.5, vendor="Acme", document_date=date(2024, 2, 1))
        path, file_name, mime = document_service.open_document(db, attachments, doc.id)
        assert path.read_bytes() == CONTENT
        assert file_name == "brake invoice.pdf"
        assert mime == "application/pdf"
        assert doc.uploaded_by == "System"
        assert doc.file_size == len(CONTENT)

    def test_not_found_after_delete(self, db, attachments, vehicle):
        doc = upload(db, attachments, vehicle)
        assert document_service.delete_document(db, attachments, doc.id) is True
        with pytest.raises(NotFound):
            document_service.open_document(db, attachments, doc.id)
        assert list(attachments.iter_stored_files()) == []
        assert document_service.delete_document(db, attachments, doc.id) is False

    def test_unknown_vehicle(self, db, attachments):
        incoming = stage(attachments)
        with pytest.raises(NotFound):
            document_service.upload_document(db, attachments, 404, "invoice", "Invoice", incoming)
        assert not incoming.path.exists()

    def test_blank_title(self, db, attachments, vehicle):
        with pytest.raises(ValidationFailed):
            upload(db, attachments, vehicle, title="  ")
        assert list(attachments.iter_stored_files()) == []

    def test_insert_failure_removes_placed_file(self, db, attachments, vehicle, monkeypatch):
        def broken_flush(*args, **kwargs):
            raise ConstraintViolation("simulated")

        monkeypatch.setattr(db, "flush", broken_flush)
        with pytest.raises(ConstraintViolation):
            upload(db, attachments, vehicle)
        assert list(attachments.iter_stored_files()) == []

    def test_missing_file_reports_not_found(self, db, attachments, vehicle):
        doc = upload(db, attachments, vehicle)
        attachments.resolve(doc.file_path).unlink()
        with pytest.raises(NotFound):
            document_service.open_document(db, attachments, doc.id)


class TestListing:
    def test_filter_search_and_sort(self, db, attachments, vehicle):
        upload(db, attachments, vehicle, "invoice", "Tire invoice", content=b"12345")
        upload(db, attachments, vehicle, "service", "Brake service", content=b"1")
        upload(db, attachments, vehicle, "photo", "Dent photo", content=b"123", name="dent.png")

        newest_first = document_service.list_vehicle_documents(db, vehicle.id)
        assert [d.title for d in newest_first] == ["Dent photo", "Brake service", "Tire invoice"]

        by_size = document_service.list_vehicle_documents(db, vehicle.id, DocumentFilter(sort_by="file_size", order="asc"))
        assert [d.file_size for d in by_size] == [1, 3, 5]

        invoices = document_service.list_vehicle_documents(db, vehicle.id, DocumentFilter(category="invoice"))
        assert [d.title for d in invoices] == ["Tire invoice"]

        found = document_service.list_vehicle_documents(db, vehicle.id, DocumentFilter(search="DENT"))
        assert [d.title for d in found] == ["Dent photo"]

    def test_stats(self, db, attachments, vehicle):
        upload(db, attachments, vehicle, "invoice", content=b"1234")
        upload(db, attachments, vehicle, "invoice", content=b"12")
        upload(db, attachments, vehicle, "service", content=b"1")
        stats = document_service.get_vehicle_document_stats(db, vehicle.id)
        assert stats.total_count == 3
        assert stats.count_by_category == {"invoice": 2, "service": 1}
        assert stats.total_size_bytes == 7

    def test_stats_empty(self, db, vehicle):
        stats = document_service.get_vehicle_document_stats(db, vehicle.id)
        assert (stats.total_count, stats.count_by_category, stats.total_size_bytes) == (0, {}, 0)


class TestUpdateAndSweep:
    def test_update_metadata_keeps_file(self, db, attachments, vehicle):
        doc = upload(db, attachments, vehicle)
        path_before = doc.file_path
        updated = document_service.update_document(db, doc.id, {"category": "service", "vendor": "Acme"})
        assert (updated.category, updated.vendor, updated.file_path) == ("service", "Acme", path_before)

    def test_update_rejects_bad_category(self, db, attachments, vehicle):
        doc = upload(db, attachments, vehicle)
        with pytest.raises(ValidationFailed):
            document_service.update_document(db, doc.id, {"category": "receipts"})

    def test_sweep_removes_only_orphans(self, db, attachments, vehicle):
        kept = upload(db, attachments, vehicle)
        orphan = attachments.save_file(vehicle.id, "other", stage(attachments, b"stray"))

        assert document_service.sweep_orphan_files(db, attachments, dry_run=True) == [orphan.relative_path]
        assert len(list(attachments.iter_stored_files())) == 2

        assert document_service.sweep_orphan_files(db, attachments) == [orphan.relative_path]
        assert list(attachments.iter_stored_files()) == [kept.file_path]
