# tests/conftest.py
"""Shared fixtures: a fresh SQLite record store and attachment store per test."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import io
from datetime import date

import pytest
from fleet_records.database import RecordStore
from fleet_records.services.attachment_store import AttachmentStore


@pytest.fixture
def store(tmp_path):
    record_store = RecordStore(f"sqlite:///{tmp_path / 'fleet.db'}")
    record_store.create_tables()
    yield record_store
    record_store.close()


@pytest.fixture
def db(store):
    session = store.session()
    yield session
    session.close()


@pytest.fixture
def attachments(tmp_path):
    return AttachmentStore(tmp_path / "uploads", max_bytes=1024)


def report_data(vehicle_number="T-101", **overrides):
    data = {
        "vehicle_number": vehicle_number,
        "inspection_date": date(2024, 3, 15),
        "inspector_name": "Dana Ortiz",
    }
    data.update(overrides)
    return data


def stage(attachments, content=b"%PDF-1.4 test", name="invoice.pdf", mime="application/pdf"):
    return attachments.stage_upload(io.BytesIO(content), name, mime)
