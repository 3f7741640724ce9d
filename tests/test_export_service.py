# tests/test_export_service.py
"""PDF layout and determinism, CSV column rendering."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import csv
import io
from datetime import date, datetime

import pytest
from fleet_records.errors import NotFound
from fleet_records.services import export_service, report_service
from conftest import report_data

GENERATED = datetime(2024, 4, 1, 9, 30, 0)


@pytest.fixture
def report(db):
    return report_service.create_report(db, report_data(
        "T-101",
        make="Ford",
        mileage=45210,
        hour_meter=1200.5,
        brakes_work=True,
        steering_good=False,
        tire_pressure_rf=95,
        defects="Cracked windshield",
    ))


class TestLayout:
    def test_sections_and_placeholders(self, report):
        sections = {s["title"]: s["lines"] for s in export_service.report_layout(report)}
        assert "VEHICLE CONDITION REPORT" in sections
        assert "STATUS: ATTENTION" in sections["VEHICLE CONDITION REPORT"]
        assert "Year: ______" in sections["Vehicle Information"]
        assert "Mileage: 45210" in sections["Vehicle Information"]
        assert "[X] Do Brakes Work Properly?" in sections["Inspection Checklist"]
        assert "[ ] Is Steering Gear in Good Condition?" in sections["Inspection Checklist"]
        assert "[ ] Are Taillights Working?" in sections["Inspection Checklist"]
        assert sections["Tire Pressure (PSI)"][0].startswith("RF: 95.0  RR: __")
        assert sections["Defects"] == ["Cracked windshield"]

    def test_empty_defects(self, db):
        clean = report_service.create_report(db, report_data("T-5"))
        sections = {s["title"]: s["lines"] for s in export_service.report_layout(clean)}
        assert sections["Defects"] == ["None reported"]
        assert sections["Signature"] == ["______________________"]

    def test_footer(self):
        assert export_service.footer_text(7, GENERATED, 2) == \
            "Report ID: 7 | Generated: 2024-04-01 09:30:00 | Page 2"


class TestPdf:
    def test_pdf_bytes_deterministic(self, db, report):
        first = export_service.render_report_document(db, report.id, generated_at=GENERATED)
        second = export_service.render_report_document(db, report.id, generated_at=GENERATED)
        assert first.startswith(b"%PDF")
        assert first == second

    def test_missing_report(self, db):
        with pytest.raises(NotFound):
            export_service.render_report_document(db, 404, generated_at=GENERATED)


class TestCsv:
    def parse(self, data: bytes):
        return list(csv.DictReader(io.StringIO(data.decode("utf-8"))))

    def test_columns_and_cells(self, db, report):
        data = export_service.render_reports_table(db)
        header = data.decode("utf-8").splitlines()[0].split(",")
        assert tuple(header) == export_service.REPORT_COLUMNS

        row = self.parse(data)[0]
        assert row["vehicle_number"] == "T-101"
        assert row["inspection_date"] == "2024-03-15"
        assert row["brakes_work"] == "1"
        assert row["steering_good"] == "0"
        assert row["tires_safe"] == ""
        assert row["year"] == ""
        assert row["hour_meter"] == "1200.5"

    def test_selection_order(self, db, report):
        other = report_service.create_report(db, report_data("T-5", inspection_date=date(2024, 1, 1)))
        rows = self.parse(export_service.render_reports_table(db, [other.id, report.id]))
        assert [r["vehicle_number"] for r in rows] == ["T-5", "T-101"]

    def test_quotes_embedded_commas(self, db):
        report_service.create_report(db, report_data(defects='Loose mirror, "rattles"\nat speed'))
        rows = self.parse(export_service.render_reports_table(db))
        assert rows[0]["defects"] == 'Loose mirror, "rattles"\nat speed'

    def test_empty_selection_is_header_only(self, db):
        data = export_service.render_reports_table(db, [404])
        assert data.decode("utf-8").splitlines() == [",".join(export_service.REPORT_COLUMNS)]
