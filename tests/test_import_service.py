# tests/test_import_service.py
"""Fleet listing import: row filtering, make/model extraction and merge-on-reimport."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from openpyxl import Workbook
from sqlalchemy import select, func
from fleet_records.models.vehicle import Vehicle
from fleet_records.services import import_service, vehicle_service

HEADER = ["VEH #", "YEAR", "DESCRIPTION", "VIN #", "DRIVER", "LICENSE", "SALES ", "PO#"]


def write_listing(path, rows):
    wb = Workbook()
    ws = wb.active
    ws.append(HEADER)
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


@pytest.fixture
def listing(tmp_path):
    return write_listing(tmp_path / "listing.xlsx", [
        ["101", 2019, "FORD F-150", "1FTEW1E50JF000001", "Lee", "FLT-101", "$12,500.00", 4471],
        ["T-7", 2015, "Chevrolet Silverado", None, None, None, None, None],
        ["ACCT 5520", 2018, "Fuel account", None, None, None, None, None],
        ["JUNKED", None, None, None, None, None, None, None],
        ["88", 1932, "Ford Model B", None, None, None, None, None],
        [None, None, "continued from above", None, None, None, None, None],
    ])


def vehicle_count(db):
    return db.scalar(select(func.count()).select_from(Vehicle))


class TestRowRules:
    @pytest.mark.parametrize("number,expected", [
        ("101", True),
        ("T-7", True),
        ("acct 5520", False),
        ("SERVICE 12", False),
        ("SPARE", False),
        ("1" * 21, False),
        ("", False),
    ])
    def test_vehicle_number_filter(self, number, expected):
        assert import_service.is_valid_vehicle_number(number) is expected

    @pytest.mark.parametrize("description,make,model", [
        ("FORD F-150", "FORD", "F-150"),
        ("2015 Chevrolet Silverado", "CHEVY", "2015 Silverado"),
        ("JOHN DEERE Gator", "JOHN DEERE", "Gator"),
        ("Utility trailer", None, "Utility trailer"),
        (None, None, None),
    ])
    def test_make_and_model(self, description, make, model):
        assert import_service.extract_make(description) == make
        assert import_service.extract_model(description) == model


class TestImport:
    def test_imports_valid_rows_and_reports_skips(self, db, listing):
        result = import_service.import_vehicles(db, listing)
        assert sorted(result.imported) == ["101", "T-7"]
        assert [row for row, _ in result.skipped] == [4, 5, 6]
        assert vehicle_count(db) == 2

        truck = vehicle_service.get_vehicle_by_number(db, "101")
        assert (truck.make, truck.model, truck.year) == ("FORD", "F-150", 2019)
        assert truck.vin == "1FTEW1E50JF000001"
        assert truck.sales_price == 12500.0
        assert truck.po_number == "4471"

    def test_reimport_merges_without_blanking(self, db, listing, tmp_path):
        import_service.import_vehicles(db, listing)
        update = write_listing(tmp_path / "update.xlsx", [["101", None, None, None, "Kim", None, None, None]])
        result = import_service.import_vehicles(db, update)
        assert result.updated == ["101"]
        truck = vehicle_service.get_vehicle_by_number(db, "101")
        assert truck.driver == "Kim"
        assert truck.license_plate == "FLT-101"
        assert truck.year == 2019
        assert vehicle_count(db) == 2

    def test_dry_run_writes_nothing(self, db, listing):
        result = import_service.import_vehicles(db, listing, dry_run=True)
        assert sorted(result.imported) == ["101", "T-7"]
        assert vehicle_count(db) == 0


class TestCleanup:
    def test_removes_vehicles_the_filter_rejects(self, db, attachments):
        vehicle_service.create_vehicle(db, {"vehicle_number": "101"})
        vehicle_service.create_vehicle(db, {"vehicle_number": "OLD # 44"})
        vehicle_service.create_vehicle(db, {"vehicle_number": "POOL CAR"})

        assert import_service.cleanup_invalid_vehicles(db, attachments, dry_run=True) == ["OLD # 44", "POOL CAR"]
        assert vehicle_count(db) == 3
        assert import_service.cleanup_invalid_vehicles(db, attachments) == ["OLD # 44", "POOL CAR"]
        assert [v.vehicle_number for v in db.scalars(select(Vehicle))] == ["101"]
