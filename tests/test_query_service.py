# tests/test_query_service.py
"""Listing, natural ordering and pagination over vehicles and reports."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date

import pytest
from fleet_records.errors import ValidationFailed
from fleet_records.schemas.common import PageRequest
from fleet_records.schemas.report import ReportFilter
from fleet_records.schemas.vehicle import VehicleFilter
from fleet_records.services import query_service, report_service, vehicle_service
from conftest import report_data


NUMBERS = ["T-100", "10", "T-5", "9", "A-2", "100", "T-10"]


@pytest.fixture
def fleet(db):
    for i, number in enumerate(NUMBERS):
        vehicle_service.create_vehicle(db, {
            "vehicle_number": number,
            "make": "Ford" if i % 2 else "Mack",
            "status": "active" if i < 5 else "maintenance",
            "location": "North Yard" if i % 3 == 0 else "South Yard",
        })
    return db


class TestNaturalSort:
    def test_numeric_before_alphanumeric(self):
        ordered = sorted(["T-100", "10", "T-5", "9", "100"], key=query_service.natural_sort_key)
        assert ordered == ["9", "10", "100", "T-5", "T-100"]

    def test_shorter_before_longer_then_lexicographic(self):
        ordered = sorted(["T-10", "A-2", "T-5", "B-2"], key=query_service.natural_sort_key)
        assert ordered == ["A-2", "B-2", "T-5", "T-10"]

    def test_total_and_consistent(self):
        keys = [query_service.natural_sort_key(n) for n in NUMBERS]
        assert len(set(keys)) == len(NUMBERS)
        assert sorted(NUMBERS, key=query_service.natural_sort_key) == \
            sorted(list(reversed(NUMBERS)), key=query_service.natural_sort_key)

    def test_listing_uses_natural_order_by_default(self, fleet):
        result = query_service.list_vehicles(fleet)
        assert [v.vehicle_number for v in result["items"]] == ["9", "10", "100", "A-2", "T-5", "T-10", "T-100"]

    def test_descending_natural_order(self, fleet):
        result = query_service.list_vehicles(fleet, page=PageRequest(order="desc"))
        assert [v.vehicle_number for v in result["items"]][:3] == ["T-100", "T-10", "T-5"]


class TestVehicleListing:
    def test_pages_sum_to_total(self, fleet):
        seen = []
        page_no = 1
        while True:
            result = query_service.list_vehicles(fleet, page=PageRequest(page=page_no, limit=3))
            if not result["items"]:
                break
            seen.extend(v.id for v in result["items"])
            page_no += 1
        assert len(seen) == len(set(seen)) == result["pagination"].total == len(NUMBERS)
        assert result["pagination"].total_pages == 3

    def test_total_stable_between_calls(self, fleet):
        filters = VehicleFilter(status="active")
        first = query_service.list_vehicles(fleet, filters)["pagination"].total
        second = query_service.list_vehicles(fleet, filters)["pagination"].total
        assert first == second == 5

    def test_search_matches_make_case_insensitive(self, fleet):
        result = query_service.list_vehicles(fleet, VehicleFilter(search="fOrD"))
        assert result["pagination"].total == 3

    def test_search_treats_wildcards_literally(self, fleet):
        result = query_service.list_vehicles(fleet, VehicleFilter(search="%"))
        assert result["pagination"].total == 0

    def test_location_filter_is_exact(self, fleet):
        result = query_service.list_vehicles(fleet, VehicleFilter(location="North"))
        assert result["pagination"].total == 0
        result = query_service.list_vehicles(fleet, VehicleFilter(location="North Yard"))
        assert result["pagination"].total == 3

    def test_unknown_sort_field_falls_back_to_default(self, fleet):
        fallback = query_service.list_vehicles(fleet, page=PageRequest(sort_by="1; DROP TABLE vehicles"))
        default = query_service.list_vehicles(fleet)
        assert [v.id for v in fallback["items"]] == [v.id for v in default["items"]]

    def test_sort_by_column_uses_id_tiebreak(self, fleet):
        result = query_service.list_vehicles(fleet, page=PageRequest(sort_by="make", order="asc"))
        makes = [(v.make, v.id) for v in result["items"]]
        assert makes == sorted(makes)

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 1001)])
    def test_invalid_pagination_rejected(self, db, page, limit):
        with pytest.raises(ValidationFailed):
            query_service.list_vehicles(db, page=PageRequest(page=page, limit=limit))

    def test_empty_store_has_zero_pages(self, db):
        result = query_service.list_vehicles(db)
        assert result["items"] == []
        assert result["pagination"].total == 0
        assert result["pagination"].total_pages == 0


class TestReportListing:
    @pytest.fixture
    def reports(self, db):
        report_service.create_report(db, report_data("T-5", inspection_date=date(2024, 1, 10)))
        report_service.create_report(db, report_data("T-10", inspection_date=date(2024, 2, 10),
                                                     inspector_name="Sam Lee", defects="Cracked mirror"))
        report_service.create_report(db, report_data("9", inspection_date=date(2024, 3, 10)))
        return db

    def test_default_order_newest_first(self, reports):
        result = query_service.list_reports(reports)
        assert [r.vehicle_number for r in result["items"]] == ["9", "T-10", "T-5"]
        assert result["pagination"].limit == 25

    def test_date_range_inclusive(self, reports):
        result = query_service.list_reports(
            reports, ReportFilter(date_from=date(2024, 1, 10), date_to=date(2024, 2, 10))
        )
        assert result["pagination"].total == 2

    def test_search_covers_defects(self, reports):
        result = query_service.list_reports(reports, ReportFilter(search="mirror"))
        assert [r.vehicle_number for r in result["items"]] == ["T-10"]

    def test_inspector_filter(self, reports):
        result = query_service.list_reports(reports, ReportFilter(inspector="sam"))
        assert result["pagination"].total == 1

    def test_natural_sort_on_vehicle_number(self, reports):
        result = query_service.list_reports(reports, page=PageRequest(sort_by="vehicle_number", order="asc"))
        assert [r.vehicle_number for r in result["items"]] == ["9", "T-5", "T-10"]

    def test_fetch_reports_keeps_caller_order(self, reports):
        ids = [r.id for r in query_service.fetch_reports(reports)]
        picked = query_service.fetch_reports(reports, [ids[2], 999, ids[0]])
        assert [r.id for r in picked] == [ids[2], ids[0]]
