# fleet_records/services/query_service.py
"""
Query engine: filtered, sorted, paginated listings of vehicles and reports,
plus the record-fetch primitives used by the export service.

Sort fields arrive as user strings. They are parsed into per-entity enums and
mapped through fixed tables to columns, so request input never reaches the
ORDER BY clause. Unknown fields fall back to the entity's default column.

Ordering by vehicle_number uses natural sort:
    "9" < "10" < "T-5" < "T-100"
Purely numeric numbers come first (by value), then everything is ordered by
length, then lexicographically. That rule is not expressible portably in SQL,
so for this key the filtered (id, number) pairs are sorted in Python and only
the requested page of rows is loaded.
"""

import math
from enum import Enum
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from fleet_records.config import settings
from fleet_records.errors import ValidationFailed
from fleet_records.models.report import Report
from fleet_records.models.vehicle import Vehicle
from fleet_records.schemas.common import PageRequest, Pagination
from fleet_records.schemas.report import ReportFilter
from fleet_records.schemas.vehicle import VehicleFilter


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class VehicleSortKey(str, Enum):
    ID = "id"
    VEHICLE_NUMBER = "vehicle_number"
    MAKE = "make"
    MODEL = "model"
    YEAR = "year"
    STATUS = "status"
    ASSIGNED_TO = "assigned_to"
    LOCATION = "location"
    CURRENT_MILEAGE = "current_mileage"
    LAST_SERVICE_DATE = "last_service_date"


class ReportSortKey(str, Enum):
    ID = "id"
    VEHICLE_NUMBER = "vehicle_number"
    INSPECTION_DATE = "inspection_date"
    INSPECTOR_NAME = "inspector_name"
    MILEAGE = "mileage"
    CREATED_AT = "created_at"


VEHICLE_SORT_COLUMNS = {
    VehicleSortKey.ID: Vehicle.id,
    VehicleSortKey.VEHICLE_NUMBER: Vehicle.vehicle_number,
    VehicleSortKey.MAKE: Vehicle.make,
    VehicleSortKey.MODEL: Vehicle.model,
    VehicleSortKey.YEAR: Vehicle.year,
    VehicleSortKey.STATUS: Vehicle.status,
    VehicleSortKey.ASSIGNED_TO: Vehicle.assigned_to,
    VehicleSortKey.LOCATION: Vehicle.location,
    VehicleSortKey.CURRENT_MILEAGE: Vehicle.current_mileage,
    VehicleSortKey.LAST_SERVICE_DATE: Vehicle.last_service_date,
}

REPORT_SORT_COLUMNS = {
    ReportSortKey.ID: Report.id,
    ReportSortKey.VEHICLE_NUMBER: Report.vehicle_number,
    ReportSortKey.INSPECTION_DATE: Report.inspection_date,
    ReportSortKey.INSPECTOR_NAME: Report.inspector_name,
    ReportSortKey.MILEAGE: Report.mileage,
    ReportSortKey.CREATED_AT: Report.created_at,
}


# ── Sort parsing ──────────────────────────────────────────────────────────────

def parse_sort_key(enum_cls, value: Optional[str], default):
    """Map a user-supplied field name onto enum_cls, or return default."""
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


def parse_sort_order(value: Optional[str], default: SortOrder) -> SortOrder:
    if value is None:
        return default
    return SortOrder.ASC if value.strip().lower() == "asc" else SortOrder.DESC


def order_by_clause(column, order: SortOrder, tie_breaker):
    if order == SortOrder.ASC:
        return [column.asc(), tie_breaker.asc()]
    return [column.desc(), tie_breaker.desc()]


# ── Natural sort ──────────────────────────────────────────────────────────────

def natural_sort_key(vehicle_number: str) -> tuple:
    """Sort key placing "9" < "10" < "T-5" < "T-100"."""
    numeric = vehicle_number.isascii() and vehicle_number.isdigit()
    return (
        0 if numeric else 1,
        int(vehicle_number) if numeric else 0,
        len(vehicle_number),
        vehicle_number,
    )


# ── Pagination ────────────────────────────────────────────────────────────────

def resolve_page(page: PageRequest, default_limit: int) -> tuple[int, int]:
    """Validate page/limit and return (page, limit)."""
    limit = page.limit if page.limit is not None else default_limit
    errors = []
    if page.page < 1:
        errors.append("Invalid page number")
    if limit < 1 or limit > settings.MAX_PAGE_SIZE:
        errors.append(f"Invalid limit (must be between 1 and {settings.MAX_PAGE_SIZE})")
    if errors:
        raise ValidationFailed("Invalid pagination parameters", errors)
    return page.page, limit


def _pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


def _count(db: Session, model, predicates: list) -> int:
    return db.scalar(select(func.count()).select_from(model).where(*predicates))


def _page_by_vehicle_number(db: Session, model, predicates: list, order: SortOrder,
                            offset: int, limit: int) -> list:
    pairs = db.execute(select(model.id, model.vehicle_number).where(*predicates)).all()
    pairs.sort(key=lambda r: (natural_sort_key(r.vehicle_number), r.id),
               reverse=order == SortOrder.DESC)
    page_ids = [r.id for r in pairs[offset:offset + limit]]
    if not page_ids:
        return []
    rows = db.scalars(select(model).where(model.id.in_(page_ids))).all()
    position = {row_id: i for i, row_id in enumerate(page_ids)}
    return sorted(rows, key=lambda row: position[row.id])


# ── Vehicles ──────────────────────────────────────────────────────────────────

def vehicle_predicates(filters: VehicleFilter) -> list:
    predicates = []
    if filters.status:
        predicates.append(Vehicle.status == filters.status)
    if filters.location:
        predicates.append(Vehicle.location == filters.location)
    if filters.search:
        term = filters.search
        predicates.append(or_(
            Vehicle.vehicle_number.icontains(term, autoescape=True),
            Vehicle.make.icontains(term, autoescape=True),
            Vehicle.model.icontains(term, autoescape=True),
            Vehicle.driver.icontains(term, autoescape=True),
            Vehicle.vin.icontains(term, autoescape=True),
        ))
    return predicates


def list_vehicles(db: Session, filters: Optional[VehicleFilter] = None,
                  page: Optional[PageRequest] = None) -> dict:
    """Returns {"items": [Vehicle, ...], "pagination": Pagination}."""
    filters = filters or VehicleFilter()
    page = page or PageRequest()
    page_no, limit = resolve_page(page, settings.DEFAULT_VEHICLE_PAGE_SIZE)
    offset = (page_no - 1) * limit

    sort_key = parse_sort_key(VehicleSortKey, page.sort_by, VehicleSortKey.VEHICLE_NUMBER)
    order = parse_sort_order(page.order, SortOrder.ASC)
    predicates = vehicle_predicates(filters)

    total = _count(db, Vehicle, predicates)
    if sort_key == VehicleSortKey.VEHICLE_NUMBER:
        items = _page_by_vehicle_number(db, Vehicle, predicates, order, offset, limit)
    else:
        stmt = (
            select(Vehicle)
            .where(*predicates)
            .order_by(*order_by_clause(VEHICLE_SORT_COLUMNS[sort_key], order, Vehicle.id))
            .offset(offset)
            .limit(limit)
        )
        items = list(db.scalars(stmt).all())

    return {"items": items, "pagination": _pagination(page_no, limit, total)}


# ── Reports ───────────────────────────────────────────────────────────────────

def report_predicates(filters: ReportFilter) -> list:
    predicates = []
    if filters.vehicle:
        predicates.append(Report.vehicle_number.icontains(filters.vehicle, autoescape=True))
    if filters.inspector:
        predicates.append(Report.inspector_name.icontains(filters.inspector, autoescape=True))
    if filters.date_from:
        predicates.append(Report.inspection_date >= filters.date_from)
    if filters.date_to:
        predicates.append(Report.inspection_date <= filters.date_to)
    if filters.search:
        term = filters.search
        predicates.append(or_(
            Report.vehicle_number.icontains(term, autoescape=True),
            Report.inspector_name.icontains(term, autoescape=True),
            Report.defects.icontains(term, autoescape=True),
        ))
    return predicates


def list_reports(db: Session, filters: Optional[ReportFilter] = None,
                 page: Optional[PageRequest] = None) -> dict:
    """Returns {"items": [Report, ...], "pagination": Pagination}."""
    filters = filters or ReportFilter()
    page = page or PageRequest()
    page_no, limit = resolve_page(page, settings.DEFAULT_REPORT_PAGE_SIZE)
    offset = (page_no - 1) * limit

    sort_key = parse_sort_key(ReportSortKey, page.sort_by, ReportSortKey.INSPECTION_DATE)
    order = parse_sort_order(page.order, SortOrder.DESC)
    predicates = report_predicates(filters)

    total = _count(db, Report, predicates)
    if sort_key == ReportSortKey.VEHICLE_NUMBER:
        items = _page_by_vehicle_number(db, Report, predicates, order, offset, limit)
    else:
        stmt = (
            select(Report)
            .where(*predicates)
            .order_by(*order_by_clause(REPORT_SORT_COLUMNS[sort_key], order, Report.id))
            .offset(offset)
            .limit(limit)
        )
        items = list(db.scalars(stmt).all())

    return {"items": items, "pagination": _pagination(page_no, limit, total)}


# ── Fetch primitives ──────────────────────────────────────────────────────────

def fetch_vehicle(db: Session, vehicle_id: int) -> Optional[Vehicle]:
    return db.get(Vehicle, vehicle_id)


def fetch_vehicle_by_number(db: Session, vehicle_number: str) -> Optional[Vehicle]:
    return db.scalars(select(Vehicle).where(Vehicle.vehicle_number == vehicle_number)).first()


def fetch_report(db: Session, report_id: int) -> Optional[Report]:
    return db.get(Report, report_id)


def fetch_reports(db: Session, report_ids: Optional[list[int]] = None) -> list[Report]:
    """
    Reports for export. With ids: caller's order, unknown ids skipped.
    Without ids: every report, newest inspection first.
    """
    if report_ids:
        rows = db.scalars(select(Report).where(Report.id.in_(report_ids))).all()
        by_id = {r.id: r for r in rows}
        return [by_id[i] for i in report_ids if i in by_id]
    stmt = select(Report).order_by(Report.inspection_date.desc(), Report.id.desc())
    return list(db.scalars(stmt).all())
