# fleet_records/services/vehicle_service.py
"""
Vehicle lookup, creation, updates and deletion.

Vehicles are created explicitly (create_vehicle) or implicitly when a report
names an unseen vehicle number (upsert_vehicle). Deletion is either soft
(status -> retired) or permanent (vehicle and every dependent row removed in
one transaction, attachment files cleaned up after commit).
"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from fleet_records.database import transaction
from fleet_records.errors import NotFound, ConstraintViolation, ValidationFailed
from fleet_records.models.document import Document
from fleet_records.models.maintenance_item import MaintenanceItem
from fleet_records.models.note import Note
from fleet_records.models.report import Report
from fleet_records.models.status_history import StatusHistory
from fleet_records.models.vehicle import Vehicle
from fleet_records.schemas.report import ReportBrief
from fleet_records.schemas.vehicle import (
    VehicleCreate, VehicleFields, VehicleUpdate, VehicleOut, VehicleStats, VehicleSummaryOut, TimelineEvent,
)
from fleet_records.services import query_service
from fleet_records.services.patching import coerce, changed_fields, apply_fields
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)

list_vehicles = query_service.list_vehicles


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = query_service.fetch_vehicle(db, vehicle_id)
    if not vehicle:
        raise NotFound(f"Vehicle {vehicle_id} not found")
    return vehicle


def get_vehicle_by_number(db: Session, vehicle_number: str) -> Vehicle:
    vehicle = query_service.fetch_vehicle_by_number(db, vehicle_number)
    if not vehicle:
        raise NotFound(f"Vehicle {vehicle_number} not found")
    return vehicle


def _record_status(db: Session, vehicle: Vehicle, reason: Optional[str] = None,
                   changed_by: Optional[str] = None):
    db.add(StatusHistory(
        vehicle_id=vehicle.id,
        status=vehicle.status,
        reason=reason,
        changed_by=changed_by,
        effective_date=date.today(),
        created_at=datetime.utcnow(),
    ))


# ── Creation ──────────────────────────────────────────────────────────────────

def create_vehicle(db: Session, data) -> Vehicle:
    """Explicit creation. A number already in use raises ConstraintViolation."""
    body = coerce(VehicleCreate, data)
    fields = body.model_dump(exclude_none=True)
    with transaction(db):
        if query_service.fetch_vehicle_by_number(db, body.vehicle_number):
            raise ConstraintViolation(f"Vehicle number {body.vehicle_number} already exists")
        now = datetime.utcnow()
        vehicle = Vehicle(**fields, created_at=now, updated_at=now)
        db.add(vehicle)
        db.flush()
        _record_status(db, vehicle, reason="Vehicle added to fleet")
    logger.info(f"[VEHICLE] Created {vehicle.vehicle_number} (id={vehicle.id})")
    return vehicle


_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def upsert_in_session(db: Session, vehicle_number: str, make: Optional[str] = None,
                      year: Optional[int] = None, reason: str = "Created from inspection report",
                      **fields) -> Vehicle:
    """
    INSERT ... ON CONFLICT (vehicle_number) DO UPDATE with COALESCE, without
    committing. Supplied non-null values overwrite; omitted/null values never
    erase what is already stored. updated_at is always refreshed.
    Extra keyword fields are other Vehicle columns merged the same way.
    """
    now = datetime.utcnow()
    existed = query_service.fetch_vehicle_by_number(db, vehicle_number) is not None
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
    values = {"make": make, "year": year, **fields}

    if insert is not None:
        stmt = insert(Vehicle).values(vehicle_number=vehicle_number, status="active",
                                      created_at=now, updated_at=now, **values)
        merged = {name: func.coalesce(getattr(stmt.excluded, name), getattr(Vehicle, name)) for name in values}
        stmt = stmt.on_conflict_do_update(
            index_elements=[Vehicle.vehicle_number],
            set_={**merged, "updated_at": now},
        )
        db.execute(stmt)
    elif existed:
        supplied = {name: value for name, value in values.items() if value is not None}
        db.execute(update(Vehicle).where(Vehicle.vehicle_number == vehicle_number)
                   .values(updated_at=now, **supplied))
    else:
        db.add(Vehicle(vehicle_number=vehicle_number, status="active",
                       created_at=now, updated_at=now, **values))
        db.flush()

    vehicle = db.scalars(
        select(Vehicle)
        .where(Vehicle.vehicle_number == vehicle_number)
        .execution_options(populate_existing=True)
    ).one()
    if not existed:
        _record_status(db, vehicle, reason=reason)
        logger.info(f"[VEHICLE] Upsert inserted {vehicle_number} (id={vehicle.id})")
    return vehicle


def upsert_vehicle(db: Session, vehicle_number: str, make: Optional[str] = None,
                   year: Optional[int] = None, reason: Optional[str] = None, **fields) -> Vehicle:
    """
    Create-or-merge by vehicle number. Extra fields are validated as
    VehicleFields; status is never set through an upsert.
    """
    vehicle_number = (vehicle_number or "").strip()
    if not vehicle_number:
        raise ValidationFailed("Vehicle number is required")
    body = coerce(VehicleFields, {"make": make, "year": year, **fields})
    values = body.model_dump(include={"make", "year", *fields}, exclude={"status"})
    with transaction(db):
        vehicle = upsert_in_session(db, vehicle_number, reason=reason or "Vehicle added to fleet", **values)
    return vehicle


# ── Updates ───────────────────────────────────────────────────────────────────

def update_vehicle(db: Session, vehicle_id: int, patch, reason: Optional[str] = None,
                   changed_by: Optional[str] = None) -> Vehicle:
    """
    Partial update restricted to VehicleUpdate fields.
    A status change is written to the status history with the given reason.
    Renaming vehicle_number carries the vehicle's reports along (ON UPDATE CASCADE).
    """
    body = coerce(VehicleUpdate, patch)
    fields = changed_fields(body, not_null=("vehicle_number", "status"))
    with transaction(db):
        vehicle = get_vehicle(db, vehicle_id)
        previous_status = vehicle.status
        apply_fields(vehicle, fields)
        if vehicle.status != previous_status:
            _record_status(db, vehicle, reason=reason, changed_by=changed_by)
            logger.info(f"[VEHICLE] {vehicle.vehicle_number} status {previous_status} -> {vehicle.status}")
    return vehicle


# ── Deletion ──────────────────────────────────────────────────────────────────

def soft_delete_vehicle(db: Session, vehicle_id: int, reason: Optional[str] = None) -> bool:
    """Retire the vehicle, keeping all dependent data. False if it doesn't exist."""
    with transaction(db):
        vehicle = query_service.fetch_vehicle(db, vehicle_id)
        if not vehicle:
            return False
        if vehicle.status != "retired":
            vehicle.status = "retired"
            _record_status(db, vehicle, reason=reason or "Vehicle retired")
        vehicle.updated_at = datetime.utcnow()
    logger.info(f"[VEHICLE] Retired {vehicle.vehicle_number} (id={vehicle_id})")
    return True


def cascade_plan(vehicle_id: int, vehicle_number: str) -> list:
    """Ordered delete statements for a permanent delete; the vehicle row goes last."""
    return [
        delete(Document).where(Document.vehicle_id == vehicle_id),
        delete(Note).where(Note.vehicle_id == vehicle_id),
        delete(MaintenanceItem).where(MaintenanceItem.vehicle_id == vehicle_id),
        delete(StatusHistory).where(StatusHistory.vehicle_id == vehicle_id),
        delete(Report).where(Report.vehicle_number == vehicle_number),
        delete(Vehicle).where(Vehicle.id == vehicle_id),
    ]


def permanently_delete_vehicle(db: Session, vehicle_id: int, attachments=None) -> bool:
    """
    Remove the vehicle and all its documents, notes, maintenance items, status
    history and reports as one atomic unit. False if the vehicle doesn't exist.
    Attachment files are removed best-effort only after the commit.
    """
    with transaction(db):
        # Read the number inside the transaction so reports match the current one
        vehicle_number = db.scalar(select(Vehicle.vehicle_number).where(Vehicle.id == vehicle_id))
        if vehicle_number is None:
            return False
        file_paths = list(db.scalars(select(Document.file_path).where(Document.vehicle_id == vehicle_id)))
        for stmt in cascade_plan(vehicle_id, vehicle_number):
            db.execute(stmt)
    db.expire_all()
    logger.info(f"[VEHICLE] Permanently deleted {vehicle_number} (id={vehicle_id})")

    if attachments is not None:
        for path in file_paths:
            attachments.delete_file(path)
        attachments.remove_vehicle_dir(vehicle_id)
    return True


# ── Read models ───────────────────────────────────────────────────────────────

def get_vehicle_reports(db: Session, vehicle_id: int) -> list[Report]:
    vehicle = get_vehicle(db, vehicle_id)
    stmt = (
        select(Report)
        .where(Report.vehicle_number == vehicle.vehicle_number)
        .order_by(Report.inspection_date.desc(), Report.id.desc())
    )
    return list(db.scalars(stmt).all())


def _count(db: Session, stmt) -> int:
    return db.scalar(stmt) or 0


def get_vehicle_summary(db: Session, vehicle_id: int) -> VehicleSummaryOut:
    vehicle = get_vehicle(db, vehicle_id)
    number = vehicle.vehicle_number

    stats = VehicleStats(
        reports_count=_count(db, select(func.count(Report.id)).where(Report.vehicle_number == number)),
        documents_count=_count(db, select(func.count(Document.id)).where(Document.vehicle_id == vehicle_id)),
        notes_count=_count(db, select(func.count(Note.id)).where(Note.vehicle_id == vehicle_id)),
        maintenance_count=_count(db, select(func.count(MaintenanceItem.id))
                                 .where(MaintenanceItem.vehicle_id == vehicle_id)),
        overdue_maintenance_count=_count(db, select(func.count(MaintenanceItem.id)).where(
            MaintenanceItem.vehicle_id == vehicle_id, MaintenanceItem.status == "overdue")),
    )
    recent = db.scalars(
        select(Report)
        .where(Report.vehicle_number == number)
        .order_by(Report.inspection_date.desc(), Report.id.desc())
        .limit(5)
    ).all()
    by_category = db.execute(
        select(Document.category, func.count(Document.id))
        .where(Document.vehicle_id == vehicle_id)
        .group_by(Document.category)
    ).all()

    return VehicleSummaryOut(
        vehicle=VehicleOut.model_validate(vehicle),
        stats=stats,
        recent_reports=[ReportBrief.model_validate(r) for r in recent],
        documents_by_category={category: count for category, count in by_category},
    )


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def get_vehicle_timeline(db: Session, vehicle_id: int) -> list[TimelineEvent]:
    """Reports, documents, notes and status changes, most recent first."""
    vehicle = get_vehicle(db, vehicle_id)
    events = []

    for r in db.scalars(select(Report).where(Report.vehicle_number == vehicle.vehicle_number)):
        events.append(TimelineEvent(type="report", id=r.id, event_date=_as_datetime(r.inspection_date),
                                    title=f"Inspection by {r.inspector_name}", detail=r.defects))
    for d in db.scalars(select(Document).where(Document.vehicle_id == vehicle_id)):
        events.append(TimelineEvent(type="document", id=d.id, event_date=d.upload_date,
                                    title=d.title, detail=d.category))
    for n in db.scalars(select(Note).where(Note.vehicle_id == vehicle_id)):
        events.append(TimelineEvent(type="note", id=n.id, event_date=n.created_at,
                                    title=n.title, detail=n.note_type))
    for s in db.scalars(select(StatusHistory).where(StatusHistory.vehicle_id == vehicle_id)):
        events.append(TimelineEvent(type="status_change", id=s.id, event_date=_as_datetime(s.effective_date),
                                    title=s.status, detail=s.reason))

    events.sort(key=lambda e: e.event_date, reverse=True)
    return events
