# fleet_records/routers/vehicles.py
"""Vehicle registry: listing, lookup, summary/timeline read models, CRUD."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.errors import NotFound, ValidationFailed
from fleet_records.schemas.common import PageRequest
from fleet_records.schemas.report import ReportOut
from fleet_records.schemas.vehicle import (
    VehicleFields, VehicleFilter, VehicleOut, VehiclePage, VehicleSummaryOut, TimelineEvent,
)
from fleet_records.services import vehicle_service
from fleet_records.services.attachment_store import AttachmentStore, get_attachments

router = APIRouter()

UPSERT_FIELDS = tuple(name for name in VehicleFields.model_fields if name != "status")


@router.get("/vehicles", response_model=VehiclePage, summary="List vehicles")
def list_vehicles(
    search: Optional[str] = None,
    status: Optional[str] = None,
    location: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Search matches vehicle number, make, model, driver and VIN. Default sort is natural vehicle number order."""
    return vehicle_service.list_vehicles(
        db,
        VehicleFilter(search=search, status=status, location=location),
        PageRequest(page=page, limit=limit, sort_by=sort_by, order=order),
    )


@router.get("/vehicles/number/{vehicle_number}", response_model=VehicleOut, summary="Look up a vehicle by number")
def get_vehicle_by_number(vehicle_number: str, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle_by_number(db, vehicle_number)


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get a vehicle")
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle(db, vehicle_id)


@router.get("/vehicles/{vehicle_id}/summary", response_model=VehicleSummaryOut, summary="Vehicle with related counts")
def get_vehicle_summary(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle_summary(db, vehicle_id)


@router.get("/vehicles/{vehicle_id}/reports", response_model=list[ReportOut], summary="Reports for a vehicle")
def get_vehicle_reports(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle_reports(db, vehicle_id)


@router.get("/vehicles/{vehicle_id}/timeline", response_model=list[TimelineEvent], summary="Vehicle history")
def get_vehicle_timeline(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle_timeline(db, vehicle_id)


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="Add a vehicle")
def create_vehicle(body: dict = Body(...), db: Session = Depends(get_db)):
    return vehicle_service.create_vehicle(db, body)


@router.post("/vehicles/upsert", response_model=VehicleOut, summary="Create or merge a vehicle by number")
def upsert_vehicle(body: dict = Body(...), db: Session = Depends(get_db)):
    """Supplied non-null fields overwrite; omitted or null fields keep their stored values. Status is ignored."""
    number = body.get("vehicle_number")
    if not isinstance(number, str):
        raise ValidationFailed("Validation failed", ["vehicle_number: Vehicle number is required"])
    fields = {name: body[name] for name in UPSERT_FIELDS if name in body}
    return vehicle_service.upsert_vehicle(db, number, **fields)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Update a vehicle")
def update_vehicle(
    vehicle_id: int,
    body: dict = Body(...),
    reason: Optional[str] = None,
    changed_by: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Partial update. Unknown keys are ignored; a status change is recorded with the given reason."""
    return vehicle_service.update_vehicle(db, vehicle_id, body, reason=reason, changed_by=changed_by)


@router.delete("/vehicles/{vehicle_id}", summary="Retire or permanently delete a vehicle")
def delete_vehicle(
    vehicle_id: int,
    permanent: bool = Query(False, description="Remove the vehicle and every dependent record"),
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    attachments: AttachmentStore = Depends(get_attachments),
):
    if permanent:
        deleted = vehicle_service.permanently_delete_vehicle(db, vehicle_id, attachments)
    else:
        deleted = vehicle_service.soft_delete_vehicle(db, vehicle_id, reason=reason)
    if not deleted:
        raise NotFound(f"Vehicle {vehicle_id} not found")
    return {"status": "deleted" if permanent else "retired", "id": vehicle_id}
