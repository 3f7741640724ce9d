# fleet_records/routers/maintenance.py
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.schemas.maintenance import MaintenanceFilter, MaintenanceOut
from fleet_records.services import maintenance_service
from fleet_records.services.vehicle_service import get_vehicle

router = APIRouter()


@router.get("/vehicles/{vehicle_id}/maintenance", response_model=list[MaintenanceOut],
            summary="Maintenance schedule for a vehicle")
def list_vehicle_maintenance(
    vehicle_id: int,
    status: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    db: Session = Depends(get_db),
):
    get_vehicle(db, vehicle_id)
    return maintenance_service.list_vehicle_maintenance(
        db, vehicle_id, MaintenanceFilter(status=status, sort_by=sort_by, order=order)
    )


@router.post("/maintenance", response_model=MaintenanceOut, status_code=201, summary="Schedule maintenance")
def create_maintenance_item(body: dict = Body(...), db: Session = Depends(get_db)):
    return maintenance_service.create_maintenance_item(db, body)


@router.get("/maintenance/{item_id}", response_model=MaintenanceOut, summary="Get a maintenance item")
def get_maintenance_item(item_id: int, db: Session = Depends(get_db)):
    return maintenance_service.get_maintenance_item(db, item_id)


@router.put("/maintenance/{item_id}", response_model=MaintenanceOut, summary="Update a maintenance item")
def update_maintenance_item(item_id: int, body: dict = Body(...), db: Session = Depends(get_db)):
    return maintenance_service.update_maintenance_item(db, item_id, body)
