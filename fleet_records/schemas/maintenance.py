# fleet_records/schemas/maintenance.py
from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Literal, Optional

from fleet_records.schemas.common import NonNegativeInt

MaintenanceStatus = Literal["scheduled", "due", "overdue", "completed"]


class MaintenanceFields(BaseModel):
    interval_miles: Optional[NonNegativeInt] = None
    interval_days: Optional[NonNegativeInt] = None
    last_service_date: Optional[date] = None
    last_service_mileage: Optional[NonNegativeInt] = None
    next_due_date: Optional[date] = None
    next_due_mileage: Optional[NonNegativeInt] = None
    notes: Optional[str] = None


class MaintenanceCreate(MaintenanceFields):
    vehicle_id: int
    maintenance_type: str
    status: MaintenanceStatus = "scheduled"

    @field_validator("maintenance_type")
    @classmethod
    def _type_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Maintenance type is required")
        return v


class MaintenanceUpdate(MaintenanceFields):
    maintenance_type: Optional[str] = None
    status: Optional[MaintenanceStatus] = None

    @field_validator("maintenance_type")
    @classmethod
    def _type_not_blank(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Maintenance type cannot be blank")
        return v


class MaintenanceFilter(BaseModel):
    status: Optional[str] = None
    sort_by: Optional[str] = None
    order: Optional[str] = None


class MaintenanceOut(BaseModel):
    id: int
    vehicle_id: int
    maintenance_type: str
    interval_miles: Optional[int]
    interval_days: Optional[int]
    last_service_date: Optional[date]
    last_service_mileage: Optional[int]
    next_due_date: Optional[date]
    next_due_mileage: Optional[int]
    status: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
