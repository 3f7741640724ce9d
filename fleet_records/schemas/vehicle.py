# fleet_records/schemas/vehicle.py
from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Literal, Optional

from fleet_records.schemas.common import NonNegativeInt, NonNegativeFloat, Pagination
from fleet_records.schemas.report import ReportBrief

VehicleStatus = Literal["active", "maintenance", "out_of_service", "retired"]


class VehicleFields(BaseModel):
    """Every mutable vehicle column, all optional."""
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[NonNegativeInt] = None
    description: Optional[str] = None
    vin: Optional[str] = None
    driver: Optional[str] = None
    license_plate: Optional[str] = None
    tonnage: Optional[str] = None
    fuel_type: Optional[str] = None
    has_radio: Optional[str] = None
    service_station: Optional[str] = None
    sales_price: Optional[NonNegativeFloat] = None
    coverage: Optional[str] = None
    po_number: Optional[str] = None
    title_number: Optional[str] = None
    status: Optional[VehicleStatus] = None
    assigned_to: Optional[str] = None
    location: Optional[str] = None
    acquisition_date: Optional[date] = None
    acquisition_cost: Optional[NonNegativeFloat] = None
    current_mileage: Optional[NonNegativeInt] = None
    last_service_date: Optional[date] = None
    notes: Optional[str] = None


class VehicleCreate(VehicleFields):
    vehicle_number: str

    @field_validator("vehicle_number")
    @classmethod
    def _number_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Vehicle number is required")
        return v


class VehicleUpdate(VehicleFields):
    vehicle_number: Optional[str] = None

    @field_validator("vehicle_number")
    @classmethod
    def _number_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Vehicle number cannot be blank")
        return v


class VehicleFilter(BaseModel):
    search: Optional[str] = None     # number / make / model / driver / VIN
    status: Optional[str] = None
    location: Optional[str] = None


class VehicleOut(BaseModel):
    id: int
    vehicle_number: str
    make: Optional[str]
    model: Optional[str]
    year: Optional[int]
    description: Optional[str]
    vin: Optional[str]
    driver: Optional[str]
    license_plate: Optional[str]
    tonnage: Optional[str]
    fuel_type: Optional[str]
    has_radio: Optional[str]
    service_station: Optional[str]
    sales_price: Optional[float]
    coverage: Optional[str]
    po_number: Optional[str]
    title_number: Optional[str]
    status: str
    assigned_to: Optional[str]
    location: Optional[str]
    acquisition_date: Optional[date]
    acquisition_cost: Optional[float]
    current_mileage: Optional[int]
    last_service_date: Optional[date]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehiclePage(BaseModel):
    items: list[VehicleOut]
    pagination: Pagination


class VehicleStats(BaseModel):
    reports_count: int
    documents_count: int
    notes_count: int
    maintenance_count: int
    overdue_maintenance_count: int


class VehicleSummaryOut(BaseModel):
    vehicle: VehicleOut
    stats: VehicleStats
    recent_reports: list[ReportBrief]
    documents_by_category: dict[str, int]


class TimelineEvent(BaseModel):
    type: str                # report | document | note | status_change
    id: int
    event_date: datetime
    title: Optional[str] = None
    detail: Optional[str] = None
