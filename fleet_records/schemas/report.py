# fleet_records/schemas/report.py
from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Optional

from fleet_records.schemas.common import NonNegativeInt, NonNegativeFloat, TirePressure, Pagination


class ReportFields(BaseModel):
    make: Optional[str] = None
    year: Optional[NonNegativeInt] = None
    mileage: Optional[NonNegativeInt] = None
    last_mileage_serviced: Optional[NonNegativeInt] = None
    hour_meter: Optional[NonNegativeFloat] = None
    hours_pto: Optional[NonNegativeFloat] = None

    steering_good: Optional[bool] = None
    brakes_work: Optional[bool] = None
    parking_brake_work: Optional[bool] = None
    headlights_working: Optional[bool] = None
    parking_lights_working: Optional[bool] = None
    taillights_working: Optional[bool] = None
    backup_lights_working: Optional[bool] = None
    signal_devices_good: Optional[bool] = None
    auxiliary_lights_working: Optional[bool] = None
    windshield_condition: Optional[str] = None
    windshield_wiper_working: Optional[bool] = None
    tires_safe: Optional[bool] = None
    flags_flares_present: Optional[bool] = None
    first_aid_kit_stocked: Optional[bool] = None
    aed_location: Optional[str] = None
    fire_extinguisher_condition: Optional[str] = None

    tire_pressure_rf: Optional[TirePressure] = None
    tire_pressure_rr: Optional[TirePressure] = None
    tire_pressure_rr_outer: Optional[TirePressure] = None
    tire_pressure_lf: Optional[TirePressure] = None
    tire_pressure_lr: Optional[TirePressure] = None
    tire_pressure_lr_outer: Optional[TirePressure] = None

    defects: Optional[str] = None
    signature: Optional[str] = None


def _required_text(v: Optional[str], label: str) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f"{label} is required")
    return v


def _not_in_future(v: Optional[date]) -> Optional[date]:
    if v is not None and v > date.today():
        raise ValueError("Inspection date cannot be in the future")
    return v


class ReportCreate(ReportFields):
    vehicle_number: str
    inspection_date: date
    inspector_name: str

    @field_validator("vehicle_number")
    @classmethod
    def _vehicle_number(cls, v):
        return _required_text(v, "Vehicle number")

    @field_validator("inspector_name")
    @classmethod
    def _inspector_name(cls, v):
        return _required_text(v, "Inspector name")

    @field_validator("inspection_date")
    @classmethod
    def _inspection_date(cls, v):
        return _not_in_future(v)


class ReportUpdate(ReportFields):
    vehicle_number: Optional[str] = None
    inspection_date: Optional[date] = None
    inspector_name: Optional[str] = None

    @field_validator("vehicle_number")
    @classmethod
    def _vehicle_number(cls, v):
        return _required_text(v, "Vehicle number")

    @field_validator("inspector_name")
    @classmethod
    def _inspector_name(cls, v):
        return _required_text(v, "Inspector name")

    @field_validator("inspection_date")
    @classmethod
    def _inspection_date(cls, v):
        return _not_in_future(v)


class ReportFilter(BaseModel):
    vehicle: Optional[str] = None
    inspector: Optional[str] = None
    search: Optional[str] = None       # vehicle number / inspector / defects
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class ReportOut(BaseModel):
    id: int
    vehicle_number: str
    inspection_date: date
    inspector_name: str
    make: Optional[str]
    year: Optional[int]
    mileage: Optional[int]
    last_mileage_serviced: Optional[int]
    hour_meter: Optional[float]
    hours_pto: Optional[float]
    steering_good: Optional[bool]
    brakes_work: Optional[bool]
    parking_brake_work: Optional[bool]
    headlights_working: Optional[bool]
    parking_lights_working: Optional[bool]
    taillights_working: Optional[bool]
    backup_lights_working: Optional[bool]
    signal_devices_good: Optional[bool]
    auxiliary_lights_working: Optional[bool]
    windshield_condition: Optional[str]
    windshield_wiper_working: Optional[bool]
    tires_safe: Optional[bool]
    flags_flares_present: Optional[bool]
    first_aid_kit_stocked: Optional[bool]
    aed_location: Optional[str]
    fire_extinguisher_condition: Optional[str]
    tire_pressure_rf: Optional[float]
    tire_pressure_rr: Optional[float]
    tire_pressure_rr_outer: Optional[float]
    tire_pressure_lf: Optional[float]
    tire_pressure_lr: Optional[float]
    tire_pressure_lr_outer: Optional[float]
    defects: Optional[str]
    signature: Optional[str]
    status: str                        # PASS | ATTENTION, derived from defects
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReportBrief(BaseModel):
    id: int
    inspection_date: date
    inspector_name: str
    mileage: Optional[int]

    class Config:
        from_attributes = True


class ReportPage(BaseModel):
    items: list[ReportOut]
    pagination: Pagination


class StatisticsOut(BaseModel):
    total_reports: int
    total_vehicles: int
    reports_last_30_days: int
    vehicles_by_status: dict[str, int]
