# fleet_records/models/report.py
"""
Vehicle condition (inspection) reports.
Linked to vehicles by vehicle_number; a rename of the vehicle cascades here.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Float, Text, Boolean, ForeignKey
from fleet_records.database import Base

CHECKLIST_FIELDS = (
    "steering_good",
    "brakes_work",
    "parking_brake_work",
    "headlights_working",
    "parking_lights_working",
    "taillights_working",
    "backup_lights_working",
    "signal_devices_good",
    "auxiliary_lights_working",
    "windshield_wiper_working",
    "tires_safe",
    "flags_flares_present",
    "first_aid_kit_stocked",
)

TIRE_PRESSURE_FIELDS = (
    "tire_pressure_rf",
    "tire_pressure_rr",
    "tire_pressure_rr_outer",
    "tire_pressure_lf",
    "tire_pressure_lr",
    "tire_pressure_lr_outer",
)

STATUS_PASS = "PASS"
STATUS_ATTENTION = "ATTENTION"


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_number = Column(
        String(50),
        ForeignKey("vehicles.vehicle_number", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    inspection_date = Column(Date, nullable=False, index=True)
    inspector_name = Column(String(200), nullable=False)
    make = Column(String(100))
    year = Column(Integer)
    mileage = Column(Integer)
    last_mileage_serviced = Column(Integer)
    hour_meter = Column(Float)
    hours_pto = Column(Float)

    # Checklist
    steering_good = Column(Boolean)
    brakes_work = Column(Boolean)
    parking_brake_work = Column(Boolean)
    headlights_working = Column(Boolean)
    parking_lights_working = Column(Boolean)
    taillights_working = Column(Boolean)
    backup_lights_working = Column(Boolean)
    signal_devices_good = Column(Boolean)
    auxiliary_lights_working = Column(Boolean)
    windshield_condition = Column(String(200))
    windshield_wiper_working = Column(Boolean)
    tires_safe = Column(Boolean)
    flags_flares_present = Column(Boolean)
    first_aid_kit_stocked = Column(Boolean)
    aed_location = Column(String(200))
    fire_extinguisher_condition = Column(String(200))

    # Tire pressures (PSI)
    tire_pressure_rf = Column(Float)
    tire_pressure_rr = Column(Float)
    tire_pressure_rr_outer = Column(Float)
    tire_pressure_lf = Column(Float)
    tire_pressure_lr = Column(Float)
    tire_pressure_lr_outer = Column(Float)

    defects = Column(Text)
    signature = Column(String(200))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def status(self) -> str:
        """Derived, never stored: any recorded defect needs attention."""
        return STATUS_ATTENTION if self.defects and self.defects.strip() else STATUS_PASS

    def __repr__(self):
        return f"<Report {self.id} vehicle={self.vehicle_number} date={self.inspection_date}>"
