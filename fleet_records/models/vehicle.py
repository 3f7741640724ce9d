# fleet_records/models/vehicle.py
"""
Fleet vehicles table.
vehicle_number is the human-assigned natural key; reports link to it by number,
every other dependent table links to the numeric id.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Float, Text, CheckConstraint
from fleet_records.database import Base

VEHICLE_STATUSES = ("active", "maintenance", "out_of_service", "retired")


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'maintenance', 'out_of_service', 'retired')",
            name="ck_vehicles_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_number = Column(String(50), unique=True, nullable=False, index=True)
    make = Column(String(100))
    model = Column(String(100))
    year = Column(Integer)
    description = Column(Text)
    vin = Column(String(50))
    driver = Column(String(200))
    license_plate = Column(String(50))
    tonnage = Column(String(50))
    fuel_type = Column(String(50))
    has_radio = Column(String(20))
    service_station = Column(String(200))
    sales_price = Column(Float)
    coverage = Column(String(100))
    po_number = Column(String(100))
    title_number = Column(String(100))
    status = Column(String(20), nullable=False, default="active", index=True)
    assigned_to = Column(String(200))
    location = Column(String(200))
    acquisition_date = Column(Date)
    acquisition_cost = Column(Float)
    current_mileage = Column(Integer)
    last_service_date = Column(Date)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Vehicle {self.id} number={self.vehicle_number} status={self.status}>"
