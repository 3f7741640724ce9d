# fleet_records/models/maintenance_item.py
"""
Maintenance schedule entries (oil change, brake service, ...).
Intervals may be expressed in miles, days, or both.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey, CheckConstraint
from fleet_records.database import Base

MAINTENANCE_STATUSES = ("scheduled", "due", "overdue", "completed")


class MaintenanceItem(Base):
    __tablename__ = "maintenance_schedule"
    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'due', 'overdue', 'completed')",
            name="ck_maintenance_schedule_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    maintenance_type = Column(String(100), nullable=False)
    interval_miles = Column(Integer)
    interval_days = Column(Integer)
    last_service_date = Column(Date)
    last_service_mileage = Column(Integer)
    next_due_date = Column(Date)
    next_due_mileage = Column(Integer)
    status = Column(String(20), nullable=False, default="scheduled", index=True)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MaintenanceItem {self.id} vehicle={self.vehicle_id} type={self.maintenance_type} status={self.status}>"
