# fleet_records/models/status_history.py
"""
One row per vehicle status transition. Read back by the vehicle timeline.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey, CheckConstraint
from fleet_records.database import Base


class StatusHistory(Base):
    __tablename__ = "vehicle_status_history"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'maintenance', 'out_of_service', 'retired')",
            name="ck_vehicle_status_history_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    reason = Column(Text)
    changed_by = Column(String(200))
    effective_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<StatusHistory {self.id} vehicle={self.vehicle_id} status={self.status}>"
