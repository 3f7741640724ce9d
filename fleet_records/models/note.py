# fleet_records/models/note.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint
from fleet_records.database import Base

NOTE_TYPES = ("general", "maintenance", "incident", "assignment")


class Note(Base):
    __tablename__ = "vehicle_notes"
    __table_args__ = (
        CheckConstraint(
            "note_type IN ('general', 'maintenance', 'incident', 'assignment')",
            name="ck_vehicle_notes_note_type",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    note_type = Column(String(20), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    created_by = Column(String(200))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Note {self.id} vehicle={self.vehicle_id} type={self.note_type}>"
