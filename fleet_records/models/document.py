# fleet_records/models/document.py
"""
Per-vehicle attachments. Each row points at exactly one file in the
attachment store (file_path is relative to the store root).
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Float, Text, ForeignKey, CheckConstraint
from fleet_records.database import Base

DOCUMENT_CATEGORIES = ("service", "invoice", "oil_test", "inspection", "photo", "other")


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        CheckConstraint(
            "category IN ('service', 'invoice', 'oil_test', 'inspection', 'photo', 'other')",
            name="ck_documents_category",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(20), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    file_name = Column(String(255), nullable=False)     # original upload name
    file_path = Column(String(500), nullable=False)     # relative to UPLOAD_DIR
    file_size = Column(Integer)
    file_type = Column(String(100))
    uploaded_by = Column(String(200))
    upload_date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    document_date = Column(Date)
    cost = Column(Float)
    vendor = Column(String(200))
    tags = Column(Text)
    extra_metadata = Column("metadata", Text)   # "metadata" is reserved on declarative classes
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Document {self.id} vehicle={self.vehicle_id} category={self.category}>"
