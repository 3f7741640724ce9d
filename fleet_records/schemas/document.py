# fleet_records/schemas/document.py
from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Literal, Optional

from fleet_records.schemas.common import NonNegativeFloat

DocumentCategory = Literal["service", "invoice", "oil_test", "inspection", "photo", "other"]


class DocumentMetadata(BaseModel):
    """Caller-supplied fields accompanying an upload."""
    description: Optional[str] = None
    uploaded_by: Optional[str] = None
    document_date: Optional[date] = None
    cost: Optional[NonNegativeFloat] = None
    vendor: Optional[str] = None
    tags: Optional[str] = None
    extra_metadata: Optional[str] = None


class DocumentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[DocumentCategory] = None
    document_date: Optional[date] = None
    cost: Optional[NonNegativeFloat] = None
    vendor: Optional[str] = None
    tags: Optional[str] = None
    extra_metadata: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title cannot be blank")
        return v


class DocumentFilter(BaseModel):
    category: Optional[str] = None
    search: Optional[str] = None      # title / description / file name
    sort_by: Optional[str] = None
    order: Optional[str] = None


class DocumentOut(BaseModel):
    id: int
    vehicle_id: int
    category: str
    title: str
    description: Optional[str]
    file_name: str
    file_path: str
    file_size: Optional[int]
    file_type: Optional[str]
    uploaded_by: Optional[str]
    upload_date: datetime
    document_date: Optional[date]
    cost: Optional[float]
    vendor: Optional[str]
    tags: Optional[str]
    extra_metadata: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DocumentStatsOut(BaseModel):
    total_count: int
    count_by_category: dict[str, int]
    total_size_bytes: int
