# fleet_records/schemas/note.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Literal, Optional

NoteType = Literal["general", "maintenance", "incident", "assignment"]


class NoteCreate(BaseModel):
    vehicle_id: int
    note_type: NoteType
    title: str
    content: str
    created_by: Optional[str] = "System"

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class NoteUpdate(BaseModel):
    note_type: Optional[NoteType] = None
    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v


class NoteFilter(BaseModel):
    note_type: Optional[str] = None
    sort_by: Optional[str] = None
    order: Optional[str] = None


class NoteOut(BaseModel):
    id: int
    vehicle_id: int
    note_type: str
    title: str
    content: str
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
