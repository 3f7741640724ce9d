# fleet_records/services/note_service.py
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from fleet_records.database import transaction
from fleet_records.errors import NotFound
from fleet_records.models.note import Note
from fleet_records.schemas.note import NoteCreate, NoteUpdate, NoteFilter
from fleet_records.services import query_service
from fleet_records.services.patching import coerce, changed_fields, apply_fields
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)


class NoteSortKey(str, Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    NOTE_TYPE = "note_type"


NOTE_SORT_COLUMNS = {
    NoteSortKey.CREATED_AT: Note.created_at,
    NoteSortKey.UPDATED_AT: Note.updated_at,
    NoteSortKey.TITLE: Note.title,
    NoteSortKey.NOTE_TYPE: Note.note_type,
}


def create_note(db: Session, data) -> Note:
    body = coerce(NoteCreate, data)
    with transaction(db):
        if not query_service.fetch_vehicle(db, body.vehicle_id):
            raise NotFound(f"Vehicle {body.vehicle_id} not found")
        now = datetime.utcnow()
        note = Note(**body.model_dump(), created_at=now, updated_at=now)
        db.add(note)
        db.flush()
    logger.info(f"[VEHICLE] Note {note.id} ({note.note_type}) added to vehicle {note.vehicle_id}")
    return note


def get_note(db: Session, note_id: int) -> Note:
    note = db.get(Note, note_id)
    if not note:
        raise NotFound(f"Note {note_id} not found")
    return note


def list_vehicle_notes(db: Session, vehicle_id: int, filters: Optional[NoteFilter] = None) -> list[Note]:
    filters = filters or NoteFilter()
    predicates = [Note.vehicle_id == vehicle_id]
    if filters.note_type:
        predicates.append(Note.note_type == filters.note_type)
    sort_key = query_service.parse_sort_key(NoteSortKey, filters.sort_by, NoteSortKey.CREATED_AT)
    order = query_service.parse_sort_order(filters.order, query_service.SortOrder.DESC)
    stmt = (
        select(Note)
        .where(*predicates)
        .order_by(*query_service.order_by_clause(NOTE_SORT_COLUMNS[sort_key], order, Note.id))
    )
    return list(db.scalars(stmt).all())


def update_note(db: Session, note_id: int, patch) -> Note:
    body = coerce(NoteUpdate, patch)
    fields = changed_fields(body, not_null=("note_type", "title", "content"))
    with transaction(db):
        note = get_note(db, note_id)
        apply_fields(note, fields)
    return note


def delete_note(db: Session, note_id: int) -> bool:
    with transaction(db):
        result = db.execute(delete(Note).where(Note.id == note_id))
    return result.rowcount > 0
