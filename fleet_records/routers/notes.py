# fleet_records/routers/notes.py
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.errors import NotFound
from fleet_records.schemas.note import NoteFilter, NoteOut
from fleet_records.services import note_service
from fleet_records.services.vehicle_service import get_vehicle

router = APIRouter()


@router.get("/vehicles/{vehicle_id}/notes", response_model=list[NoteOut], summary="List notes for a vehicle")
def list_vehicle_notes(
    vehicle_id: int,
    note_type: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    db: Session = Depends(get_db),
):
    get_vehicle(db, vehicle_id)
    return note_service.list_vehicle_notes(db, vehicle_id, NoteFilter(note_type=note_type, sort_by=sort_by, order=order))


@router.post("/notes", response_model=NoteOut, status_code=201, summary="Add a note")
def create_note(body: dict = Body(...), db: Session = Depends(get_db)):
    return note_service.create_note(db, body)


@router.get("/notes/{note_id}", response_model=NoteOut, summary="Get a note")
def get_note(note_id: int, db: Session = Depends(get_db)):
    return note_service.get_note(db, note_id)


@router.put("/notes/{note_id}", response_model=NoteOut, summary="Update a note")
def update_note(note_id: int, body: dict = Body(...), db: Session = Depends(get_db)):
    return note_service.update_note(db, note_id, body)


@router.delete("/notes/{note_id}", summary="Delete a note")
def delete_note(note_id: int, db: Session = Depends(get_db)):
    if not note_service.delete_note(db, note_id):
        raise NotFound(f"Note {note_id} not found")
    return {"status": "deleted", "id": note_id}
