# fleet_records/routers/documents.py
"""
Vehicle documents. Uploads are multipart: the file part is staged into the
attachment store, then placed and recorded by the document service.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.errors import NotFound
from fleet_records.schemas.document import DocumentFilter, DocumentOut, DocumentStatsOut
from fleet_records.services import document_service
from fleet_records.services.attachment_store import AttachmentStore, get_attachments
from fleet_records.services.vehicle_service import get_vehicle

router = APIRouter()


@router.post("/vehicles/{vehicle_id}/documents", response_model=DocumentOut, status_code=201,
             summary="Upload a document")
def upload_document(
    vehicle_id: int,
    file: UploadFile = File(...),
    category: str = Form(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    uploaded_by: Optional[str] = Form(None),
    document_date: Optional[date] = Form(None),
    cost: Optional[float] = Form(None),
    vendor: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    metadata: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    attachments: AttachmentStore = Depends(get_attachments),
):
    incoming = attachments.stage_upload(file.file, file.filename or "upload",
                                        file.content_type or "application/octet-stream")
    meta = {
        "description": description,
        "uploaded_by": uploaded_by,
        "document_date": document_date,
        "cost": cost,
        "vendor": vendor,
        "tags": tags,
        "extra_metadata": metadata,
    }
    try:
        return document_service.upload_document(db, attachments, vehicle_id, category, title, incoming, meta)
    finally:
        # No-op once the file has been placed
        attachments.discard(incoming)


@router.get("/vehicles/{vehicle_id}/documents", response_model=list[DocumentOut], summary="List documents")
def list_vehicle_documents(
    vehicle_id: int,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    db: Session = Depends(get_db),
):
    get_vehicle(db, vehicle_id)
    return document_service.list_vehicle_documents(
        db, vehicle_id, DocumentFilter(category=category, search=search, sort_by=sort_by, order=order)
    )


@router.get("/vehicles/{vehicle_id}/documents/stats", response_model=DocumentStatsOut, summary="Document totals")
def get_vehicle_document_stats(vehicle_id: int, db: Session = Depends(get_db)):
    get_vehicle(db, vehicle_id)
    return document_service.get_vehicle_document_stats(db, vehicle_id)


@router.get("/documents/{document_id}", response_model=DocumentOut, summary="Get document metadata")
def get_document(document_id: int, db: Session = Depends(get_db)):
    return document_service.get_document(db, document_id)


@router.get("/documents/{document_id}/download", summary="Download a document")
def download_document(
    document_id: int,
    db: Session = Depends(get_db),
    attachments: AttachmentStore = Depends(get_attachments),
):
    path, file_name, mime_type = document_service.open_document(db, attachments, document_id)
    return FileResponse(path, media_type=mime_type, filename=file_name)


@router.put("/documents/{document_id}", response_model=DocumentOut, summary="Update document metadata")
def update_document(document_id: int, body: dict = Body(...), db: Session = Depends(get_db)):
    return document_service.update_document(db, document_id, body)


@router.delete("/documents/{document_id}", summary="Delete a document")
def delete_document(
    document_id: int,
    db: Session = Depends(get_db),
    attachments: AttachmentStore = Depends(get_attachments),
):
    if not document_service.delete_document(db, attachments, document_id):
        raise NotFound(f"Document {document_id} not found")
    return {"status": "deleted", "id": document_id}
