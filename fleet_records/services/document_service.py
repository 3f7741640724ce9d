# fleet_records/services/document_service.py
"""
Vehicle documents: metadata rows in the record store, files in the
attachment store.

Write order: place the file, then insert the row.
Delete order: commit the row deletion, then remove the file best-effort.
A crash between the two steps leaves at worst an orphaned file, which
sweep_orphan_files() cleans up; it never leaves a row pointing nowhere.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from fleet_records.database import transaction
from fleet_records.errors import NotFound, ValidationFailed
from fleet_records.models.document import Document, DOCUMENT_CATEGORIES
from fleet_records.schemas.document import DocumentMetadata, DocumentUpdate, DocumentFilter, DocumentStatsOut
from fleet_records.services import query_service
from fleet_records.services.attachment_store import AttachmentStore, IncomingFile
from fleet_records.services.patching import coerce, changed_fields, apply_fields
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentSortKey(str, Enum):
    UPLOAD_DATE = "upload_date"
    DOCUMENT_DATE = "document_date"
    TITLE = "title"
    CATEGORY = "category"
    FILE_SIZE = "file_size"


DOCUMENT_SORT_COLUMNS = {
    DocumentSortKey.UPLOAD_DATE: Document.upload_date,
    DocumentSortKey.DOCUMENT_DATE: Document.document_date,
    DocumentSortKey.TITLE: Document.title,
    DocumentSortKey.CATEGORY: Document.category,
    DocumentSortKey.FILE_SIZE: Document.file_size,
}


def upload_document(db: Session, attachments: AttachmentStore, vehicle_id: int, category: str,
                    title: str, incoming: IncomingFile, metadata=None) -> Document:
    meta = coerce(DocumentMetadata, metadata or {})
    errors = []
    if not title or not title.strip():
        errors.append("title: Title is required")
    if category not in DOCUMENT_CATEGORIES:
        errors.append(f"category: must be one of {', '.join(DOCUMENT_CATEGORIES)}")
    if errors:
        attachments.discard(incoming)
        raise ValidationFailed("Validation failed", errors)
    if not query_service.fetch_vehicle(db, vehicle_id):
        attachments.discard(incoming)
        raise NotFound(f"Vehicle {vehicle_id} not found")

    stored = attachments.save_file(vehicle_id, category, incoming)
    try:
        with transaction(db):
            now = datetime.utcnow()
            document = Document(
                vehicle_id=vehicle_id,
                category=category,
                title=title.strip(),
                file_name=stored.original_name,
                file_path=stored.relative_path,
                file_size=stored.size,
                file_type=stored.mime_type,
                upload_date=now,
                created_at=now,
                updated_at=now,
                **meta.model_dump(),
            )
            if document.uploaded_by is None:
                document.uploaded_by = "System"
            db.add(document)
            db.flush()
    except Exception:
        attachments.delete_file(stored.relative_path)
        raise
    logger.info(f"[DOCUMENT] Uploaded document {document.id} for vehicle {vehicle_id} ({category})")
    return document


def get_document(db: Session, document_id: int) -> Document:
    document = db.get(Document, document_id)
    if not document:
        raise NotFound(f"Document {document_id} not found")
    return document


def open_document(db: Session, attachments: AttachmentStore, document_id: int) -> tuple[Path, str, str]:
    """Returns (absolute path, original file name, mime type) for download."""
    document = get_document(db, document_id)
    path = attachments.resolve(document.file_path)
    if not path.is_file():
        logger.warning(f"[DOCUMENT] File missing for document {document_id}: {document.file_path}")
        raise NotFound(f"File for document {document_id} not found")
    return path, document.file_name, document.file_type or "application/octet-stream"


def update_document(db: Session, document_id: int, patch) -> Document:
    """Metadata only; the stored file stays where it was placed."""
    body = coerce(DocumentUpdate, patch)
    fields = changed_fields(body, not_null=("title", "category"))
    with transaction(db):
        document = get_document(db, document_id)
        apply_fields(document, fields)
    return document


def delete_document(db: Session, attachments: AttachmentStore, document_id: int) -> bool:
    with transaction(db):
        file_path = db.scalar(select(Document.file_path).where(Document.id == document_id))
        if file_path is None:
            return False
        db.execute(delete(Document).where(Document.id == document_id))
    attachments.delete_file(file_path)
    logger.info(f"[DOCUMENT] Deleted document {document_id}")
    return True


def list_vehicle_documents(db: Session, vehicle_id: int,
                           filters: Optional[DocumentFilter] = None) -> list[Document]:
    filters = filters or DocumentFilter()
    predicates = [Document.vehicle_id == vehicle_id]
    if filters.category:
        predicates.append(Document.category == filters.category)
    if filters.search:
        term = filters.search
        predicates.append(or_(
            Document.title.icontains(term, autoescape=True),
            Document.description.icontains(term, autoescape=True),
            Document.file_name.icontains(term, autoescape=True),
        ))
    sort_key = query_service.parse_sort_key(DocumentSortKey, filters.sort_by, DocumentSortKey.UPLOAD_DATE)
    order = query_service.parse_sort_order(filters.order, query_service.SortOrder.DESC)
    stmt = (
        select(Document)
        .where(*predicates)
        .order_by(*query_service.order_by_clause(DOCUMENT_SORT_COLUMNS[sort_key], order, Document.id))
    )
    return list(db.scalars(stmt).all())


def get_vehicle_document_stats(db: Session, vehicle_id: int) -> DocumentStatsOut:
    by_category = db.execute(
        select(Document.category, func.count(Document.id))
        .where(Document.vehicle_id == vehicle_id)
        .group_by(Document.category)
    ).all()
    total_size = db.scalar(
        select(func.coalesce(func.sum(Document.file_size), 0)).where(Document.vehicle_id == vehicle_id)
    )
    counts = {category: count for category, count in by_category}
    return DocumentStatsOut(
        total_count=sum(counts.values()),
        count_by_category=counts,
        total_size_bytes=int(total_size or 0),
    )


def sweep_orphan_files(db: Session, attachments: AttachmentStore, dry_run: bool = False) -> list[str]:
    """Remove stored files that no document row references. Returns their paths."""
    referenced = set(db.scalars(select(Document.file_path)))
    orphans = [p for p in attachments.iter_stored_files() if p not in referenced]
    if not dry_run:
        for path in orphans:
            attachments.delete_file(path)
    if orphans:
        logger.info(f"[DOCUMENT] Orphan sweep {'found' if dry_run else 'removed'} {len(orphans)} file(s)")
    return orphans
