# fleet_records/routers/health.py
"""
System health check endpoint.
Returns status of backend + record store + attachment directory.
"""

import os
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.services.attachment_store import AttachmentStore, get_attachments

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), attachments: AttachmentStore = Depends(get_attachments)):
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "attachments": "unknown",
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # Attachment root must be writable
    if os.access(attachments.root, os.W_OK):
        result["attachments"] = "ok"
    else:
        result["attachments"] = "not writable"
        result["status"] = "degraded"

    return result
