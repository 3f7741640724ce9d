# scripts/maintenance/sweep_attachments.py
"""
Remove attachment files that no document record references.
Such files are left behind when a process dies between placing a file and
recording it, or when a best-effort removal fails.
Usage: python scripts/maintenance/sweep_attachments.py [--dry-run]
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from fleet_records.database import RecordStore
from fleet_records.config import settings
from fleet_records.services.attachment_store import AttachmentStore
from fleet_records.services.document_service import sweep_orphan_files


def main():
    parser = argparse.ArgumentParser(description="Sweep orphaned attachment files")
    parser.add_argument("--dry-run", action="store_true", help="List orphans without removing them")
    parser.add_argument("--upload-dir", default=settings.UPLOAD_DIR, help="Attachment root directory")
    args = parser.parse_args()

    store = RecordStore(settings.DATABASE_URL)
    store.create_tables()
    attachments = AttachmentStore(args.upload_dir)

    db = store.session()
    try:
        orphans = sweep_orphan_files(db, attachments, dry_run=args.dry_run)
    finally:
        db.close()
        store.close()

    verb = "Would remove" if args.dry_run else "Removed"
    for path in orphans:
        print(f"   {path}")
    print(f"{verb} {len(orphans)} orphaned file(s) under {attachments.root}")


if __name__ == "__main__":
    main()
