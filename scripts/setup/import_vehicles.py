# scripts/setup/import_vehicles.py
"""
Import the fleet listing workbook (.xlsx) into the vehicle registry.
Rows are merged by vehicle number; values already on file are never blanked.
Usage: python scripts/setup/import_vehicles.py LISTING.xlsx [--dry-run] [--cleanup]
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from fleet_records.database import RecordStore
from fleet_records.config import settings
from fleet_records.services.attachment_store import AttachmentStore
from fleet_records.services.import_service import cleanup_invalid_vehicles, import_vehicles


def main():
    parser = argparse.ArgumentParser(description="Import vehicles from the fleet listing workbook")
    parser.add_argument("workbook", help="Path to the .xlsx listing")
    parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing")
    parser.add_argument("--cleanup", action="store_true",
                        help="Also delete vehicles whose numbers the import filter rejects")
    args = parser.parse_args()

    if not os.path.isfile(args.workbook):
        print(f"Workbook not found: {args.workbook}")
        sys.exit(1)

    store = RecordStore(settings.DATABASE_URL)
    store.create_tables()
    db = store.session()
    try:
        result = import_vehicles(db, args.workbook, dry_run=args.dry_run)
        removed = []
        if args.cleanup:
            removed = cleanup_invalid_vehicles(db, AttachmentStore(settings.UPLOAD_DIR), dry_run=args.dry_run)
    finally:
        db.close()
        store.close()

    prefix = "Would import" if args.dry_run else "Imported"
    print(f"{prefix}: {len(result.imported)} new, {len(result.updated)} merged")
    print(f"Skipped: {len(result.skipped)} row(s)")
    for row_number, reason in result.skipped:
        print(f"   row {row_number}: {reason}")
    if args.cleanup:
        verb = "Would delete" if args.dry_run else "Deleted"
        print(f"{verb} {len(removed)} invalid vehicle(s)")
        for number in removed:
            print(f"   {number}")


if __name__ == "__main__":
    main()
