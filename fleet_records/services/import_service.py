# fleet_records/services/import_service.py
"""
Bulk fleet import from the stores vehicle and equipment listing workbook.

The first sheet's first row holds the column headers. Each row with a VEH #
becomes a create-or-merge through vehicle_service.upsert_vehicle, so a
re-import fills gaps but never blanks out values already on file.
Rows whose "vehicle number" is really an account line, a note or a section
heading are skipped, as are years outside MIN_YEAR..MAX_YEAR.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from openpyxl import load_workbook
from sqlalchemy import select
from sqlalchemy.orm import Session

from fleet_records.errors import ValidationFailed
from fleet_records.models.vehicle import Vehicle
from fleet_records.services import query_service, vehicle_service
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)

NUMBER_COLUMN = "VEH #"

# Workbook header -> vehicle column. Headers are compared stripped and upper-cased.
COLUMN_MAP = {
    "YEAR": "year",
    "DESCRIPTION": "description",
    "VIN #": "vin",
    "DRIVER": "driver",
    "LICENSE": "license_plate",
    "TONNAGE": "tonnage",
    "FUEL": "fuel_type",
    "RADIO": "has_radio",
    "SERVICE": "service_station",
    "SALES": "sales_price",
    "COVERAGE": "coverage",
    "PO#": "po_number",
    "TITLE": "title_number",
}

NOT_A_VEHICLE = (
    "ACCT", "ACCOUNT", "ELECT", "DUTY", "STATION", "PRICE",
    "JOB ", "NDEG", "NDEQ", "JUNKED", "TRADED", "AUCTION",
    "NEW #", "OLD #", "VEH #", "E-G-W", "E G W",
    "HAS BEEN", "SERVICE", "SALES",
)
MAX_NUMBER_LENGTH = 20
MIN_YEAR, MAX_YEAR = 1950, 2030

# Checked in order; the first one found in the description wins
KNOWN_MAKES = (
    "DODGE", "CHEVY", "CHEVROLET", "FORD", "GMC", "RAM", "TOYOTA", "HONDA", "NISSAN",
    "KIA", "HYUNDAI", "JOHN DEERE", "KUBOTA", "EXMARK", "HUSQVARNA",
)
MAKE_ALIASES = {"CHEVROLET": "CHEVY"}

_DIGIT = re.compile(r"\d")
_NOT_PRICE = re.compile(r"[^0-9.]")


@dataclass
class ImportRow:
    row_number: int
    vehicle_number: str
    fields: dict


@dataclass
class ImportResult:
    imported: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[tuple[int, str]] = field(default_factory=list)   # (row number, reason)


def is_valid_vehicle_number(value) -> bool:
    number = str(value or "").strip().upper()
    if not number:
        return False
    if any(pattern in number for pattern in NOT_A_VEHICLE):
        return False
    return bool(_DIGIT.search(number)) and len(number) <= MAX_NUMBER_LENGTH


def _find_make(description: Optional[str]) -> Optional[str]:
    if not description:
        return None
    upper = description.upper()
    for make in KNOWN_MAKES:
        if make in upper:
            return make
    return None


def extract_make(description: Optional[str]) -> Optional[str]:
    make = _find_make(description)
    return MAKE_ALIASES.get(make, make)


def extract_model(description: Optional[str]) -> Optional[str]:
    """The description with the make removed (first occurrence, any case)."""
    if not description:
        return None
    make = _find_make(description)
    if make:
        description = re.sub(re.escape(make), "", description, count=1, flags=re.IGNORECASE)
    return " ".join(description.split()) or None


def _text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _year(value) -> Optional[int]:
    text = _text(value)
    if text is None:
        return None
    match = re.match(r"\d+", text)
    return int(match.group()) if match else None


def _price(value) -> Optional[float]:
    if isinstance(value, (int, float)):
        return float(value)
    digits = _NOT_PRICE.sub("", _text(value) or "")
    try:
        return float(digits)
    except ValueError:
        return None


def read_workbook(path) -> list[dict]:
    """Rows of the first sheet as {HEADER: value}, blank rows dropped."""
    workbook = load_workbook(Path(path), read_only=True, data_only=True)
    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        columns = [str(h).strip().upper() if h is not None else "" for h in header]
        records = []
        for values in rows:
            if all(v is None or str(v).strip() == "" for v in values):
                continue
            records.append({col: v for col, v in zip(columns, values) if col})
        return records
    finally:
        workbook.close()


def parse_rows(records: list[dict]) -> tuple[list[ImportRow], list[tuple[int, str]]]:
    """Split workbook records into importable rows and (row number, reason) skips."""
    rows, skipped = [], []
    # Row 1 is the header
    for row_number, record in enumerate(records, start=2):
        number = _text(record.get(NUMBER_COLUMN))
        if number is None:
            continue
        if not is_valid_vehicle_number(number):
            skipped.append((row_number, f"not a vehicle number: {number}"))
            continue
        year = _year(record.get("YEAR"))
        if year is not None and not MIN_YEAR <= year <= MAX_YEAR:
            skipped.append((row_number, f"year out of range: {year}"))
            continue

        fields = {column: _text(record.get(header)) for header, column in COLUMN_MAP.items()}
        fields["year"] = year
        fields["sales_price"] = _price(record.get("SALES"))
        fields["make"] = extract_make(fields["description"])
        fields["model"] = extract_model(fields["description"])
        rows.append(ImportRow(row_number=row_number, vehicle_number=number, fields=fields))
    return rows, skipped


def import_vehicles(db: Session, path, dry_run: bool = False) -> ImportResult:
    records = read_workbook(path)
    rows, skipped = parse_rows(records)
    result = ImportResult(skipped=skipped)
    logger.info(f"[IMPORT] {path}: {len(rows)} candidate row(s), {len(skipped)} skipped while parsing")

    for row in rows:
        existed = query_service.fetch_vehicle_by_number(db, row.vehicle_number) is not None
        if not dry_run:
            try:
                vehicle_service.upsert_vehicle(db, row.vehicle_number, reason="Imported from fleet listing",
                                               **row.fields)
            except ValidationFailed as e:
                logger.warning(f"[IMPORT] Row {row.row_number} ({row.vehicle_number}) rejected: {e.details}")
                result.skipped.append((row.row_number, "; ".join(e.details)))
                continue
        (result.updated if existed else result.imported).append(row.vehicle_number)

    logger.info(
        f"[IMPORT] {'Dry run' if dry_run else 'Done'}: {len(result.imported)} new, "
        f"{len(result.updated)} merged, {len(result.skipped)} skipped"
    )
    return result


def find_invalid_vehicles(db: Session) -> list[Vehicle]:
    """Vehicles whose number would have been rejected by the import filter."""
    vehicles = db.scalars(select(Vehicle).order_by(Vehicle.id)).all()
    return [v for v in vehicles if not is_valid_vehicle_number(v.vehicle_number)]


def cleanup_invalid_vehicles(db: Session, attachments=None, dry_run: bool = False) -> list[str]:
    """Permanently delete vehicles left by earlier unfiltered imports. Returns their numbers."""
    invalid = [(v.id, v.vehicle_number) for v in find_invalid_vehicles(db)]
    if not dry_run:
        for vehicle_id, _ in invalid:
            vehicle_service.permanently_delete_vehicle(db, vehicle_id, attachments)
    if invalid:
        logger.info(f"[IMPORT] Cleanup {'found' if dry_run else 'removed'} {len(invalid)} invalid vehicle(s)")
    return [number for _, number in invalid]
