# fleet_records/services/report_service.py
"""
Inspection report writes and statistics.

Reports link to vehicles by vehicle_number. Before a report is inserted (or
re-pointed at another number) the vehicle is upserted in the same
transaction, so the number always resolves to a vehicle row.
"""

from datetime import date, datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from fleet_records.database import transaction
from fleet_records.errors import NotFound
from fleet_records.models.report import Report
from fleet_records.models.vehicle import Vehicle
from fleet_records.schemas.report import ReportCreate, ReportUpdate, StatisticsOut
from fleet_records.services import query_service
from fleet_records.services.patching import coerce, changed_fields, apply_fields
from fleet_records.services.vehicle_service import upsert_in_session
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)

list_reports = query_service.list_reports


def get_report(db: Session, report_id: int) -> Report:
    report = query_service.fetch_report(db, report_id)
    if not report:
        raise NotFound(f"Report {report_id} not found")
    return report


def create_report(db: Session, data) -> Report:
    body = coerce(ReportCreate, data)
    with transaction(db):
        upsert_in_session(db, body.vehicle_number, make=body.make, year=body.year)
        now = datetime.utcnow()
        report = Report(**body.model_dump(), created_at=now, updated_at=now)
        db.add(report)
        db.flush()
    logger.info(f"[REPORT] Created report {report.id} for {report.vehicle_number} "
                f"({report.status})")
    return report


def update_report(db: Session, report_id: int, patch) -> Report:
    body = coerce(ReportUpdate, patch)
    fields = changed_fields(body, not_null=("vehicle_number", "inspection_date", "inspector_name"))
    with transaction(db):
        report = get_report(db, report_id)
        if "vehicle_number" in fields:
            upsert_in_session(db, fields["vehicle_number"], make=fields.get("make"), year=fields.get("year"))
        apply_fields(report, fields)
    logger.info(f"[REPORT] Updated report {report_id}: {sorted(fields)}")
    return report


def delete_report(db: Session, report_id: int) -> bool:
    with transaction(db):
        result = db.execute(delete(Report).where(Report.id == report_id))
    if result.rowcount:
        logger.info(f"[REPORT] Deleted report {report_id}")
    return result.rowcount > 0


def get_statistics(db: Session, today: date | None = None) -> StatisticsOut:
    """Totals, reports inspected in the last 30 days, vehicles per status."""
    today = today or date.today()
    since = today - timedelta(days=30)
    by_status = db.execute(select(Vehicle.status, func.count(Vehicle.id)).group_by(Vehicle.status)).all()
    return StatisticsOut(
        total_reports=db.scalar(select(func.count(Report.id))) or 0,
        total_vehicles=db.scalar(select(func.count(Vehicle.id))) or 0,
        reports_last_30_days=db.scalar(
            select(func.count(Report.id)).where(Report.inspection_date >= since)
        ) or 0,
        vehicles_by_status={status: count for status, count in by_status},
    )
