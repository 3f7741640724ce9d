# fleet_records/routers/export.py
"""PDF and CSV downloads of inspection reports."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.errors import ValidationFailed
from fleet_records.services import export_service
from fleet_records.services.report_service import get_report

router = APIRouter()


def _parse_ids(ids: Optional[str]) -> Optional[list[int]]:
    if not ids:
        return None
    try:
        return [int(part) for part in ids.split(",") if part.strip()]
    except ValueError as e:
        raise ValidationFailed("ids must be a comma-separated list of report ids") from e


@router.get("/export/reports/{report_id}/pdf", summary="Report as PDF")
def export_report_pdf(report_id: int, db: Session = Depends(get_db)):
    report = get_report(db, report_id)
    filename = f"report_{report.vehicle_number}_{report.inspection_date}.pdf"
    pdf = export_service.render_report_document(db, report_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/reports/csv", summary="Reports as CSV")
def export_reports_csv(
    ids: Optional[str] = Query(None, description="Comma-separated report ids; omit for all reports"),
    db: Session = Depends(get_db),
):
    data = export_service.render_reports_table(db, _parse_ids(ids))
    filename = f"reports_{date.today().isoformat()}.csv"
    return Response(
        content=data,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
