# fleet_records/routers/reports.py
"""Vehicle condition reports."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from fleet_records.database import get_db
from fleet_records.errors import NotFound
from fleet_records.schemas.common import PageRequest
from fleet_records.schemas.report import ReportFilter, ReportOut, ReportPage, StatisticsOut
from fleet_records.services import report_service

router = APIRouter()


@router.get("/reports", response_model=ReportPage, summary="List reports")
def list_reports(
    vehicle: Optional[str] = None,
    inspector: Optional[str] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return report_service.list_reports(
        db,
        ReportFilter(vehicle=vehicle, inspector=inspector, search=search, date_from=date_from, date_to=date_to),
        PageRequest(page=page, limit=limit, sort_by=sort_by, order=order),
    )


@router.get("/reports/statistics", response_model=StatisticsOut, summary="Fleet and report totals")
def get_statistics(db: Session = Depends(get_db)):
    return report_service.get_statistics(db)


@router.get("/reports/{report_id}", response_model=ReportOut, summary="Get a report")
def get_report(report_id: int, db: Session = Depends(get_db)):
    return report_service.get_report(db, report_id)


@router.post("/reports", response_model=ReportOut, status_code=201, summary="Submit a report")
def create_report(body: dict = Body(...), db: Session = Depends(get_db)):
    """An unseen vehicle number registers the vehicle as part of the same write."""
    return report_service.create_report(db, body)


@router.put("/reports/{report_id}", response_model=ReportOut, summary="Update a report")
def update_report(report_id: int, body: dict = Body(...), db: Session = Depends(get_db)):
    return report_service.update_report(db, report_id, body)


@router.delete("/reports/{report_id}", summary="Delete a report")
def delete_report(report_id: int, db: Session = Depends(get_db)):
    if not report_service.delete_report(db, report_id):
        raise NotFound(f"Report {report_id} not found")
    return {"status": "deleted", "id": report_id}
