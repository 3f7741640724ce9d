# fleet_records/services/export_service.py
"""
Report export: single-report PDF and multi-report CSV.

Both renderers are pure functions of the report rows (plus generated_at for
the PDF footer). The PDF canvas runs with invariant=1 so reportlab writes no
wall-clock creation date or random document id.
"""

import csv
import io
from datetime import date, datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
from sqlalchemy.orm import Session

from fleet_records.errors import NotFound
from fleet_records.models.report import Report
from fleet_records.services import query_service
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)

BLANK = "______"
BLANK_PRESSURE = "__"
BLANK_SIGNATURE = "______________________"
NO_DEFECTS = "None reported"

CHECKLIST_LABELS = (
    ("steering_good", "Is Steering Gear in Good Condition?"),
    ("brakes_work", "Do Brakes Work Properly?"),
    ("parking_brake_work", "Does Parking Brake Work Properly?"),
    ("headlights_working", "Are Both Headlights Working?"),
    ("parking_lights_working", "Are Both Parking Lights Working?"),
    ("taillights_working", "Are Taillights Working?"),
    ("backup_lights_working", "Are Both Back-Up Lights Working?"),
    ("signal_devices_good", "Are Signal Devices in Good Order?"),
    ("auxiliary_lights_working", "Are Auxiliary Lights Working?"),
    ("windshield_wiper_working", "Is Windshield Wiper Working?"),
    ("tires_safe", "Are All Tires & Treads Safe?"),
    ("flags_flares_present", "Are there Flags & Flares?"),
    ("first_aid_kit_stocked", "Is First Aid Kit Fully Stocked?"),
)

VEHICLE_INFO_LABELS = (
    ("make", "Make of Vehicle"),
    ("year", "Year"),
    ("mileage", "Mileage"),
    ("last_mileage_serviced", "Last Mileage Serviced"),
    ("hour_meter", "Hour Meter"),
    ("hours_pto", "Hours PTO"),
)

CONDITION_LABELS = (
    ("windshield_condition", "Condition of Windshield"),
    ("aed_location", "Location and Condition of AED"),
    ("fire_extinguisher_condition", "Condition of Fire Extinguisher"),
)

REPORT_COLUMNS = (
    "id", "vehicle_number", "inspection_date", "inspector_name",
    "make", "year", "mileage", "last_mileage_serviced", "hour_meter", "hours_pto",
    "steering_good", "brakes_work", "parking_brake_work",
    "headlights_working", "parking_lights_working", "taillights_working",
    "backup_lights_working", "signal_devices_good", "auxiliary_lights_working",
    "windshield_condition", "windshield_wiper_working", "tires_safe",
    "flags_flares_present", "first_aid_kit_stocked", "aed_location",
    "fire_extinguisher_condition", "tire_pressure_rf", "tire_pressure_rr",
    "tire_pressure_rr_outer", "tire_pressure_lf", "tire_pressure_lr",
    "tire_pressure_lr_outer", "defects", "signature", "created_at", "updated_at",
)


def _text(value, blank: str = BLANK) -> str:
    if value is None:
        return blank
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _checkbox(value) -> str:
    return "[X]" if value is True else "[ ]"


# ── PDF ───────────────────────────────────────────────────────────────────────

def report_layout(report: Report) -> list[dict]:
    """
    The printable report as ordered sections:
        [{"title": str | None, "lines": [str, ...]}, ...]
    The PDF renderer draws exactly these lines.
    """
    def pressure(field):
        return _text(getattr(report, field), BLANK_PRESSURE)

    defects = report.defects if report.defects and report.defects.strip() else NO_DEFECTS
    return [
        {"title": "VEHICLE CONDITION REPORT", "lines": [
            f"VEHICLE NO: {_text(report.vehicle_number)}",
            f"DATE: {_text(report.inspection_date)}",
            f"INSPECTOR: {_text(report.inspector_name)}",
            f"STATUS: {report.status}",
        ]},
        {"title": "Vehicle Information", "lines": [
            f"{label}: {_text(getattr(report, field))}" for field, label in VEHICLE_INFO_LABELS
        ]},
        {"title": "Inspection Checklist", "lines": [
            f"{_checkbox(getattr(report, field))} {label}" for field, label in CHECKLIST_LABELS
        ]},
        {"title": "Condition", "lines": [
            f"{label}: {_text(getattr(report, field))}" for field, label in CONDITION_LABELS
        ]},
        {"title": "Tire Pressure (PSI)", "lines": [
            f"RF: {pressure('tire_pressure_rf')}  RR: {pressure('tire_pressure_rr')}  "
            f"RR (Outer): {pressure('tire_pressure_rr_outer')}",
            f"LF: {pressure('tire_pressure_lf')}  LR: {pressure('tire_pressure_lr')}  "
            f"LR (Outer): {pressure('tire_pressure_lr_outer')}",
        ]},
        {"title": "Defects", "lines": defects.splitlines() or [NO_DEFECTS]},
        {"title": "Signature", "lines": [_text(report.signature, BLANK_SIGNATURE)]},
    ]


def footer_text(report_id: int, generated_at: datetime, page: int) -> str:
    return f"Report ID: {report_id} | Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')} | Page {page}"


def build_report_pdf(report: Report, generated_at: datetime) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=0.7 * inch,
        rightMargin=0.7 * inch,
        topMargin=0.7 * inch,
        bottomMargin=0.8 * inch,
        title=f"Vehicle Condition Report {report.id}",
        author="Fleet Records",
        invariant=1,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], alignment=TA_CENTER, fontSize=18)
    heading = ParagraphStyle("Section", parent=styles["Heading3"], spaceBefore=8, spaceAfter=4)
    body = ParagraphStyle("Body", parent=styles["Normal"], fontSize=10, leading=13)

    def draw_footer(canvas, document):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(letter[0] / 2, 0.5 * inch,
                                 footer_text(report.id, generated_at, document.page))
        canvas.restoreState()

    story = []
    for i, section in enumerate(report_layout(report)):
        story.append(Paragraph(escape(section["title"]), title_style if i == 0 else heading))
        for line in section["lines"]:
            story.append(Paragraph(escape(line), body))
        story.append(Spacer(1, 6))

    doc.build(story, onFirstPage=draw_footer, onLaterPages=draw_footer)
    return buf.getvalue()


def render_report_document(db: Session, report_id: int, generated_at: Optional[datetime] = None) -> bytes:
    report = query_service.fetch_report(db, report_id)
    if not report:
        raise NotFound(f"Report {report_id} not found")
    pdf = build_report_pdf(report, generated_at or datetime.now())
    logger.info(f"[EXPORT] Rendered PDF for report {report_id} ({len(pdf)} bytes)")
    return pdf


# ── CSV ───────────────────────────────────────────────────────────────────────

def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def build_reports_csv(reports: list[Report]) -> bytes:
    buf = io.StringIO(newline="")
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow(REPORT_COLUMNS)
    for report in reports:
        writer.writerow([_cell(getattr(report, col)) for col in REPORT_COLUMNS])
    return buf.getvalue().encode("utf-8")


def render_reports_table(db: Session, report_ids: Optional[list[int]] = None) -> bytes:
    reports = query_service.fetch_reports(db, report_ids)
    data = build_reports_csv(reports)
    logger.info(f"[EXPORT] Rendered CSV with {len(reports)} report(s)")
    return data
