"""
Reports Router - Thesis Defense Platform
thesis_app/routers/reports.py

Admin summary and audit CSV export.

Date window: pass both `from` and `to`, or let `days` (clamped to 1..365,
default 30) pick the window ending at `to` (default today).
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from thesis_app.config import settings
from thesis_app.core.dependencies import get_report_service
from thesis_app.core.errors import raise_error
from thesis_app.models.report import ReportsSummary
from thesis_app.services.report_service import ReportService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Reports"])


def _check_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if date_from and date_to and date_from > date_to:
        raise_error(status.HTTP_400_BAD_REQUEST, "INVALID_DATE_RANGE", "'from' must not be after 'to'")


@router.get("/reports/summary", response_model=ReportsSummary, summary="Admin reports summary")
async def reports_summary(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    days: Optional[int] = Query(None, description="Window length when from/to are not both given"),
    program: Optional[str] = Query(None, max_length=255),
    term: Optional[str] = Query(None, max_length=100),
    service: ReportService = Depends(get_report_service),
) -> ReportsSummary:
    _check_range(date_from, date_to)
    return service.summary(date_from, date_to, days, program=program, term=term)


@router.get(
    "/reports/audit-export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}, "description": "Audit log CSV"}},
    summary="Export audit logs as CSV",
)
async def audit_export(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    days: Optional[int] = Query(None),
    service: ReportService = Depends(get_report_service),
) -> Response:
    _check_range(date_from, date_to)
    filename, csv_text = service.audit_export_csv(date_from, date_to, days)
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )
