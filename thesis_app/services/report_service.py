"""
Report Service - Thesis Defense Platform
thesis_app/services/report_service.py

Admin reporting:
    - summary(): counts across users, groups, defenses, evaluations and audit logs
    - audit_export_csv(): audit entries in a date range as CSV (pandas)

Date ranges are inclusive calendar days. When either end is missing the
range is the last `days` days (1..365, default 30) ending today.
"""

import json
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from thesis_app.config import settings
from thesis_app.models.report import (
    AuditSummary,
    CountBucket,
    DateRange,
    DefensesSummary,
    EvaluationsBucket,
    EvaluationsSummary,
    ReportsSummary,
    ThesisSummary,
    UsersSummary,
)
from thesis_app.repositories.audit_log_repository import AuditLogRepository
from thesis_app.repositories.report_repository import ReportRepository

logger = logging.getLogger(__name__)

MIN_DAYS = 1
MAX_DAYS = 365

AUDIT_EXPORT_COLUMNS = [
    "created_at",
    "actor_id",
    "actor_name",
    "actor_email",
    "role",
    "action",
    "entity_type",
    "entity_id",
    "metadata",
]


def resolve_date_range(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    days: Optional[int] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Normalize a report window.

    Both ends given: used as-is.
    Otherwise: `to` defaults to today and `from` to `to - (days - 1)`.
    """
    if date_from and date_to:
        return date_from, date_to

    window = settings.REPORT_DEFAULT_DAYS if days is None else int(days)
    window = min(max(window, MIN_DAYS), MAX_DAYS)

    end = date_to or today or date.today()
    start = date_from or end - timedelta(days=window - 1)
    return start, end


def _buckets(rows: List[Dict[str, Any]]) -> List[CountBucket]:
    return [CountBucket(key=r["key"], count=r["count"]) for r in rows]


def _as_map(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    return {r["key"]: r["count"] for r in rows}


class ReportService:
    def __init__(self, reports: ReportRepository, audit_logs: AuditLogRepository):
        self.reports = reports
        self.audit_logs = audit_logs

    def summary(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        days: Optional[int] = None,
        program: Optional[str] = None,
        term: Optional[str] = None,
    ) -> ReportsSummary:
        start, end = resolve_date_range(date_from, date_to, days)
        program = program.strip() if program and program.strip() else None
        term = term.strip() if term and term.strip() else None

        users_by_status = self.reports.users_by_status()
        users = UsersSummary(
            total=sum(r["count"] for r in users_by_status),
            by_status=_as_map(users_by_status),
            by_role=_as_map(self.reports.users_by_role()),
        )

        by_program = self.reports.groups_by_program(program, term)
        thesis = ThesisSummary(
            groups_total=sum(r["count"] for r in by_program),
            memberships_total=self.reports.memberships_total(program, term),
            unassigned_adviser=self.reports.groups_without_adviser(program, term),
            by_program=_buckets(by_program),
        )

        by_status = self.reports.defenses_grouped("s.STATUS", start, end, program, term)
        defenses = DefensesSummary(
            total_in_range=sum(r["count"] for r in by_status),
            by_status=_buckets(by_status),
            by_room=_buckets(self.reports.defenses_grouped("COALESCE(s.ROOM, 'unassigned')", start, end, program, term)),
            by_month=_buckets(self.reports.defenses_grouped("TO_CHAR(s.SCHEDULED_AT, 'YYYY-MM')", start, end, program, term)),
        )

        panel = self.reports.evaluations_by_status("EVALUATIONS", start, end)
        student = self.reports.evaluations_by_status("STUDENT_EVALUATIONS", start, end)
        evaluations = EvaluationsSummary(
            panel=EvaluationsBucket(total_in_range=sum(r["count"] for r in panel), by_status=_buckets(panel)),
            student=EvaluationsBucket(total_in_range=sum(r["count"] for r in student), by_status=_buckets(student)),
        )

        daily = self.reports.audit_daily(start, end)
        audit = AuditSummary(
            total_in_range=sum(r["count"] for r in daily),
            top_actions=_buckets(self.reports.audit_top_actions(start, end, settings.REPORT_TOP_N)),
            top_actors=_buckets(self.reports.audit_top_actors(start, end, settings.REPORT_TOP_N)),
            daily=_buckets(daily),
        )

        logger.info(f"Built reports summary for {start}..{end} (program={program}, term={term})")
        return ReportsSummary(
            range=DateRange(date_from=start, date_to=end),
            program=program,
            term=term,
            users=users,
            thesis=thesis,
            defenses=defenses,
            evaluations=evaluations,
            audit=audit,
        )

    def audit_export_csv(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        days: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Returns:
            (filename, csv_text) where filename is audit_logs_<from>_to_<to>.csv
        """
        start, end = resolve_date_range(date_from, date_to, days)
        rows = self.audit_logs.list_in_range(start, end)

        records = [
            {
                "created_at": r["created_at"].isoformat() if r.get("created_at") else "",
                "actor_id": r.get("actor_id") or "",
                "actor_name": r.get("actor_name") or "",
                "actor_email": r.get("actor_email") or "",
                "role": r.get("actor_role") or "",
                "action": r.get("action") or "",
                "entity_type": r.get("entity") or "",
                "entity_id": r.get("entity_id") or "",
                "metadata": json.dumps(r["details"], default=str) if r.get("details") else "",
            }
            for r in rows
        ]
        df = pd.DataFrame(records, columns=AUDIT_EXPORT_COLUMNS)
        csv_text = df.to_csv(index=False, lineterminator="\n")

        filename = f"audit_logs_{start.isoformat()}_to_{end.isoformat()}.csv"
        logger.info(f"Exported {len(df)} audit log rows to {filename}")
        return filename, csv_text
