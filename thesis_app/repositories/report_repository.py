"""
Report Repository - Thesis Defense Platform
thesis_app/repositories/report_repository.py

Read-only GROUP BY queries behind the admin reports summary.
Every bucket query returns [{"key": str, "count": int}, ...].
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from thesis_app.repositories.audit_log_repository import day_bounds
from thesis_app.repositories.base import BaseRepository


class ReportRepository(BaseRepository):
    """Aggregate counts across the workflow tables."""

    def _buckets(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        rows = self.execute_query(sql, params, fetch_all=True) or []
        return [
            {"key": str(row["BUCKET"]) if row.get("BUCKET") is not None else "unknown", "count": int(row["CNT"] or 0)}
            for row in rows
        ]

    def _scalar(self, sql: str, params: Sequence[Any] = ()) -> int:
        row = self.execute_query(sql, params, fetch_one=True) or {}
        return int(row.get("CNT") or 0)

    def _group_filter(self, alias: str, program: Optional[str], term: Optional[str]) -> Tuple[str, List[Any]]:
        clauses, params = [], []
        if program:
            clauses.append(f"{alias}.PROGRAM = %s")
            params.append(program)
        if term:
            clauses.append(f"{alias}.TERM = %s")
            params.append(term)
        return "".join(f" AND {c}" for c in clauses), params

    #  Users

    def users_by_status(self) -> List[Dict[str, Any]]:
        return self._buckets("SELECT STATUS AS BUCKET, COUNT(*) AS CNT FROM USERS GROUP BY STATUS")

    def users_by_role(self) -> List[Dict[str, Any]]:
        return self._buckets("SELECT ROLE AS BUCKET, COUNT(*) AS CNT FROM USERS GROUP BY ROLE")

    #  Thesis groups

    def groups_by_program(self, program: Optional[str] = None, term: Optional[str] = None) -> List[Dict[str, Any]]:
        extra, params = self._group_filter("g", program, term)
        sql = f"""
            SELECT COALESCE(g.PROGRAM, 'unspecified') AS BUCKET, COUNT(*) AS CNT
            FROM THESIS_GROUPS g
            WHERE 1 = 1{extra}
            GROUP BY BUCKET
            ORDER BY CNT DESC, BUCKET
        """
        return self._buckets(sql, params)

    def memberships_total(self, program: Optional[str] = None, term: Optional[str] = None) -> int:
        extra, params = self._group_filter("g", program, term)
        sql = f"""
            SELECT COUNT(*) AS CNT
            FROM GROUP_MEMBERS m
            JOIN THESIS_GROUPS g ON g.ID = m.GROUP_ID
            WHERE 1 = 1{extra}
        """
        return self._scalar(sql, params)

    def groups_without_adviser(self, program: Optional[str] = None, term: Optional[str] = None) -> int:
        extra, params = self._group_filter("g", program, term)
        return self._scalar(
            f"SELECT COUNT(*) AS CNT FROM THESIS_GROUPS g WHERE g.ADVISER_ID IS NULL{extra}", params
        )

    #  Defenses

    def defenses_grouped(
        self,
        bucket_sql: str,
        date_from: date,
        date_to: date,
        program: Optional[str] = None,
        term: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Defenses scheduled in range, grouped by bucket_sql.

        bucket_sql is a trusted expression over alias s (e.g. "s.STATUS").
        """
        start, end = day_bounds(date_from, date_to)
        extra, params = self._group_filter("g", program, term)
        sql = f"""
            SELECT {bucket_sql} AS BUCKET, COUNT(*) AS CNT
            FROM DEFENSE_SCHEDULES s
            JOIN THESIS_GROUPS g ON g.ID = s.GROUP_ID
            WHERE s.SCHEDULED_AT >= %s AND s.SCHEDULED_AT < %s{extra}
            GROUP BY BUCKET
            ORDER BY BUCKET
        """
        return self._buckets(sql, [start, end] + params)

    #  Evaluations

    def evaluations_by_status(self, table: str, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        """table is EVALUATIONS or STUDENT_EVALUATIONS."""
        if table not in ("EVALUATIONS", "STUDENT_EVALUATIONS"):
            raise ValueError(f"Unsupported evaluation table: {table}")
        start, end = day_bounds(date_from, date_to)
        sql = f"""
            SELECT STATUS AS BUCKET, COUNT(*) AS CNT
            FROM {table}
            WHERE CREATED_AT >= %s AND CREATED_AT < %s
            GROUP BY STATUS
            ORDER BY STATUS
        """
        return self._buckets(sql, (start, end))

    #  Audit

    def audit_top_actions(self, date_from: date, date_to: date, top_n: int) -> List[Dict[str, Any]]:
        start, end = day_bounds(date_from, date_to)
        sql = """
            SELECT ACTION AS BUCKET, COUNT(*) AS CNT
            FROM AUDIT_LOGS
            WHERE CREATED_AT >= %s AND CREATED_AT < %s
            GROUP BY ACTION
            ORDER BY CNT DESC, ACTION
            LIMIT %s
        """
        return self._buckets(sql, (start, end, top_n))

    def audit_top_actors(self, date_from: date, date_to: date, top_n: int) -> List[Dict[str, Any]]:
        start, end = day_bounds(date_from, date_to)
        sql = """
            SELECT COALESCE(u.NAME, a.ACTOR_ID, 'system') AS BUCKET, COUNT(*) AS CNT
            FROM AUDIT_LOGS a
            LEFT JOIN USERS u ON u.ID = a.ACTOR_ID
            WHERE a.CREATED_AT >= %s AND a.CREATED_AT < %s
            GROUP BY BUCKET
            ORDER BY CNT DESC, BUCKET
            LIMIT %s
        """
        return self._buckets(sql, (start, end, top_n))

    def audit_daily(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        start, end = day_bounds(date_from, date_to)
        sql = """
            SELECT TO_CHAR(CREATED_AT, 'YYYY-MM-DD') AS BUCKET, COUNT(*) AS CNT
            FROM AUDIT_LOGS
            WHERE CREATED_AT >= %s AND CREATED_AT < %s
            GROUP BY BUCKET
            ORDER BY BUCKET
        """
        return self._buckets(sql, (start, end))
