"""
Defense Schedule Repository - Thesis Defense Platform
thesis_app/repositories/defense_schedule_repository.py

Data access layer for defense schedules and panel membership.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


class DefenseScheduleRepository(BaseRepository):
    """Repository for DefenseSchedule CRUD and panelist operations."""

    TABLE_NAME = "DEFENSE_SCHEDULES"

    _SELECT = """
        SELECT s.ID, s.GROUP_ID, g.TITLE AS GROUP_TITLE, s.SCHEDULED_AT, s.ROOM, s.STATUS,
               s.RUBRIC_TEMPLATE_ID, s.CREATED_BY, s.CREATED_AT, s.UPDATED_AT
        FROM DEFENSE_SCHEDULES s
        LEFT JOIN THESIS_GROUPS g ON g.ID = s.GROUP_ID
    """

    def get_by_id(self, schedule_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._SELECT} WHERE s.ID = %s", (str(schedule_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_many(self, schedule_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        rows = self.fetch_in(self._SELECT, "s.ID", schedule_ids)
        return [self._row_to_dict(row) for row in rows]

    def list(
        self,
        limit: int,
        offset: int,
        group_id: Optional[UUID] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List schedules, soonest first.

        date_from / date_to are inclusive calendar days (UTC).
        """
        where, params = self.build_where({"s.GROUP_ID": group_id, "s.STATUS": status})
        clauses = [where[len("WHERE "):]] if where else []
        if date_from:
            clauses.append("s.SCHEDULED_AT >= %s")
            params.append(datetime.combine(date_from, time.min, tzinfo=timezone.utc))
        if date_to:
            clauses.append("s.SCHEDULED_AT < %s")
            params.append(datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        rows, total = self.paginate(
            f"{self._SELECT} {where} ORDER BY s.SCHEDULED_AT ASC",
            f"SELECT COUNT(*) AS TOTAL FROM DEFENSE_SCHEDULES s {where}",
            params,
            limit,
            offset,
        )
        return [self._row_to_dict(row) for row in rows], total

    def create(
        self,
        group_id: UUID,
        scheduled_at: datetime,
        room: Optional[str] = None,
        status: str = "scheduled",
        rubric_template_id: Optional[UUID] = None,
        created_by: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        schedule_id = str(uuid4())
        sql = """
            INSERT INTO DEFENSE_SCHEDULES
                (ID, GROUP_ID, SCHEDULED_AT, ROOM, STATUS, RUBRIC_TEMPLATE_ID, CREATED_BY, CREATED_AT, UPDATED_AT)
            VALUES (%s, %s, %s, %s, %s, %s, %s, CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP())
        """
        self.execute_query(
            sql,
            (
                schedule_id,
                str(group_id),
                scheduled_at,
                room,
                status,
                self.uuid_to_str(rubric_template_id),
                self.uuid_to_str(created_by),
            ),
            commit=True,
        )
        return self.get_by_id(UUID(schedule_id))

    def update(self, schedule_id: UUID, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if data:
            sql, params = self.build_update_query(
                self.TABLE_NAME, data, "ID", schedule_id, {"UPDATED_AT": "CURRENT_TIMESTAMP()"}
            )
            self.execute_query(sql, params, commit=True)
        return self.get_by_id(schedule_id)

    def delete(self, schedule_id: UUID) -> bool:
        """Delete a schedule with its panel, evaluations (scores, extras) and student feedback."""
        sid = (str(schedule_id),)
        affected = self.execute_many([
            (
                "DELETE FROM EVALUATION_SCORES WHERE EVALUATION_ID IN "
                "(SELECT ID FROM EVALUATIONS WHERE SCHEDULE_ID = %s)",
                sid,
            ),
            (
                "DELETE FROM EVALUATION_EXTRAS WHERE EVALUATION_ID IN "
                "(SELECT ID FROM EVALUATIONS WHERE SCHEDULE_ID = %s)",
                sid,
            ),
            ("DELETE FROM EVALUATIONS WHERE SCHEDULE_ID = %s", sid),
            ("DELETE FROM STUDENT_EVALUATIONS WHERE SCHEDULE_ID = %s", sid),
            ("DELETE FROM SCHEDULE_PANELISTS WHERE SCHEDULE_ID = %s", sid),
            ("DELETE FROM DEFENSE_SCHEDULES WHERE ID = %s", (str(schedule_id),)),
        ])
        return affected > 0

    #  Panelists

    def list_panelists(self, schedule_id: UUID) -> List[Dict[str, Any]]:
        sql = """
            SELECT p.STAFF_ID, u.NAME, u.EMAIL, u.ROLE
            FROM SCHEDULE_PANELISTS p
            LEFT JOIN USERS u ON u.ID = p.STAFF_ID
            WHERE p.SCHEDULE_ID = %s
            ORDER BY u.NAME
        """
        rows = self.execute_query(sql, (str(schedule_id),), fetch_all=True) or []
        return [
            {
                "staff_id": row["STAFF_ID"],
                "name": row.get("NAME"),
                "email": row.get("EMAIL"),
                "role": row.get("ROLE"),
            }
            for row in rows
        ]

    def add_panelist(self, schedule_id: UUID, staff_id: UUID) -> bool:
        """Returns False when the staff member is already on the panel."""
        row = self.execute_query(
            "SELECT 1 FROM SCHEDULE_PANELISTS WHERE SCHEDULE_ID = %s AND STAFF_ID = %s",
            (str(schedule_id), str(staff_id)),
            fetch_one=True,
        )
        if row:
            return False
        self.execute_query(
            "INSERT INTO SCHEDULE_PANELISTS (SCHEDULE_ID, STAFF_ID) VALUES (%s, %s)",
            (str(schedule_id), str(staff_id)),
            commit=True,
        )
        return True

    def remove_panelist(self, schedule_id: UUID, staff_id: UUID) -> bool:
        affected = self.execute_query(
            "DELETE FROM SCHEDULE_PANELISTS WHERE SCHEDULE_ID = %s AND STAFF_ID = %s",
            (str(schedule_id), str(staff_id)),
            commit=True,
        )
        return bool(affected)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to defense schedule dict."""
        return {
            "id": row["ID"],
            "group_id": row["GROUP_ID"],
            "group_title": row.get("GROUP_TITLE"),
            "scheduled_at": self.normalize_timestamp(row.get("SCHEDULED_AT")),
            "room": row.get("ROOM"),
            "status": row.get("STATUS") or "scheduled",
            "rubric_template_id": row.get("RUBRIC_TEMPLATE_ID"),
            "created_by": row.get("CREATED_BY"),
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
            "updated_at": self.normalize_timestamp(row.get("UPDATED_AT")),
        }
