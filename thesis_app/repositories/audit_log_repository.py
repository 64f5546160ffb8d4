"""
Audit Log Repository - Thesis Defense Platform
thesis_app/repositories/audit_log_repository.py

Append-only access to AUDIT_LOGS. DETAILS is a VARIANT column.
"""

import json
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


def day_bounds(date_from: date, date_to: date) -> Tuple[datetime, datetime]:
    """[start of date_from, start of the day after date_to) in UTC."""
    start = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


class AuditLogRepository(BaseRepository):
    """Repository for AuditLog operations."""

    TABLE_NAME = "AUDIT_LOGS"

    _SELECT = """
        SELECT a.ID, a.ACTOR_ID, u.NAME AS ACTOR_NAME, u.EMAIL AS ACTOR_EMAIL, u.ROLE AS ACTOR_ROLE,
               a.ACTION, a.ENTITY, a.ENTITY_ID, a.DETAILS, a.CREATED_AT
        FROM AUDIT_LOGS a
        LEFT JOIN USERS u ON u.ID = a.ACTOR_ID
    """

    def create(
        self,
        action: str,
        entity: str,
        actor_id: Optional[UUID] = None,
        entity_id: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        log_id = str(uuid4())
        sql = """
            INSERT INTO AUDIT_LOGS (ID, ACTOR_ID, ACTION, ENTITY, ENTITY_ID, DETAILS, CREATED_AT)
            SELECT %s, %s, %s, %s, %s, PARSE_JSON(%s), CURRENT_TIMESTAMP()
        """
        self.execute_query(
            sql,
            (
                log_id,
                self.uuid_to_str(actor_id),
                action,
                entity,
                str(entity_id) if entity_id else None,
                json.dumps(details or {}, default=str),
            ),
            commit=True,
        )
        return log_id

    def list(
        self,
        limit: int,
        offset: int,
        actor_id: Optional[UUID] = None,
        action: Optional[str] = None,
        entity: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = self.build_where({"a.ACTOR_ID": actor_id, "a.ACTION": action, "a.ENTITY": entity})
        rows, total = self.paginate(
            f"{self._SELECT} {where} ORDER BY a.CREATED_AT DESC",
            f"SELECT COUNT(*) AS TOTAL FROM AUDIT_LOGS a {where}",
            params,
            limit,
            offset,
        )
        return [self._row_to_dict(row) for row in rows], total

    def list_in_range(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        """Every entry created within the inclusive day range, oldest first."""
        start, end = day_bounds(date_from, date_to)
        rows = self.execute_query(
            f"{self._SELECT} WHERE a.CREATED_AT >= %s AND a.CREATED_AT < %s ORDER BY a.CREATED_AT ASC",
            (start, end),
            fetch_all=True,
        ) or []
        return [self._row_to_dict(row) for row in rows]

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to audit log dict."""
        return {
            "id": row["ID"],
            "actor_id": row.get("ACTOR_ID"),
            "actor_name": row.get("ACTOR_NAME"),
            "actor_email": row.get("ACTOR_EMAIL"),
            "actor_role": row.get("ACTOR_ROLE"),
            "action": row["ACTION"],
            "entity": row["ENTITY"],
            "entity_id": row.get("ENTITY_ID"),
            "details": self.parse_variant(row.get("DETAILS")),
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
        }
