"""
User Repository - Thesis Defense Platform
thesis_app/repositories/user_repository.py

Data access layer for the user directory.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for User CRUD operations."""

    TABLE_NAME = "USERS"

    _SELECT = """
        SELECT ID, NAME, EMAIL, ROLE, STATUS, CREATED_AT, UPDATED_AT
        FROM USERS
    """

    def get_by_id(self, user_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._SELECT} WHERE ID = %s", (str(user_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive lookup; emails are stored lower-cased."""
        row = self.execute_query(
            f"{self._SELECT} WHERE LOWER(EMAIL) = %s",
            (email.strip().lower(),),
            fetch_one=True,
        )
        return self._row_to_dict(row) if row else None

    def get_many(self, user_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        rows = self.fetch_in(self._SELECT, "ID", user_ids)
        return [self._row_to_dict(row) for row in rows]

    def list(
        self,
        limit: int,
        offset: int,
        role: Optional[str] = None,
        status: Optional[str] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List users with optional role/status filters and a name/email search.

        Returns:
            (users, total)
        """
        where, params = self.build_where({"ROLE": role, "STATUS": status})
        if q:
            like = f"%{q.strip().lower()}%"
            clause = "(LOWER(NAME) LIKE %s OR LOWER(EMAIL) LIKE %s)"
            where = f"{where} AND {clause}" if where else f"WHERE {clause}"
            params += [like, like]

        rows, total = self.paginate(
            f"{self._SELECT} {where} ORDER BY NAME, EMAIL",
            f"SELECT COUNT(*) AS TOTAL FROM USERS {where}",
            params,
            limit,
            offset,
        )
        return [self._row_to_dict(row) for row in rows], total

    def create(self, name: str, email: str, role: str) -> Dict[str, Any]:
        user_id = str(uuid4())
        sql = """
            INSERT INTO USERS (ID, NAME, EMAIL, ROLE, STATUS, CREATED_AT, UPDATED_AT)
            VALUES (%s, %s, %s, %s, 'active', CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP())
        """
        self.execute_query(sql, (user_id, name, email.strip().lower(), role), commit=True)
        return self.get_by_id(UUID(user_id))

    def update(self, user_id: UUID, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if data:
            sql, params = self.build_update_query(
                self.TABLE_NAME, data, "ID", user_id, {"UPDATED_AT": "CURRENT_TIMESTAMP()"}
            )
            self.execute_query(sql, params, commit=True)
        return self.get_by_id(user_id)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to user dict."""
        return {
            "id": row["ID"],
            "name": row["NAME"],
            "email": row["EMAIL"],
            "role": row["ROLE"],
            "status": row.get("STATUS") or "active",
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
            "updated_at": self.normalize_timestamp(row.get("UPDATED_AT")),
        }
