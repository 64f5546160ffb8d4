"""
Thesis Group Repository - Thesis Defense Platform
thesis_app/repositories/thesis_group_repository.py

Data access layer for thesis groups and their student members.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


class ThesisGroupRepository(BaseRepository):
    """Repository for ThesisGroup CRUD and membership operations."""

    TABLE_NAME = "THESIS_GROUPS"

    _SELECT = """
        SELECT g.ID, g.TITLE, g.ADVISER_ID, g.PROGRAM, g.TERM, g.CREATED_AT, g.UPDATED_AT,
               (SELECT COUNT(*) FROM GROUP_MEMBERS m WHERE m.GROUP_ID = g.ID) AS MEMBER_COUNT
        FROM THESIS_GROUPS g
    """

    def get_by_id(self, group_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._SELECT} WHERE g.ID = %s", (str(group_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def exists(self, group_id: UUID) -> bool:
        row = self.execute_query("SELECT 1 FROM THESIS_GROUPS WHERE ID = %s", (str(group_id),), fetch_one=True)
        return row is not None

    def get_many(self, group_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        rows = self.fetch_in(self._SELECT, "g.ID", group_ids)
        return [self._row_to_dict(row) for row in rows]

    def list(
        self,
        limit: int,
        offset: int,
        program: Optional[str] = None,
        term: Optional[str] = None,
        adviser_id: Optional[UUID] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = self.build_where({"g.PROGRAM": program, "g.TERM": term, "g.ADVISER_ID": adviser_id})
        if q:
            clause = "LOWER(g.TITLE) LIKE %s"
            where = f"{where} AND {clause}" if where else f"WHERE {clause}"
            params.append(f"%{q.strip().lower()}%")

        rows, total = self.paginate(
            f"{self._SELECT} {where} ORDER BY g.CREATED_AT DESC, g.TITLE",
            f"SELECT COUNT(*) AS TOTAL FROM THESIS_GROUPS g {where}",
            params,
            limit,
            offset,
        )
        return [self._row_to_dict(row) for row in rows], total

    def create(
        self,
        title: str,
        adviser_id: Optional[UUID] = None,
        program: Optional[str] = None,
        term: Optional[str] = None,
    ) -> Dict[str, Any]:
        group_id = str(uuid4())
        sql = """
            INSERT INTO THESIS_GROUPS (ID, TITLE, ADVISER_ID, PROGRAM, TERM, CREATED_AT, UPDATED_AT)
            VALUES (%s, %s, %s, %s, %s, CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP())
        """
        self.execute_query(sql, (group_id, title, self.uuid_to_str(adviser_id), program, term), commit=True)
        return self.get_by_id(UUID(group_id))

    def update(self, group_id: UUID, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if data:
            sql, params = self.build_update_query(
                self.TABLE_NAME, data, "ID", group_id, {"UPDATED_AT": "CURRENT_TIMESTAMP()"}
            )
            self.execute_query(sql, params, commit=True)
        return self.get_by_id(group_id)

    def delete(self, group_id: UUID) -> bool:
        """Delete a group and its memberships. Returns False if it did not exist."""
        affected = self.execute_many([
            ("DELETE FROM GROUP_MEMBERS WHERE GROUP_ID = %s", (str(group_id),)),
            ("DELETE FROM THESIS_GROUPS WHERE ID = %s", (str(group_id),)),
        ])
        return affected > 0

    #  Membership

    def list_members(self, group_id: UUID) -> List[Dict[str, Any]]:
        sql = """
            SELECT m.STUDENT_ID, u.NAME, u.EMAIL
            FROM GROUP_MEMBERS m
            LEFT JOIN USERS u ON u.ID = m.STUDENT_ID
            WHERE m.GROUP_ID = %s
            ORDER BY u.NAME
        """
        rows = self.execute_query(sql, (str(group_id),), fetch_all=True) or []
        return [
            {"student_id": row["STUDENT_ID"], "name": row.get("NAME"), "email": row.get("EMAIL")}
            for row in rows
        ]

    def is_member(self, group_id: UUID, student_id: UUID) -> bool:
        row = self.execute_query(
            "SELECT 1 FROM GROUP_MEMBERS WHERE GROUP_ID = %s AND STUDENT_ID = %s",
            (str(group_id), str(student_id)),
            fetch_one=True,
        )
        return row is not None

    def add_member(self, group_id: UUID, student_id: UUID) -> bool:
        """Returns False when the student is already a member."""
        if self.is_member(group_id, student_id):
            return False
        self.execute_query(
            "INSERT INTO GROUP_MEMBERS (GROUP_ID, STUDENT_ID) VALUES (%s, %s)",
            (str(group_id), str(student_id)),
            commit=True,
        )
        return True

    def remove_member(self, group_id: UUID, student_id: UUID) -> bool:
        affected = self.execute_query(
            "DELETE FROM GROUP_MEMBERS WHERE GROUP_ID = %s AND STUDENT_ID = %s",
            (str(group_id), str(student_id)),
            commit=True,
        )
        return bool(affected)

    def replace_members(self, group_id: UUID, student_ids: Iterable[UUID]) -> None:
        statements = [("DELETE FROM GROUP_MEMBERS WHERE GROUP_ID = %s", (str(group_id),))]
        for student_id in dict.fromkeys(str(s) for s in student_ids):
            statements.append(
                ("INSERT INTO GROUP_MEMBERS (GROUP_ID, STUDENT_ID) VALUES (%s, %s)", (str(group_id), student_id))
            )
        self.execute_many(statements)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to thesis group dict."""
        return {
            "id": row["ID"],
            "title": row["TITLE"],
            "adviser_id": row.get("ADVISER_ID"),
            "program": row.get("PROGRAM"),
            "term": row.get("TERM"),
            "member_count": int(row.get("MEMBER_COUNT") or 0),
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
            "updated_at": self.normalize_timestamp(row.get("UPDATED_AT")),
        }
