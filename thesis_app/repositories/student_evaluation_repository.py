"""
Student Evaluation Repository - Thesis Defense Platform
thesis_app/repositories/student_evaluation_repository.py

Data access layer for student feedback forms. ANSWERS is a VARIANT column,
written with PARSE_JSON and read back as JSON text.
"""

import json
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


class StudentEvaluationRepository(BaseRepository):
    """Repository for StudentEvaluation operations."""

    TABLE_NAME = "STUDENT_EVALUATIONS"

    STAMP_COLUMNS = {"submitted": "SUBMITTED_AT", "locked": "LOCKED_AT"}

    _SELECT = """
        SELECT ID, SCHEDULE_ID, STUDENT_ID, STATUS, ANSWERS, SUBMITTED_AT, LOCKED_AT, CREATED_AT, UPDATED_AT
        FROM STUDENT_EVALUATIONS
    """

    def get_by_id(self, evaluation_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._SELECT} WHERE ID = %s", (str(evaluation_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_by_pair(self, schedule_id: UUID, student_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(
            f"{self._SELECT} WHERE SCHEDULE_ID = %s AND STUDENT_ID = %s",
            (str(schedule_id), str(student_id)),
            fetch_one=True,
        )
        return self._row_to_dict(row) if row else None

    def list(
        self,
        limit: int,
        offset: int,
        schedule_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = self.build_where({"SCHEDULE_ID": schedule_id, "STUDENT_ID": student_id, "STATUS": status})
        rows, total = self.paginate(
            f"{self._SELECT} {where} ORDER BY CREATED_AT DESC",
            f"SELECT COUNT(*) AS TOTAL FROM STUDENT_EVALUATIONS {where}",
            params,
            limit,
            offset,
        )
        return [self._row_to_dict(row) for row in rows], total

    def create(self, schedule_id: UUID, student_id: UUID) -> Dict[str, Any]:
        evaluation_id = str(uuid4())
        # PARSE_JSON is not allowed in a VALUES clause
        sql = """
            INSERT INTO STUDENT_EVALUATIONS (ID, SCHEDULE_ID, STUDENT_ID, STATUS, ANSWERS, CREATED_AT, UPDATED_AT)
            SELECT %s, %s, %s, 'pending', PARSE_JSON('{}'), CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP()
        """
        self.execute_query(sql, (evaluation_id, str(schedule_id), str(student_id)), commit=True)
        return self.get_by_id(UUID(evaluation_id))

    def update_answers(self, evaluation_id: UUID, answers: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        sql = """
            UPDATE STUDENT_EVALUATIONS
            SET ANSWERS = PARSE_JSON(%s), UPDATED_AT = CURRENT_TIMESTAMP()
            WHERE ID = %s
        """
        self.execute_query(sql, (json.dumps(answers, default=str), str(evaluation_id)), commit=True)
        return self.get_by_id(evaluation_id)

    def set_status(self, evaluation_id: UUID, status: str) -> Optional[Dict[str, Any]]:
        additional = {"UPDATED_AT": "CURRENT_TIMESTAMP()"}
        stamp = self.STAMP_COLUMNS.get(status)
        if stamp:
            additional[stamp] = "CURRENT_TIMESTAMP()"
        sql, params = self.build_update_query(self.TABLE_NAME, {"STATUS": status}, "ID", evaluation_id, additional)
        self.execute_query(sql, params, commit=True)
        return self.get_by_id(evaluation_id)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to student evaluation dict."""
        return {
            "id": row["ID"],
            "schedule_id": row["SCHEDULE_ID"],
            "student_id": row["STUDENT_ID"],
            "status": row.get("STATUS") or "pending",
            "answers": self.parse_variant(row.get("ANSWERS")),
            "submitted_at": self.normalize_timestamp(row.get("SUBMITTED_AT")),
            "locked_at": self.normalize_timestamp(row.get("LOCKED_AT")),
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
            "updated_at": self.normalize_timestamp(row.get("UPDATED_AT")),
        }
