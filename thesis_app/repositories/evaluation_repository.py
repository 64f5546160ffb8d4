"""
Evaluation Repository - Thesis Defense Platform
thesis_app/repositories/evaluation_repository.py

Data access layer for panel evaluations and their per-criterion scores.
EVALUATION_EXTRAS.DATA is a VARIANT holding free-form panel notes
(overall and system comments, per-member remarks).
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


class EvaluationRepository(BaseRepository):
    """Repository for Evaluation and EvaluationScore operations."""

    TABLE_NAME = "EVALUATIONS"

    _SELECT = """
        SELECT e.ID, e.SCHEDULE_ID, e.EVALUATOR_ID, u.NAME AS EVALUATOR_NAME, e.STATUS,
               e.SUBMITTED_AT, e.LOCKED_AT, e.CREATED_AT
        FROM EVALUATIONS e
        LEFT JOIN USERS u ON u.ID = e.EVALUATOR_ID
    """

    _SCORE_SELECT = """
        SELECT ID, EVALUATION_ID, CRITERION_ID, TARGET_TYPE, TARGET_ID, SCORE, COMMENT
        FROM EVALUATION_SCORES
    """

    STAMP_COLUMNS = {"submitted": "SUBMITTED_AT", "locked": "LOCKED_AT"}

    def get_by_id(self, evaluation_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._SELECT} WHERE e.ID = %s", (str(evaluation_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_by_assignment(self, schedule_id: UUID, evaluator_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(
            f"{self._SELECT} WHERE e.SCHEDULE_ID = %s AND e.EVALUATOR_ID = %s",
            (str(schedule_id), str(evaluator_id)),
            fetch_one=True,
        )
        return self._row_to_dict(row) if row else None

    def list(
        self,
        limit: int,
        offset: int,
        schedule_id: Optional[UUID] = None,
        evaluator_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = self.build_where(
            {"e.SCHEDULE_ID": schedule_id, "e.EVALUATOR_ID": evaluator_id, "e.STATUS": status}
        )
        rows, total = self.paginate(
            f"{self._SELECT} {where} ORDER BY e.CREATED_AT DESC",
            f"SELECT COUNT(*) AS TOTAL FROM EVALUATIONS e {where}",
            params,
            limit,
            offset,
        )
        return [self._row_to_dict(row) for row in rows], total

    def list_by_statuses(self, statuses: Iterable[str], limit: int) -> List[Dict[str, Any]]:
        """Most recent evaluations in any of the given statuses, capped at limit."""
        values = list(statuses)
        placeholders = ", ".join(["%s"] * len(values))
        rows = self.execute_query(
            f"{self._SELECT} WHERE e.STATUS IN ({placeholders}) ORDER BY e.CREATED_AT DESC LIMIT %s",
            values + [limit],
            fetch_all=True,
        ) or []
        return [self._row_to_dict(row) for row in rows]

    def create(self, schedule_id: UUID, evaluator_id: UUID) -> Dict[str, Any]:
        evaluation_id = str(uuid4())
        sql = """
            INSERT INTO EVALUATIONS (ID, SCHEDULE_ID, EVALUATOR_ID, STATUS, CREATED_AT)
            VALUES (%s, %s, %s, 'pending', CURRENT_TIMESTAMP())
        """
        self.execute_query(sql, (evaluation_id, str(schedule_id), str(evaluator_id)), commit=True)
        return self.get_by_id(UUID(evaluation_id))

    def set_status(self, evaluation_id: UUID, status: str) -> Optional[Dict[str, Any]]:
        """Move to status; submitted/locked also stamp their timestamp column."""
        stamp = self.STAMP_COLUMNS.get(status)
        sql, params = self.build_update_query(
            self.TABLE_NAME,
            {"STATUS": status},
            "ID",
            evaluation_id,
            {stamp: "CURRENT_TIMESTAMP()"} if stamp else None,
        )
        self.execute_query(sql, params, commit=True)
        return self.get_by_id(evaluation_id)

    def delete(self, evaluation_id: UUID) -> bool:
        affected = self.execute_many([
            ("DELETE FROM EVALUATION_EXTRAS WHERE EVALUATION_ID = %s", (str(evaluation_id),)),
            ("DELETE FROM EVALUATION_SCORES WHERE EVALUATION_ID = %s", (str(evaluation_id),)),
            ("DELETE FROM EVALUATIONS WHERE ID = %s", (str(evaluation_id),)),
        ])
        return affected > 0

    #  Scores

    def list_scores(self, evaluation_id: UUID) -> List[Dict[str, Any]]:
        rows = self.execute_query(
            f"{self._SCORE_SELECT} WHERE EVALUATION_ID = %s",
            (str(evaluation_id),),
            fetch_all=True,
        ) or []
        return [self._score_to_dict(row) for row in rows]

    def list_scores_for_evaluations(self, evaluation_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        rows = self.fetch_in(self._SCORE_SELECT, "EVALUATION_ID", evaluation_ids)
        return [self._score_to_dict(row) for row in rows]

    def upsert_scores(self, evaluation_id: UUID, items: List[Dict[str, Any]]) -> int:
        """
        Insert or update score rows keyed on (evaluation, criterion, target_type, target_id).

        Args:
            items: dicts with criterion_id, target_type, target_id, score, comment

        Returns:
            Number of rows written
        """
        sql = """
            MERGE INTO EVALUATION_SCORES t
            USING (
                SELECT %s AS EVALUATION_ID, %s AS CRITERION_ID, %s AS TARGET_TYPE,
                       %s AS TARGET_ID, %s AS SCORE, %s AS COMMENT
            ) s
            ON t.EVALUATION_ID = s.EVALUATION_ID
               AND t.CRITERION_ID = s.CRITERION_ID
               AND t.TARGET_TYPE = s.TARGET_TYPE
               AND t.TARGET_ID = s.TARGET_ID
            WHEN MATCHED THEN UPDATE SET
                SCORE = s.SCORE,
                COMMENT = s.COMMENT
            WHEN NOT MATCHED THEN INSERT
                (ID, EVALUATION_ID, CRITERION_ID, TARGET_TYPE, TARGET_ID, SCORE, COMMENT)
            VALUES
                (%s, s.EVALUATION_ID, s.CRITERION_ID, s.TARGET_TYPE, s.TARGET_ID, s.SCORE, s.COMMENT)
        """
        statements = [
            (
                sql,
                (
                    str(evaluation_id),
                    str(item["criterion_id"]),
                    item["target_type"],
                    str(item["target_id"]),
                    item["score"],
                    item.get("comment"),
                    str(uuid4()),
                ),
            )
            for item in items
        ]
        self.execute_many(statements)
        return len(statements)

    #  Extras

    def get_extras(self, evaluation_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(
            "SELECT EVALUATION_ID, DATA, UPDATED_AT FROM EVALUATION_EXTRAS WHERE EVALUATION_ID = %s",
            (str(evaluation_id),),
            fetch_one=True,
        )
        if not row:
            return None
        return {
            "evaluation_id": row["EVALUATION_ID"],
            "extras": self.parse_variant(row.get("DATA")),
            "updated_at": self.normalize_timestamp(row.get("UPDATED_AT")),
        }

    def upsert_extras(self, evaluation_id: UUID, extras: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the stored extras object for one evaluation."""
        sql = """
            MERGE INTO EVALUATION_EXTRAS t
            USING (SELECT %s AS EVALUATION_ID, PARSE_JSON(%s) AS DATA) s
            ON t.EVALUATION_ID = s.EVALUATION_ID
            WHEN MATCHED THEN UPDATE SET
                DATA = s.DATA,
                UPDATED_AT = CURRENT_TIMESTAMP()
            WHEN NOT MATCHED THEN INSERT
                (EVALUATION_ID, DATA, CREATED_AT, UPDATED_AT)
            VALUES
                (s.EVALUATION_ID, s.DATA, CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP())
        """
        self.execute_query(sql, (str(evaluation_id), json.dumps(extras, default=str)), commit=True)
        return self.get_extras(evaluation_id)

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to evaluation dict."""
        return {
            "id": row["ID"],
            "schedule_id": row["SCHEDULE_ID"],
            "evaluator_id": row["EVALUATOR_ID"],
            "evaluator_name": row.get("EVALUATOR_NAME"),
            "status": row.get("STATUS") or "pending",
            "submitted_at": self.normalize_timestamp(row.get("SUBMITTED_AT")),
            "locked_at": self.normalize_timestamp(row.get("LOCKED_AT")),
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
        }

    def _score_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to evaluation score dict."""
        return {
            "id": row.get("ID"),
            "evaluation_id": row["EVALUATION_ID"],
            "criterion_id": row["CRITERION_ID"],
            "target_type": row.get("TARGET_TYPE") or "group",
            "target_id": row.get("TARGET_ID"),
            "score": float(row["SCORE"]) if row.get("SCORE") is not None else None,
            "comment": row.get("COMMENT"),
        }
