"""
Rubric Repository - Thesis Defense Platform
thesis_app/repositories/rubric_repository.py

Data access layer for rubric templates, their criteria and adjectival
scale levels (score -> label).
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from thesis_app.repositories.base import BaseRepository


class RubricRepository(BaseRepository):
    """Repository for RubricTemplate and RubricCriterion operations."""

    TEMPLATE_TABLE = "RUBRIC_TEMPLATES"
    CRITERIA_TABLE = "RUBRIC_CRITERIA"

    _TEMPLATE_SELECT = """
        SELECT ID, NAME, VERSION, ACTIVE, DESCRIPTION, CREATED_AT, UPDATED_AT
        FROM RUBRIC_TEMPLATES
    """

    _CRITERIA_SELECT = """
        SELECT ID, TEMPLATE_ID, CRITERION, DESCRIPTION, WEIGHT, MIN_SCORE, MAX_SCORE, CREATED_AT
        FROM RUBRIC_CRITERIA
    """

    #  Templates

    def get_template(self, template_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._TEMPLATE_SELECT} WHERE ID = %s", (str(template_id),), fetch_one=True)
        return self._template_to_dict(row) if row else None

    def get_default_template(self) -> Optional[Dict[str, Any]]:
        """Active template with the highest version; newest wins a tie."""
        sql = f"""
            {self._TEMPLATE_SELECT}
            WHERE ACTIVE = TRUE
            ORDER BY VERSION DESC, CREATED_AT DESC
            LIMIT 1
        """
        row = self.execute_query(sql, fetch_one=True)
        return self._template_to_dict(row) if row else None

    def list_templates(
        self,
        limit: int,
        offset: int,
        active: Optional[bool] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = self.build_where({"ACTIVE": active})
        if q:
            clause = "LOWER(NAME) LIKE %s"
            where = f"{where} AND {clause}" if where else f"WHERE {clause}"
            params.append(f"%{q.strip().lower()}%")

        rows, total = self.paginate(
            f"{self._TEMPLATE_SELECT} {where} ORDER BY NAME, VERSION DESC",
            f"SELECT COUNT(*) AS TOTAL FROM RUBRIC_TEMPLATES {where}",
            params,
            limit,
            offset,
        )
        return [self._template_to_dict(row) for row in rows], total

    def create_template(
        self,
        name: str,
        version: int = 1,
        active: bool = True,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        template_id = str(uuid4())
        sql = """
            INSERT INTO RUBRIC_TEMPLATES (ID, NAME, VERSION, ACTIVE, DESCRIPTION, CREATED_AT, UPDATED_AT)
            VALUES (%s, %s, %s, %s, %s, CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP())
        """
        self.execute_query(sql, (template_id, name, version, active, description), commit=True)
        return self.get_template(UUID(template_id))

    def update_template(self, template_id: UUID, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if data:
            sql, params = self.build_update_query(
                self.TEMPLATE_TABLE, data, "ID", template_id, {"UPDATED_AT": "CURRENT_TIMESTAMP()"}
            )
            self.execute_query(sql, params, commit=True)
        return self.get_template(template_id)

    def delete_template(self, template_id: UUID) -> bool:
        """Delete a template together with its criteria and scale levels."""
        affected = self.execute_many([
            ("DELETE FROM RUBRIC_CRITERIA WHERE TEMPLATE_ID = %s", (str(template_id),)),
            ("DELETE FROM RUBRIC_SCALE_LEVELS WHERE TEMPLATE_ID = %s", (str(template_id),)),
            ("DELETE FROM RUBRIC_TEMPLATES WHERE ID = %s", (str(template_id),)),
        ])
        return affected > 0

    #  Criteria

    def get_criterion(self, criterion_id: UUID) -> Optional[Dict[str, Any]]:
        row = self.execute_query(f"{self._CRITERIA_SELECT} WHERE ID = %s", (str(criterion_id),), fetch_one=True)
        return self._criterion_to_dict(row) if row else None

    def list_criteria(self, template_id: UUID) -> List[Dict[str, Any]]:
        rows = self.execute_query(
            f"{self._CRITERIA_SELECT} WHERE TEMPLATE_ID = %s ORDER BY CREATED_AT, CRITERION",
            (str(template_id),),
            fetch_all=True,
        ) or []
        return [self._criterion_to_dict(row) for row in rows]

    def list_criteria_for_templates(self, template_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        rows = self.fetch_in(self._CRITERIA_SELECT, "TEMPLATE_ID", template_ids)
        return [self._criterion_to_dict(row) for row in rows]

    def create_criterion(
        self,
        template_id: UUID,
        criterion: str,
        description: Optional[str] = None,
        weight: float = 1.0,
        min_score: int = 1,
        max_score: int = 5,
    ) -> Dict[str, Any]:
        criterion_id = str(uuid4())
        sql = """
            INSERT INTO RUBRIC_CRITERIA
                (ID, TEMPLATE_ID, CRITERION, DESCRIPTION, WEIGHT, MIN_SCORE, MAX_SCORE, CREATED_AT)
            VALUES (%s, %s, %s, %s, %s, %s, %s, CURRENT_TIMESTAMP())
        """
        self.execute_query(
            sql,
            (criterion_id, str(template_id), criterion, description, weight, min_score, max_score),
            commit=True,
        )
        return self.get_criterion(UUID(criterion_id))

    def update_criterion(self, criterion_id: UUID, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if data:
            sql, params = self.build_update_query(self.CRITERIA_TABLE, data, "ID", criterion_id)
            self.execute_query(sql, params, commit=True)
        return self.get_criterion(criterion_id)

    def delete_criterion(self, criterion_id: UUID) -> bool:
        affected = self.execute_query(
            "DELETE FROM RUBRIC_CRITERIA WHERE ID = %s", (str(criterion_id),), commit=True
        )
        return bool(affected)

    #  Scale levels

    def list_scale_levels(self, template_id: UUID) -> List[Dict[str, Any]]:
        rows = self.execute_query(
            "SELECT TEMPLATE_ID, SCORE, ADJECTIVAL, DESCRIPTION FROM RUBRIC_SCALE_LEVELS "
            "WHERE TEMPLATE_ID = %s ORDER BY SCORE DESC",
            (str(template_id),),
            fetch_all=True,
        ) or []
        return [
            {
                "score": int(row["SCORE"]),
                "adjectival": row["ADJECTIVAL"],
                "description": row.get("DESCRIPTION"),
            }
            for row in rows
        ]

    def replace_scale_levels(self, template_id: UUID, levels: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Swap the template's scale levels for the given set in one transaction."""
        tid = str(template_id)
        statements = [("DELETE FROM RUBRIC_SCALE_LEVELS WHERE TEMPLATE_ID = %s", (tid,))]
        statements.extend(
            (
                "INSERT INTO RUBRIC_SCALE_LEVELS (TEMPLATE_ID, SCORE, ADJECTIVAL, DESCRIPTION) VALUES (%s, %s, %s, %s)",
                (tid, level["score"], level["adjectival"], level.get("description")),
            )
            for level in levels
        )
        self.execute_many(statements)
        return self.list_scale_levels(template_id)

    def _template_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to rubric template dict."""
        return {
            "id": row["ID"],
            "name": row["NAME"],
            "version": int(row.get("VERSION") or 1),
            "active": bool(row.get("ACTIVE")),
            "description": row.get("DESCRIPTION"),
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
            "updated_at": self.normalize_timestamp(row.get("UPDATED_AT")),
        }

    def _criterion_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to rubric criterion dict."""
        return {
            "id": row["ID"],
            "template_id": row["TEMPLATE_ID"],
            "criterion": row["CRITERION"],
            "description": row.get("DESCRIPTION"),
            "weight": float(row["WEIGHT"]) if row.get("WEIGHT") is not None else 1.0,
            "min_score": int(row["MIN_SCORE"]) if row.get("MIN_SCORE") is not None else 1,
            "max_score": int(row["MAX_SCORE"]) if row.get("MAX_SCORE") is not None else 5,
            "created_at": self.normalize_timestamp(row.get("CREATED_AT")),
        }
