"""
Rubric Service - Thesis Defense Platform
thesis_app/services/rubric_service.py

Rubric templates with their criteria and adjectival scale levels. Template
detail (criteria, totals, scale levels) is cached in Redis; every mutation
drops the template key and the rankings, which depend on criterion weights
and bounds.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from thesis_app.core.exceptions import EntityNotFoundException, WorkflowException
from thesis_app.models.rubric import (
    RubricCriterionCreate,
    RubricCriterionUpdate,
    RubricScaleLevel,
    RubricScaleLevelsUpdate,
    RubricTemplateCreate,
    RubricTemplateDetail,
    RubricTemplateUpdate,
    RubricTotals,
)
from thesis_app.repositories.rubric_repository import RubricRepository
from thesis_app.scoring.utils import field, to_number
from thesis_app.services.audit_service import AuditService
from thesis_app.services.cache import (
    TTL_RUBRIC_TEMPLATE,
    get_or_load,
    invalidate_template,
    template_cache_key,
)

logger = logging.getLogger(__name__)


def compute_totals(criteria: Iterable[Any]) -> RubricTotals:
    """Sum weight, min and max across a template's criteria."""
    rows = list(criteria)
    return RubricTotals(
        criteria_count=len(rows),
        total_weight=round(sum(to_number(field(c, "weight"), 1.0) for c in rows), 3),
        total_min=round(sum(to_number(field(c, "min_score"), 0.0) for c in rows), 3),
        total_max=round(sum(to_number(field(c, "max_score"), 0.0) for c in rows), 3),
    )


class RubricService:
    def __init__(self, repo: RubricRepository, audit: AuditService):
        self.repo = repo
        self.audit = audit

    #  Templates

    def list_templates(
        self,
        limit: int,
        offset: int,
        active: Optional[bool] = None,
        q: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        return self.repo.list_templates(limit, offset, active=active, q=q)

    def get_template_detail(self, template_id: UUID) -> RubricTemplateDetail:
        detail = get_or_load(
            template_cache_key(template_id),
            RubricTemplateDetail,
            TTL_RUBRIC_TEMPLATE,
            lambda: self._load_detail(template_id),
        )
        if detail is None:
            raise EntityNotFoundException("rubric template", str(template_id))
        return detail

    def _load_detail(self, template_id: UUID) -> Optional[RubricTemplateDetail]:
        template = self.repo.get_template(template_id)
        if template is None:
            return None
        criteria = self.repo.list_criteria(template_id)
        return RubricTemplateDetail(
            **template,
            criteria=criteria,
            totals=compute_totals(criteria),
            scale_levels=self.repo.list_scale_levels(template_id),
        )

    def default_template(self) -> Optional[Dict[str, Any]]:
        """Active template with the highest version, newest first on a tie."""
        return self.repo.get_default_template()

    def create_template(self, data: RubricTemplateCreate, actor_id: Optional[UUID] = None) -> RubricTemplateDetail:
        template = self.repo.create_template(
            name=data.name.strip(),
            version=data.version,
            active=data.active,
            description=data.description,
        )
        self.audit.record("rubric_template.create", "rubric_template", actor_id, template["id"], {"name": template["name"]})
        return RubricTemplateDetail(**template)

    def update_template(
        self,
        template_id: UUID,
        data: RubricTemplateUpdate,
        actor_id: Optional[UUID] = None,
    ) -> RubricTemplateDetail:
        self.require_template(template_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        self.repo.update_template(template_id, changes)
        invalidate_template(template_id)
        self.audit.record("rubric_template.update", "rubric_template", actor_id, template_id, changes)
        return self.get_template_detail(template_id)

    def delete_template(self, template_id: UUID, actor_id: Optional[UUID] = None) -> None:
        self.require_template(template_id)
        self.repo.delete_template(template_id)
        logger.info(f"Deleted rubric template {template_id} and its criteria")
        invalidate_template(template_id)
        self.audit.record("rubric_template.delete", "rubric_template", actor_id, template_id)

    #  Criteria

    def add_criterion(
        self,
        template_id: UUID,
        data: RubricCriterionCreate,
        actor_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        self.require_template(template_id)
        criterion = self.repo.create_criterion(
            template_id=template_id,
            criterion=data.criterion.strip(),
            description=data.description,
            weight=data.weight,
            min_score=data.min_score,
            max_score=data.max_score,
        )
        invalidate_template(template_id)
        self.audit.record(
            "rubric_criterion.create", "rubric_criterion", actor_id, criterion["id"],
            {"template_id": str(template_id), "criterion": criterion["criterion"]},
        )
        return criterion

    def update_criterion(
        self,
        criterion_id: UUID,
        data: RubricCriterionUpdate,
        actor_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        current = self.repo.get_criterion(criterion_id)
        if current is None:
            raise EntityNotFoundException("rubric criterion", str(criterion_id))

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        min_score = changes.get("min_score", current["min_score"])
        max_score = changes.get("max_score", current["max_score"])
        if min_score > max_score:
            raise WorkflowException("min_score must be less than or equal to max_score")

        updated = self.repo.update_criterion(criterion_id, changes)
        invalidate_template(current["template_id"])
        self.audit.record("rubric_criterion.update", "rubric_criterion", actor_id, criterion_id, changes)
        return updated

    def delete_criterion(self, criterion_id: UUID, actor_id: Optional[UUID] = None) -> None:
        current = self.repo.get_criterion(criterion_id)
        if current is None:
            raise EntityNotFoundException("rubric criterion", str(criterion_id))
        self.repo.delete_criterion(criterion_id)
        invalidate_template(current["template_id"])
        self.audit.record("rubric_criterion.delete", "rubric_criterion", actor_id, criterion_id)

    #  Scale levels

    def set_scale_levels(
        self,
        template_id: UUID,
        data: RubricScaleLevelsUpdate,
        actor_id: Optional[UUID] = None,
    ) -> List[RubricScaleLevel]:
        self.require_template(template_id)
        levels = sorted((level.model_dump() for level in data.levels), key=lambda level: -level["score"])
        stored = self.repo.replace_scale_levels(template_id, levels)
        invalidate_template(template_id)
        self.audit.record(
            "rubric_template.scale_levels", "rubric_template", actor_id, template_id,
            {"scores": [level["score"] for level in levels]},
        )
        return [RubricScaleLevel(**level) for level in stored]

    def require_template(self, template_id: UUID) -> Dict[str, Any]:
        template = self.repo.get_template(template_id)
        if template is None:
            raise EntityNotFoundException("rubric template", str(template_id))
        return template
