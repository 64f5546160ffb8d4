"""
Evaluation Service - Thesis Defense Platform
thesis_app/services/evaluation_service.py

Panel evaluation workflow:

    pending ──save_scores──▶ in_progress ──submit──▶ submitted ──lock──▶ locked
       └───────────────────────submit──────────────────▲
    (lock is allowed from any state except locked)

Score writes are validated against the rubric template bound to the
evaluation's defense schedule: the criterion must belong to the template
and the score must sit inside [min_score, max_score].

Extras (overall/system comments, per-member remarks) stay editable until
the evaluation is locked.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from thesis_app.core.exceptions import (
    CriterionTemplateMismatch,
    EntityNotFoundException,
    InvalidStateTransition,
    ScoreOutOfRange,
    WorkflowException,
)
from thesis_app.models.enumerations import EvaluationStatus, TargetType
from thesis_app.models.evaluation import (
    CriterionScoreRow,
    EvaluationDetailResponse,
    EvaluationResponse,
    ScoreItem,
)
from thesis_app.repositories.defense_schedule_repository import DefenseScheduleRepository
from thesis_app.repositories.evaluation_repository import EvaluationRepository
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.repositories.user_repository import UserRepository
from thesis_app.scoring.aggregator import evaluation_percentage, summarize_scores
from thesis_app.scoring.utils import id_key
from thesis_app.services.audit_service import AuditService
from thesis_app.services.cache import invalidate_rankings
from thesis_app.services.rubric_service import RubricService
from thesis_app.services.schedule_service import require_evaluator

logger = logging.getLogger(__name__)

FINAL_STATUSES = (EvaluationStatus.SUBMITTED.value, EvaluationStatus.LOCKED.value)
SUBMITTABLE_STATUSES = (EvaluationStatus.PENDING.value, EvaluationStatus.IN_PROGRESS.value)


class EvaluationService:
    def __init__(
        self,
        evaluations: EvaluationRepository,
        schedules: DefenseScheduleRepository,
        groups: ThesisGroupRepository,
        users: UserRepository,
        rubrics: RubricService,
        audit: AuditService,
    ):
        self.evaluations = evaluations
        self.schedules = schedules
        self.groups = groups
        self.users = users
        self.rubrics = rubrics
        self.audit = audit

    def list(
        self,
        limit: int,
        offset: int,
        schedule_id: Optional[UUID] = None,
        evaluator_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        return self.evaluations.list(
            limit, offset, schedule_id=schedule_id, evaluator_id=evaluator_id, status=status
        )

    def get(self, evaluation_id: UUID) -> Dict[str, Any]:
        evaluation = self.evaluations.get_by_id(evaluation_id)
        if evaluation is None:
            raise EntityNotFoundException("evaluation", str(evaluation_id))
        return evaluation

    def _schedule(self, schedule_id: Any) -> Dict[str, Any]:
        schedule = self.schedules.get_by_id(schedule_id)
        if schedule is None:
            raise EntityNotFoundException("defense schedule", str(schedule_id))
        return schedule

    #  Assignment

    def assign(
        self,
        schedule_id: UUID,
        evaluator_id: UUID,
        actor_id: Optional[UUID] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Assign one evaluator. Idempotent.

        Returns:
            (evaluation, created) where created is False for an existing assignment
        """
        self._schedule(schedule_id)
        require_evaluator(self.users, evaluator_id)

        existing = self.evaluations.get_by_assignment(schedule_id, evaluator_id)
        if existing is not None:
            return existing, False

        evaluation = self.evaluations.create(schedule_id, evaluator_id)
        self.audit.record(
            "evaluation.assign", "evaluation", actor_id, evaluation["id"],
            {"schedule_id": str(schedule_id), "evaluator_id": str(evaluator_id)},
        )
        return evaluation, True

    def assign_panelists(self, schedule_id: UUID, actor_id: Optional[UUID] = None) -> int:
        """Create a pending evaluation for every panelist who does not have one yet."""
        self._schedule(schedule_id)
        created = 0
        for panelist in self.schedules.list_panelists(schedule_id):
            staff_id = panelist["staff_id"]
            if self.evaluations.get_by_assignment(schedule_id, staff_id) is not None:
                continue
            self.evaluations.create(schedule_id, staff_id)
            created += 1

        if created:
            self.audit.record(
                "evaluation.assign_panelists", "defense_schedule", actor_id, schedule_id,
                {"created_count": created},
            )
        logger.info(f"Assigned {created} panelist evaluation(s) for schedule {schedule_id}")
        return created

    def unassign(
        self,
        schedule_id: UUID,
        evaluator_id: UUID,
        force: bool = False,
        actor_id: Optional[UUID] = None,
    ) -> bool:
        """
        Remove an assignment and its scores.

        Submitted or locked evaluations are kept unless force is set.
        Returns False when there was nothing to remove.
        """
        existing = self.evaluations.get_by_assignment(schedule_id, evaluator_id)
        if existing is None:
            return False
        if existing["status"] in FINAL_STATUSES and not force:
            raise InvalidStateTransition("evaluation", existing["status"], "unassigned")

        self.evaluations.delete(existing["id"])
        if existing["status"] in FINAL_STATUSES:
            invalidate_rankings()
        self.audit.record(
            "evaluation.unassign", "evaluation", actor_id, existing["id"],
            {"schedule_id": str(schedule_id), "evaluator_id": str(evaluator_id), "force": force},
        )
        return True

    #  Scores

    def save_scores(
        self,
        evaluation_id: UUID,
        items: List[ScoreItem],
        actor_id: Optional[UUID] = None,
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Bulk upsert criterion scores.

        Returns:
            (rows written, evaluation after the status update)
        """
        evaluation = self.get(evaluation_id)
        if evaluation["status"] in FINAL_STATUSES:
            raise InvalidStateTransition("evaluation", evaluation["status"], EvaluationStatus.IN_PROGRESS.value)

        schedule = self._schedule(evaluation["schedule_id"])
        template_id = schedule.get("rubric_template_id")
        if not template_id:
            raise WorkflowException(f"Defense schedule {schedule['id']} has no rubric template")

        template = self.rubrics.get_template_detail(template_id)
        criteria = {id_key(c.id): c for c in template.criteria}

        rows: Dict[tuple, Dict[str, Any]] = {}
        for item in items:
            criterion = criteria.get(id_key(item.criterion_id))
            if criterion is None:
                raise CriterionTemplateMismatch(str(item.criterion_id), str(template_id))
            score_ok = math.isfinite(item.score) and criterion.min_score <= item.score <= criterion.max_score
            if not score_ok:
                raise ScoreOutOfRange(str(item.criterion_id), item.score, criterion.min_score, criterion.max_score)

            target_type = item.target_type or TargetType.GROUP
            if target_type == TargetType.GROUP:
                target_id = schedule["group_id"]
            else:
                target_id = item.target_id
                if not self.groups.is_member(schedule["group_id"], target_id):
                    raise WorkflowException(f"Student {target_id} is not a member of the defended group")

            key = (id_key(item.criterion_id), target_type.value, id_key(target_id))
            # last item wins for a repeated criterion/target
            rows[key] = {
                "criterion_id": item.criterion_id,
                "target_type": target_type.value,
                "target_id": target_id,
                "score": item.score,
                "comment": item.comment,
            }

        saved = self.evaluations.upsert_scores(evaluation_id, list(rows.values()))

        if evaluation["status"] == EvaluationStatus.PENDING.value:
            evaluation = self.evaluations.set_status(evaluation_id, EvaluationStatus.IN_PROGRESS.value)

        self.audit.record("evaluation.save_scores", "evaluation", actor_id, evaluation_id, {"saved": saved})
        return saved, evaluation

    #  Extras

    def get_extras(self, evaluation_id: UUID) -> Dict[str, Any]:
        self.get(evaluation_id)
        stored = self.evaluations.get_extras(evaluation_id)
        return stored or {"evaluation_id": evaluation_id, "extras": {}, "updated_at": None}

    def save_extras(
        self,
        evaluation_id: UUID,
        extras: Dict[str, Any],
        actor_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        """Merge extras key-by-key into the stored object."""
        evaluation = self.get(evaluation_id)
        if evaluation["status"] == EvaluationStatus.LOCKED.value:
            raise InvalidStateTransition("evaluation", evaluation["status"], "edited")

        current = self.evaluations.get_extras(evaluation_id) or {}
        merged = {**(current.get("extras") or {}), **extras}
        saved = self.evaluations.upsert_extras(evaluation_id, merged)
        self.audit.record(
            "evaluation.save_extras", "evaluation", actor_id, evaluation_id,
            {"keys": sorted(extras.keys())},
        )
        return saved

    #  Lifecycle

    def submit(self, evaluation_id: UUID, actor_id: Optional[UUID] = None) -> Dict[str, Any]:
        evaluation = self.get(evaluation_id)
        if evaluation["status"] not in SUBMITTABLE_STATUSES:
            raise InvalidStateTransition("evaluation", evaluation["status"], EvaluationStatus.SUBMITTED.value)

        updated = self.evaluations.set_status(evaluation_id, EvaluationStatus.SUBMITTED.value)
        invalidate_rankings()
        self.audit.record("evaluation.submit", "evaluation", actor_id, evaluation_id)
        return updated

    def lock(self, evaluation_id: UUID, actor_id: Optional[UUID] = None) -> Dict[str, Any]:
        evaluation = self.get(evaluation_id)
        if evaluation["status"] == EvaluationStatus.LOCKED.value:
            raise InvalidStateTransition("evaluation", evaluation["status"], EvaluationStatus.LOCKED.value)

        updated = self.evaluations.set_status(evaluation_id, EvaluationStatus.LOCKED.value)
        invalidate_rankings()
        self.audit.record("evaluation.lock", "evaluation", actor_id, evaluation_id, {"from": evaluation["status"]})
        return updated

    #  Detail

    def detail(self, evaluation_id: UUID) -> EvaluationDetailResponse:
        """
        Evaluation with its rubric sheet and both score summaries.

        Group-level scores fill the criterion rows; per-student scores are
        returned separately and do not affect the summary.
        """
        evaluation = self.get(evaluation_id)
        schedule = self.schedules.get_by_id(evaluation["schedule_id"])
        template_id = schedule.get("rubric_template_id") if schedule else None
        criteria = self.rubrics.get_template_detail(template_id).criteria if template_id else []

        scores = self.evaluations.list_scores(evaluation_id)
        group_scores = {
            id_key(s["criterion_id"]): s
            for s in scores
            if s.get("target_type", TargetType.GROUP.value) == TargetType.GROUP.value
        }

        rows = []
        for criterion in criteria:
            score_row = group_scores.get(id_key(criterion.id), {})
            rows.append(CriterionScoreRow(
                criterion_id=criterion.id,
                criterion=criterion.criterion,
                description=criterion.description,
                weight=criterion.weight,
                min_score=criterion.min_score,
                max_score=criterion.max_score,
                score=score_row.get("score"),
                comment=score_row.get("comment"),
            ))

        return EvaluationDetailResponse(
            evaluation=EvaluationResponse(**evaluation),
            schedule=schedule,
            criteria=rows,
            student_scores=[s for s in scores if s.get("target_type") == TargetType.STUDENT.value],
            summary=summarize_scores(rows),
            percentage=evaluation_percentage(criteria, group_scores.values()),
        )
