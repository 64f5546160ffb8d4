"""
Student Feedback Service - Thesis Defense Platform
thesis_app/services/student_feedback_service.py

One feedback form per (defense schedule, student). Answers are a free-form
JSON object merged key-by-key while the form is pending; submit and lock
follow the panel evaluation lifecycle.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from thesis_app.core.exceptions import EntityNotFoundException, InvalidStateTransition, WorkflowException
from thesis_app.models.enumerations import StudentEvaluationStatus
from thesis_app.repositories.defense_schedule_repository import DefenseScheduleRepository
from thesis_app.repositories.student_evaluation_repository import StudentEvaluationRepository
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.services.audit_service import AuditService


class StudentFeedbackService:
    def __init__(
        self,
        repo: StudentEvaluationRepository,
        schedules: DefenseScheduleRepository,
        groups: ThesisGroupRepository,
        audit: AuditService,
    ):
        self.repo = repo
        self.schedules = schedules
        self.groups = groups
        self.audit = audit

    def list(
        self,
        limit: int,
        offset: int,
        schedule_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        return self.repo.list(limit, offset, schedule_id=schedule_id, student_id=student_id, status=status)

    def get(self, feedback_id: UUID) -> Dict[str, Any]:
        record = self.repo.get_by_id(feedback_id)
        if record is None:
            raise EntityNotFoundException("student evaluation", str(feedback_id))
        return record

    def create(
        self,
        schedule_id: UUID,
        student_id: UUID,
        actor_id: Optional[UUID] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Open (or return the existing) feedback form for a student.

        Returns:
            (record, created)
        """
        schedule = self.schedules.get_by_id(schedule_id)
        if schedule is None:
            raise EntityNotFoundException("defense schedule", str(schedule_id))
        if not self.groups.is_member(schedule["group_id"], student_id):
            raise WorkflowException(f"Student {student_id} is not a member of the defended group")

        existing = self.repo.get_by_pair(schedule_id, student_id)
        if existing is not None:
            return existing, False

        record = self.repo.create(schedule_id, student_id)
        self.audit.record(
            "student_evaluation.create", "student_evaluation", actor_id, record["id"],
            {"schedule_id": str(schedule_id), "student_id": str(student_id)},
        )
        return record, True

    def save_answers(
        self,
        feedback_id: UUID,
        answers: Dict[str, Any],
        actor_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        record = self.get(feedback_id)
        if record["status"] != StudentEvaluationStatus.PENDING.value:
            raise InvalidStateTransition("student evaluation", record["status"], "edited")

        merged = {**(record.get("answers") or {}), **answers}
        updated = self.repo.update_answers(feedback_id, merged)
        self.audit.record(
            "student_evaluation.save_answers", "student_evaluation", actor_id, feedback_id,
            {"keys": sorted(answers.keys())},
        )
        return updated

    def submit(self, feedback_id: UUID, actor_id: Optional[UUID] = None) -> Dict[str, Any]:
        record = self.get(feedback_id)
        if record["status"] != StudentEvaluationStatus.PENDING.value:
            raise InvalidStateTransition(
                "student evaluation", record["status"], StudentEvaluationStatus.SUBMITTED.value
            )
        updated = self.repo.set_status(feedback_id, StudentEvaluationStatus.SUBMITTED.value)
        self.audit.record("student_evaluation.submit", "student_evaluation", actor_id, feedback_id)
        return updated

    def lock(self, feedback_id: UUID, actor_id: Optional[UUID] = None) -> Dict[str, Any]:
        record = self.get(feedback_id)
        if record["status"] == StudentEvaluationStatus.LOCKED.value:
            raise InvalidStateTransition(
                "student evaluation", record["status"], StudentEvaluationStatus.LOCKED.value
            )
        updated = self.repo.set_status(feedback_id, StudentEvaluationStatus.LOCKED.value)
        self.audit.record(
            "student_evaluation.lock", "student_evaluation", actor_id, feedback_id, {"from": record["status"]}
        )
        return updated
