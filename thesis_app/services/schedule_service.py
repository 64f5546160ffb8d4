"""
Schedule Service - Thesis Defense Platform
thesis_app/services/schedule_service.py

Defense schedules and their panels. A schedule created without a rubric
template is bound to the current default template.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from thesis_app.core.exceptions import EntityNotFoundException, RoleMismatch
from thesis_app.models.defense_schedule import DefenseScheduleCreate, DefenseScheduleUpdate
from thesis_app.models.enumerations import EVALUATOR_ROLES
from thesis_app.repositories.defense_schedule_repository import DefenseScheduleRepository
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.repositories.user_repository import UserRepository
from thesis_app.services.audit_service import AuditService
from thesis_app.services.cache import invalidate_rankings
from thesis_app.services.rubric_service import RubricService

logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(
        self,
        schedules: DefenseScheduleRepository,
        groups: ThesisGroupRepository,
        users: UserRepository,
        rubrics: RubricService,
        audit: AuditService,
    ):
        self.schedules = schedules
        self.groups = groups
        self.users = users
        self.rubrics = rubrics
        self.audit = audit

    def list(
        self,
        limit: int,
        offset: int,
        group_id: Optional[UUID] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        return self.schedules.list(
            limit, offset, group_id=group_id, status=status, date_from=date_from, date_to=date_to
        )

    def get(self, schedule_id: UUID) -> Dict[str, Any]:
        schedule = self.schedules.get_by_id(schedule_id)
        if schedule is None:
            raise EntityNotFoundException("defense schedule", str(schedule_id))
        return schedule

    def create(self, data: DefenseScheduleCreate, actor_id: Optional[UUID] = None) -> Dict[str, Any]:
        if not self.groups.exists(data.group_id):
            raise EntityNotFoundException("thesis group", str(data.group_id))

        template_id = data.rubric_template_id
        if template_id is not None:
            self.rubrics.require_template(template_id)
        else:
            default = self.rubrics.default_template()
            template_id = default["id"] if default else None
            if template_id is None:
                logger.warning(f"No active rubric template; schedule for group {data.group_id} has none")

        schedule = self.schedules.create(
            group_id=data.group_id,
            scheduled_at=data.scheduled_at,
            room=data.room,
            status=data.status.value,
            rubric_template_id=template_id,
            created_by=actor_id,
        )
        self.audit.record(
            "defense_schedule.create", "defense_schedule", actor_id, schedule["id"],
            {"group_id": str(data.group_id), "rubric_template_id": str(template_id) if template_id else None},
        )
        return schedule

    def update(
        self,
        schedule_id: UUID,
        data: DefenseScheduleUpdate,
        actor_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        self.get(schedule_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        if data.group_id is not None and not self.groups.exists(data.group_id):
            raise EntityNotFoundException("thesis group", str(data.group_id))
        if data.rubric_template_id is not None:
            self.rubrics.require_template(data.rubric_template_id)
        if data.scheduled_at is not None:
            changes["scheduled_at"] = data.scheduled_at

        updated = self.schedules.update(schedule_id, changes)
        invalidate_rankings()
        self.audit.record("defense_schedule.update", "defense_schedule", actor_id, schedule_id, {
            k: str(v) for k, v in changes.items()
        })
        return updated

    def delete(self, schedule_id: UUID, actor_id: Optional[UUID] = None) -> None:
        self.get(schedule_id)
        self.schedules.delete(schedule_id)
        invalidate_rankings()
        self.audit.record("defense_schedule.delete", "defense_schedule", actor_id, schedule_id)

    #  Panelists

    def list_panelists(self, schedule_id: UUID) -> List[Dict[str, Any]]:
        self.get(schedule_id)
        return self.schedules.list_panelists(schedule_id)

    def add_panelist(self, schedule_id: UUID, staff_id: UUID, actor_id: Optional[UUID] = None) -> bool:
        """Returns True when the panelist was newly added."""
        self.get(schedule_id)
        require_evaluator(self.users, staff_id)
        added = self.schedules.add_panelist(schedule_id, staff_id)
        if added:
            self.audit.record(
                "schedule_panelist.add", "defense_schedule", actor_id, schedule_id, {"staff_id": str(staff_id)}
            )
        return added

    def remove_panelist(self, schedule_id: UUID, staff_id: UUID, actor_id: Optional[UUID] = None) -> None:
        self.get(schedule_id)
        if not self.schedules.remove_panelist(schedule_id, staff_id):
            raise EntityNotFoundException("panelist", str(staff_id))
        self.audit.record(
            "schedule_panelist.remove", "defense_schedule", actor_id, schedule_id, {"staff_id": str(staff_id)}
        )


def require_evaluator(users: UserRepository, user_id: UUID) -> Dict[str, Any]:
    """Load a user who may sit on a panel (staff or panelist role)."""
    user = users.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundException("user", str(user_id))
    if str(user.get("role")) not in EVALUATOR_ROLES:
        raise RoleMismatch(str(user_id), EVALUATOR_ROLES)
    return user
