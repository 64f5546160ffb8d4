"""
Dependencies - Thesis Defense Platform
thesis_app/core/dependencies.py

FastAPI dependency injection for repositories and services.
Repositories are process-wide singletons; services are cheap wrappers
built per request from them, so tests can swap any repository through
app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from thesis_app.repositories.audit_log_repository import AuditLogRepository
from thesis_app.repositories.defense_schedule_repository import DefenseScheduleRepository
from thesis_app.repositories.evaluation_repository import EvaluationRepository
from thesis_app.repositories.report_repository import ReportRepository
from thesis_app.repositories.rubric_repository import RubricRepository
from thesis_app.repositories.student_evaluation_repository import StudentEvaluationRepository
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.repositories.user_repository import UserRepository
from thesis_app.services.audit_service import AuditService
from thesis_app.services.evaluation_service import EvaluationService
from thesis_app.services.ranking_service import RankingService
from thesis_app.services.report_service import ReportService
from thesis_app.services.rubric_service import RubricService
from thesis_app.services.schedule_service import ScheduleService
from thesis_app.services.student_feedback_service import StudentFeedbackService


#  Repositories


@lru_cache()
def get_user_repository() -> UserRepository:
    """Get cached UserRepository instance."""
    return UserRepository()


@lru_cache()
def get_thesis_group_repository() -> ThesisGroupRepository:
    """Get cached ThesisGroupRepository instance."""
    return ThesisGroupRepository()


@lru_cache()
def get_rubric_repository() -> RubricRepository:
    """Get cached RubricRepository instance."""
    return RubricRepository()


@lru_cache()
def get_defense_schedule_repository() -> DefenseScheduleRepository:
    """Get cached DefenseScheduleRepository instance."""
    return DefenseScheduleRepository()


@lru_cache()
def get_evaluation_repository() -> EvaluationRepository:
    """Get cached EvaluationRepository instance."""
    return EvaluationRepository()


@lru_cache()
def get_student_evaluation_repository() -> StudentEvaluationRepository:
    """Get cached StudentEvaluationRepository instance."""
    return StudentEvaluationRepository()


@lru_cache()
def get_audit_log_repository() -> AuditLogRepository:
    """Get cached AuditLogRepository instance."""
    return AuditLogRepository()


@lru_cache()
def get_report_repository() -> ReportRepository:
    """Get cached ReportRepository instance."""
    return ReportRepository()


#  Services


def get_audit_service(
    repo: AuditLogRepository = Depends(get_audit_log_repository),
) -> AuditService:
    return AuditService(repo)


def get_rubric_service(
    repo: RubricRepository = Depends(get_rubric_repository),
    audit: AuditService = Depends(get_audit_service),
) -> RubricService:
    return RubricService(repo, audit)


def get_schedule_service(
    schedules: DefenseScheduleRepository = Depends(get_defense_schedule_repository),
    groups: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
    rubrics: RubricService = Depends(get_rubric_service),
    audit: AuditService = Depends(get_audit_service),
) -> ScheduleService:
    return ScheduleService(schedules, groups, users, rubrics, audit)


def get_evaluation_service(
    evaluations: EvaluationRepository = Depends(get_evaluation_repository),
    schedules: DefenseScheduleRepository = Depends(get_defense_schedule_repository),
    groups: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
    rubrics: RubricService = Depends(get_rubric_service),
    audit: AuditService = Depends(get_audit_service),
) -> EvaluationService:
    return EvaluationService(evaluations, schedules, groups, users, rubrics, audit)


def get_student_feedback_service(
    repo: StudentEvaluationRepository = Depends(get_student_evaluation_repository),
    schedules: DefenseScheduleRepository = Depends(get_defense_schedule_repository),
    groups: ThesisGroupRepository = Depends(get_thesis_group_repository),
    audit: AuditService = Depends(get_audit_service),
) -> StudentFeedbackService:
    return StudentFeedbackService(repo, schedules, groups, audit)


def get_ranking_service(
    evaluations: EvaluationRepository = Depends(get_evaluation_repository),
    schedules: DefenseScheduleRepository = Depends(get_defense_schedule_repository),
    rubrics: RubricRepository = Depends(get_rubric_repository),
    groups: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
) -> RankingService:
    return RankingService(evaluations, schedules, rubrics, groups, users)


def get_report_service(
    reports: ReportRepository = Depends(get_report_repository),
    audit_logs: AuditLogRepository = Depends(get_audit_log_repository),
) -> ReportService:
    return ReportService(reports, audit_logs)
