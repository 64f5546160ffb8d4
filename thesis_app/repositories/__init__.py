"""
Repositories Package - Thesis Defense Platform
thesis_app/repositories/__init__.py

Data access layer for Snowflake database operations.
"""

from thesis_app.repositories.base import BaseRepository
from thesis_app.repositories.audit_log_repository import AuditLogRepository
from thesis_app.repositories.defense_schedule_repository import DefenseScheduleRepository
from thesis_app.repositories.evaluation_repository import EvaluationRepository
from thesis_app.repositories.report_repository import ReportRepository
from thesis_app.repositories.rubric_repository import RubricRepository
from thesis_app.repositories.student_evaluation_repository import StudentEvaluationRepository
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "AuditLogRepository",
    "DefenseScheduleRepository",
    "EvaluationRepository",
    "ReportRepository",
    "RubricRepository",
    "StudentEvaluationRepository",
    "ThesisGroupRepository",
    "UserRepository",
]
