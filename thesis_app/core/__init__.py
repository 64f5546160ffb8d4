"""
Core Package - Thesis Defense Platform
thesis_app/core/__init__.py

Core infrastructure: dependencies, exceptions, error handlers, logging.
"""

from thesis_app.core.exceptions import (
    CriterionTemplateMismatch,
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    ForeignKeyViolationException,
    InvalidStateTransition,
    RepositoryException,
    RoleMismatch,
    ScoreOutOfRange,
    WorkflowException,
)

__all__ = [
    "CriterionTemplateMismatch",
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ForeignKeyViolationException",
    "InvalidStateTransition",
    "RepositoryException",
    "RoleMismatch",
    "ScoreOutOfRange",
    "WorkflowException",
]
