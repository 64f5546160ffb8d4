"""
Custom Exceptions - Thesis Defense Platform
thesis_app/core/exceptions.py

Repository and workflow exceptions. Each carries the HTTP status and
error code the API layer reports for it.
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""

    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str = "Unexpected repository error"):
        self.message = message
        super().__init__(message)


class EntityNotFoundException(RepositoryException):
    """Entity not found in database."""

    status_code = 404

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.error_code = f"{entity_type.upper().replace(' ', '_')}_NOT_FOUND"
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    status_code = 409
    error_code = "DUPLICATE_ENTITY"

    def __init__(self, message: str = "Entity already exists"):
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    status_code = 503
    error_code = "DATABASE_UNAVAILABLE"

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message)


class ForeignKeyViolationException(RepositoryException):
    """Foreign key constraint violation."""

    status_code = 409
    error_code = "FOREIGN_KEY_VIOLATION"

    def __init__(self, message: str = "Foreign key constraint violation"):
        super().__init__(message)


class WorkflowException(RepositoryException):
    """Base class for business-rule violations raised by services."""

    status_code = 400
    error_code = "INVALID_REQUEST"


class InvalidStateTransition(WorkflowException):
    """Evaluation or feedback record cannot move to the requested status."""

    status_code = 409
    error_code = "INVALID_STATE_TRANSITION"

    def __init__(self, entity_type: str, current: str, target: str):
        self.entity_type = entity_type
        self.current = current
        self.target = target
        super().__init__(f"{entity_type} is '{current}' and cannot become '{target}'")


class ScoreOutOfRange(WorkflowException):
    """Score falls outside the criterion's [min_score, max_score]."""

    status_code = 422
    error_code = "SCORE_OUT_OF_RANGE"

    def __init__(self, criterion_id: str, score: float, min_score: float, max_score: float):
        self.criterion_id = criterion_id
        super().__init__(
            f"Score {score} out of allowed range [{min_score}..{max_score}] for criterion {criterion_id}"
        )


class CriterionTemplateMismatch(WorkflowException):
    """Criterion does not belong to the rubric template bound to the schedule."""

    status_code = 422
    error_code = "CRITERION_TEMPLATE_MISMATCH"

    def __init__(self, criterion_id: str, expected_template_id: str):
        self.criterion_id = criterion_id
        super().__init__(
            f"Criterion {criterion_id} does not belong to rubric template {expected_template_id}"
        )


class RoleMismatch(WorkflowException):
    """User does not hold a role allowed for the operation."""

    status_code = 400
    error_code = "ROLE_MISMATCH"

    def __init__(self, user_id: str, allowed: tuple):
        super().__init__(f"User {user_id} must have one of roles: {', '.join(allowed)}")
