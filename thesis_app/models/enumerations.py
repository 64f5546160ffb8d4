from enum import Enum

class UserRole(str, Enum):
    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"
    PANELIST = "panelist"

class UserStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"

class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class EvaluationStatus(str, Enum):
    PENDING = "pending"          # Assigned, nothing saved yet
    IN_PROGRESS = "in_progress"  # Draft scores saved
    SUBMITTED = "submitted"      # Final; no more score edits
    LOCKED = "locked"            # Frozen by an administrator

class StudentEvaluationStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    LOCKED = "locked"

class TargetType(str, Enum):
    GROUP = "group"
    STUDENT = "student"

class AssignMode(str, Enum):
    SINGLE = "single"
    PANELISTS = "panelists"

# Roles allowed to sit on a defense panel
EVALUATOR_ROLES = (UserRole.STAFF.value, UserRole.PANELIST.value)
