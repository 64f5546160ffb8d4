# tests/conftest.py

"""
Pytest Fixtures - Shared test configuration for services and APIs

Repositories are replaced with the in-memory fakes from tests/fakes.py, and
Redis is treated as unavailable so every read goes to the fakes.

SEEDED WORLD (see `world`):
- Users:    admin, staff (Dr. Reyes), panelist (Prof. Tan), two students
- Group:    "Edge Caching for Rural Clinics" with both students
- Rubric:   "Thesis Defense Rubric v1" with three criteria
              Presentation  weight 1  (1..5)
              Methodology   weight 2  (1..5)
              Q&A           weight 1  (0..10)
- Schedule: defense for the group, rubric attached, panelist on the panel
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-thesis-platform-suite")
os.environ.setdefault("SNOWFLAKE_ACCOUNT", "test-account")
os.environ.setdefault("SNOWFLAKE_USER", "test-user")
os.environ.setdefault("SNOWFLAKE_PASSWORD", "test-password")
os.environ.setdefault("SNOWFLAKE_DATABASE", "TEST_DB")
os.environ.setdefault("SNOWFLAKE_SCHEMA", "PUBLIC")
os.environ.setdefault("SNOWFLAKE_WAREHOUSE", "TEST_WH")

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from fakes import FakeStore
from thesis_app.core import dependencies as deps
from thesis_app.main import app
from thesis_app.services.audit_service import AuditService
from thesis_app.services.evaluation_service import EvaluationService
from thesis_app.services.ranking_service import RankingService
from thesis_app.services.rubric_service import RubricService
from thesis_app.services.schedule_service import ScheduleService
from thesis_app.services.student_feedback_service import StudentFeedbackService


# =============================================================================
# CACHE
# =============================================================================

@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Behave as if Redis is unreachable."""
    monkeypatch.setattr("thesis_app.services.cache.get_cache", lambda: None)
    monkeypatch.setattr("thesis_app.routers.health.get_cache", lambda: None)


# =============================================================================
# FAKE STORE + SERVICES
# =============================================================================

@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def audit(store):
    return AuditService(store.audit_logs)


@pytest.fixture
def rubric_service(store, audit):
    return RubricService(store.rubrics, audit)


@pytest.fixture
def schedule_service(store, rubric_service, audit):
    return ScheduleService(store.schedules, store.groups, store.users, rubric_service, audit)


@pytest.fixture
def evaluation_service(store, rubric_service, audit):
    return EvaluationService(store.evaluations, store.schedules, store.groups, store.users, rubric_service, audit)


@pytest.fixture
def feedback_service(store, audit):
    return StudentFeedbackService(store.student_evaluations, store.schedules, store.groups, audit)


@pytest.fixture
def ranking_service(store):
    return RankingService(store.evaluations, store.schedules, store.rubrics, store.groups, store.users)


@pytest.fixture
def world(store):
    """A small, fully wired defense: see module docstring."""
    admin = store.users.create("Admin User", "admin@school.edu", "admin")
    staff = store.users.create("Dr. Reyes", "reyes@school.edu", "staff")
    panelist = store.users.create("Prof. Tan", "tan@school.edu", "panelist")
    ana = store.users.create("Ana Cruz", "ana@school.edu", "student")
    ben = store.users.create("Ben Lim", "ben@school.edu", "student")

    group = store.groups.create(
        "Edge Caching for Rural Clinics", adviser_id=staff["id"], program="BSCS", term="2026-1"
    )
    store.groups.replace_members(group["id"], [ana["id"], ben["id"]])

    template = store.rubrics.create_template("Thesis Defense Rubric v1", version=1, active=True)
    presentation = store.rubrics.create_criterion(template["id"], "Presentation", weight=1, min_score=1, max_score=5)
    methodology = store.rubrics.create_criterion(template["id"], "Methodology", weight=2, min_score=1, max_score=5)
    qa = store.rubrics.create_criterion(template["id"], "Q&A", weight=1, min_score=0, max_score=10)

    schedule = store.schedules.create(
        group_id=group["id"],
        scheduled_at=datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc),
        room="Room 301",
        rubric_template_id=template["id"],
    )
    store.schedules.add_panelist(schedule["id"], panelist["id"])

    return SimpleNamespace(
        admin=admin,
        staff=staff,
        panelist=panelist,
        ana=ana,
        ben=ben,
        group=group,
        template=template,
        presentation=presentation,
        methodology=methodology,
        qa=qa,
        schedule=schedule,
    )


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(store):
    """TestClient with every repository provider pointed at the fake store."""
    app.dependency_overrides[deps.get_user_repository] = lambda: store.users
    app.dependency_overrides[deps.get_thesis_group_repository] = lambda: store.groups
    app.dependency_overrides[deps.get_rubric_repository] = lambda: store.rubrics
    app.dependency_overrides[deps.get_defense_schedule_repository] = lambda: store.schedules
    app.dependency_overrides[deps.get_evaluation_repository] = lambda: store.evaluations
    app.dependency_overrides[deps.get_student_evaluation_repository] = lambda: store.student_evaluations
    app.dependency_overrides[deps.get_audit_log_repository] = lambda: store.audit_logs
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_uuid():
    return "00000000-0000-4000-8000-000000000000"
