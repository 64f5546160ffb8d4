# tests/test_models.py

"""
Model Validation Tests - Tests for the Pydantic request/response models
"""

import pytest
from uuid import uuid4
from datetime import date, datetime, timezone, timedelta
from pydantic import ValidationError

from thesis_app.models.enumerations import (
    AssignMode,
    EvaluationStatus,
    ScheduleStatus,
    StudentEvaluationStatus,
    TargetType,
    UserRole,
)
from thesis_app.models.user import UserCreate, UserUpdate
from thesis_app.models.thesis_group import ThesisGroupCreate, ThesisGroupUpdate
from thesis_app.models.rubric import RubricCriterionCreate, RubricCriterionUpdate, RubricTemplateCreate
from thesis_app.models.defense_schedule import DefenseScheduleCreate
from thesis_app.models.evaluation import AssignRequest, ScoreItem, ScoresUpsert
from thesis_app.models.report import DateRange
from thesis_app.models.common import ErrorResponse, ListEnvelope



# ENUMERATION TESTS


class TestEnumerations:
    """Status and role vocabularies."""

    def test_user_roles(self):
        assert [r.value for r in UserRole] == ["student", "staff", "admin", "panelist"]

    def test_evaluation_statuses(self):
        """Test the panel evaluation lifecycle order."""
        expected = ["pending", "in_progress", "submitted", "locked"]
        assert [s.value for s in EvaluationStatus] == expected

    def test_student_evaluation_has_no_draft_state(self):
        assert "in_progress" not in [s.value for s in StudentEvaluationStatus]

    def test_schedule_statuses(self):
        assert ScheduleStatus("cancelled") == ScheduleStatus.CANCELLED

    def test_target_types(self):
        assert {t.value for t in TargetType} == {"group", "student"}



# USER MODEL TESTS


class TestUserModels:

    def test_email_normalized(self):
        user = UserCreate(name="Ana Cruz", email="  Ana@School.EDU ", role="student")
        assert user.email == "ana@school.edu"

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            UserCreate(name="Ana", email="ana-at-school", role="student")

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            UserCreate(name="Ana", email="ana@school.edu", role="dean")

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            UserCreate(name="", email="ana@school.edu", role="student")

    def test_partial_update(self):
        update = UserUpdate(status="disabled")
        assert update.model_dump(exclude_unset=True) == {"status": "disabled"}



# THESIS GROUP MODEL TESTS


class TestThesisGroupModels:

    def test_title_required(self):
        with pytest.raises(ValidationError):
            ThesisGroupCreate(program="BSCS")

    def test_update_all_optional(self):
        assert ThesisGroupUpdate().model_dump(exclude_unset=True) == {}



# RUBRIC MODEL TESTS


class TestRubricModels:

    def test_criterion_defaults(self):
        criterion = RubricCriterionCreate(criterion="Presentation")
        assert criterion.weight == 1.0
        assert criterion.min_score == 1
        assert criterion.max_score == 5

    def test_min_above_max_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            RubricCriterionCreate(criterion="Q&A", min_score=10, max_score=5)
        assert "min_score" in str(exc_info.value)

    def test_equal_bounds_allowed(self):
        criterion = RubricCriterionCreate(criterion="Pass/Fail", min_score=1, max_score=1)
        assert criterion.min_score == criterion.max_score

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            RubricCriterionCreate(criterion="Presentation", weight=-1)

    def test_update_checks_range_only_when_both_given(self):
        assert RubricCriterionUpdate(min_score=9).min_score == 9
        with pytest.raises(ValidationError):
            RubricCriterionUpdate(min_score=9, max_score=3)

    def test_template_version_positive(self):
        with pytest.raises(ValidationError):
            RubricTemplateCreate(name="Rubric", version=0)



# DEFENSE SCHEDULE MODEL TESTS


class TestDefenseScheduleModels:

    def test_naive_datetime_treated_as_utc(self):
        schedule = DefenseScheduleCreate(group_id=uuid4(), scheduled_at=datetime(2026, 3, 10, 9, 0))
        assert schedule.scheduled_at.tzinfo == timezone.utc
        assert schedule.scheduled_at.hour == 9

    def test_offset_converted_to_utc(self):
        manila = timezone(timedelta(hours=8))
        schedule = DefenseScheduleCreate(
            group_id=uuid4(), scheduled_at=datetime(2026, 3, 10, 17, 0, tzinfo=manila)
        )
        assert schedule.scheduled_at == datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)

    def test_default_status(self):
        schedule = DefenseScheduleCreate(group_id=uuid4(), scheduled_at="2026-03-10T09:00:00Z")
        assert schedule.status == ScheduleStatus.SCHEDULED



# EVALUATION MODEL TESTS


class TestAssignRequest:

    def test_single_requires_evaluator(self):
        with pytest.raises(ValidationError) as exc_info:
            AssignRequest(schedule_id=uuid4())
        assert "evaluator_id" in str(exc_info.value)

    def test_single_with_evaluator(self):
        request = AssignRequest(schedule_id=uuid4(), evaluator_id=uuid4())
        assert request.mode == AssignMode.SINGLE

    def test_panelists_mode_needs_no_evaluator(self):
        request = AssignRequest(mode="panelists", schedule_id=uuid4())
        assert request.evaluator_id is None

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            AssignRequest(mode="everyone", schedule_id=uuid4())


class TestScoreItems:

    def test_group_target_optional(self):
        item = ScoreItem(criterion_id=uuid4(), score=4)
        assert item.target_type is None
        assert item.target_id is None

    def test_student_target_requires_id(self):
        with pytest.raises(ValidationError):
            ScoreItem(criterion_id=uuid4(), score=4, target_type="student")

    def test_student_target_with_id(self):
        student_id = uuid4()
        item = ScoreItem(criterion_id=uuid4(), score=4, target_type="student", target_id=student_id)
        assert item.target_id == student_id

    @pytest.mark.parametrize("score", ["nan", float("nan"), float("inf"), "-Infinity"])
    def test_non_finite_score_rejected(self, score):
        with pytest.raises(ValidationError):
            ScoreItem(criterion_id=uuid4(), score=score)

    def test_empty_batch_rejected(self):
        with pytest.raises(ValidationError):
            ScoresUpsert(items=[])



# COMMON MODEL TESTS


class TestCommonModels:

    def test_date_range_aliases(self):
        parsed = DateRange.model_validate({"from": "2026-03-01", "to": "2026-03-31"})
        assert parsed.date_from == date(2026, 3, 1)
        assert parsed.model_dump(by_alias=True, mode="json") == {"from": "2026-03-01", "to": "2026-03-31"}

    def test_date_range_by_name(self):
        parsed = DateRange(date_from=date(2026, 3, 1), date_to=date(2026, 3, 2))
        assert parsed.date_to == date(2026, 3, 2)

    def test_error_response_shape(self):
        body = ErrorResponse(error_code="GROUP_NOT_FOUND", message="Thesis group not found").model_dump()
        assert body["ok"] is False
        assert body["details"] is None
        assert body["timestamp"].tzinfo is not None

    def test_list_envelope_limits(self):
        with pytest.raises(ValidationError):
            ListEnvelope(total=0, limit=0, offset=0)
