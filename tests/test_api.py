# tests/test_api.py

"""
API Endpoint Tests - every router against the in-memory fakes

Error bodies share one shape: { ok: false, error_code, message, details, timestamp }.
"""

import csv
from io import StringIO
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from thesis_app.core import dependencies as deps
from thesis_app.main import app

API = "/api/v1"


def assert_error(response, status_code, error_code):
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["ok"] is False
    assert body["error_code"] == error_code
    assert body["message"]
    assert "timestamp" in body
    return body


@pytest.fixture
def evaluation_id(client, world):
    response = client.post(f"{API}/evaluations/assign", json={
        "schedule_id": world.schedule["id"],
        "evaluator_id": world.panelist["id"],
    })
    return response.json()["id"]



# ROOT AND HEALTH


class TestRootAndHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_startup_configures_logging(self):
        with patch("thesis_app.main.configure_logging") as configure:
            with TestClient(app):
                configure.assert_called_once_with()

    def test_health_degraded_without_backends(self, client):
        with patch("thesis_app.routers.health.get_snowflake_connection", side_effect=RuntimeError("no warehouse")):
            response = client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["dependencies"]["snowflake"] == "unhealthy: no warehouse"
        assert body["dependencies"]["redis"].startswith("unhealthy")

    def test_health_ok(self, client, monkeypatch):
        conn = MagicMock()
        conn.cursor.return_value.fetchone.return_value = ("SVC_THESIS",)
        monkeypatch.setattr("thesis_app.routers.health.get_cache", lambda: MagicMock())
        with patch("thesis_app.routers.health.get_snowflake_connection", return_value=conn):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["dependencies"]["snowflake"] == "healthy (User: SVC_THESIS)"

    def test_cache_stats_without_redis(self, client):
        body = client.get("/health/cache/stats").json()
        assert body["redis_connected"] is False

    def test_unknown_route(self, client):
        assert_error(client.get(f"{API}/nothing-here"), 404, "HTTP_404")



# USERS


class TestUsers:

    def test_create_and_get(self, client, store):
        response = client.post(f"{API}/users", json={"name": "Carla Diaz", "email": "Carla@School.edu", "role": "staff"})
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "carla@school.edu"
        assert user["status"] == "active"

        fetched = client.get(f"{API}/users/{user['id']}").json()
        assert fetched["ok"] is True
        assert fetched["user"]["name"] == "Carla Diaz"
        assert "user.create" in store.audit_logs.actions()

    def test_duplicate_email(self, client, world):
        response = client.post(f"{API}/users", json={"name": "Ana Again", "email": "ANA@school.edu", "role": "student"})
        assert_error(response, 409, "DUPLICATE_EMAIL")

    def test_missing_email_message(self, client):
        body = assert_error(client.post(f"{API}/users", json={"name": "No Mail", "role": "student"}), 422, "VALIDATION_ERROR")
        assert body["message"] == "Email is required"
        assert body["details"]["field"] == "email"

    def test_malformed_json(self, client):
        response = client.post(
            f"{API}/users", content="{not json", headers={"Content-Type": "application/json"}
        )
        assert_error(response, 400, "INVALID_REQUEST")

    def test_list_filters(self, client, world):
        body = client.get(f"{API}/users", params={"role": "student"}).json()
        assert body["total"] == 2
        assert body["limit"] == 50
        assert {u["name"] for u in body["items"]} == {"Ana Cruz", "Ben Lim"}

    def test_limit_bounds(self, client):
        assert_error(client.get(f"{API}/users", params={"limit": 500}), 422, "VALIDATION_ERROR")

    def test_not_found(self, client, sample_uuid):
        body = assert_error(client.get(f"{API}/users/{sample_uuid}"), 404, "USER_NOT_FOUND")
        assert body["message"] == "User not found"

    def test_invalid_uuid(self, client):
        assert_error(client.get(f"{API}/users/not-a-uuid"), 422, "VALIDATION_ERROR")

    def test_update_records_actor(self, client, world, store):
        response = client.patch(
            f"{API}/users/{world.ana['id']}",
            json={"status": "disabled"},
            headers={"X-Actor-Id": world.admin["id"]},
        )
        assert response.status_code == 200
        assert response.json()["user"]["status"] == "disabled"
        entry = store.audit_logs.rows[-1]
        assert entry["action"] == "user.update"
        assert entry["actor_id"] == world.admin["id"]

    def test_malformed_actor_header_ignored(self, client, world, store):
        response = client.patch(
            f"{API}/users/{world.ben['id']}", json={"name": "Benjamin Lim"}, headers={"X-Actor-Id": "nobody"}
        )
        assert response.status_code == 200
        assert store.audit_logs.rows[-1]["actor_id"] is None

    def test_update_email_taken(self, client, world):
        response = client.patch(f"{API}/users/{world.ben['id']}", json={"email": "ana@school.edu"})
        assert_error(response, 409, "DUPLICATE_EMAIL")



# THESIS GROUPS


class TestThesisGroups:

    def test_create_with_adviser(self, client, world):
        response = client.post(f"{API}/thesis-groups", json={
            "title": "  Crop Disease Detection  ", "adviser_id": world.staff["id"], "program": "BSIT",
        })
        assert response.status_code == 201
        group = response.json()["group"]
        assert group["title"] == "Crop Disease Detection"
        assert group["member_count"] == 0

    def test_student_cannot_advise(self, client, world):
        response = client.post(f"{API}/thesis-groups", json={"title": "X", "adviser_id": world.ana["id"]})
        assert_error(response, 400, "ROLE_MISMATCH")

    def test_missing_title_message(self, client):
        body = assert_error(client.post(f"{API}/thesis-groups", json={}), 422, "VALIDATION_ERROR")
        assert body["message"] == "Thesis title is required"

    def test_members(self, client, world, store):
        carla = store.users.create("Carla Diaz", "carla@school.edu", "student")
        url = f"{API}/thesis-groups/{world.group['id']}/members"

        added = client.post(url, json={"student_id": carla["id"]})
        assert added.status_code == 201
        assert len(added.json()["members"]) == 3

        assert_error(client.post(url, json={"student_id": carla["id"]}), 409, "DUPLICATE_MEMBER")
        assert_error(client.post(url, json={"student_id": world.staff["id"]}), 400, "ROLE_MISMATCH")

        removed = client.delete(f"{url}/{carla['id']}")
        assert removed.json()["deleted"] is True
        assert_error(client.delete(f"{url}/{carla['id']}"), 404, "GROUP_MEMBER_NOT_FOUND")

    def test_replace_members(self, client, world):
        response = client.put(
            f"{API}/thesis-groups/{world.group['id']}/members", json={"student_ids": [world.ben["id"]]}
        )
        assert [m["name"] for m in response.json()["members"]] == ["Ben Lim"]

    def test_filters(self, client, world):
        assert client.get(f"{API}/thesis-groups", params={"program": "BSCS"}).json()["total"] == 1
        assert client.get(f"{API}/thesis-groups", params={"program": "BSIT"}).json()["total"] == 0

    def test_delete(self, client, world):
        response = client.delete(f"{API}/thesis-groups/{world.group['id']}")
        assert response.json() == {"ok": True, "message": "Thesis group deleted", "id": world.group["id"], "deleted": True}
        assert_error(client.get(f"{API}/thesis-groups/{world.group['id']}"), 404, "THESIS_GROUP_NOT_FOUND")



# RUBRICS


class TestRubrics:

    def test_template_detail(self, client, world):
        body = client.get(f"{API}/rubric-templates/{world.template['id']}").json()
        template = body["template"]
        assert [c["criterion"] for c in template["criteria"]] == ["Presentation", "Methodology", "Q&A"]
        assert template["totals"]["total_max"] == 20

    def test_create_template_and_criterion(self, client):
        created = client.post(f"{API}/rubric-templates", json={"name": "Proposal Rubric"})
        assert created.status_code == 201
        template_id = created.json()["template"]["id"]

        criterion = client.post(
            f"{API}/rubric-templates/{template_id}/criteria",
            json={"criterion": "Problem Statement", "weight": 2, "min_score": 0, "max_score": 10},
        )
        assert criterion.status_code == 201
        assert criterion.json()["criterion"]["weight"] == 2

        detail = client.get(f"{API}/rubric-templates/{template_id}").json()["template"]
        assert detail["totals"]["criteria_count"] == 1

    def test_criterion_range_validation(self, client, world):
        response = client.post(
            f"{API}/rubric-templates/{world.template['id']}/criteria",
            json={"criterion": "Bad", "min_score": 5, "max_score": 1},
        )
        body = assert_error(response, 422, "VALIDATION_ERROR")
        assert "min_score" in body["message"]

    def test_negative_weight_message(self, client, world):
        response = client.post(
            f"{API}/rubric-templates/{world.template['id']}/criteria", json={"criterion": "Bad", "weight": -1}
        )
        assert assert_error(response, 422, "VALIDATION_ERROR")["message"] == "Weight must be zero or greater"

    def test_update_criterion_merged_range(self, client, world):
        response = client.patch(f"{API}/rubric-criteria/{world.presentation['id']}", json={"min_score": 9})
        assert_error(response, 400, "INVALID_REQUEST")

    def test_delete_criterion(self, client, world):
        assert client.delete(f"{API}/rubric-criteria/{world.qa['id']}").json()["deleted"] is True
        assert_error(client.delete(f"{API}/rubric-criteria/{world.qa['id']}"), 404, "RUBRIC_CRITERION_NOT_FOUND")

    def test_list_active(self, client, world, store):
        store.rubrics.create_template("Old", version=1, active=False)
        body = client.get(f"{API}/rubric-templates", params={"active": "true"}).json()
        assert [t["name"] for t in body["items"]] == ["Thesis Defense Rubric v1"]

    def test_scale_levels(self, client, world):
        url = f"{API}/rubric-templates/{world.template['id']}"
        saved = client.put(f"{url}/scale-levels", json={"levels": [
            {"score": 4, "adjectival": "Proficient"},
            {"score": 5, "adjectival": "Professional / Accomplished", "description": "Exceeds expectations"},
        ]})
        assert saved.status_code == 200
        assert [level["score"] for level in saved.json()["levels"]] == [5, 4]

        template = client.get(url).json()["template"]
        assert template["scale_levels"][0]["adjectival"] == "Professional / Accomplished"

    def test_duplicate_scale_level(self, client, world):
        response = client.put(f"{API}/rubric-templates/{world.template['id']}/scale-levels", json={"levels": [
            {"score": 3, "adjectival": "Satisfactory"},
            {"score": 3, "adjectival": "Developing"},
        ]})
        body = assert_error(response, 422, "VALIDATION_ERROR")
        assert body["message"] == "Each score can have only one scale level"

    def test_scale_levels_unknown_template(self, client, sample_uuid):
        response = client.put(f"{API}/rubric-templates/{sample_uuid}/scale-levels", json={"levels": []})
        assert_error(response, 404, "RUBRIC_TEMPLATE_NOT_FOUND")



# DEFENSE SCHEDULES


class TestDefenseSchedules:

    def test_create_defaults_template(self, client, world):
        response = client.post(f"{API}/defense-schedules", json={
            "group_id": world.group["id"], "scheduled_at": "2026-04-02T09:30:00+08:00", "room": "Room 5",
        })
        assert response.status_code == 201
        schedule = response.json()["schedule"]
        assert schedule["rubric_template_id"] == world.template["id"]
        assert schedule["scheduled_at"].startswith("2026-04-02T01:30:00")
        assert schedule["status"] == "scheduled"

    def test_unknown_group(self, client, sample_uuid):
        response = client.post(f"{API}/defense-schedules", json={
            "group_id": sample_uuid, "scheduled_at": "2026-04-02T09:30:00Z",
        })
        assert_error(response, 404, "THESIS_GROUP_NOT_FOUND")

    def test_list_date_range(self, client, world):
        inside = client.get(f"{API}/defense-schedules", params={"from": "2026-03-01", "to": "2026-03-31"}).json()
        outside = client.get(f"{API}/defense-schedules", params={"from": "2026-04-01"}).json()
        assert inside["total"] == 1
        assert inside["items"][0]["group_title"] == world.group["title"]
        assert outside["total"] == 0

    def test_reversed_range(self, client):
        response = client.get(f"{API}/defense-schedules", params={"from": "2026-03-31", "to": "2026-03-01"})
        assert_error(response, 400, "INVALID_DATE_RANGE")

    def test_update(self, client, world):
        response = client.patch(f"{API}/defense-schedules/{world.schedule['id']}", json={"status": "ongoing"})
        assert response.json()["schedule"]["status"] == "ongoing"

    def test_panelists(self, client, world):
        url = f"{API}/defense-schedules/{world.schedule['id']}/panelists"

        added = client.post(url, json={"staff_id": world.staff["id"]})
        assert added.status_code == 201
        assert {p["name"] for p in added.json()["panelists"]} == {"Prof. Tan", "Dr. Reyes"}

        assert_error(client.post(url, json={"staff_id": world.staff["id"]}), 409, "DUPLICATE_PANELIST")
        assert_error(client.post(url, json={"staff_id": world.ana["id"]}), 400, "ROLE_MISMATCH")

        assert client.delete(f"{url}/{world.staff['id']}").status_code == 200
        assert len(client.get(url).json()["panelists"]) == 1

    def test_delete(self, client, world, evaluation_id, store):
        assert client.delete(f"{API}/defense-schedules/{world.schedule['id']}").status_code == 200
        assert store.evaluations.get_by_id(evaluation_id) is None
        assert_error(client.get(f"{API}/defense-schedules/{world.schedule['id']}"), 404, "DEFENSE_SCHEDULE_NOT_FOUND")



# EVALUATIONS


class TestEvaluations:

    def test_assign_single(self, client, world):
        payload = {"schedule_id": world.schedule["id"], "evaluator_id": world.panelist["id"]}
        first = client.post(f"{API}/evaluations/assign", json=payload).json()
        second = client.post(f"{API}/evaluations/assign", json=payload).json()

        assert first["created"] is True
        assert first["created_count"] == 1
        assert first["message"] == "Evaluator assigned"
        assert second["created"] is False
        assert second["message"] == "Evaluator already assigned"
        assert first["id"] == second["id"]

    def test_assign_single_requires_evaluator(self, client, world):
        response = client.post(f"{API}/evaluations/assign", json={"schedule_id": world.schedule["id"]})
        body = assert_error(response, 422, "VALIDATION_ERROR")
        assert body["message"] == "evaluator_id is required when mode is 'single'"

    def test_assign_panelists(self, client, world):
        payload = {"mode": "panelists", "schedule_id": world.schedule["id"]}
        body = client.post(f"{API}/evaluations/assign", json=payload).json()
        assert body["created"] is True
        assert body["created_count"] == 1
        assert client.post(f"{API}/evaluations/assign", json=payload).json()["created_count"] == 0

    def test_assign_student_rejected(self, client, world):
        response = client.post(f"{API}/evaluations/assign", json={
            "schedule_id": world.schedule["id"], "evaluator_id": world.ana["id"],
        })
        assert_error(response, 400, "ROLE_MISMATCH")

    def test_full_workflow(self, client, world, evaluation_id, store):
        url = f"{API}/evaluations/{evaluation_id}"

        saved = client.put(f"{url}/scores", json={"items": [
            {"criterion_id": world.presentation["id"], "score": 5},
            {"criterion_id": world.methodology["id"], "score": 4, "comment": "Solid design"},
            {"criterion_id": world.qa["id"], "score": 8},
        ]})
        assert saved.status_code == 200
        assert saved.json()["saved"] == 3
        assert saved.json()["status"] == "in_progress"

        detail = client.get(url).json()
        assert detail["summary"]["scored_count"] == 3
        assert detail["summary"]["weighted_average"] == pytest.approx((5 + 8 + 8) / 4)
        assert detail["percentage"]["overall_percentage"] == 84.0
        assert detail["criteria"][1]["comment"] == "Solid design"

        submitted = client.post(f"{url}/submit").json()
        assert submitted["evaluation"]["status"] == "submitted"

        assert_error(
            client.put(f"{url}/scores", json={"items": [{"criterion_id": world.qa["id"], "score": 1}]}),
            409, "INVALID_STATE_TRANSITION",
        )

        rankings = client.get(f"{API}/rankings/groups").json()
        assert rankings["items"][0]["group_title"] == world.group["title"]
        assert rankings["items"][0]["group_percentage"] == pytest.approx(82.5)

        locked = client.post(f"{url}/lock").json()
        assert locked["evaluation"]["status"] == "locked"
        assert store.audit_logs.actions()[-1] == "evaluation.lock"

    def test_score_out_of_range(self, client, world, evaluation_id):
        response = client.put(f"{API}/evaluations/{evaluation_id}/scores", json={
            "items": [{"criterion_id": world.presentation["id"], "score": 6}],
        })
        assert_error(response, 422, "SCORE_OUT_OF_RANGE")

    @pytest.mark.parametrize("score", ["nan", "Infinity"])
    def test_non_finite_score(self, client, world, evaluation_id, store, score):
        response = client.put(f"{API}/evaluations/{evaluation_id}/scores", json={
            "items": [{"criterion_id": world.presentation["id"], "score": score}],
        })
        body = assert_error(response, 422, "VALIDATION_ERROR")
        assert "finite" in body["message"]
        assert store.evaluations.list_scores(evaluation_id) == []

    def test_empty_items(self, client, evaluation_id):
        response = client.put(f"{API}/evaluations/{evaluation_id}/scores", json={"items": []})
        assert assert_error(response, 422, "VALIDATION_ERROR")["message"] == "At least one score item is required"

    def test_criterion_not_in_template(self, client, evaluation_id):
        response = client.put(f"{API}/evaluations/{evaluation_id}/scores", json={
            "items": [{"criterion_id": str(uuid4()), "score": 3}],
        })
        assert_error(response, 422, "CRITERION_TEMPLATE_MISMATCH")

    def test_list_by_status(self, client, world, evaluation_id):
        body = client.get(f"{API}/evaluations", params={"status": "pending"}).json()
        assert body["total"] == 1
        assert body["items"][0]["evaluator_name"] == "Prof. Tan"
        assert client.get(f"{API}/evaluations", params={"status": "locked"}).json()["total"] == 0

    def test_unassign(self, client, world, evaluation_id):
        params = {"schedule_id": world.schedule["id"], "evaluator_id": world.panelist["id"]}
        client.post(f"{API}/evaluations/{evaluation_id}/submit")

        assert_error(client.delete(f"{API}/evaluations/assign", params=params), 409, "INVALID_STATE_TRANSITION")

        forced = client.delete(f"{API}/evaluations/assign", params={**params, "force": "true"}).json()
        assert forced["deleted"] is True
        again = client.delete(f"{API}/evaluations/assign", params=params).json()
        assert again["deleted"] is False
        assert again["message"] == "No assignment found"

    def test_unknown_evaluation(self, client, sample_uuid):
        assert_error(client.get(f"{API}/evaluations/{sample_uuid}"), 404, "EVALUATION_NOT_FOUND")

    def test_extras(self, client, evaluation_id):
        url = f"{API}/evaluations/{evaluation_id}/extras"
        assert client.get(url).json()["extras"] == {}

        client.put(url, json={"extras": {"overall_comment": "Clear defense"}})
        saved = client.put(url, json={"extras": {"system_comment": "Demo ran offline"}})
        assert saved.status_code == 200
        assert saved.json()["message"] == "Panel notes saved"
        assert client.get(url).json()["extras"] == {
            "overall_comment": "Clear defense", "system_comment": "Demo ran offline",
        }

        client.post(f"{API}/evaluations/{evaluation_id}/submit")
        client.post(f"{API}/evaluations/{evaluation_id}/lock")
        refused = client.put(url, json={"extras": {"overall_comment": "Changed"}})
        assert_error(refused, 409, "INVALID_STATE_TRANSITION")

    def test_extras_unknown_evaluation(self, client, sample_uuid):
        assert_error(client.get(f"{API}/evaluations/{sample_uuid}/extras"), 404, "EVALUATION_NOT_FOUND")



# STUDENT EVALUATIONS


class TestStudentEvaluations:

    def test_create_then_existing(self, client, world):
        payload = {"schedule_id": world.schedule["id"], "student_id": world.ana["id"]}
        first = client.post(f"{API}/student-evaluations", json=payload)
        second = client.post(f"{API}/student-evaluations", json=payload)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["message"] == "Feedback form already exists"
        assert first.json()["student_evaluation"]["id"] == second.json()["student_evaluation"]["id"]

    def test_non_member(self, client, world):
        response = client.post(f"{API}/student-evaluations", json={
            "schedule_id": world.schedule["id"], "student_id": world.staff["id"],
        })
        assert_error(response, 400, "INVALID_REQUEST")

    def test_answers_submit_lock(self, client, world):
        created = client.post(f"{API}/student-evaluations", json={
            "schedule_id": world.schedule["id"], "student_id": world.ben["id"],
        }).json()["student_evaluation"]
        url = f"{API}/student-evaluations/{created['id']}"

        client.patch(f"{url}/answers", json={"answers": {"clarity": 4}})
        merged = client.patch(f"{url}/answers", json={"answers": {"pacing": "fast"}}).json()
        assert merged["student_evaluation"]["answers"] == {"clarity": 4, "pacing": "fast"}

        assert client.post(f"{url}/submit").json()["student_evaluation"]["status"] == "submitted"
        assert_error(client.patch(f"{url}/answers", json={"answers": {"x": 1}}), 409, "INVALID_STATE_TRANSITION")
        assert client.post(f"{url}/lock").json()["student_evaluation"]["status"] == "locked"

        listed = client.get(f"{API}/student-evaluations", params={"student_id": world.ben["id"]}).json()
        assert listed["total"] == 1

    def test_not_found(self, client, sample_uuid):
        assert_error(client.get(f"{API}/student-evaluations/{sample_uuid}"), 404, "STUDENT_EVALUATION_NOT_FOUND")



# RANKINGS


class TestRankings:

    def _score_students(self, client, world, evaluation_id):
        client.put(f"{API}/evaluations/{evaluation_id}/scores", json={"items": [
            {"criterion_id": world.presentation["id"], "score": 5, "target_type": "student", "target_id": world.ana["id"]},
            {"criterion_id": world.presentation["id"], "score": 3, "target_type": "student", "target_id": world.ben["id"]},
        ]})
        client.post(f"{API}/evaluations/{evaluation_id}/submit")

    def test_empty(self, client, world):
        body = client.get(f"{API}/rankings/groups").json()
        assert body == {"ok": True, "message": None, "items": [], "total": 0}

    def test_students(self, client, world, evaluation_id):
        self._score_students(client, world, evaluation_id)

        body = client.get(f"{API}/rankings/students").json()
        assert [i["student_name"] for i in body["items"]] == ["Ana Cruz", "Ben Lim"]
        assert [i["rank"] for i in body["items"]] == [1, 2]
        assert body["items"][1]["student_percentage"] == 50.0

        limited = client.get(f"{API}/rankings/students", params={"limit": 1}).json()
        assert len(limited["items"]) == 1
        assert limited["total"] == 2

        single = client.get(f"{API}/rankings/students/{world.ben['id']}").json()
        assert single["ranking"]["rank"] == 2

    def test_single_group_missing(self, client, world):
        assert_error(client.get(f"{API}/rankings/groups/{world.group['id']}"), 404, "GROUP_RANKING_NOT_FOUND")

    def test_student_missing(self, client, sample_uuid):
        assert_error(client.get(f"{API}/rankings/students/{sample_uuid}"), 404, "STUDENT_RANKING_NOT_FOUND")

    def test_limit_validation(self, client):
        assert_error(client.get(f"{API}/rankings/groups", params={"limit": 0}), 422, "VALIDATION_ERROR")



# AUDIT LOGS


class TestAuditLogs:

    def test_newest_first_and_filters(self, client, world, evaluation_id):
        client.post(f"{API}/evaluations/{evaluation_id}/submit", headers={"X-Actor-Id": world.panelist["id"]})

        body = client.get(f"{API}/audit-logs").json()
        assert [i["action"] for i in body["items"]] == ["evaluation.submit", "evaluation.assign"]
        assert body["items"][0]["actor_name"] == "Prof. Tan"

        filtered = client.get(f"{API}/audit-logs", params={"action": "evaluation.assign"}).json()
        assert filtered["total"] == 1

        by_actor = client.get(f"{API}/audit-logs", params={"actor_id": world.panelist["id"]}).json()
        assert by_actor["total"] == 1



# REPORTS


class TestReports:

    @pytest.fixture
    def reports(self):
        repo = MagicMock()
        for name in ("users_by_status", "users_by_role", "groups_by_program", "defenses_grouped",
                     "evaluations_by_status", "audit_top_actions", "audit_top_actors", "audit_daily"):
            getattr(repo, name).return_value = [{"key": "x", "count": 2}]
        repo.memberships_total.return_value = 4
        repo.groups_without_adviser.return_value = 0
        app.dependency_overrides[deps.get_report_repository] = lambda: repo
        return repo

    def test_summary(self, client, reports):
        body = client.get(f"{API}/reports/summary", params={"from": "2026-03-01", "to": "2026-03-31", "program": "BSCS"}).json()
        assert body["ok"] is True
        assert body["range"] == {"from": "2026-03-01", "to": "2026-03-31"}
        assert body["program"] == "BSCS"
        assert body["users"]["total"] == 2
        assert body["thesis"]["memberships_total"] == 4

    def test_summary_days_window(self, client, reports):
        body = client.get(f"{API}/reports/summary", params={"to": "2026-03-31", "days": 7}).json()
        assert body["range"] == {"from": "2026-03-25", "to": "2026-03-31"}

    def test_summary_reversed_range(self, client, reports):
        response = client.get(f"{API}/reports/summary", params={"from": "2026-04-01", "to": "2026-03-01"})
        assert_error(response, 400, "INVALID_DATE_RANGE")

    def test_audit_export(self, client, world, reports, store):
        store.audit_logs.create("user.update", "user", actor_id=world.admin["id"], entity_id=world.ana["id"],
                                details={"status": "disabled"})

        response = client.get(f"{API}/reports/audit-export", params={"from": "2000-01-01", "to": "2100-12-31"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="audit_logs_2000-01-01_to_2100-12-31.csv"'
        assert response.headers["cache-control"] == "no-store"

        rows = list(csv.DictReader(StringIO(response.text)))
        assert len(rows) == 1
        assert rows[0]["actor_email"] == "admin@school.edu"
        assert rows[0]["role"] == "admin"
        assert rows[0]["entity_type"] == "user"
