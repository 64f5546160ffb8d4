# tests/test_api_client.py

"""
Dashboard API Client Tests - multi-endpoint fallback fetching
"""

from unittest.mock import MagicMock

import pytest
import requests

from thesis_app.services.api_client import ApiClient, FetchResult, api_paths


def _response(status_code=200, payload=None, json_error=False):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ApiClient(base_url="http://api.test/", timeout=3, session=session)


class TestUrl:

    def test_joins_base(self, client):
        assert client.url("/api/v1/rankings/groups") == "http://api.test/api/v1/rankings/groups"
        assert client.url("health") == "http://api.test/health"

    def test_absolute_url_kept(self, client):
        assert client.url("https://other.test/x") == "https://other.test/x"

    def test_actor_header(self, session):
        api = ApiClient(base_url="http://api.test", session=session, actor_id="u-1")
        assert api.headers["X-Actor-Id"] == "u-1"


class TestFetchFirst:

    def test_first_success_wins(self, client, session):
        session.get.return_value = _response(200, {"ok": True, "items": []})

        result = client.fetch_first(["/a", "/b"], {"limit": 5})

        assert result.ok
        assert result.path == "/a"
        assert result.status_code == 200
        assert result.data == {"ok": True, "items": []}
        session.get.assert_called_once_with(
            "http://api.test/a", params={"limit": 5}, headers={"Accept": "application/json"}, timeout=3
        )

    @pytest.mark.parametrize("missing_status", [404, 405])
    def test_missing_route_skipped_silently(self, client, session, missing_status):
        session.get.side_effect = [_response(missing_status, {"detail": "Not Found"}), _response(200, [1, 2])]

        result = client.fetch_first(["/old", "/new"])

        assert result.path == "/new"
        assert result.data == [1, 2]
        assert result.errors == []

    def test_app_route_missing_skipped(self, client, session):
        session.get.side_effect = [
            _response(404, {"ok": False, "error_code": "HTTP_404", "message": "Not Found"}),
            _response(200, {"ok": True}),
        ]
        result = client.fetch_first(["/api/v1/x", "/x"])
        assert result.path == "/x"
        assert result.errors == []

    def test_entity_not_found_recorded(self, client, session):
        session.get.return_value = _response(
            404, {"ok": False, "error_code": "EVALUATION_NOT_FOUND", "message": "Evaluation not found"}
        )

        result = client.fetch_first(["/api/v1/evaluations/e-1", "/evaluations/e-1"])

        assert not result.ok
        assert result.status_code == 404
        assert result.errors == ["Evaluation not found"]
        session.get.assert_called_once()

    def test_server_error_recorded_then_fallback(self, client, session):
        session.get.side_effect = [
            _response(500, {"ok": False, "error_code": "INTERNAL_SERVER_ERROR", "message": "boom"}),
            _response(200, {"ok": True}),
        ]

        result = client.fetch_first(["/a", "/b"])

        assert result.path == "/b"
        assert result.errors == ["boom"]

    def test_ok_false_body_skipped(self, client, session):
        session.get.return_value = _response(200, {"ok": False, "message": "not ready"})

        result = client.fetch_first(["/a"])

        assert not result.ok
        assert result.data is None
        assert result.errors == ["not ready"]

    def test_non_json_body_skipped(self, client, session):
        session.get.return_value = _response(200, json_error=True)
        result = client.fetch_first(["/a"])
        assert result.errors == ["/a returned a non-JSON body"]

    def test_error_without_message(self, client, session):
        session.get.return_value = _response(502, json_error=True)
        result = client.fetch_first(["/a"])
        assert result.errors == ["/a returned 502"]

    def test_nested_detail_message(self, client, session):
        session.get.return_value = _response(400, {"detail": {"message": "Invalid date range"}})
        assert client.fetch_first(["/a"]).errors == ["Invalid date range"]

    def test_connection_error_never_raises(self, client, session):
        session.get.side_effect = requests.ConnectionError("refused")

        result = client.fetch_first(["/a", "/b"])

        assert isinstance(result, FetchResult)
        assert not result.ok
        assert len(result.errors) == 2
        assert result.errors[0].startswith("/a: ")

    def test_no_paths(self, client, session):
        result = client.fetch_first([])
        assert not result.ok
        session.get.assert_not_called()


class TestEndpoints:

    def test_api_paths(self):
        assert api_paths("rankings/groups") == ["/api/v1/rankings/groups", "/rankings/groups"]

    def test_group_rankings_candidates(self, session):
        api = ApiClient(base_url="http://gateway.test/thesis/api/v1", timeout=3, session=session)
        session.get.side_effect = [_response(404), _response(200, {"ok": True, "items": [], "total": 0})]

        result = api.group_rankings(limit=10)

        assert result.path == "/rankings/groups"
        urls = [c.args[0] for c in session.get.call_args_list]
        assert urls == [
            "http://gateway.test/thesis/api/v1/api/v1/rankings/groups",
            "http://gateway.test/thesis/api/v1/rankings/groups",
        ]
        assert session.get.call_args.kwargs["params"] == {"limit": 10}

    def test_evaluation_detail_not_found(self, client, session):
        session.get.return_value = _response(
            404, {"ok": False, "error_code": "EVALUATION_NOT_FOUND", "message": "Evaluation not found"}
        )
        result = client.evaluation_detail("e-1")
        assert result.errors == ["Evaluation not found"]
        assert session.get.call_args.args[0] == "http://api.test/api/v1/evaluations/e-1"

    def test_health_returns_body(self, client, session):
        session.get.return_value = _response(200, {"status": "healthy"})
        assert client.health() == {"status": "healthy"}

    def test_health_unreachable(self, client, session):
        session.get.side_effect = requests.Timeout("slow")
        assert client.health() is None

    def test_evaluations_status_filter(self, client, session):
        session.get.return_value = _response(200, {"ok": True, "items": []})
        client.evaluations(status="submitted", limit=20)
        assert session.get.call_args.kwargs["params"] == {"limit": 20, "offset": 0, "status": "submitted"}
