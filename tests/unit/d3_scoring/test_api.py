"""
Tests for the scoring and game HTTP routes
"""
import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_db
from main import app

MEMORY_PAYLOAD = {"pairs_total": 8, "pairs_matched": 6, "attempts": 12, "duration_seconds": 90}


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def save_memory_version(client, weights=None, formulas=None):
    response = client.post(
        "/api/scoring/save",
        json={
            "game_type": "memory_match",
            "formulas": formulas or {"memory": "completion", "efficiency": "efficiency * 1.2"},
            "weights": weights or {"memory": 0.6, "efficiency": 0.4},
            "description": "baseline",
            "created_by": "ops@example.com",
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestFormulaRoutes:
    def test_validate_formula(self, client):
        response = client.post(
            "/api/scoring/validate-formula",
            json={"formula": "a * 2 + b", "test_variables": {"a": 2, "b": 1}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["variables"] == ["a", "b"]
        assert data["test_result"] == 5.0

    def test_validate_formula_failing_test_variables(self, client):
        response = client.post(
            "/api/scoring/validate-formula",
            json={"formula": "a / b", "test_variables": {"a": 1, "b": 0}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["error"] == "Division by zero"
        assert data["error_kind"] == "DIVISION_BY_ZERO"
        assert data["test_result"] is None

    def test_validate_invalid_formula_is_not_an_http_error(self, client):
        response = client.post("/api/scoring/validate-formula", json={"formula": "a +* b"})
        assert response.status_code == 200
        assert response.json()["valid"] is False

    def test_validate_missing_formula(self, client):
        response = client.post("/api/scoring/validate-formula", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "INPUT_ERROR"

    def test_preview(self, client):
        response = client.post(
            "/api/scoring/preview",
            json={
                "formulas": {"overall": "accuracy * 0.5 + speed * 0.5"},
                "weights": {"overall": 1},
                "test_variables": {"accuracy": 80, "speed": 60},
            },
        )
        assert response.status_code == 200
        assert response.json()["scores"] == {
            "final_score": 70.0,
            "competencies": {"overall": {"raw": 70.0, "weight": 1.0, "weighted": 70.0}},
        }

    def test_preview_with_bad_variable(self, client):
        response = client.post(
            "/api/scoring/preview",
            json={"formulas": {"a": "x"}, "weights": {"a": 1}, "test_variables": {"x": "eighty"}},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INPUT_ERROR"

    def test_preview_with_overflowing_weight(self, client):
        response = client.post(
            "/api/scoring/preview",
            json={"formulas": {"a": "x"}, "weights": {"a": 1e307}, "test_variables": {"x": 100}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["error"]["competency"] == "a"
        assert data["error"]["kind"] == "DOMAIN_ERROR"


class TestVersionRoutes:
    def test_save_and_get_active(self, client):
        saved = save_memory_version(client)
        assert saved["version_name"] == "v1"
        assert saved["is_active"] is True
        assert saved["created_by"] == "ops@example.com"

        response = client.get("/api/scoring/active/memory_match")
        assert response.status_code == 200
        assert response.json()["id"] == saved["id"]

    def test_save_invalid_formula(self, client):
        response = client.post(
            "/api/scoring/save",
            json={"game_type": "memory_match", "formulas": {"memory": "completion +"}, "weights": {"memory": 1}},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "SCORING_ERROR"
        assert body["details"]["competency"] == "memory"

    def test_save_negative_weight(self, client):
        response = client.post(
            "/api/scoring/save",
            json={"game_type": "memory_match", "formulas": {"memory": "completion"}, "weights": {"memory": -1}},
        )
        assert response.status_code == 400

    def test_no_active_version(self, client):
        response = client.get("/api/scoring/active/focus_task")
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_versions_and_set_active(self, client):
        save_memory_version(client)
        save_memory_version(client, weights={"memory": 1, "efficiency": 0})

        response = client.post("/api/scoring/set-active", json={"game_type": "memory_match", "version_name": "v1"})
        assert response.status_code == 200
        assert response.json()["is_active"] is True

        versions = client.get("/api/scoring/versions/memory_match").json()
        assert [(version["version_name"], version["is_active"]) for version in versions] == [
            ("v2", False),
            ("v1", True),
        ]

    def test_set_active_unknown_version(self, client):
        response = client.post("/api/scoring/set-active", json={"game_type": "memory_match", "version_name": "v3"})
        assert response.status_code == 404

    def test_compare(self, client):
        v1 = save_memory_version(client)
        v2 = save_memory_version(client, weights={"memory": 0.8, "efficiency": 0.2})

        response = client.post(
            "/api/scoring/compare",
            json={
                "game_type": "memory_match",
                "version_ids": [v1["id"], v2["id"]],
                "test_data": {"completion": 75, "efficiency": 50},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert [entry["version_name"] for entry in data["comparisons"]] == ["v1", "v2"]
        assert data["differences"][0]["score_delta"] == 3.0

    def test_compare_needs_two_versions(self, client):
        v1 = save_memory_version(client)
        response = client.post("/api/scoring/compare", json={"game_type": "memory_match", "version_ids": [v1["id"]]})
        assert response.status_code == 400

    def test_variables(self, client):
        response = client.get("/api/scoring/variables/reaction_time")
        assert response.status_code == 200
        assert "avg_reaction_ms" in response.json()["variables"]

    def test_variables_unknown_game(self, client):
        response = client.get("/api/scoring/variables/chess")
        assert response.status_code == 404
        assert response.json()["error"] == "UNKNOWN_GAME_TYPE"


class TestGameRoutes:
    def test_submit_and_results(self, client):
        save_memory_version(client)

        response = client.post(
            "/api/games/submit",
            json={"game_type": "memory_match", "user_id": "user-1", "raw_data": MEMORY_PAYLOAD},
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["version_used"] == "v1"
        assert data["scores"]["final_score"] == 69.0

        results = client.get("/api/games/results/memory_match", params={"userId": "user-1"}).json()
        assert [result["session_id"] for result in results] == [data["session_id"]]
        assert client.get("/api/games/results/memory_match", params={"userId": "someone-else"}).json() == []

    def test_submit_without_active_version(self, client):
        response = client.post(
            "/api/games/submit",
            json={"game_type": "memory_match", "user_id": "user-1", "raw_data": MEMORY_PAYLOAD},
        )
        assert response.status_code == 404

    def test_submit_missing_telemetry(self, client):
        save_memory_version(client)
        response = client.post(
            "/api/games/submit",
            json={"game_type": "memory_match", "user_id": "user-1", "raw_data": {"pairs_total": 8}},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_TELEMETRY_FIELD"

    def test_submit_formula_failure(self, client):
        save_memory_version(client, formulas={"memory": "completion / 0"}, weights={"memory": 1})
        response = client.post(
            "/api/games/submit",
            json={"game_type": "memory_match", "user_id": "user-1", "raw_data": MEMORY_PAYLOAD},
        )
        assert response.status_code == 422
        assert response.json()["details"] == {
            "competency": "memory",
            "kind": "DIVISION_BY_ZERO",
            "reason": "Division by zero",
        }


class TestOperationalRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["checks"]["database"]["status"] == "connected"

    def test_metrics(self, client):
        client.post("/api/scoring/validate-formula", json={"formula": "1 + 1"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "neurazor_http_requests_total" in response.text
