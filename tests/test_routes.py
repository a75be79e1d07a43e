"""
Tests for the HTTP API with the store and services mocked out.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from fitness_tracker.schedule import WeekKey
from fitness_tracker.server.main import app
from fitness_tracker.workout_generator import GenerationResult, GenerationStatus

client = TestClient(app)

PROFILE_BODY = {
    "user_id": "user-1",
    "name": "Ana",
    "weight": 70,
    "height": 175,
    "age": 30,
    "goal": "maintain",
    "level": "beginner",
    "frequency": 3,
    "location": "gym",
}


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Fitness Tracker API"


def test_goals(make_profile):
    with patch("fitness_tracker.server.routes.profile.repo") as mock_repo:
        mock_repo.get_profile = AsyncMock(return_value=make_profile())
        response = client.get("/api/v1/goals", params={"user_id": "user-1"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "calorie_goal": 1979, "protein_goal": 126}


def test_goals_without_profile():
    with patch("fitness_tracker.server.routes.profile.repo") as mock_repo:
        mock_repo.get_profile = AsyncMock(return_value=None)
        response = client.get("/api/v1/goals", params={"user_id": "ghost"})

    assert response.status_code == 404


def test_put_profile_regenerates_plan():
    result = GenerationResult(GenerationStatus.CREATED, WeekKey(2024, 1), [1, 3, 5])
    with (
        patch("fitness_tracker.server.routes.profile.repo") as mock_repo,
        patch(
            "fitness_tracker.server.routes.profile.generate_weekly_workout",
            new=AsyncMock(return_value=result),
        ) as mock_generate,
    ):
        mock_repo.upsert_profile = AsyncMock()
        response = client.put("/api/v1/profile", json=PROFILE_BODY)

    assert response.status_code == 200
    body = response.json()
    assert body["profile"]["timezone"] == "UTC"
    assert body["plan"]["status"] == "created"
    mock_repo.upsert_profile.assert_awaited_once()
    assert mock_generate.await_args.kwargs["regenerate"] is True


def test_put_profile_rejects_invalid_weight():
    with patch("fitness_tracker.server.routes.profile.repo") as mock_repo:
        mock_repo.upsert_profile = AsyncMock()
        response = client.put("/api/v1/profile", json={**PROFILE_BODY, "weight": -1})

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["weight"]
    mock_repo.upsert_profile.assert_not_awaited()


def test_put_profile_rejects_unknown_timezone():
    with patch("fitness_tracker.server.routes.profile.repo") as mock_repo:
        mock_repo.upsert_profile = AsyncMock()
        response = client.put("/api/v1/profile", json={**PROFILE_BODY, "timezone": "Mars/Base"})

    assert response.status_code == 422


def test_generate_reports_existing_plan():
    result = GenerationResult(GenerationStatus.ALREADY_EXISTS, WeekKey(2024, 1), [1, 3, 5])
    with patch("fitness_tracker.server.routes.workout.WorkoutService") as mock_service:
        mock_service.return_value.ensure_weekly_plan = AsyncMock(return_value=result)
        response = client.post("/api/v1/workout/generate", json={"user_id": "user-1"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "result": {
            "status": "already_exists",
            "iso_year": 2024,
            "week": 1,
            "days": [1, 3, 5],
            "reason": None,
        },
    }


def test_generate_failure_is_not_success():
    result = GenerationResult(GenerationStatus.FAILED, WeekKey(2024, 1), reason="db down")
    with patch("fitness_tracker.server.routes.workout.WorkoutService") as mock_service:
        mock_service.return_value.ensure_weekly_plan = AsyncMock(return_value=result)
        response = client.post("/api/v1/workout/generate", json={"user_id": "user-1"})

    assert response.json()["success"] is False
    assert response.json()["result"]["reason"] == "db down"


def test_exercise_progress_unknown_workout():
    with patch("fitness_tracker.server.routes.workout.WorkoutService") as mock_service:
        mock_service.return_value.mark_exercise_complete = AsyncMock(return_value=False)
        response = client.post(
            "/api/v1/workout/progress",
            json={"user_id": "user-1", "workout_id": 99, "exercise_id": "push-up"},
        )

    assert response.status_code == 404


def test_meals_disabled(monkeypatch):
    from fitness_tracker.server.routes import nutrition

    monkeypatch.setattr(nutrition.SETTINGS, "FF_MEAL_VISION", False)
    response = client.post(
        "/api/v1/meals", json={"user_id": "user-1", "image_url": "https://example.com/a.jpg"}
    )

    assert response.status_code == 503


def test_healthz_reports_database_down():
    with patch("fitness_tracker.server.main._database_ok", new=AsyncMock(return_value=False)):
        response = client.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert body["database"] == {"status": "down"}


def test_healthz_reports_vision_configuration(monkeypatch):
    from fitness_tracker.server import main

    monkeypatch.setattr(main.SETTINGS, "OPENAI_API_KEY", None)
    monkeypatch.setattr(main.SETTINGS, "FF_MEAL_VISION", True)
    with patch("fitness_tracker.server.main._database_ok", new=AsyncMock(return_value=True)):
        unconfigured = client.get("/healthz").json()
    monkeypatch.setattr(main.SETTINGS, "OPENAI_API_KEY", "sk-test")
    with patch("fitness_tracker.server.main._database_ok", new=AsyncMock(return_value=True)):
        configured = client.get("/healthz").json()

    assert unconfigured["vision"] == {"enabled": True, "configured": False}
    assert configured["vision"] == {"enabled": True, "configured": True}


def test_patch_profile_sends_only_given_fields(make_profile):
    result = GenerationResult(GenerationStatus.CREATED, WeekKey(2024, 1), [1, 3, 5])
    with (
        patch("fitness_tracker.server.routes.profile.repo") as mock_repo,
        patch(
            "fitness_tracker.server.routes.profile.generate_weekly_workout",
            new=AsyncMock(return_value=result),
        ),
    ):
        mock_repo.update_profile = AsyncMock(return_value=make_profile(name=None))
        response = client.patch("/api/v1/profile", json={"user_id": "user-1", "name": None})

    assert response.status_code == 200
    assert response.json()["profile"]["name"] is None
    mock_repo.update_profile.assert_awaited_once_with("user-1", {"name": None})
