"""Tests for the JSON API."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from progress_fit.web import create_app


@pytest.fixture
def client(temp_db_path):
    with TestClient(create_app(temp_db_path)) as test_client:
        yield test_client


@pytest.fixture
def workout(client):
    """A workout holding Bench Press with two sets."""
    workout = client.post("/workouts", json={"name": "Push Day"}).json()
    exercise = client.post(
        f"/workouts/{workout['id']}/exercises", json={"name": "Bench Press", "rest_time": 90}
    ).json()
    for weight, reps in ((10, 5), (20, 3)):
        client.post(
            f"/workouts/{workout['id']}/exercises/{exercise['id']}/sets",
            json={"weight": weight, "reps": reps},
        )
    return client.get(f"/workouts/{workout['id']}").json()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestWorkoutRoutes:
    """Tests for /workouts."""

    def test_workout_totals(self, workout):
        assert workout["total_weight"] == 110
        assert workout["total_sets"] == 2
        bench = workout["exercises"][0]
        assert [s["order"] for s in bench["sets"]] == [0, 1]
        assert bench["total_volume"] == 110

    def test_lifecycle(self, client, workout):
        started = client.post(f"/workouts/{workout['id']}/start").json()
        assert started["accepted"] is True
        assert started["current"] == "in_progress"

        again = client.post(f"/workouts/{workout['id']}/start").json()
        assert again["accepted"] is False
        assert again["workout"]["status"] == "in_progress"

        done = client.post(f"/workouts/{workout['id']}/complete").json()
        assert done["workout"]["status"] == "completed"
        assert done["workout"]["duration"] is not None

    def test_set_flow(self, client, workout):
        workout_id = workout["id"]
        first = workout["exercises"][0]["sets"][0]

        updated = client.patch(f"/workouts/{workout_id}/sets/{first['id']}", json={"reps": 6})
        assert updated.json()["reps"] == 6
        assert updated.json()["weight"] == 10

        completed = client.post(f"/workouts/{workout_id}/sets/{first['id']}/complete").json()
        assert completed["is_completed"] is True
        assert 0 < completed["remaining_rest_time"] <= 90

        reset = client.post(f"/workouts/{workout_id}/sets/{first['id']}/reset").json()
        assert reset["is_completed"] is False

        response = client.delete(f"/workouts/{workout_id}/sets/{first['id']}")
        assert response.status_code == 204
        remaining = client.get(f"/workouts/{workout_id}").json()["exercises"][0]["sets"]
        assert [(s["weight"], s["order"]) for s in remaining] == [(20, 0)]

    def test_template_and_list(self, client, workout):
        response = client.post(f"/workouts/{workout['id']}/template", json={"name": "Base"})
        assert response.status_code == 201
        assert response.json()["template_id"] == workout["id"]

        names = [w["name"] for w in client.get("/workouts", params={"sort": "a_to_z"}).json()]
        assert names == ["Base", "Push Day"]

        found = client.get("/workouts", params={"search": "push"}).json()
        assert [w["id"] for w in found] == [workout["id"]]

    def test_remove_exercise_and_delete(self, client, workout):
        exercise_id = workout["exercises"][0]["id"]

        response = client.delete(f"/workouts/{workout['id']}/exercises/{exercise_id}")
        assert response.status_code == 204
        assert client.get(f"/workouts/{workout['id']}").json()["exercises"] == []

        assert client.delete(f"/workouts/{workout['id']}").status_code == 204
        assert client.get(f"/workouts/{workout['id']}").status_code == 404

    def test_move_exercise(self, client, workout):
        client.post(f"/workouts/{workout['id']}/exercises", json={"name": "Dips"})

        response = client.post(
            f"/workouts/{workout['id']}/exercises/move", json={"from_index": 1, "to_index": 0}
        )

        assert response.status_code == 200
        exercises = response.json()["exercises"]
        assert [(ex["name"], ex["order"]) for ex in exercises] == [("Dips", 0), ("Bench Press", 1)]

        bad = client.post(
            f"/workouts/{workout['id']}/exercises/move", json={"from_index": 0, "to_index": 9}
        )
        assert bad.status_code == 422

    def test_unknown_workout_is_404(self, client):
        response = client.get("/workouts/nope")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_negative_values_are_422(self, client, workout):
        set_id = workout["exercises"][0]["sets"][0]["id"]

        response = client.patch(f"/workouts/{workout['id']}/sets/{set_id}", json={"weight": -1})

        assert response.status_code == 422
        assert "weight" in response.json()["detail"]

    def test_invalid_sort_is_rejected(self, client):
        assert client.get("/workouts", params={"sort": "sideways"}).status_code == 422


class TestNutritionRoutes:
    """Tests for /nutrition."""

    def log(self, client, **overrides):
        body = {
            "food_name": "Chicken Breast",
            "calories": 165,
            "protein": 31,
            "carbohydrates": 0,
            "fat": 3.6,
            "quantity": 2,
            "meal_type": "lunch",
            "extended_nutrients": {"zinc": 1},
        }
        body.update(overrides)
        response = client.post("/nutrition/entries", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    def test_log_and_fetch(self, client):
        entry = self.log(client)

        assert entry["total_calories"] == 330
        assert entry["log_method"] == "manual"
        fetched = client.get(f"/nutrition/entries/{entry['id']}").json()
        assert fetched["extended_nutrients"] == {"zinc": 1.0}

    def test_day_summary(self, client):
        entry = self.log(client)
        # No profile exists, so days are bucketed in the system zone
        day = datetime.fromisoformat(entry["logged_at"]).astimezone().date()

        summary = client.get(f"/nutrition/days/{day.isoformat()}").json()

        assert summary["entry_count"] == 1
        assert summary["totals"]["protein"] == 62
        assert summary["meals"]["lunch"][0]["id"] == entry["id"]
        protein = next(p for p in summary["primary"] if p["metric"] == "protein")
        assert protein["remaining"] == 88

    def test_day_totals_empty(self, client):
        totals = client.get("/nutrition/days/2001-01-01/totals").json()

        assert totals["calories"] == 0
        assert len(totals) > 40

    def test_lookup_entry(self, client):
        response = client.post(
            "/nutrition/entries/lookup",
            json={
                "name": "Protein Bar",
                "calories": 210,
                "barcode": "5000",
                "log_method": "barcode",
                "meal_type": "snack",
            },
        )

        assert response.status_code == 201
        assert response.json()["is_verified"] is True
        assert response.json()["barcode"] == "5000"

    def test_ai_detection(self, client):
        response = client.post(
            "/nutrition/entries/detections",
            json={"name": "Pasta", "calories": 220, "confidence": 0.6, "meal_type": "dinner"},
        )

        assert response.status_code == 201
        assert response.json()["log_method"] == "ai_camera"
        assert response.json()["needs_verification"] is True

    def test_ai_camera_lookup_without_confidence_is_422(self, client):
        response = client.post(
            "/nutrition/entries/lookup",
            json={"name": "Pasta", "calories": 220, "log_method": "ai_camera"},
        )

        assert response.status_code == 422

    def test_edit_favorite_and_delete(self, client):
        entry = self.log(client)
        entry_id = entry["id"]

        again = client.post(f"/nutrition/entries/{entry_id}/duplicate", json={"quantity": 1})
        assert again.status_code == 201
        assert again.json()["total_calories"] == 165

        updated = client.patch(f"/nutrition/entries/{entry_id}/quantity", json={"quantity": 3})
        assert updated.json()["quantity"] == 3

        client.put(f"/nutrition/entries/{entry_id}/favorite", json={"favorite": True})
        favorites = client.get("/nutrition/favorites").json()
        assert [f["id"] for f in favorites] == [entry_id]

        assert client.post(f"/nutrition/entries/{entry_id}/verify").json()["is_verified"]

        assert client.delete(f"/nutrition/entries/{entry_id}").status_code == 204
        assert client.get(f"/nutrition/entries/{entry_id}").status_code == 404

    def test_core_metric_in_extended_is_422(self, client):
        response = client.post(
            "/nutrition/entries",
            json={
                "food_name": "Shake",
                "calories": 100,
                "protein": 20,
                "carbohydrates": 2,
                "fat": 1,
                "extended_nutrients": {"protein": 5},
            },
        )

        assert response.status_code == 422

    def test_unknown_entry_is_404(self, client):
        assert client.post("/nutrition/entries/nope/verify").status_code == 404
