"""
End-to-end tests for the HTTP API and the /ws push channel.

Each test builds its own app on a temporary SQLite database, so the
connection registry and broadcaster are never shared between tests.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from backend.main import create_app
from src.core.models import MindfulnessActivity
from src.dashboard.insights import CATALOG, RandomInsightSelector

USER = 1


@pytest.fixture
def app(config, db):
    return create_app(
        config=config,
        database=db,
        insight_selector=RandomInsightSelector(rng=random.Random(0)),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def iso(moment: datetime) -> str:
    return moment.isoformat()


def create_task(client, **fields):
    body = {"title": "Task", "userId": USER, **fields}
    response = client.post("/api/tasks", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestTasks:

    def test_ai_task_is_scored_on_create(self, client):
        due = datetime.now(timezone.utc) + timedelta(days=2, hours=1)
        task = create_task(
            client,
            title="Plan quarter",
            description="x" * 120,
            priority="ai",
            isMindful=True,
            dueDate=iso(due),
        )
        assert task["aiPriority"] == 83
        assert task["priority"] == "ai"
        assert task["isMindful"] is True
        assert task["completed"] is False

    def test_non_ai_task_has_no_score(self, client):
        task = create_task(client, priority="high")
        assert task["aiPriority"] is None

    def test_client_cannot_set_score(self, client):
        task = create_task(client, priority="low", aiPriority=99)
        assert task["aiPriority"] is None

    def test_defaults(self, client):
        task = create_task(client)
        assert task["priority"] == "medium"
        assert task["category"] is None

    def test_get_and_404(self, client):
        task = create_task(client)
        assert client.get(f"/api/tasks/{task['id']}").json()["data"]["id"] == task["id"]

        response = client.get("/api/tasks/9999")
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    def test_list_requires_user_id(self, client):
        response = client.get("/api/tasks")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid user ID"}

        response = client.get("/api/tasks", params={"userId": "abc"})
        assert response.status_code == 400

    def test_list_rejects_unknown_filter(self, client):
        response = client.get("/api/tasks", params={"userId": USER, "filter": "someday"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid filter: someday"}

    def test_list_filters(self, client):
        now = datetime.now(timezone.utc)
        create_task(client, title="later", dueDate=iso(now + timedelta(days=3)))
        create_task(client, title="last week", dueDate=iso(now - timedelta(days=7)))
        create_task(client, title="urgent", priority="high")
        create_task(client, title="done", completed=True)
        create_task(client, title="someone else", userId=2)

        def titles(task_filter):
            response = client.get("/api/tasks", params={"userId": USER, "filter": task_filter})
            assert response.status_code == 200
            return {t["title"] for t in response.json()["data"]}

        assert titles("all") == {"later", "last week", "urgent", "done"}
        assert titles("today") == {"later"}
        assert titles("important") == {"urgent"}
        assert titles("completed") == {"done"}

    def test_scored_tasks_listed_first(self, client):
        create_task(client, title="plain")
        create_task(client, title="low score", priority="ai")
        create_task(client, title="high score", priority="ai", isMindful=True)

        data = client.get("/api/tasks", params={"userId": USER}).json()["data"]
        assert [t["title"] for t in data] == ["high score", "low score", "plain"]

    def test_pagination(self, client):
        for i in range(5):
            create_task(client, title=f"t{i}")
        page = client.get("/api/tasks", params={"userId": USER, "limit": 2, "offset": 1}).json()["data"]
        assert len(page) == 2

    def test_validation_errors(self, client):
        response = client.post("/api/tasks", json={"title": "", "priority": "urgent"})
        assert response.status_code == 400

        fields = {error["field"] for error in response.json()["error"]}
        assert {"title", "priority", "userId"} <= fields
        assert all("message" in error for error in response.json()["error"])

    def test_unknown_category(self, client):
        response = client.post("/api/tasks", json={"title": "t", "userId": USER, "categoryId": 42})
        assert response.status_code == 404
        assert response.json() == {"error": "Category not found"}

    def test_category_of_another_user(self, client):
        category = client.post(
            "/api/categories", json={"name": "Theirs", "color": "#000", "userId": 2}
        ).json()["data"]
        response = client.post(
            "/api/tasks", json={"title": "t", "userId": USER, "categoryId": category["id"]}
        )
        assert response.status_code == 404

    def test_update_into_and_out_of_ai(self, client):
        task = create_task(client, description="y" * 60)

        response = client.put(f"/api/tasks/{task['id']}", json={"priority": "ai"})
        assert response.status_code == 200
        assert response.json()["data"]["aiPriority"] == 52  # 50 + 2 (60 chars)

        # Staying in the tier keeps the stored score
        updated = client.put(f"/api/tasks/{task['id']}", json={"isMindful": True}).json()["data"]
        assert updated["aiPriority"] == 52
        assert updated["isMindful"] is True

        left = client.put(f"/api/tasks/{task['id']}", json={"priority": "low"}).json()["data"]
        assert left["priority"] == "low"
        assert left["aiPriority"] is None

    def test_update_is_partial(self, client):
        task = create_task(client, title="Keep me", description="original")
        updated = client.put(f"/api/tasks/{task['id']}", json={"completed": True}).json()["data"]
        assert updated["title"] == "Keep me"
        assert updated["description"] == "original"
        assert updated["completed"] is True

    def test_update_rejects_null_title(self, client):
        task = create_task(client)
        response = client.put(f"/api/tasks/{task['id']}", json={"title": None})
        assert response.status_code == 400

    def test_update_missing_task(self, client):
        response = client.put("/api/tasks/9999", json={"completed": True})
        assert response.status_code == 404

    def test_delete(self, client):
        task = create_task(client)
        response = client.delete(f"/api/tasks/{task['id']}")
        assert response.status_code == 200
        assert response.json() == {"data": {"success": True}}

        assert client.get(f"/api/tasks/{task['id']}").status_code == 404
        assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


class TestCategories:

    def test_create_and_list(self, client):
        created = client.post(
            "/api/categories", json={"name": "Work", "color": "#4F46E5", "userId": USER}
        )
        assert created.status_code == 201
        category = created.json()["data"]
        assert category["name"] == "Work"
        assert category["userId"] == USER

        listed = client.get("/api/categories", params={"userId": USER}).json()["data"]
        assert [c["id"] for c in listed] == [category["id"]]
        assert client.get("/api/categories", params={"userId": 2}).json()["data"] == []

    def test_task_embeds_category(self, client):
        category = client.post(
            "/api/categories", json={"name": "Health", "color": "#10B981", "userId": USER}
        ).json()["data"]
        task = create_task(client, categoryId=category["id"])
        assert task["category"]["name"] == "Health"
        assert task["categoryId"] == category["id"]


class TestMindfulness:

    def test_tips(self, client, storage):
        assert client.get("/api/mindfulness/tips").json() == {"data": None}

        storage.create_tip("Breathe in for four counts.", "daily")
        tip = client.get("/api/mindfulness/tips", params={"type": "daily"}).json()["data"]
        assert tip["content"] == "Breathe in for four counts."
        assert client.get("/api/mindfulness/tips", params={"type": "general"}).json()["data"] is None

    def test_activities(self, client, storage):
        storage.create_activity(MindfulnessActivity(
            type="breathing", title="Box breathing", description="4-4-4-4", duration=240,
        ))
        data = client.get("/api/mindfulness/activities").json()["data"]
        assert data[0]["title"] == "Box breathing"
        assert data[0]["duration"] == 240

    def test_sessions_and_streak(self, client):
        response = client.post("/api/mindfulness/sessions", json={"userId": USER, "duration": 300})
        assert response.status_code == 201
        assert response.json()["data"]["duration"] == 300

        streak = client.get("/api/mindfulness/streak", params={"userId": USER}).json()["data"]
        assert streak["days"] == 1
        assert streak["message"]

        stats = client.get("/api/dashboard/stats", params={"userId": USER}).json()["data"]
        assert stats["mindfulnessMinutes"] == 5

    def test_partial_minutes_round_down(self, client):
        client.post("/api/mindfulness/sessions", json={"userId": USER, "duration": 90})
        stats = client.get("/api/dashboard/stats", params={"userId": USER}).json()["data"]
        assert stats["mindfulnessMinutes"] == 1

    def test_session_validation(self, client):
        response = client.post("/api/mindfulness/sessions", json={"userId": USER, "duration": 0})
        assert response.status_code == 400
        assert response.json()["error"][0]["field"] == "duration"

    def test_session_unknown_activity(self, client):
        response = client.post(
            "/api/mindfulness/sessions", json={"userId": USER, "duration": 60, "activityId": 77}
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Activity not found"}


class TestDashboard:

    def test_stats(self, client):
        create_task(client)
        create_task(client, completed=True)
        stats = client.get("/api/dashboard/stats", params={"userId": USER}).json()["data"]
        assert stats == {
            "activeTasks": 1,
            "completedToday": 1,
            "focusScore": 0,
            "mindfulnessMinutes": 0,
        }

    def test_category_progress(self, client):
        category = client.post(
            "/api/categories", json={"name": "Work", "color": "#fff", "userId": USER}
        ).json()["data"]
        create_task(client, categoryId=category["id"], completed=True)
        create_task(client, categoryId=category["id"])
        create_task(client, categoryId=category["id"])

        progress = client.get(
            "/api/dashboard/category-progress", params={"userId": USER}
        ).json()["data"]
        assert progress[0]["category"]["name"] == "Work"
        assert progress[0]["completedTasks"] == 1
        assert progress[0]["totalTasks"] == 3
        assert progress[0]["percentage"] == 33

    def test_productivity(self, client):
        response = client.post("/api/dashboard/productivity", json={
            "userId": USER,
            "focusScore": 72,
            "hourlyData": [{"hour": 9, "score": 80}, {"hour": 14, "score": 65}],
        })
        assert response.status_code == 201

        records = client.get(
            "/api/dashboard/productivity", params={"userId": USER, "timeframe": "week"}
        ).json()["data"]
        assert len(records) == 1
        assert records[0]["focusScore"] == 72
        assert records[0]["hourlyData"][1] == {"hour": 14, "score": 65}

        stats = client.get("/api/dashboard/stats", params={"userId": USER}).json()["data"]
        assert stats["focusScore"] == 72

    def test_productivity_unknown_timeframe(self, client):
        response = client.get(
            "/api/dashboard/productivity", params={"userId": USER, "timeframe": "year"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid timeframe: year"}


class TestInsightAndHealth:

    def test_insight(self, client):
        data = client.get("/api/ai/insight", params={"userId": USER}).json()["data"]
        assert (data["message"], data["type"]) in [
            (entry.insight.message, entry.insight.type) for entry in CATALOG
        ]

    def test_health(self, client):
        data = client.get("/health").json()["data"]
        assert data["status"] == "healthy"
        assert data["connections"] == 0

    def test_root(self, client):
        assert client.get("/").json()["data"]["endpoints"]["websocket"] == "/ws"


class TestWebSocket:

    def authenticate(self, websocket, user_id=USER):
        websocket.send_json({"type": "AUTH", "userId": user_id, "timestamp": 1700000000000})
        reply = websocket.receive_json()
        assert reply["type"] == "AUTH_SUCCESS"
        assert "timestamp" in reply

    def test_auth_handshake(self, client, app):
        with client.websocket_connect("/ws") as websocket:
            self.authenticate(websocket)
            assert app.state.registry.count() == 1
            assert client.get("/health").json()["data"]["connections"] == 1

    def test_garbage_frames_are_ignored(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("not json")
            websocket.send_json({"type": "PING"})
            websocket.send_json({"type": "AUTH"})
            self.authenticate(websocket)

    def test_auth_rejects_non_positive_user_id(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "AUTH", "userId": 0})
            self.authenticate(websocket)

            # A second AUTH_SUCCESS would arrive here if user 0 had been accepted
            create_task(client)
            assert websocket.receive_json()["type"] == "TASK_CREATED"

    def test_task_events_reach_owner(self, client):
        with client.websocket_connect("/ws") as websocket:
            self.authenticate(websocket)

            due = datetime.now(timezone.utc) + timedelta(days=2, hours=1)
            task = create_task(
                client, priority="ai", description="z" * 120, isMindful=True, dueDate=iso(due)
            )
            event = websocket.receive_json()
            assert event["type"] == "TASK_CREATED"
            assert event["payload"]["id"] == task["id"]
            assert event["payload"]["aiPriority"] == 83

            client.put(f"/api/tasks/{task['id']}", json={"completed": True})
            event = websocket.receive_json()
            assert event["type"] == "TASK_UPDATED"
            assert event["payload"]["completed"] is True

            client.delete(f"/api/tasks/{task['id']}")
            event = websocket.receive_json()
            assert event == {
                "type": "TASK_DELETED",
                "payload": {"id": task["id"]},
                "timestamp": event["timestamp"],
            }

    def test_other_users_events_are_not_delivered(self, client):
        with client.websocket_connect("/ws") as websocket:
            self.authenticate(websocket)

            create_task(client, title="not yours", userId=2)
            client.post("/api/mindfulness/sessions", json={"userId": USER, "duration": 60})

            event = websocket.receive_json()
            assert event["type"] == "MINDFULNESS_COMPLETED"
            assert event["payload"]["duration"] == 60

