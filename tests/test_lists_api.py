import os
from datetime import datetime

from fastapi.testclient import TestClient

from todo_api import main
from todo_api.exceptions import StorageError
from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository
from todo_api.settings import get_settings


def assert_list_shape(item: dict):
    for key in ["id", "name", "description", "created_at", "updated_at", "task_count"]:
        assert key in item
    assert isinstance(item["id"], str)
    datetime.fromisoformat(item["created_at"].replace("Z", "+00:00"))
    datetime.fromisoformat(item["updated_at"].replace("Z", "+00:00"))


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] == "memory"

    def test_ready(self, client):
        res = client.get("/health/ready")
        assert res.status_code == 200
        data = res.json()
        assert data["ready"] is True
        assert data["backend"] == "memory"
        assert data["timestamp"] == "2025-01-15T10:00:00+00:00"

    def test_not_ready_when_store_fails(self, client, repository, monkeypatch):
        def broken(owner_id):
            raise StorageError("disk I/O error")

        monkeypatch.setattr(repository, "list_lists", broken)
        res = client.get("/health/ready")
        assert res.status_code == 503
        data = res.json()
        assert data["ready"] is False
        assert data["error"] == "Storage error: disk I/O error"
        assert "timestamp" in data

    def test_live(self, client):
        res = client.get("/health/live")
        assert res.status_code == 200
        data = res.json()
        assert data["alive"] is True
        assert data["pid"] == os.getpid()
        assert isinstance(data["uptime"], int) and data["uptime"] >= 0
        assert data["timestamp"] == "2025-01-15T10:00:00+00:00"

    def test_module_app_is_built_on_first_access(self, monkeypatch, tmp_path):
        db_path = tmp_path / "lazy" / "todo.db"
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_DB_PATH", str(db_path))
        monkeypatch.setattr(main, "_app", None)

        assert not db_path.exists()
        app = main.app
        assert db_path.exists()
        assert app.state.settings.persistence_backend == "sqlite"
        assert main.app is app


class TestListsCRUD:
    def test_create_and_get(self, client, make_list):
        created = make_list("  Groceries  ", description="Weekly shopping")
        assert_list_shape(created)
        assert created["name"] == "Groceries"
        assert created["task_count"] == 0

        res = client.get(f"/api/v1/lists/{created['id']}")
        assert res.status_code == 200
        assert res.json()["name"] == "Groceries"

    def test_create_validation(self, client):
        res = client.post("/api/v1/lists/", json={"name": "   "})
        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "ValidationError"
        assert body["message"] == "Request validation failed"

        res = client.post("/api/v1/lists/", json={"name": "x" * 101})
        assert res.status_code == 422

    def test_list_lists_with_counts(self, client, clock, make_list, add_task):
        home = make_list("Home")
        clock.advance(minutes=1)
        work = make_list("Work")
        add_task(work["id"], "Email")
        add_task(work["id"], "Report")

        res = client.get("/api/v1/lists/")
        assert res.status_code == 200
        data = res.json()
        assert [li["name"] for li in data] == ["Home", "Work"]
        assert [li["task_count"] for li in data] == [0, 2]
        assert data[0]["id"] == home["id"]

    def test_update_partial(self, client, clock, make_list):
        created = make_list("Home", description="Chores")
        clock.advance(minutes=1)
        res = client.put(f"/api/v1/lists/{created['id']}", json={"name": "House"})
        assert res.status_code == 200
        data = res.json()
        assert data["name"] == "House"
        assert data["description"] == "Chores"
        assert data["updated_at"] != created["updated_at"]

    def test_update_requires_a_field(self, client, make_list):
        created = make_list("Home")
        res = client.put(f"/api/v1/lists/{created['id']}", json={})
        assert res.status_code == 422

    def test_delete_cascades(self, client, make_list, add_task):
        created = make_list("Home")
        task = add_task(created["id"], "Sweep")

        res = client.delete(f"/api/v1/lists/{created['id']}")
        assert res.status_code == 204

        assert client.get(f"/api/v1/lists/{created['id']}").status_code == 404
        assert client.get(f"/api/v1/tasks/{task['id']}").status_code == 404

    def test_not_found_shape(self, client):
        res = client.get("/api/v1/lists/missing")
        assert res.status_code == 404
        body = res.json()
        assert body["error"] == "NOT_FOUND"
        assert body["message"] == "List with ID 'missing' not found"
        assert body["detail"] == {"resource": "list", "resource_id": "missing"}

        assert client.delete("/api/v1/lists/missing").status_code == 404
        assert client.put("/api/v1/lists/missing", json={"name": "x"}).status_code == 404


class TestListContents:
    def test_create_task_in_list_and_read_back(self, client, make_list, add_task):
        li = make_list("Home")
        task = add_task(li["id"], "Sweep", priority="high", deadline="2099-12-25")
        assert task["list_id"] == li["id"]
        assert task["priority"] == "high"
        assert task["deadline"].startswith("2099-12-25T00:00:00")

        res = client.get(f"/api/v1/lists/{li['id']}/tasks")
        assert res.status_code == 200
        data = res.json()
        assert data["task_count"] == 1
        assert [t["id"] for t in data["tasks"]] == [task["id"]]

    def test_create_task_in_missing_list(self, client):
        res = client.post("/api/v1/lists/missing/tasks", json={"title": "Sweep"})
        assert res.status_code == 404

    def test_create_task_in_another_owners_list(self, client, make_list):
        li = make_list("Home")
        res = client.post(f"/api/v1/lists/{li['id']}/tasks", json={"title": "Sweep"}, headers={"X-Owner-Id": "bob"})
        assert res.status_code == 404
        assert client.get(f"/api/v1/lists/{li['id']}").json()["task_count"] == 0

    def test_list_statistics(self, client, make_list, add_task):
        li = make_list("Home")
        ids = [add_task(li["id"], f"t{i}")["id"] for i in range(5)]
        for task_id in ids[:2]:
            client.patch(f"/api/v1/tasks/{task_id}/completion", json={"completed": True})

        res = client.get(f"/api/v1/lists/{li['id']}/statistics")
        assert res.status_code == 200
        stats = res.json()
        assert stats["list_id"] == li["id"]
        assert stats["list_name"] == "Home"
        assert stats["total"] == 5
        assert stats["completed"] == 2
        assert stats["pending"] == 3
        assert stats["completion_rate"] == 40.0


class TestOwnership:
    def test_lists_are_scoped_by_owner_header(self, client):
        res = client.post("/api/v1/lists/", json={"name": "Mine"}, headers={"X-Owner-Id": "alice"})
        list_id = res.json()["id"]

        assert client.get(f"/api/v1/lists/{list_id}", headers={"X-Owner-Id": "alice"}).status_code == 200
        assert client.get(f"/api/v1/lists/{list_id}", headers={"X-Owner-Id": "bob"}).status_code == 404
        assert client.get("/api/v1/lists/", headers={"X-Owner-Id": "bob"}).json() == []
        # no header falls back to DEFAULT_OWNER_ID
        assert client.get("/api/v1/lists/").json() == []

    def test_basic_auth_owner(self, monkeypatch):
        monkeypatch.setenv("ENABLE_BASIC_AUTH", "true")
        monkeypatch.setenv("BASIC_AUTH_USERNAME", "alice")
        monkeypatch.setenv("BASIC_AUTH_PASSWORD", "secret")
        client = TestClient(create_app(get_settings(), repository=InMemoryRepository()))

        res = client.get("/api/v1/lists/")
        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"] == "Basic"

        assert client.get("/api/v1/lists/", auth=("alice", "wrong")).status_code == 401

        res = client.post("/api/v1/lists/", json={"name": "Mine"}, auth=("alice", "secret"))
        assert res.status_code == 201
        assert len(client.get("/api/v1/lists/", auth=("alice", "secret")).json()) == 1
