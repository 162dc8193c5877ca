import pytest


@pytest.fixture
def task(make_list, add_task):
    li = make_list("Home")
    return add_task(li["id"], "Sweep", description="Kitchen floor", deadline="2025-01-20T12:00:00Z")


def assert_task_shape(task: dict):
    for key in [
        "id", "list_id", "title", "description", "completed", "deadline",
        "priority", "created_at", "updated_at", "completed_at",
    ]:
        assert key in task
    assert isinstance(task["id"], str)
    assert isinstance(task["completed"], bool)
    assert "owner_id" not in task


class TestTasksCRUD:
    def test_create_defaults(self, task):
        assert_task_shape(task)
        assert task["completed"] is False
        assert task["completed_at"] is None
        assert task["priority"] == "medium"

    def test_create_validation(self, client, make_list):
        li = make_list("Home")
        assert client.post(f"/api/v1/lists/{li['id']}/tasks", json={"title": ""}).status_code == 422
        assert client.post(f"/api/v1/lists/{li['id']}/tasks", json={"title": "x" * 201}).status_code == 422
        res = client.post(f"/api/v1/lists/{li['id']}/tasks", json={"title": "ok", "priority": "critical"})
        assert res.status_code == 422
        res = client.post(f"/api/v1/lists/{li['id']}/tasks", json={"title": "ok", "deadline": "not-a-date"})
        assert res.status_code == 422

    def test_get_and_not_found(self, client, task):
        res = client.get(f"/api/v1/tasks/{task['id']}")
        assert res.status_code == 200
        assert res.json() == task

        res = client.get("/api/v1/tasks/does-not-exist")
        assert res.status_code == 404
        assert res.json()["detail"] == {"resource": "task", "resource_id": "does-not-exist"}

    def test_partial_update(self, client, clock, task):
        clock.advance(minutes=1)
        res = client.put(f"/api/v1/tasks/{task['id']}", json={"title": "Mop", "priority": "urgent"})
        assert res.status_code == 200
        data = res.json()
        assert data["title"] == "Mop"
        assert data["priority"] == "urgent"
        assert data["description"] == "Kitchen floor"
        assert data["deadline"] == task["deadline"]
        assert data["updated_at"] != task["updated_at"]

    def test_null_deadline_clears_it(self, client, task):
        res = client.put(f"/api/v1/tasks/{task['id']}", json={"deadline": None})
        assert res.status_code == 200
        assert res.json()["deadline"] is None

    def test_delete(self, client, task):
        assert client.delete(f"/api/v1/tasks/{task['id']}").status_code == 204
        assert client.get(f"/api/v1/tasks/{task['id']}").status_code == 404
        assert client.delete(f"/api/v1/tasks/{task['id']}").status_code == 404

    def test_other_owner_cannot_touch(self, client, task):
        headers = {"X-Owner-Id": "intruder"}
        assert client.get(f"/api/v1/tasks/{task['id']}", headers=headers).status_code == 404
        assert client.delete(f"/api/v1/tasks/{task['id']}", headers=headers).status_code == 404
        assert client.get(f"/api/v1/tasks/{task['id']}").status_code == 200


class TestCompletionAndDeadline:
    def test_toggle_completion(self, client, clock, task):
        clock.advance(hours=2)
        res = client.patch(f"/api/v1/tasks/{task['id']}/completion", json={"completed": True})
        assert res.status_code == 200
        data = res.json()
        assert data["completed"] is True
        assert data["completed_at"] is not None

        res = client.patch(f"/api/v1/tasks/{task['id']}/completion", json={"completed": False})
        assert res.json()["completed"] is False
        assert res.json()["completed_at"] is None

    def test_completion_body_required(self, client, task):
        assert client.patch(f"/api/v1/tasks/{task['id']}/completion", json={}).status_code == 422

    def test_set_deadline(self, client, task):
        res = client.patch(f"/api/v1/tasks/{task['id']}/deadline", json={"deadline": "2025-03-01"})
        assert res.status_code == 200
        assert res.json()["deadline"].startswith("2025-03-01T00:00:00")

        assert client.patch("/api/v1/tasks/missing/deadline", json={"deadline": "2025-03-01"}).status_code == 404


class TestTaskInsight:
    def test_insight(self, client, task):
        # clock is 2025-01-15T10:00Z, deadline 2025-01-20T12:00Z
        res = client.get(f"/api/v1/tasks/{task['id']}/statistics")
        assert res.status_code == 200
        data = res.json()
        assert data["task_id"] == task["id"]
        assert data["title"] == "Sweep"
        assert data["is_overdue"] is False
        assert data["is_urgent"] is False
        assert data["days_until_deadline"] == 6
        assert data["created_days_ago"] == 0
        assert data["has_deadline"] is True
        assert data["deadline"].startswith("2025-01-20T12:00:00")
        assert data["completion_time_hours"] is None

    def test_insight_overdue(self, client, clock, task):
        clock.advance(days=6)
        data = client.get(f"/api/v1/tasks/{task['id']}/statistics").json()
        assert data["is_overdue"] is True
        assert data["days_until_deadline"] == 0
        assert data["created_days_ago"] == 6

    def test_insight_completion_time(self, client, clock, task):
        clock.advance(hours=26)
        client.patch(f"/api/v1/tasks/{task['id']}/completion", json={"completed": True})
        data = client.get(f"/api/v1/tasks/{task['id']}/statistics").json()
        assert data["completed"] is True
        assert data["completion_time_hours"] == 26
