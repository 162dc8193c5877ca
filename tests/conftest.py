import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from todo_api.main import create_app
from todo_api.models import Priority, Task
from todo_api.repositories import InMemoryRepository
from todo_api.settings import get_settings

# Wednesday, mid-morning UTC
NOW = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock; every call returns the current value."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_task():
    counter = itertools.count(1)

    def _make(
        title="Task",
        *,
        completed=False,
        deadline=None,
        priority=Priority.MEDIUM,
        created_at=None,
        updated_at=None,
        completed_at=None,
        description=None,
        list_id="list-1",
        owner_id="owner-1",
    ) -> Task:
        created = created_at or NOW - timedelta(days=1)
        return Task(
            id=f"task-{next(counter)}",
            list_id=list_id,
            owner_id=owner_id,
            title=title,
            description=description,
            completed=completed,
            deadline=deadline,
            priority=priority,
            created_at=created,
            updated_at=updated_at or created,
            completed_at=completed_at if completed_at is not None else (NOW if completed else None),
        )

    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "memory")
    monkeypatch.delenv("ENABLE_BASIC_AUTH", raising=False)
    return get_settings()


@pytest.fixture
def repository(clock):
    return InMemoryRepository(clock=clock)


@pytest.fixture
def client(settings, repository, clock):
    app = create_app(settings, repository=repository, clock=clock)
    return TestClient(app)


@pytest.fixture
def make_list(client):
    def _make(name="Inbox", **extra):
        res = client.post("/api/v1/lists/", json={"name": name, **extra})
        assert res.status_code == 201, res.text
        return res.json()

    return _make


@pytest.fixture
def add_task(client):
    def _add(list_id, title="Task", **extra):
        res = client.post(f"/api/v1/lists/{list_id}/tasks", json={"title": title, **extra})
        assert res.status_code == 201, res.text
        return res.json()

    return _add
