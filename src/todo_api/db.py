from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Generator, List, Optional

from .engine.dates import utc_now
from .exceptions import StorageError
from .models import Priority, Task, TaskList
from .repositories import (
    Clock,
    Repository,
    TaskScope,
    apply_completion,
    apply_list_update,
    apply_task_update,
    new_id,
)
from .schemas import ListCreate, ListUpdate, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Tables:
    lists: str = "lists"
    tasks: str = "tasks"


_T = _Tables()


def _dump_dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="microseconds") if value is not None else None


def _load_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value is not None else None


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Each call opens its own connection. Writes are serialized by a process
    lock and run inside BEGIN IMMEDIATE transactions, so concurrent requests
    cannot lose each other's updates.
    """

    def __init__(self, db_path: str, clock: Clock = utc_now, id_factory: Callable[[], str] = new_id) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._clock = clock
        self._id_factory = id_factory
        self._write_lock = threading.Lock()
        self._init_db()

    @contextmanager
    def _conn(self, write: bool = False) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=30.0, isolation_level=None)
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            if write:
                with self._write_lock:
                    conn.execute("BEGIN IMMEDIATE")
                    try:
                        yield conn
                    except BaseException:
                        conn.execute("ROLLBACK")
                        raise
                    conn.execute("COMMIT")
            else:
                yield conn
        except sqlite3.Error as exc:
            logger.error("sqlite failure on %s: %s", self._db_path, exc)
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn(write=True) as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_T.lists} (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_T.tasks} (
                    id TEXT PRIMARY KEY,
                    list_id TEXT NOT NULL REFERENCES {_T.lists}(id) ON DELETE CASCADE,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    deadline TEXT NULL,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    completed_at TEXT NULL
                )
                """
            )
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{_T.lists}_owner ON {_T.lists}(owner_id)")
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{_T.tasks}_owner ON {_T.tasks}(owner_id)")
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{_T.tasks}_list ON {_T.tasks}(list_id)")

    # ---- row mapping ----

    @staticmethod
    def _row_to_list(row: sqlite3.Row) -> TaskList:
        return TaskList(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            name=str(row["name"]),
            description=row["description"],
            created_at=_load_dt(row["created_at"]),  # type: ignore[arg-type]
            updated_at=_load_dt(row["updated_at"]),  # type: ignore[arg-type]
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            list_id=str(row["list_id"]),
            owner_id=str(row["owner_id"]),
            title=str(row["title"]),
            description=row["description"],
            completed=bool(row["completed"]),
            deadline=_load_dt(row["deadline"]),
            priority=Priority(row["priority"]),
            created_at=_load_dt(row["created_at"]),  # type: ignore[arg-type]
            updated_at=_load_dt(row["updated_at"]),  # type: ignore[arg-type]
            completed_at=_load_dt(row["completed_at"]),
        )

    def _fetch_list(self, conn: sqlite3.Connection, owner_id: str, list_id: str) -> Optional[TaskList]:
        row = conn.execute(
            f"SELECT * FROM {_T.lists} WHERE id = ? AND owner_id = ?", (list_id, owner_id)
        ).fetchone()
        return self._row_to_list(row) if row else None

    def _fetch_task(self, conn: sqlite3.Connection, owner_id: str, task_id: str) -> Optional[Task]:
        row = conn.execute(
            f"SELECT * FROM {_T.tasks} WHERE id = ? AND owner_id = ?", (task_id, owner_id)
        ).fetchone()
        return self._row_to_task(row) if row else None

    def _insert_task(self, conn: sqlite3.Connection, task: Task) -> None:
        conn.execute(
            f"""
            INSERT INTO {_T.tasks} (id, list_id, owner_id, title, description, completed,
                deadline, priority, created_at, updated_at, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.id,
                task.list_id,
                task.owner_id,
                task.title,
                task.description,
                1 if task.completed else 0,
                _dump_dt(task.deadline),
                task.priority.value,
                _dump_dt(task.created_at),
                _dump_dt(task.updated_at),
                _dump_dt(task.completed_at),
            ),
        )

    def _update_task(self, conn: sqlite3.Connection, task: Task) -> None:
        conn.execute(
            f"""
            UPDATE {_T.tasks}
            SET title = ?, description = ?, completed = ?, deadline = ?, priority = ?,
                updated_at = ?, completed_at = ?
            WHERE id = ?
            """,
            (
                task.title,
                task.description,
                1 if task.completed else 0,
                _dump_dt(task.deadline),
                task.priority.value,
                _dump_dt(task.updated_at),
                _dump_dt(task.completed_at),
                task.id,
            ),
        )

    # ---- lists ----

    def create_list(self, owner_id: str, data: ListCreate) -> TaskList:
        now = self._clock()
        entity = TaskList(
            id=self._id_factory(),
            owner_id=owner_id,
            name=data.name,
            description=data.description,
            created_at=now,
            updated_at=now,
        )
        with self._conn(write=True) as conn:
            conn.execute(
                f"""
                INSERT INTO {_T.lists} (id, owner_id, name, description, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (entity.id, owner_id, entity.name, entity.description, _dump_dt(now), _dump_dt(now)),
            )
        logger.debug("Created list id=%s owner=%s", entity.id, owner_id)
        return entity

    def get_list(self, owner_id: str, list_id: str) -> Optional[TaskList]:
        with self._conn() as conn:
            return self._fetch_list(conn, owner_id, list_id)

    def list_lists(self, owner_id: str) -> List[TaskList]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_T.lists} WHERE owner_id = ? ORDER BY created_at ASC, rowid ASC", (owner_id,)
            ).fetchall()
            return [self._row_to_list(r) for r in rows]

    def update_list(self, owner_id: str, list_id: str, data: ListUpdate) -> Optional[TaskList]:
        with self._conn(write=True) as conn:
            current = self._fetch_list(conn, owner_id, list_id)
            if current is None:
                return None
            updated = apply_list_update(current, data, self._clock())
            conn.execute(
                f"UPDATE {_T.lists} SET name = ?, description = ?, updated_at = ? WHERE id = ?",
                (updated.name, updated.description, _dump_dt(updated.updated_at), list_id),
            )
            return updated

    def delete_list(self, owner_id: str, list_id: str) -> bool:
        with self._conn(write=True) as conn:
            cur = conn.execute(f"DELETE FROM {_T.lists} WHERE id = ? AND owner_id = ?", (list_id, owner_id))
            return cur.rowcount > 0

    # ---- tasks ----

    def create_task(self, owner_id: str, list_id: str, data: TaskCreate) -> Optional[Task]:
        now = self._clock()
        entity = Task(
            id=self._id_factory(),
            list_id=list_id,
            owner_id=owner_id,
            title=data.title,
            description=data.description,
            deadline=data.deadline,
            priority=data.priority,
            created_at=now,
            updated_at=now,
        )
        with self._conn(write=True) as conn:
            if self._fetch_list(conn, owner_id, list_id) is None:
                return None
            self._insert_task(conn, entity)
        logger.debug("Created task id=%s list=%s owner=%s", entity.id, list_id, owner_id)
        return entity

    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        with self._conn() as conn:
            return self._fetch_task(conn, owner_id, task_id)

    def _replace_task(self, owner_id: str, task_id: str, change: Callable[[Task, datetime], Task]) -> Optional[Task]:
        with self._conn(write=True) as conn:
            current = self._fetch_task(conn, owner_id, task_id)
            if current is None:
                return None
            updated = change(current, self._clock())
            self._update_task(conn, updated)
            return updated

    def update_task(self, owner_id: str, task_id: str, data: TaskUpdate) -> Optional[Task]:
        return self._replace_task(owner_id, task_id, lambda t, now: apply_task_update(t, data, now))

    def set_completion(self, owner_id: str, task_id: str, completed: bool) -> Optional[Task]:
        return self._replace_task(owner_id, task_id, lambda t, now: apply_completion(t, completed, now))

    def set_deadline(self, owner_id: str, task_id: str, deadline: Optional[datetime]) -> Optional[Task]:
        return self._replace_task(owner_id, task_id, lambda t, now: t.evolve(deadline=deadline, updated_at=now))

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        with self._conn(write=True) as conn:
            cur = conn.execute(f"DELETE FROM {_T.tasks} WHERE id = ? AND owner_id = ?", (task_id, owner_id))
            return cur.rowcount > 0

    def list_tasks(self, scope: TaskScope) -> List[Task]:
        clauses = ["owner_id = ?"]
        params: list = [scope.owner_id]
        if scope.list_id is not None:
            clauses.append("list_id = ?")
            params.append(scope.list_id)
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_T.tasks} WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, rowid ASC",
                params,
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def count_tasks(self, scope: TaskScope) -> int:
        clauses = ["owner_id = ?"]
        params: list = [scope.owner_id]
        if scope.list_id is not None:
            clauses.append("list_id = ?")
            params.append(scope.list_id)
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM {_T.tasks} WHERE {' AND '.join(clauses)}", params
            ).fetchone()
            return int(row["cnt"]) if row else 0
