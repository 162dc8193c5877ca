from datetime import timedelta

from todo_api.engine import TaskQuery, completed_between, filter_tasks, search_tasks
from todo_api.models import Priority


class TestFilterTasks:
    def test_empty_query_keeps_everything_in_order(self, make_task):
        tasks = [make_task("a"), make_task("b"), make_task("c")]
        assert filter_tasks(tasks, TaskQuery()) == tasks

    def test_criteria_are_conjunctive(self, make_task, now):
        match = make_task("Write report", priority=Priority.HIGH, deadline=now + timedelta(days=2))
        tasks = [
            match,
            make_task("Write report", priority=Priority.LOW, deadline=now + timedelta(days=2)),
            make_task("Write report", priority=Priority.HIGH, completed=True, deadline=now + timedelta(days=2)),
            make_task("Read book", priority=Priority.HIGH, deadline=now + timedelta(days=2)),
            make_task("Write report", priority=Priority.HIGH, deadline=now + timedelta(days=20)),
        ]
        query = TaskQuery(
            completed=False,
            priority=Priority.HIGH,
            due_before=now + timedelta(days=3),
            search="REPORT",
        )
        assert filter_tasks(tasks, query) == [match]

    def test_date_bounds_are_inclusive_and_require_a_deadline(self, make_task, now):
        on_bound = make_task("edge", deadline=now)
        undated = make_task("undated")
        assert filter_tasks([on_bound, undated], TaskQuery(due_before=now)) == [on_bound]
        assert filter_tasks([on_bound, undated], TaskQuery(due_after=now)) == [on_bound]

    def test_search_matches_description(self, make_task):
        hit = make_task("Shopping", description="Buy MILK and eggs")
        miss = make_task("Laundry")
        assert filter_tasks([hit, miss], TaskQuery(search="milk")) == [hit]

    def test_input_is_not_mutated(self, make_task):
        tasks = [make_task("a", completed=True), make_task("b")]
        snapshot = list(tasks)
        filter_tasks(tasks, TaskQuery(completed=False))
        assert tasks == snapshot


class TestSearchAndWindow:
    def test_blank_search_returns_all(self, make_task):
        tasks = [make_task("a"), make_task("b")]
        assert search_tasks(tasks, "   ") == tasks

    def test_completed_between(self, make_task, now):
        inside = make_task("inside", completed=True, completed_at=now - timedelta(days=1))
        outside = make_task("outside", completed=True, completed_at=now - timedelta(days=10))
        pending = make_task("pending")
        result = completed_between([inside, outside, pending], now - timedelta(days=2), now)
        assert result == [inside]
