from todo_api.engine import TaskQuery, paginate, run_query
from todo_api.models import Priority, SortField, SortOrder


class TestPaginate:
    def test_pages_concatenate_to_the_whole(self):
        items = list(range(23))
        pages = [paginate(items, page=p, limit=5) for p in range(1, 6)]
        assert sum((p.items for p in pages), []) == items
        assert pages[0].total_pages == 5
        assert pages[-1].items == [20, 21, 22]
        assert not pages[-1].has_next
        assert pages[-1].has_prev

    def test_empty_collection(self):
        page = paginate([], page=1, limit=10)
        assert page.items == []
        assert page.total == 0
        assert page.total_pages == 0
        assert not page.has_next
        assert not page.has_prev

    def test_page_past_the_end_is_empty(self):
        page = paginate(list(range(3)), page=4, limit=2)
        assert page.items == []
        assert page.total == 3
        assert page.total_pages == 2
        assert not page.has_next
        assert page.has_prev


class TestRunQuery:
    def test_high_priority_title_page(self, make_task):
        names = ["Banana", "apple", "Cherry", "date", "Eggplant"]
        tasks = [make_task(n, priority=Priority.HIGH) for n in names]
        tasks.append(make_task("aardvark", priority=Priority.LOW))

        page = run_query(
            tasks,
            TaskQuery(priority=Priority.HIGH, sort_by=SortField.TITLE, order=SortOrder.ASC, page=1, limit=2),
        )

        assert [t.title for t in page.items] == ["apple", "Banana"]
        assert page.total == 5
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is False
