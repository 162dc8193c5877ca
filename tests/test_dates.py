from datetime import datetime, timedelta, timezone

from todo_api.engine import dates

NOW = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)


class TestPredicates:
    def test_overdue_is_strictly_before_now(self):
        assert dates.is_overdue(NOW - timedelta(seconds=1), NOW)
        assert not dates.is_overdue(NOW, NOW)

    def test_today_and_tomorrow_are_calendar_days(self):
        assert dates.is_today(NOW.replace(hour=23, minute=59), NOW)
        assert not dates.is_today(NOW + timedelta(days=1), NOW)
        assert dates.is_tomorrow(NOW.replace(hour=0) + timedelta(days=1), NOW)
        assert not dates.is_tomorrow(NOW + timedelta(days=2), NOW)

    def test_this_week_window_is_inclusive(self):
        assert dates.is_this_week(NOW, NOW)
        assert dates.is_this_week(NOW + timedelta(days=7), NOW)
        assert not dates.is_this_week(NOW + timedelta(days=7, seconds=1), NOW)
        assert not dates.is_this_week(NOW - timedelta(seconds=1), NOW)

    def test_urgent_within_24_hours(self):
        assert dates.is_urgent(NOW + timedelta(hours=24), NOW)
        assert not dates.is_urgent(NOW + timedelta(hours=24, seconds=1), NOW)
        assert not dates.is_urgent(NOW - timedelta(minutes=1), NOW)


class TestHelpers:
    def test_as_utc_treats_naive_as_utc(self):
        naive = datetime(2025, 1, 15, 10, 0)
        assert dates.as_utc(naive) == NOW
        plus_two = datetime(2025, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert dates.as_utc(plus_two) == NOW
        assert dates.as_utc(plus_two).tzinfo == timezone.utc

    def test_days_until_rounds_up(self):
        assert dates.days_until(NOW + timedelta(hours=1), NOW) == 1
        assert dates.days_until(NOW + timedelta(days=2), NOW) == 2
        assert dates.days_until(NOW - timedelta(days=1, hours=12), NOW) == -1

    def test_weekday_index_starts_on_sunday(self):
        # 2025-01-12 is a Sunday, NOW is a Wednesday
        assert dates.weekday_index(datetime(2025, 1, 12, tzinfo=timezone.utc)) == 0
        assert dates.weekday_index(NOW) == 3
        assert dates.WEEKDAY_NAMES[dates.weekday_index(NOW)] == "Wednesday"

    def test_in_window(self):
        start, end = NOW - timedelta(days=1), NOW
        assert dates.in_window(NOW, start, end)
        assert not dates.in_window(NOW, start, end, inclusive_end=False)
        assert dates.in_window(start, start, end, inclusive_end=False)
        assert not dates.in_window(None, start, end)
