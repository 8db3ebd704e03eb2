from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from conftest import NOW, days_ago

from progress_companion.core.enums import MetricType
from progress_companion.services.aggregation import (
    bucket_by_day,
    daily_averages,
    day_key,
    filter_window,
    last_two,
    latest_per_bucket,
    trailing_window,
    values_of,
)
from progress_companion.services.records import FoodLogEntry, Sample, TimeWindow


def test_trailing_window_ends_now():
    window = trailing_window(NOW, 30)
    assert window.end == NOW
    assert window.start == NOW - timedelta(days=30)


def test_filter_window_sorts_and_drops_outside(weight_samples):
    window = trailing_window(NOW, 10)
    inside = filter_window(reversed(weight_samples), window)
    assert values_of(inside) == [79.0, 78.0]


def test_filter_window_empty_input():
    assert filter_window([], trailing_window(NOW, 30)) == []


def test_bucket_by_day_sums_per_calendar_day(food_entries):
    buckets = bucket_by_day(food_entries)
    assert list(buckets) == [date(2026, 3, 13), date(2026, 3, 14)]
    assert buckets[date(2026, 3, 14)].calories == 2200
    assert buckets[date(2026, 3, 14)].protein == 160


def test_daily_averages_over_logged_days(food_entries):
    avg = daily_averages(bucket_by_day(food_entries))
    assert avg.calories == 2100
    assert avg.protein == 155
    assert avg.carbs == 205
    assert avg.fat == 75


def test_daily_averages_empty_is_zero():
    avg = daily_averages(bucket_by_day([]))
    assert (avg.calories, avg.protein, avg.carbs, avg.fat) == (0, 0, 0, 0)


def test_day_key_uses_local_calendar():
    late_evening_in_new_york = datetime(2026, 3, 15, 2, 0, tzinfo=timezone.utc)
    assert day_key(late_evening_in_new_york) == date(2026, 3, 15)
    assert day_key(late_evening_in_new_york, ZoneInfo("America/New_York")) == date(2026, 3, 14)


def test_bucket_by_day_respects_timezone():
    entries = [
        FoodLogEntry(datetime(2026, 3, 15, 2, 0, tzinfo=timezone.utc), calories=500),
        FoodLogEntry(datetime(2026, 3, 14, 20, 0, tzinfo=timezone.utc), calories=700),
    ]
    buckets = bucket_by_day(entries, ZoneInfo("America/New_York"))
    assert list(buckets) == [date(2026, 3, 14)]
    assert buckets[date(2026, 3, 14)].calories == 1200


def test_last_two(weight_samples):
    current, previous = last_two(weight_samples)
    assert current.value == 78.0
    assert previous.value == 79.0
    assert last_two([]) == (None, None)
    assert last_two(weight_samples[:1]) == (weight_samples[0], None)


def test_latest_per_bucket_half_open_boundaries():
    t0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
    buckets = [
        TimeWindow(t0, t0 + timedelta(days=10)),
        TimeWindow(t0 + timedelta(days=10), t0 + timedelta(days=20)),
    ]
    on_boundary = Sample(MetricType.WEIGHT, 70.0, t0 + timedelta(days=10))
    at_last_end = Sample(MetricType.WEIGHT, 71.0, t0 + timedelta(days=20))
    early = Sample(MetricType.WEIGHT, 69.0, t0 + timedelta(days=1))
    picked = latest_per_bucket([early, on_boundary, at_last_end], buckets)
    assert picked[0] is early
    assert picked[1] is at_last_end


def test_latest_per_bucket_empty_bucket_is_none():
    t0 = days_ago(40)
    buckets = [TimeWindow(t0, t0 + timedelta(days=10)), TimeWindow(t0 + timedelta(days=10), t0 + timedelta(days=20))]
    assert latest_per_bucket([], buckets) == [None, None]
