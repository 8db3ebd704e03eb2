import asyncio

from conftest import NOW, FakeSampleStore, FakeScanStore, days_ago, make_scan

from progress_companion.core.enums import Effort, MetricType
from progress_companion.services.records import FoodLogEntry, Sample
from progress_companion.services.signal_composer import (
    DataAvailability,
    analyze_data_gaps,
    compose_signals,
    data_quality,
    load_availability,
)


def test_new_user_gets_top_three_gaps():
    plan = compose_signals(DataAvailability(), NOW)
    assert [r.gap.type for r in plan.recommended] == ["meal_log", "progress_photo", "body_measurements"]
    assert [r.rank for r in plan.recommended] == [1, 2, 3]
    assert plan.total_potential_improvement == 38
    assert plan.recommended[1].gap.action == "Take a progress photo today"
    assert plan.recommended[0].rationale == "Adding this data point would improve insight accuracy by 15%"
    assert plan.data_quality.score == 0
    assert plan.data_quality.level == "needs_attention"


def test_gaps_sorted_by_improvement_then_effort():
    gaps = analyze_data_gaps(DataAvailability(), NOW)
    improvements = [g.confidence_improvement for g in gaps]
    assert improvements == sorted(improvements, reverse=True)
    assert len(gaps) == 6
    assert next(g for g in gaps if g.type == "body_measurements").effort == Effort.MEDIUM


def test_well_tracked_user():
    avail = DataAvailability(
        meals_logged_today=True,
        meal_consistency=90,
        last_photo_at=days_ago(3),
        photo_count=4,
        last_weight_at=days_ago(1),
        has_body_measurements=True,
        workouts_this_week=True,
        has_goal=True,
    )
    plan = compose_signals(avail, NOW)
    assert [r.gap.type for r in plan.recommended] == ["food_label"]
    assert plan.data_quality.score == 100
    assert plan.data_quality.level == "excellent"


def test_photo_taken_today_is_not_a_gap():
    gaps = analyze_data_gaps(DataAvailability(last_photo_at=NOW, photo_count=1), NOW)
    assert "progress_photo" not in [g.type for g in gaps]


def test_recent_but_stale_photo_suggests_weekly_schedule():
    gaps = analyze_data_gaps(DataAvailability(last_photo_at=days_ago(10), photo_count=1), NOW)
    photo = next(g for g in gaps if g.type == "progress_photo")
    assert photo.action == "Schedule your weekly progress photo"


def test_quality_levels():
    good = DataAvailability(meals_logged_today=True, photo_count=1, last_weight_at=days_ago(2), workouts_this_week=True)
    assert data_quality(good, NOW).score == 60
    assert data_quality(good, NOW).level == "good"
    fair = DataAvailability(meals_logged_today=True, has_goal=True, last_photo_at=days_ago(20))
    assert data_quality(fair, NOW).score == 35
    assert data_quality(fair, NOW).level == "needs_attention"
    fair = DataAvailability(meals_logged_today=True, has_goal=True, last_photo_at=days_ago(10))
    assert data_quality(fair, NOW).score == 40
    assert data_quality(fair, NOW).level == "fair"


def test_load_availability(ctx, workouts):
    food = [FoodLogEntry(NOW.replace(hour=8), calories=500), FoodLogEntry(days_ago(3), calories=1800)]
    samples = FakeSampleStore(
        samples=[Sample(MetricType.WEIGHT, 78.0, days_ago(2)), Sample(MetricType.WAIST, 84.0, days_ago(40), unit="cm")],
        food=food,
        workouts=workouts,
    )
    scans = FakeScanStore([make_scan(days_ago(30), 19, 21), make_scan(days_ago(5), 18, 20)])
    avail = asyncio.run(load_availability(ctx, samples, scans))
    assert avail.meals_logged_today is True
    assert avail.meal_consistency == 7
    assert avail.photo_count == 2
    assert avail.last_photo_at == days_ago(5)
    assert avail.last_weight_at == days_ago(2)
    assert avail.has_body_measurements is True
    assert avail.workouts_this_week is True
    assert avail.has_goal is True
