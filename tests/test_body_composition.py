import asyncio
import json

import pytest

from conftest import NOW, USER_ID, FakeSampleStore, FakeScanStore, FakeVision, days_ago, make_scan

from progress_companion.core.constants import SAFETY_ALERT
from progress_companion.core.enums import ChangeDirection, Goal, MetricType, NumericDirection
from progress_companion.core.errors import MalformedUpstreamResponse
from progress_companion.services.body_composition import (
    assess_scan,
    FALLBACK_ZONE,
    ChangeZone,
    compare_scans,
    create_scan,
    detect_change_zones,
    has_recent_weight,
    summarize_history,
    summarize_month,
)
from progress_companion.services.records import Sample, UserContext, UserProfileSnapshot
from progress_companion.services.vision import PhotoSet, build_scan_prompt

PAYLOAD = {
    "bodyFatMin": 18,
    "bodyFatMax": 21,
    "confidence": 80,
    "photoQuality": 90,
    "lightingQuality": 60,
    "poseAlignment": 80,
    "observations": "Moderate abdominal definition.",
    "definition": 62,
}


@pytest.fixture
def latest_weight():
    return Sample(MetricType.WEIGHT, 78.0, days_ago(1))


def test_has_recent_weight(latest_weight):
    assert has_recent_weight(latest_weight, NOW, 30) is True
    assert has_recent_weight(Sample(MetricType.WEIGHT, 78.0, days_ago(45)), NOW, 30) is False
    assert has_recent_weight(None, NOW, 30) is False


def test_first_scan_assessment(ctx, latest_weight):
    result = assess_scan(ctx, PAYLOAD, None, latest_weight)
    assert result.data_completeness == pytest.approx(0.65)
    assert result.adjusted_confidence == 72
    assert (result.lean_mass_min, result.lean_mass_max) == (61.6, 64.0)
    assert result.change is None
    assert result.body_fat_change is None
    assert result.safety.rapid_change is False
    assert result.commentary.startswith("Estimated body fat: 18–21% (Confidence: 72%). Good confidence")
    assert "Moderate abdominal definition." in result.commentary
    assert result.insight.direction == ChangeDirection.STABLE


def test_rapid_change_assessment(ctx, latest_weight):
    previous = make_scan(days_ago(10), 17, 19)  # mid 18
    payload = dict(PAYLOAD, bodyFatMin=20, bodyFatMax=22)  # mid 21
    result = assess_scan(ctx, payload, previous, latest_weight)
    assert result.body_fat_change == 3.0
    assert result.change.weekly_rate_display == 2.1
    assert result.change_direction == ChangeDirection.DECLINING
    assert result.safety.rapid_change is True
    assert result.safety.alert == SAFETY_ALERT
    assert "Body fat increased by approximately 3.0% since last scan." in result.commentary


def test_assessment_without_profile_or_weight(now):
    bare = UserContext(user_id=USER_ID, now=now)
    result = assess_scan(bare, {"bodyFatMin": 18, "bodyFatMax": 21, "confidence": 80}, None, None)
    assert result.data_completeness == 0.0
    assert result.adjusted_confidence == 56
    assert result.lean_mass_min is None


def test_create_scan_persists_assessment(ctx, weight_samples, food_entries, workouts):
    samples = FakeSampleStore(samples=weight_samples, food=food_entries, workouts=workouts)
    scans = FakeScanStore([make_scan(days_ago(20), 19, 21)])
    vision = FakeVision("```json\n" + json.dumps(PAYLOAD) + "\n```")
    photos = PhotoSet(front_photo_url="https://img.example/front.jpg", side_photo_url="https://img.example/side.jpg")

    record, assessment = asyncio.run(create_scan(ctx, photos, samples, scans, vision))

    assert record.body_fat_min == 18
    assert record.body_fat_max == 21
    assert record.body_fat_change == -0.5
    assert record.change_direction == "stable"
    assert record.rapid_change_detected is False
    fields = scans.created[0]
    assert fields["avg_calories"] == pytest.approx(600.0)
    assert fields["weight_trend"] == "down"
    assert fields["training_volume"] == 3
    assert fields["processing_time_ms"] >= 0
    assert fields["side_photo_url"] == "https://img.example/side.jpg"
    assert record.definition == 62
    assert fields["muscle_fullness"] is None
    prompt, urls = vision.prompts[0]
    assert "Current Weight: 78kg" in prompt
    assert "Pose: Front view + Side view" in prompt
    assert urls == ["https://img.example/front.jpg", "https://img.example/side.jpg"]
    assert assessment.adjusted_confidence == record.body_fat_confidence


def test_create_scan_does_not_persist_unparseable_reply(ctx):
    scans = FakeScanStore()
    vision = FakeVision("Sorry, I can't help with that.")
    photos = PhotoSet(front_photo_url="https://img.example/front.jpg")
    with pytest.raises(MalformedUpstreamResponse):
        asyncio.run(create_scan(ctx, photos, FakeSampleStore(), scans, vision))
    assert scans.created == []


def test_build_scan_prompt_without_context():
    prompt = build_scan_prompt(None, None, PhotoSet(front_photo_url="x"))
    assert "Sex: Not provided" in prompt
    assert "Weight: Not provided" in prompt
    assert "Pose: Front view" in prompt


@pytest.fixture
def three_scans():
    return [
        make_scan(days_ago(1), 17, 19),  # mid 18
        make_scan(days_ago(10), 18, 20),  # mid 19
        make_scan(days_ago(20), 19, 21),  # mid 20
    ]


def test_history_trends_oldest_first(ctx, three_scans):
    history = summarize_history(three_scans, ctx)
    assert [p.value for p in history.trends.body_fat_trend] == [20, 19, 18]
    assert history.trends.avg_change == -2
    assert history.trends.direction == ChangeDirection.IMPROVING
    assert history.monthly_summary is None


def test_history_direction_follows_goal(ctx, three_scans):
    bulk = UserContext(ctx.user_id, ctx.now, UserProfileSnapshot(primary_goal=Goal.MUSCLE_GAIN))
    assert summarize_history(three_scans, bulk).trends.direction == ChangeDirection.DECLINING


def test_history_with_one_scan(ctx, three_scans):
    trends = summarize_history(three_scans[:1], ctx, include_summary=True).trends
    assert trends.body_fat_trend == []
    assert trends.avg_change == 0.0
    assert trends.direction == ChangeDirection.STABLE


def test_monthly_summary(ctx, three_scans):
    summary = summarize_history(three_scans, ctx, include_summary=True).monthly_summary
    assert summary.scan_count == 3
    assert summary.body_fat_change == -2.0
    assert summary.direction == "decreased"
    assert "based on 3 scans" in summary.summary


def test_monthly_summary_needs_two_recent_scans(three_scans):
    old = [make_scan(days_ago(40), 19, 21), three_scans[0]]
    assert summarize_month(old, NOW) is None


def test_compare_scans_rapid_gain(ctx):
    earlier = make_scan(days_ago(10), 17, 19, lean_mass_min=60.0, lean_mass_max=62.0)
    later = make_scan(days_ago(0), 20, 22, lean_mass_min=60.0, lean_mass_max=61.0)
    result = compare_scans(later, earlier, ctx)
    assert result.earlier is earlier
    assert result.body_fat_change == 3.0
    assert result.days_between == 10
    assert result.weekly_rate == 2.1
    assert result.direction == NumericDirection.INCREASING
    assert result.goal_direction == ChangeDirection.DECLINING
    assert result.rapid_change_detected is True
    assert result.lean_mass_change == -0.5
    assert result.insight == (
        "Over 1 week, body fat increased by approximately 3.0% while lean mass decreased by 0.5kg. "
        "Rate of change is notable."
    )


def test_compare_scans_is_order_independent(ctx):
    a = make_scan(days_ago(30), 22, 24)
    b = make_scan(days_ago(2), 19, 21)
    assert compare_scans(a, b, ctx) == compare_scans(b, a, ctx)


def test_compare_scans_without_lean_mass(ctx):
    a = make_scan(days_ago(30), 22, 24)
    b = make_scan(days_ago(2), 19, 21)
    result = compare_scans(a, b, ctx)
    assert result.lean_mass_change is None
    assert result.direction == NumericDirection.DECREASING
    assert result.goal_direction == ChangeDirection.IMPROVING
    assert result.insight.startswith("Over 4 weeks, body fat decreased by approximately 3.0%.")


def test_compare_scans_without_muscle_scores_reports_fallback_zone(ctx):
    result = compare_scans(make_scan(days_ago(30), 22, 24), make_scan(days_ago(2), 19, 21), ctx)
    assert result.change_zones == [ChangeZone("Overall Physique", "stable", 50)]


def test_change_zones_from_muscle_scores():
    earlier = make_scan(days_ago(30), 22, 24, definition=50, muscle_fullness=70)
    later = make_scan(days_ago(2), 19, 21, definition=58, muscle_fullness=62)
    assert detect_change_zones(earlier, later) == [
        ChangeZone("Overall Definition", "improved", 70),
        ChangeZone("Muscle Fullness", "reduced", 65),
    ]


def test_change_zones_ignore_small_or_missing_scores():
    earlier = make_scan(days_ago(30), 22, 24, definition=50, muscle_fullness=None)
    later = make_scan(days_ago(2), 19, 21, definition=55, muscle_fullness=80)
    assert detect_change_zones(earlier, later) == [FALLBACK_ZONE]
