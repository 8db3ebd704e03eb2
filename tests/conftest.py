"""Shared fixtures: in-memory stores, a canned vision provider and a fixed clock."""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from progress_companion.core.enums import Goal, MetricType
from progress_companion.core.errors import MissingPrerequisite
from progress_companion.services.records import (
    FoodLogEntry,
    Sample,
    ScanRecord,
    UserContext,
    UserProfileSnapshot,
    WorkoutSummary,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


def days_ago(days: float, base: datetime = NOW) -> datetime:
    return base - timedelta(days=days)


def make_scan(captured_at, body_fat_min, body_fat_max, confidence=70.0, **kwargs) -> ScanRecord:
    return ScanRecord(
        id=kwargs.pop("id", uuid.uuid4()),
        captured_at=captured_at,
        body_fat_min=body_fat_min,
        body_fat_max=body_fat_max,
        body_fat_confidence=confidence,
        **kwargs,
    )


class FakeSampleStore:
    """SampleStore over in-memory lists, with the same window semantics as SQL."""

    def __init__(self, samples=(), food=(), workouts=()):
        self.samples = list(samples)
        self.food = list(food)
        self.workouts = list(workouts)
        self.calls = []

    async def find_samples(self, user_id, metric, window):
        self.calls.append(("find_samples", metric))
        hits = [s for s in self.samples if s.metric == metric and window.contains(s.captured_at)]
        return sorted(hits, key=lambda s: s.captured_at)

    async def find_latest(self, user_id, metric):
        self.calls.append(("find_latest", metric))
        hits = [s for s in self.samples if s.metric == metric]
        return max(hits, key=lambda s: s.captured_at) if hits else None

    async def find_food_entries(self, user_id, window):
        return sorted((e for e in self.food if window.contains(e.logged_at)), key=lambda e: e.logged_at)

    async def find_workouts(self, user_id, window):
        hits = [w for w in self.workouts if window.contains(w.started_at)]
        return sorted(hits, key=lambda w: w.started_at, reverse=True)


class FakeScanStore:
    def __init__(self, scans=()):
        self.scans = list(scans)
        self.created = []

    async def find_scans(self, user_id, limit=None):
        ordered = sorted(self.scans, key=lambda s: s.captured_at, reverse=True)
        return ordered[:limit] if limit is not None else ordered

    async def get_scan(self, user_id, scan_id):
        return next((s for s in self.scans if s.id == scan_id), None)

    async def create_scan(self, user_id, fields):
        self.created.append(fields)
        record = ScanRecord(
            id=uuid.uuid4(),
            captured_at=fields["captured_at"],
            body_fat_min=fields["body_fat_min"],
            body_fat_max=fields["body_fat_max"],
            body_fat_confidence=fields["body_fat_confidence"],
            lean_mass_min=fields["lean_mass_min"],
            lean_mass_max=fields["lean_mass_max"],
            body_fat_change=fields["body_fat_change"],
            change_direction=fields["change_direction"],
            ai_commentary=fields["ai_commentary"],
            photo_clarity=fields["photo_clarity"],
            lighting_quality=fields["lighting_quality"],
            pose_quality=fields["pose_quality"],
            rapid_change_detected=fields["rapid_change_detected"],
            safety_alert=fields["safety_alert"],
            data_completeness=fields["data_completeness"],
            front_photo_url=fields["front_photo_url"],
            definition=fields["definition"],
            muscle_fullness=fields["muscle_fullness"],
        )
        self.scans.append(record)
        return record


class FakeProfileReader:
    def __init__(self, ctx=None):
        self.ctx = ctx

    async def get_user_context(self, now):
        if self.ctx is None:
            raise MissingPrerequisite("User not found")
        return replace(self.ctx, now=now)


class FakeVision:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    async def analyze(self, prompt, image_urls):
        self.prompts.append((prompt, image_urls))
        return self.reply


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def full_profile():
    return UserProfileSnapshot(
        height_cm=180,
        birth_date=datetime(1990, 5, 1).date(),
        biological_sex="male",
        activity_level="moderate",
        primary_goal=Goal.FAT_LOSS,
    )


@pytest.fixture
def ctx(full_profile):
    return UserContext(user_id=USER_ID, now=NOW, profile=full_profile)


@pytest.fixture
def weight_samples():
    """80 -> 79 -> 78 kg over 14 days."""
    return [
        Sample(MetricType.WEIGHT, 80.0, days_ago(14)),
        Sample(MetricType.WEIGHT, 79.0, days_ago(7)),
        Sample(MetricType.WEIGHT, 78.0, days_ago(0)),
    ]


@pytest.fixture
def food_entries():
    return [
        FoodLogEntry(days_ago(1, NOW.replace(hour=8)), calories=600, protein=40, carbs=60, fat=20),
        FoodLogEntry(days_ago(1, NOW.replace(hour=19)), calories=1600, protein=120, carbs=150, fat=60),
        FoodLogEntry(days_ago(2, NOW.replace(hour=13)), calories=2000, protein=150, carbs=200, fat=70),
    ]


@pytest.fixture
def workouts():
    return [
        WorkoutSummary(days_ago(6), duration_minutes=60, total_volume=5000),
        WorkoutSummary(days_ago(4), duration_minutes=45, total_volume=5000),
        WorkoutSummary(days_ago(2), duration_minutes=75, total_volume=8000),
    ]
