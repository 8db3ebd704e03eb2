"""Read/write collaborators of the analytics engine.

The engine only sees the Protocols below. The Sql* implementations map ORM
rows to plain records; each call opens its own session so callers may gather
independent reads concurrently.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from progress_companion.core.enums import Goal, MetricType, SampleSource
from progress_companion.core.errors import MissingPrerequisite
from progress_companion.db.session import async_session_maker, session_scope
from progress_companion.models.body_scan import BodyCompositionScan
from progress_companion.models.food_log import FoodLogEntry as FoodLogRow
from progress_companion.models.measurement import Measurement
from progress_companion.models.user import User, UserProfile
from progress_companion.models.workout import Workout
from progress_companion.services import records
from progress_companion.services.records import TimeWindow


class SampleStore(Protocol):
    async def find_samples(self, user_id: uuid.UUID, metric: MetricType, window: TimeWindow) -> list[records.Sample]:
        """Samples of one metric inside the window, ascending by capture time."""

    async def find_latest(self, user_id: uuid.UUID, metric: MetricType) -> Optional[records.Sample]:
        ...

    async def find_food_entries(self, user_id: uuid.UUID, window: TimeWindow) -> list[records.FoodLogEntry]:
        ...

    async def find_workouts(self, user_id: uuid.UUID, window: TimeWindow) -> list[records.WorkoutSummary]:
        ...


class ScanStore(Protocol):
    async def find_scans(self, user_id: uuid.UUID, limit: Optional[int] = None) -> list[records.ScanRecord]:
        """Most recent first."""

    async def get_scan(self, user_id: uuid.UUID, scan_id: uuid.UUID) -> Optional[records.ScanRecord]:
        ...

    async def create_scan(self, user_id: uuid.UUID, fields: dict[str, Any]) -> records.ScanRecord:
        ...


class ProfileReader(Protocol):
    async def get_user_context(self, now: datetime) -> records.UserContext:
        """Raises MissingPrerequisite when no user exists."""


# ── Row mapping ──────────────────────────────────────────────────────────

def _goal(value: Optional[str]) -> Optional[Goal]:
    try:
        return Goal(value) if value else None
    except ValueError:
        return None


def _source(value: Optional[str]) -> SampleSource:
    try:
        return SampleSource(value) if value else SampleSource.MANUAL
    except ValueError:
        return SampleSource.MANUAL


def sample_from_row(row: Measurement) -> records.Sample:
    return records.Sample(
        metric=MetricType(row.measurement_type),
        value=float(row.value),
        captured_at=row.captured_at,
        unit=row.unit or "kg",
        source=_source(row.source),
        confidence=row.confidence if row.confidence is not None else 1.0,
    )


def scan_from_row(row: BodyCompositionScan) -> records.ScanRecord:
    return records.ScanRecord(
        id=row.id,
        captured_at=row.captured_at,
        body_fat_min=row.body_fat_min,
        body_fat_max=row.body_fat_max,
        body_fat_confidence=row.body_fat_confidence,
        lean_mass_min=row.lean_mass_min,
        lean_mass_max=row.lean_mass_max,
        body_fat_change=row.body_fat_change,
        change_direction=row.change_direction,
        ai_commentary=row.ai_commentary,
        photo_clarity=row.photo_clarity,
        lighting_quality=row.lighting_quality,
        pose_quality=row.pose_quality,
        rapid_change_detected=bool(row.rapid_change_detected),
        safety_alert=row.safety_alert,
        data_completeness=row.data_completeness,
        front_photo_url=row.front_photo_url,
        definition=row.definition,
        muscle_fullness=row.muscle_fullness,
        behavior=records.BehavioralContext(
            avg_calories=row.avg_calories,
            avg_protein=row.avg_protein,
            weight_trend=row.weight_trend,
            training_volume=row.training_volume,
        ),
    )


def profile_from_row(row: Optional[UserProfile]) -> Optional[records.UserProfileSnapshot]:
    if row is None:
        return None
    return records.UserProfileSnapshot(
        height_cm=row.height_cm,
        birth_date=row.birth_date,
        biological_sex=row.biological_sex,
        activity_level=row.activity_level,
        primary_goal=_goal(row.primary_goal),
    )


# ── SQL implementations ──────────────────────────────────────────────────

class _SqlStore:
    def __init__(self, maker: async_sessionmaker[AsyncSession] = async_session_maker):
        self._maker = maker


class SqlSampleStore(_SqlStore):
    async def find_samples(self, user_id, metric, window):
        async with session_scope(self._maker) as db:
            result = await db.execute(
                select(Measurement)
                .where(
                    Measurement.user_id == user_id,
                    Measurement.measurement_type == metric.value,
                    Measurement.captured_at >= window.start,
                    Measurement.captured_at <= window.end,
                )
                .order_by(Measurement.captured_at)
            )
            return [sample_from_row(r) for r in result.scalars().all()]

    async def find_latest(self, user_id, metric):
        async with session_scope(self._maker) as db:
            result = await db.execute(
                select(Measurement)
                .where(Measurement.user_id == user_id, Measurement.measurement_type == metric.value)
                .order_by(Measurement.captured_at.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return sample_from_row(row) if row else None

    async def find_food_entries(self, user_id, window):
        async with session_scope(self._maker) as db:
            result = await db.execute(
                select(FoodLogRow)
                .where(
                    FoodLogRow.user_id == user_id,
                    FoodLogRow.logged_at >= window.start,
                    FoodLogRow.logged_at <= window.end,
                )
                .order_by(FoodLogRow.logged_at)
            )
            return [
                records.FoodLogEntry(
                    logged_at=r.logged_at,
                    calories=r.calories or 0,
                    protein=r.protein or 0,
                    carbs=r.carbs or 0,
                    fat=r.fat or 0,
                )
                for r in result.scalars().all()
            ]

    async def find_workouts(self, user_id, window):
        async with session_scope(self._maker) as db:
            result = await db.execute(
                select(Workout)
                .where(
                    Workout.user_id == user_id,
                    Workout.started_at >= window.start,
                    Workout.started_at <= window.end,
                )
                .order_by(Workout.started_at.desc())
            )
            return [
                records.WorkoutSummary(
                    started_at=w.started_at,
                    duration_minutes=float(w.duration_minutes or 0),
                    total_volume=float(w.total_volume or 0),
                )
                for w in result.scalars().all()
            ]


class SqlScanStore(_SqlStore):
    async def find_scans(self, user_id, limit=None):
        async with session_scope(self._maker) as db:
            stmt = (
                select(BodyCompositionScan)
                .where(BodyCompositionScan.user_id == user_id)
                .order_by(BodyCompositionScan.captured_at.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            result = await db.execute(stmt)
            return [scan_from_row(r) for r in result.scalars().all()]

    async def get_scan(self, user_id, scan_id):
        async with session_scope(self._maker) as db:
            result = await db.execute(
                select(BodyCompositionScan).where(
                    BodyCompositionScan.id == scan_id,
                    BodyCompositionScan.user_id == user_id,
                )
            )
            row = result.scalar_one_or_none()
            return scan_from_row(row) if row else None

    async def create_scan(self, user_id, fields):
        async with session_scope(self._maker) as db:
            row = BodyCompositionScan(user_id=user_id, **fields)
            db.add(row)
            await db.flush()
            await db.refresh(row)
            return scan_from_row(row)


class SqlProfileReader(_SqlStore):
    async def get_user_context(self, now):
        async with session_scope(self._maker) as db:
            result = await db.execute(select(User).order_by(User.created_at).limit(1))
            user = result.scalar_one_or_none()
            if user is None:
                raise MissingPrerequisite("User not found")
            profile = await db.execute(select(UserProfile).where(UserProfile.user_id == user.id))
            return records.UserContext(
                user_id=user.id,
                now=now,
                profile=profile_from_row(profile.scalar_one_or_none()),
            )
