"""BodyCompositionScan model — one photo-analysis result, never mutated."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from progress_companion.db.base import Base


class BodyCompositionScan(Base):
    """Body fat range + confidence derived from progress photos.

    Behavioral context (avg_calories .. training_volume) is a snapshot taken
    when the scan was created, so later log edits do not rewrite history.
    """

    __tablename__ = "body_composition_scans"
    __table_args__ = (Index("ix_scans_user_captured", "user_id", "captured_at"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Photo inputs
    front_photo_url: Mapped[str] = mapped_column(Text, nullable=False)
    side_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    back_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    lighting: Mapped[str | None] = mapped_column(String(20), nullable=True)
    clothing: Mapped[str | None] = mapped_column(String(20), nullable=True)
    fasted_state: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    time_of_day: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Estimates (body fat clamped to [5, 40], min <= max)
    body_fat_min: Mapped[float] = mapped_column(Float, nullable=False)
    body_fat_max: Mapped[float] = mapped_column(Float, nullable=False)
    body_fat_confidence: Mapped[float] = mapped_column(Float, nullable=False)
    lean_mass_min: Mapped[float | None] = mapped_column(Float, nullable=True)
    lean_mass_max: Mapped[float | None] = mapped_column(Float, nullable=True)
    lean_mass_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Change vs previous scan
    body_fat_change: Mapped[float | None] = mapped_column(Float, nullable=True)
    change_direction: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ai_commentary: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Photo quality fractions in [0, 1]
    photo_clarity: Mapped[float | None] = mapped_column(Float, nullable=True)
    lighting_quality: Mapped[float | None] = mapped_column(Float, nullable=True)
    pose_quality: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Muscle scores in [0, 100], when the model reports them
    definition: Mapped[float | None] = mapped_column(Float, nullable=True)
    muscle_fullness: Mapped[float | None] = mapped_column(Float, nullable=True)

    data_completeness: Mapped[float | None] = mapped_column(Float, nullable=True)
    processing_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Behavioral context snapshot
    avg_calories: Mapped[float | None] = mapped_column(Float, nullable=True)
    avg_protein: Mapped[float | None] = mapped_column(Float, nullable=True)
    weight_trend: Mapped[str | None] = mapped_column(String(10), nullable=True)
    training_volume: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Safety
    rapid_change_detected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    safety_alert: Mapped[str | None] = mapped_column(Text, nullable=True)
