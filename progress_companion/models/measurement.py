"""Measurement model — one timestamped sample of one metric."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from progress_companion.db.base import Base


class Measurement(Base):
    """Append-only sample: weight, body_fat, lean_mass, circumferences."""

    __tablename__ = "measurements"
    __table_args__ = (
        Index("ix_measurements_user_type_captured", "user_id", "measurement_type", "captured_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    measurement_type: Mapped[str] = mapped_column(String(20), nullable=False)  # MetricType value
    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(10), nullable=False, default="kg")
    source: Mapped[str] = mapped_column(String(10), nullable=False, default="manual")  # SampleSource value
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
