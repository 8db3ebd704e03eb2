"""Initial schema: users, profiles, measurements, food log, workouts, body composition scans.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _user_fk() -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )

    op.create_table(
        "user_profiles",
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("height_cm", sa.Float(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("biological_sex", sa.String(length=10), nullable=True),
        sa.Column("activity_level", sa.String(length=20), nullable=True),
        sa.Column("primary_goal", sa.String(length=20), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("user_id", name="pk_user_profiles"),
    )

    op.create_table(
        "measurements",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _user_fk(),
        sa.Column("measurement_type", sa.String(length=20), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=10), nullable=False, server_default="kg"),
        sa.Column("source", sa.String(length=10), nullable=False, server_default="manual"),
        sa.Column("confidence", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_measurements"),
    )
    op.create_index(
        "ix_measurements_user_type_captured",
        "measurements",
        ["user_id", "measurement_type", "captured_at"],
    )

    op.create_table(
        "food_log_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _user_fk(),
        sa.Column("calories", sa.Float(), nullable=False, server_default="0"),
        sa.Column("protein", sa.Float(), nullable=False, server_default="0"),
        sa.Column("carbs", sa.Float(), nullable=False, server_default="0"),
        sa.Column("fat", sa.Float(), nullable=False, server_default="0"),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_food_log_entries"),
    )
    op.create_index("ix_food_log_user_logged", "food_log_entries", ["user_id", "logged_at"])

    op.create_table(
        "workouts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _user_fk(),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("total_volume", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_workouts"),
    )
    op.create_index("ix_workouts_user_started", "workouts", ["user_id", "started_at"])

    op.create_table(
        "body_composition_scans",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _user_fk(),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("front_photo_url", sa.Text(), nullable=False),
        sa.Column("side_photo_url", sa.Text(), nullable=True),
        sa.Column("back_photo_url", sa.Text(), nullable=True),
        sa.Column("lighting", sa.String(length=20), nullable=True),
        sa.Column("clothing", sa.String(length=20), nullable=True),
        sa.Column("fasted_state", sa.Boolean(), nullable=True),
        sa.Column("time_of_day", sa.String(length=20), nullable=True),
        sa.Column("body_fat_min", sa.Float(), nullable=False),
        sa.Column("body_fat_max", sa.Float(), nullable=False),
        sa.Column("body_fat_confidence", sa.Float(), nullable=False),
        sa.Column("lean_mass_min", sa.Float(), nullable=True),
        sa.Column("lean_mass_max", sa.Float(), nullable=True),
        sa.Column("lean_mass_confidence", sa.Float(), nullable=True),
        sa.Column("body_fat_change", sa.Float(), nullable=True),
        sa.Column("change_direction", sa.String(length=20), nullable=True),
        sa.Column("ai_commentary", sa.Text(), nullable=True),
        sa.Column("photo_clarity", sa.Float(), nullable=True),
        sa.Column("lighting_quality", sa.Float(), nullable=True),
        sa.Column("pose_quality", sa.Float(), nullable=True),
        sa.Column("definition", sa.Float(), nullable=True),
        sa.Column("muscle_fullness", sa.Float(), nullable=True),
        sa.Column("data_completeness", sa.Float(), nullable=True),
        sa.Column("processing_time_ms", sa.Integer(), nullable=True),
        sa.Column("avg_calories", sa.Float(), nullable=True),
        sa.Column("avg_protein", sa.Float(), nullable=True),
        sa.Column("weight_trend", sa.String(length=10), nullable=True),
        sa.Column("training_volume", sa.Integer(), nullable=True),
        sa.Column("rapid_change_detected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("safety_alert", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_body_composition_scans"),
    )
    op.create_index("ix_scans_user_captured", "body_composition_scans", ["user_id", "captured_at"])


def downgrade() -> None:
    op.drop_index("ix_scans_user_captured", table_name="body_composition_scans")
    op.drop_table("body_composition_scans")
    op.drop_index("ix_workouts_user_started", table_name="workouts")
    op.drop_table("workouts")
    op.drop_index("ix_food_log_user_logged", table_name="food_log_entries")
    op.drop_table("food_log_entries")
    op.drop_index("ix_measurements_user_type_captured", table_name="measurements")
    op.drop_table("measurements")
    op.drop_table("user_profiles")
    op.drop_table("users")
