import pytest

from conftest import days_ago

from progress_companion.core.enums import ChangeDirection, Goal, NumericDirection
from progress_companion.services.change import (
    Observation,
    compute_change,
    compute_series_change,
    days_between,
    goal_direction,
    numeric_direction,
    weekly_rate,
)


def test_fat_loss_weight_scenario(weight_samples):
    result = compute_series_change(weight_samples, Goal.FAT_LOSS)
    assert result.change == pytest.approx(-2.0)
    assert result.days == 14
    assert result.weekly_rate == pytest.approx(-1.0)
    assert result.direction == ChangeDirection.IMPROVING
    assert result.weekly_rate_display == -1.0


def test_argument_order_does_not_matter():
    a = Observation(days_ago(10), 18.0)
    b = Observation(days_ago(0), 21.0)
    forward = compute_change(a, b, Goal.FAT_LOSS)
    backward = compute_change(b, a, Goal.FAT_LOSS)
    assert forward == backward
    assert forward.change == pytest.approx(3.0)
    assert forward.weekly_rate_display == 2.1


def test_equal_timestamps_are_order_independent():
    at = days_ago(3)
    a = Observation(at, 20.0)
    b = Observation(at, 22.0)
    assert compute_change(a, b) == compute_change(b, a)
    assert compute_change(a, b).weekly_rate == 0.0


@pytest.mark.parametrize(
    "goal, change, expected",
    [
        (Goal.FAT_LOSS, -1.0, ChangeDirection.IMPROVING),
        (Goal.FAT_LOSS, 1.0, ChangeDirection.DECLINING),
        (Goal.MUSCLE_GAIN, 1.0, ChangeDirection.IMPROVING),
        (Goal.MUSCLE_GAIN, -1.0, ChangeDirection.DECLINING),
        (Goal.RECOMPOSITION, -1.0, ChangeDirection.IMPROVING),
        (Goal.RECOMPOSITION, 1.0, ChangeDirection.STABLE),
        (Goal.MAINTENANCE, 1.0, ChangeDirection.STABLE),
        (None, -1.0, ChangeDirection.IMPROVING),
        (None, 1.0, ChangeDirection.STABLE),
    ],
)
def test_goal_direction_table(goal, change, expected):
    assert goal_direction(change, goal) == expected


def test_direction_threshold_boundary_is_stable():
    assert numeric_direction(0.5) == NumericDirection.STABLE
    assert numeric_direction(-0.5) == NumericDirection.STABLE
    assert numeric_direction(0.51) == NumericDirection.INCREASING
    assert numeric_direction(-0.51) == NumericDirection.DECREASING


def test_days_between_floors_partial_days():
    assert days_between(days_ago(13.9), days_ago(0)) == 13
    assert days_between(days_ago(0), days_ago(0)) == 0


def test_weekly_rate_zero_days():
    assert weekly_rate(3.0, 0) == 0.0


def test_series_change_needs_two_samples(weight_samples):
    assert compute_series_change([]) is None
    assert compute_series_change(weight_samples[:1]) is None
