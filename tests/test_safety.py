from conftest import NOW, days_ago, make_scan

from progress_companion.core.constants import SAFETY_ALERT
from progress_companion.services.safety import detect_rapid_change, is_rapid_change


def test_three_points_in_ten_days_is_flagged():
    previous = make_scan(days_ago(10), 19, 21)  # mid 20
    result = detect_rapid_change(23.0, previous, NOW)
    assert result.rapid_change is True
    assert result.change == 3.0
    assert result.days_since_previous == 10
    assert result.alert == SAFETY_ALERT


def test_same_change_over_twenty_days_is_not_flagged():
    previous = make_scan(days_ago(20), 19, 21)
    result = detect_rapid_change(23.0, previous, NOW)
    assert result.rapid_change is False
    assert result.alert is None


def test_no_previous_scan_is_not_flagged():
    result = detect_rapid_change(23.0, None, NOW)
    assert result.rapid_change is False
    assert result.change is None


def test_boundaries_are_exclusive():
    assert is_rapid_change(20.0, 22.0, 5) is False
    assert is_rapid_change(20.0, 23.0, 14) is False
    assert is_rapid_change(20.0, 17.5, 13) is True


def test_thresholds_are_configurable():
    previous = make_scan(days_ago(20), 19, 21)
    assert detect_rapid_change(23.0, previous, NOW, max_points=2.0, window_days=30).rapid_change is True
