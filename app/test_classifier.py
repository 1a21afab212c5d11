"""Unit tests for attendance status classification."""
import pytest

from classifier import STATUS_LABELS, AttendanceStatus, classify, is_in_roster
from errors import InvalidScore
from policy import EngineConfig


class TestClassify:
    """Test cases for the score bands."""

    @pytest.mark.parametrize(
        "score, expected",
        [
            (100, AttendanceStatus.present),
            (70, AttendanceStatus.present),
            (69.99, AttendanceStatus.check),
            (40, AttendanceStatus.check),
            (39.5, AttendanceStatus.proxy),
            (0, AttendanceStatus.proxy),
        ],
    )
    def test_bands_in_roster(self, score, expected):
        assert classify(score, True) is expected

    @pytest.mark.parametrize("score", [0, 39, 40, 69, 70, 100])
    def test_not_in_roster_always_wins(self, score):
        assert classify(score, False) is AttendanceStatus.not_in_list

    def test_total_over_score_range(self):
        """Every score in [0, 100] maps to exactly one of the three bands."""
        for tenth in range(0, 1001):
            status = classify(tenth / 10, True)
            assert status in (AttendanceStatus.present, AttendanceStatus.check, AttendanceStatus.proxy)

    def test_custom_thresholds(self):
        config = EngineConfig(present_threshold=80, check_threshold=50)
        assert classify(75, True, config) is AttendanceStatus.check
        assert classify(80, True, config) is AttendanceStatus.present
        assert classify(49, True, config) is AttendanceStatus.proxy

    def test_nan_rejected(self):
        with pytest.raises(InvalidScore):
            classify(float("nan"), True)

    def test_status_values(self):
        assert AttendanceStatus.present == "present"
        assert AttendanceStatus.check == "check"
        assert AttendanceStatus.proxy == "proxy"
        assert AttendanceStatus.not_in_list == "not_in_list"
        assert STATUS_LABELS[AttendanceStatus.check] == "Please Check"


class TestRosterMembership:
    """Test cases for the roster lookup."""

    def test_case_insensitive(self):
        assert is_in_roster("cs2023001", ["CS2023001", "CS2023002"])

    def test_surrounding_whitespace_ignored(self):
        assert is_in_roster(" CS2023002 ", ["cs2023002"])

    def test_missing(self):
        assert not is_in_roster("CS2023003", ["CS2023001", "CS2023002"])

    def test_empty_inputs(self):
        assert not is_in_roster("", ["CS2023001"])
        assert not is_in_roster(None, ["CS2023001"])
        assert not is_in_roster("CS2023001", [])
