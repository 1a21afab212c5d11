"""Attendance status classification."""
import math
from enum import Enum
from typing import Iterable, Optional

from errors import InvalidScore
from policy import DEFAULT_CONFIG, EngineConfig


class AttendanceStatus(str, Enum):
    """Outcome of a check-in."""
    present = "present"
    check = "check"
    proxy = "proxy"
    not_in_list = "not_in_list"


STATUS_LABELS = {
    AttendanceStatus.present: "Present",
    AttendanceStatus.check: "Please Check",
    AttendanceStatus.proxy: "Proxy",
    AttendanceStatus.not_in_list: "Not in List",
}


def classify(
    overlap_pct: float,
    in_roster: bool,
    config: EngineConfig = DEFAULT_CONFIG,
) -> AttendanceStatus:
    """Map an overlap score and roster membership to a status.

    Roster membership is checked first: a student who is not expected in the
    session is ``not_in_list`` whatever the score. Band edges belong to the
    upper band, so a score equal to a threshold takes the better status.
    """
    if isinstance(overlap_pct, bool) or not isinstance(overlap_pct, (int, float)) or math.isnan(overlap_pct):
        raise InvalidScore(f"Overlap percentage must be a number, got {overlap_pct!r}")

    if not in_roster:
        return AttendanceStatus.not_in_list
    if overlap_pct >= config.present_threshold:
        return AttendanceStatus.present
    if overlap_pct >= config.check_threshold:
        return AttendanceStatus.check
    return AttendanceStatus.proxy


def normalize_registration(registration_number: Optional[str]) -> str:
    return (registration_number or "").strip().casefold()


def is_in_roster(registration_number: Optional[str], roster: Iterable[str]) -> bool:
    """Case-insensitive registration number lookup in a roster snapshot."""
    wanted = normalize_registration(registration_number)
    if not wanted:
        return False
    return any(normalize_registration(entry) == wanted for entry in roster)
