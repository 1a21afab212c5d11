"""Engine configuration and the session radius / expiry policy."""
import math
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import InvalidAccuracy, InvalidDuration, InvalidRoomSize


class RoomSize(str, Enum):
    """Room size category chosen by faculty."""
    small = "small"
    mid = "mid"
    large = "large"


class SessionState(str, Enum):
    """Lifecycle state of a session."""
    active = "active"
    expired = "expired"


class EngineConfig(BaseModel):
    """Immutable tuning values for scoring, classification and sessions."""

    model_config = ConfigDict(frozen=True)

    present_threshold: float = Field(default=70.0, ge=0, le=100)
    check_threshold: float = Field(default=40.0, ge=0, le=100)
    room_radii: Mapping[RoomSize, float] = Field(
        default_factory=lambda: {RoomSize.small: 5.0, RoomSize.mid: 10.0, RoomSize.large: 15.0},
        validate_default=True,
    )
    student_base_radius: float = Field(default=2.0, gt=0)
    default_buffer_m: float = Field(default=5.0, ge=0)
    allowed_durations: Tuple[int, ...] = (5, 10, 15)
    overlap_strategy: str = "geometric"

    @field_validator("room_radii", mode="after")
    @classmethod
    def freeze_radii(cls, value):
        # read-only view, item assignment raises TypeError
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def check_consistency(self):
        if self.check_threshold > self.present_threshold:
            raise ValueError("check_threshold must not exceed present_threshold")
        for size, radius in self.room_radii.items():
            if not radius > 0:
                raise ValueError(f"Base radius for '{size.value}' must be > 0")
        if any(d <= 0 for d in self.allowed_durations):
            raise ValueError("Allowed durations must be positive")
        return self

    @classmethod
    def from_settings(cls, settings) -> "EngineConfig":
        return cls(
            present_threshold=settings.present_threshold,
            check_threshold=settings.check_threshold,
            room_radii={
                RoomSize.small: settings.room_radius_small,
                RoomSize.mid: settings.room_radius_mid,
                RoomSize.large: settings.room_radius_large,
            },
            student_base_radius=settings.student_base_radius,
            default_buffer_m=settings.default_buffer_m,
            allowed_durations=tuple(settings.allowed_durations),
            overlap_strategy=settings.overlap_strategy,
        )


DEFAULT_CONFIG = EngineConfig()


def _non_negative(value: Optional[float], label: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidAccuracy(f"{label} must be a finite number, got {value!r}")
    if value < 0:
        raise InvalidAccuracy(f"{label} must be >= 0, got {value}")
    return float(value)


def base_radius(room_size, config: EngineConfig = DEFAULT_CONFIG) -> float:
    """Fixed detection radius for a room size category."""
    try:
        return config.room_radii[RoomSize(room_size)]
    except (KeyError, ValueError):
        raise InvalidRoomSize(
            f"Unknown room size {room_size!r}; expected one of {[s.value for s in RoomSize]}"
        ) from None


def effective_radius(
    room_size,
    device_accuracy: Optional[float],
    buffer_m: Optional[float],
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """Anchor circle radius: base room radius + device accuracy + safety buffer."""
    return (
        base_radius(room_size, config)
        + _non_negative(device_accuracy, "Device accuracy")
        + _non_negative(buffer_m, "Buffer")
    )


def student_radius(device_accuracy: Optional[float], config: EngineConfig = DEFAULT_CONFIG) -> float:
    """Probe circle radius: fixed student base radius + device accuracy."""
    return config.student_base_radius + _non_negative(device_accuracy, "Device accuracy")


def validate_duration(duration_minutes: int, config: EngineConfig = DEFAULT_CONFIG) -> int:
    """Accept only the durations faculty may pick from."""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidDuration(f"Duration must be whole minutes, got {duration_minutes!r}")
    if duration_minutes not in config.allowed_durations:
        raise InvalidDuration(
            f"Duration {duration_minutes} min not allowed; choose one of {list(config.allowed_durations)}"
        )
    return duration_minutes


def expiry(created_at: datetime, duration_minutes: float) -> datetime:
    """Moment a session stops accepting check-ins."""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, (int, float)):
        raise InvalidDuration(f"Duration must be a number, got {duration_minutes!r}")
    if not math.isfinite(duration_minutes) or duration_minutes <= 0:
        raise InvalidDuration(f"Duration must be > 0 minutes, got {duration_minutes}")
    return created_at + timedelta(minutes=duration_minutes)


def is_expired(expires_at: datetime, now: datetime) -> bool:
    """A session is expired once the clock has passed its expiry."""
    return now > expires_at


def session_state(stored_state, expires_at: datetime, now: datetime) -> SessionState:
    """State as seen at ``now``: a closed session stays expired, an open one expires lazily."""
    if SessionState(stored_state) is SessionState.expired or is_expired(expires_at, now):
        return SessionState.expired
    return SessionState.active
