"""Best-fix location acquisition.

Devices report noisy fixes; the caller keeps sampling until one is accurate
enough or the budget runs out, and hands the single best fix to the scoring
engine. The engine itself never loops or waits.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from errors import InvalidAccuracy
from geo import Coordinate

logger = logging.getLogger(__name__)


class LocationUnavailable(RuntimeError):
    """No usable fix was obtained within the attempt / time budget."""


@dataclass(frozen=True)
class LocationFix:
    """A single device reading and its reported horizontal accuracy."""

    coordinate: Coordinate
    accuracy_m: float

    def __post_init__(self):
        if not isinstance(self.accuracy_m, (int, float)) or not math.isfinite(self.accuracy_m):
            raise InvalidAccuracy(f"Accuracy must be a finite number, got {self.accuracy_m!r}")
        if self.accuracy_m < 0:
            raise InvalidAccuracy(f"Accuracy must be >= 0, got {self.accuracy_m}")


Sampler = Callable[[], Awaitable[LocationFix]]


async def acquire_best_fix(
    sample: Sampler,
    target_accuracy_m: float = 10.0,
    max_attempts: int = 5,
    timeout_s: float = 15.0,
    delay_s: float = 1.0,
    backoff: float = 1.5,
    max_delay_s: Optional[float] = 5.0,
) -> LocationFix:
    """Sample repeatedly and return the most accurate fix seen.

    Stops as soon as a fix meets ``target_accuracy_m``, or when either
    ``max_attempts`` or ``timeout_s`` is spent. Sampler exceptions count as a
    failed attempt and are retried with exponential backoff.

    Raises:
        ValueError: If max_attempts < 1.
        LocationUnavailable: If every attempt failed.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    deadline = time.monotonic() + timeout_s
    best: Optional[LocationFix] = None
    last_exc: Optional[BaseException] = None
    cur_delay = float(delay_s)

    for attempt in range(1, max_attempts + 1):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        try:
            fix = await asyncio.wait_for(sample(), timeout=remaining)
        except asyncio.TimeoutError as exc:
            last_exc = exc
            logger.warning("Location attempt %d/%d timed out", attempt, max_attempts)
            break
        except Exception as exc:
            last_exc = exc
            logger.warning("Location attempt %d/%d failed: %s", attempt, max_attempts, exc)
        else:
            if best is None or fix.accuracy_m < best.accuracy_m:
                best = fix
            logger.debug("Location attempt %d/%d accuracy=%.1fm", attempt, max_attempts, fix.accuracy_m)
            if fix.accuracy_m <= target_accuracy_m:
                return fix

        if attempt < max_attempts:
            pause = min(cur_delay, max(0.0, deadline - time.monotonic()))
            if pause > 0:
                await asyncio.sleep(pause)
            cur_delay *= backoff
            if max_delay_s is not None:
                cur_delay = min(cur_delay, max_delay_s)

    if best is None:
        raise LocationUnavailable("Unable to retrieve location") from last_exc
    logger.info("Target accuracy %.1fm not reached; best fix %.1fm", target_accuracy_m, best.accuracy_m)
    return best
