"""Circle-overlap scoring strategies.

A score is the share of the *probe* circle (the student's uncertainty circle)
covered by the *anchor* circle (the faculty's detection zone), expressed as an
integer percentage in [0, 100]. The measure is deliberately asymmetric: the
question answered is "how much of where the student might be lies inside the
room", not how similar the two circles are.
"""
import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, Type

from errors import ArithmeticDomainError, InvalidArgument
from geo import DEGENERATE_DISTANCE_M, Circle, distance_m

logger = logging.getLogger(__name__)

# Linear heuristic: score reached exactly on the anchor circle's edge.
EDGE_SCORE = 70.0


def _clamp_unit(value: float) -> float:
    """Clamp an acos argument into [-1, 1]; float drift must not become NaN."""
    if math.isnan(value):
        raise ArithmeticDomainError("acos argument is NaN")
    return max(-1.0, min(1.0, value))


def _to_percent(value: float) -> float:
    # halves round up: 68.5 -> 69
    return float(max(0, min(100, math.floor(value + 0.5))))


def lens_area(d: float, r1: float, r2: float) -> float:
    """Intersection area of two circles with radii r1, r2 whose centers are d apart."""
    if d >= r1 + r2:
        return 0.0
    if d + r2 <= r1:
        return math.pi * r2 * r2
    if d + r1 <= r2:
        return math.pi * r1 * r1

    part1 = r2 * r2 * math.acos(_clamp_unit((d * d + r2 * r2 - r1 * r1) / (2.0 * d * r2)))
    part2 = r1 * r1 * math.acos(_clamp_unit((d * d + r1 * r1 - r2 * r2) / (2.0 * d * r1)))
    product = (-d + r1 + r2) * (d + r1 - r2) * (d - r1 + r2) * (d + r1 + r2)
    part3 = 0.5 * math.sqrt(max(0.0, product))
    return max(0.0, part1 + part2 - part3)


class OverlapStrategy(ABC):
    """Scores how much of ``probe`` lies within ``anchor``."""

    name = "abstract"

    @abstractmethod
    def score(self, anchor: Circle, probe: Circle) -> float:
        """Return an overlap percentage in [0, 100]."""

    def __call__(self, anchor: Circle, probe: Circle) -> float:
        return self.score(anchor, probe)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GeometricOverlap(OverlapStrategy):
    """Exact lens area divided by the probe circle's area."""

    name = "geometric"

    def score(self, anchor: Circle, probe: Circle) -> float:
        r1 = anchor.radius_m
        r2 = probe.radius_m
        d = distance_m(anchor.center, probe.center)

        if d >= r1 + r2:
            result, branch = 0.0, "disjoint"
        elif d < DEGENERATE_DISTANCE_M:
            result, branch = 100.0, "same point"
        elif d + r2 <= r1:
            result, branch = 100.0, "probe inside anchor"
        else:
            result = _to_percent(lens_area(d, r1, r2) / probe.area_m2 * 100.0)
            branch = "lens"

        logger.debug(
            "geometric overlap: d=%.3fm r_anchor=%.2fm r_probe=%.2fm branch=%s -> %s%%",
            d, r1, r2, branch, result,
        )
        return result


class LinearOverlap(OverlapStrategy):
    """Piecewise-linear falloff with distance.

    100 at the anchor center, 70 on the anchor edge, then down to 0 across one
    probe radius beyond the edge. Cheaper and more forgiving of GPS noise than
    the geometric score, but not an area measure.
    """

    name = "linear"

    def score(self, anchor: Circle, probe: Circle) -> float:
        r1 = anchor.radius_m
        r2 = probe.radius_m
        d = distance_m(anchor.center, probe.center)

        if d <= r1:
            raw = 100.0 - (100.0 - EDGE_SCORE) * (d / r1)
        elif d < r1 + r2:
            raw = EDGE_SCORE * (1.0 - (d - r1) / r2)
        else:
            raw = 0.0

        result = _to_percent(raw)
        logger.debug(
            "linear overlap: d=%.3fm r_anchor=%.2fm r_probe=%.2fm -> %s%%",
            d, r1, r2, result,
        )
        return result


STRATEGIES: Dict[str, Type[OverlapStrategy]] = {
    GeometricOverlap.name: GeometricOverlap,
    LinearOverlap.name: LinearOverlap,
}


def get_strategy(name: str) -> OverlapStrategy:
    """Instantiate a scoring strategy by its configured name."""
    try:
        return STRATEGIES[name.strip().lower()]()
    except (KeyError, AttributeError):
        raise InvalidArgument(
            f"Unknown overlap strategy {name!r}; expected one of {sorted(STRATEGIES)}"
        ) from None


_default = GeometricOverlap()


def overlap_percentage(anchor: Circle, probe: Circle) -> float:
    """Score with the geometric method."""
    return _default.score(anchor, probe)
