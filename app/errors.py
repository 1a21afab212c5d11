"""Errors raised by the scoring engine.

Every error here is a deterministic function of its input, so none of them is
worth retrying. The API layer turns ``InvalidArgument`` into a 422 response.
"""


class InvalidArgument(ValueError):
    """An input violates the contract of an engine function."""


class InvalidCoordinate(InvalidArgument):
    """Latitude/longitude out of range or not a finite number."""


class InvalidRadius(InvalidArgument):
    """Circle radius that is not a finite, strictly positive number."""


class InvalidAccuracy(InvalidArgument):
    """Device accuracy or buffer that is negative or not finite."""


class InvalidRoomSize(InvalidArgument):
    """Room size category without a configured base radius."""


class InvalidDuration(InvalidArgument):
    """Session duration that is not positive or not on the allowed list."""


class InvalidScore(InvalidArgument):
    """Overlap percentage that is not a number."""


class ArithmeticDomainError(ArithmeticError):
    """A trig argument was NaN and could not be clamped back into range."""
