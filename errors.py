"""
Error kinds raised by the footprint estimator.

Each kind subclasses the builtin exception callers would otherwise catch
(``ValueError`` for bad input, ``LookupError`` for missing reference data,
``RuntimeError`` for upstream failures).
"""

import math
from numbers import Real


class DispersionError(Exception):
    """Base class for all footprint estimator errors."""


class InvalidInputError(DispersionError, ValueError):
    """Missing or non-finite numeric input."""


class NotFoundError(DispersionError, LookupError):
    """Requested reference record does not exist."""


class UpstreamUnavailableError(DispersionError, RuntimeError):
    """An external data service failed or returned a non-2xx response."""


def require_finite(**values) -> None:
    """Raise InvalidInputError unless every keyword value is a finite real number.

    Booleans are rejected even though they are ints.

    Raises:
        InvalidInputError: Listing every offending field.
    """
    bad = []
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, Real):
            bad.append(name)
        elif not math.isfinite(value):
            bad.append(name)
    if bad:
        raise InvalidInputError(
            f"Invalid numeric input for {', '.join(bad)}: values must be finite numbers."
        )
