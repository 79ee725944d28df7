"""
Pasquill atmospheric stability classification.

Stability classes are ranked A (very unstable) through F (very stable), so
comparisons between classes are rank comparisons on an ``IntEnum``.
"""

import logging
from enum import IntEnum

from config import DEFAULT_STABILITY_CLASS

logger = logging.getLogger(__name__)


class StabilityClass(IntEnum):
    """Pasquill-Gifford stability category, ordered by rank."""

    A = 0  # Very unstable
    B = 1  # Unstable
    C = 2  # Slightly unstable
    D = 3  # Neutral
    E = 4  # Slightly stable
    F = 5  # Stable

    @property
    def is_stable(self) -> bool:
        return self > StabilityClass.D

    def __str__(self) -> str:
        return self.name


def classify_stability(wind_speed: float) -> StabilityClass:
    """
    Estimate the Pasquill stability class from wind speed alone.

    Assumes daytime with moderate solar radiation, so speeds of 6 m/s and
    above are treated as neutral (D) rather than the E/F a night-time
    scheme would give. Negative speeds are not checked here.

    Args:
        wind_speed: Wind speed in m/s.

    Returns:
        StabilityClass using half-open intervals [0, 2) -> A, [2, 3) -> B,
        [3, 5) -> C, [5, inf) -> D.
    """
    if wind_speed < 2:
        return StabilityClass.A
    if wind_speed < 3:
        return StabilityClass.B
    if wind_speed < 5:
        return StabilityClass.C
    # Night-time E/F is not inferred from wind alone; strong wind stays neutral.
    return StabilityClass.D


def resolve_stability_class(value) -> StabilityClass:
    """Coerce a class, letter or rank to a StabilityClass, defaulting to neutral."""
    if isinstance(value, StabilityClass):
        return value
    try:
        if isinstance(value, str):
            return StabilityClass[value.strip().upper()]
        return StabilityClass(int(value))
    except (KeyError, ValueError, TypeError):
        logger.warning(
            "Unrecognized stability class %r, falling back to %s",
            value, DEFAULT_STABILITY_CLASS,
        )
        return StabilityClass[DEFAULT_STABILITY_CLASS]
