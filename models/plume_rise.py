"""
Briggs Plume Rise.

Estimates the buoyant rise a heated release gains above the stack exit,
using simplified Briggs (1975) formulas for final rise. Momentum-only rise
of non-buoyant releases is not modeled: those get zero rise.
"""

import logging
from dataclasses import dataclass

from config import (
    BRIGGS_LARGE_FLUX_THRESHOLD,
    DEFAULT_EXIT_TEMP_OFFSET_C,
    DEFAULT_EXIT_VELOCITY,
    DEFAULT_STACK_DIAMETER_M,
    DEFAULT_STACK_HEIGHT_M,
    GRAVITY,
    KELVIN_OFFSET,
    MIN_WIND_SPEED,
    PLUME_RISE_AMPLIFICATION,
    STABLE_STABILITY_PARAMETER,
)
from errors import InvalidInputError, require_finite
from models.stability import resolve_stability_class

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackParameters:
    """Release point geometry and exit conditions.

    Args:
        stack_height: Physical release height (meters).
        stack_diameter: Exit diameter (meters).
        exit_velocity: Exit velocity (m/s).
        exit_temperature_offset: Exit temperature above ambient (degrees C).
    """

    stack_height: float = DEFAULT_STACK_HEIGHT_M
    stack_diameter: float = DEFAULT_STACK_DIAMETER_M
    exit_velocity: float = DEFAULT_EXIT_VELOCITY
    exit_temperature_offset: float = DEFAULT_EXIT_TEMP_OFFSET_C

    # Request key -> field name; camelCase is the wire form
    _KEYS = {
        "stackHeight": "stack_height",
        "stackDiameter": "stack_diameter",
        "exitVelocity": "exit_velocity",
        "exitTemperatureOffset": "exit_temperature_offset",
    }

    @classmethod
    def from_dict(cls, payload: dict) -> "StackParameters":
        """Build from request keys, keeping defaults for absent or null ones.

        Raises:
            InvalidInputError: If a present value is not a finite number.
        """
        overrides = {}
        for wire_key, field_name in cls._KEYS.items():
            value = payload.get(wire_key, payload.get(field_name))
            if value is None:
                continue
            try:
                overrides[field_name] = float(value)
            except (TypeError, ValueError):
                raise InvalidInputError(
                    f"Stack parameter '{wire_key}' must be a number, got {value!r}."
                ) from None
        require_finite(**overrides)
        return cls(**overrides)


def fahrenheit_to_celsius(temperature_f: float) -> float:
    return (temperature_f - 32.0) * 5.0 / 9.0


def celsius_to_kelvin(temperature_c: float) -> float:
    return temperature_c + KELVIN_OFFSET


def buoyancy_flux(
    stack_diameter: float,
    exit_velocity: float,
    exit_temperature_k: float,
    ambient_temperature_k: float,
) -> float:
    """
    Briggs buoyancy flux parameter.

        F = g * v_s * (d / 2)^2 * (1 - T_a / T_s)

    Returns:
        F in m^4/s^3. Non-positive when the release is no warmer than
        ambient air.
    """
    radius = stack_diameter / 2.0
    return GRAVITY * exit_velocity * radius ** 2 * (
        1.0 - ambient_temperature_k / exit_temperature_k
    )


def briggs_plume_rise(
    stack_diameter: float,
    exit_velocity: float,
    exit_temperature_k: float,
    ambient_temperature_k: float,
    wind_speed: float,
    stability_class,
    amplification: float = PLUME_RISE_AMPLIFICATION,
) -> float:
    """
    Final buoyant plume rise (delta H) above the stack exit.

    Branches:
        F <= 0:                  delta_H = 0
        A-D, F >= 55:            delta_H = 38.71 * F^(3/5) / u
        A-D, F < 55:             delta_H = 21.425 * F^(3/4) / u
        E-F:                     delta_H = 2.6 * (F / (u * s))^(1/3)

    Both buoyant branches are multiplied by ``amplification``, a visual
    tuning factor with no physical basis.

    Args:
        stack_diameter: Exit diameter (meters).
        exit_velocity: Exit velocity (m/s).
        exit_temperature_k: Exit temperature (K).
        ambient_temperature_k: Ambient air temperature (K).
        wind_speed: Wind speed at release height (m/s), floored at 0.1.
        stability_class: Pasquill-Gifford class A-F.
        amplification: Multiplier on the buoyant rise.

    Returns:
        Plume rise in meters, never negative.
    """
    sc = resolve_stability_class(stability_class)
    logger.debug(
        "Plume rise inputs: d=%s v=%s Ts=%s Ta=%s u=%s class=%s",
        stack_diameter, exit_velocity, exit_temperature_k,
        ambient_temperature_k, wind_speed, sc,
    )

    # Ground-level wind stands in for wind at stack height
    u = max(wind_speed, MIN_WIND_SPEED)
    flux = buoyancy_flux(stack_diameter, exit_velocity, exit_temperature_k, ambient_temperature_k)

    if flux <= 0:
        logger.warning("Non-buoyant plume (F=%.4g <= 0), returning 0 plume rise.", flux)
        delta_h = 0.0
    elif not sc.is_stable:
        if flux >= BRIGGS_LARGE_FLUX_THRESHOLD:
            delta_h = 38.71 * flux ** (3.0 / 5.0) / u
        else:
            delta_h = 21.425 * flux ** (3.0 / 4.0) / u
        delta_h *= amplification
    else:
        s = STABLE_STABILITY_PARAMETER[sc.name]
        delta_h = 2.6 * (flux / (u * s)) ** (1.0 / 3.0)
        delta_h *= amplification

    logger.debug("Calculated plume rise: %.3f m", delta_h)
    return max(0.0, delta_h)
