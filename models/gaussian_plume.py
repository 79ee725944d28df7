"""
Gaussian Plume Dispersion Model.

Implements the ground-level centerline form of the Gaussian plume equation
for an elevated continuous point source, with Pasquill-Gifford open-country
dispersion coefficients.

Convention:
  - Distances in meters; the power laws are evaluated in kilometers.
  - Concentrations are in arbitrary units consistent with the emission rate,
    which is a volatility-based proxy rather than a calibrated mass flow.
"""

import numpy as np
from config import (
    DISPERSION_COEFFICIENTS,
    MIN_SIGMA_Y_M,
    MIN_SIGMA_Z_M,
    MIN_WIND_SPEED,
)
from models.stability import resolve_stability_class


def _get_dispersion_coeffs(stability_class) -> dict:
    """Return (a, b) coefficients for sigma_y and sigma_z."""
    sc = resolve_stability_class(stability_class)
    return DISPERSION_COEFFICIENTS[sc.name]


def compute_sigma(distance_downwind, stability_class):
    """
    Compute lateral (sigma_y) and vertical (sigma_z) dispersion parameters.

        sigma = a * x_km^b * 1000

    Args:
        distance_downwind: Downwind distance(s) in meters, scalar or array.
        stability_class: Pasquill-Gifford class A-F. Unrecognized values
            fall back to neutral (D).

    Returns:
        (sigma_y, sigma_z) in meters, floored at 1 m. Floats for scalar
        input, arrays otherwise. Distances <= 0 give the floor values.
    """
    coeffs = _get_dispersion_coeffs(stability_class)
    a_y, b_y = coeffs["sigma_y"]
    a_z, b_z = coeffs["sigma_z"]

    x_km = np.asarray(distance_downwind, dtype=float) / 1000.0
    downwind = x_km > 0

    # Placeholder for non-positive distances keeps np.power away from 0^b
    x_safe = np.where(downwind, x_km, 1.0)

    sigma_y = np.where(downwind, a_y * np.power(x_safe, b_y) * 1000.0, MIN_SIGMA_Y_M)
    sigma_z = np.where(downwind, a_z * np.power(x_safe, b_z) * 1000.0, MIN_SIGMA_Z_M)

    sigma_y = np.maximum(sigma_y, MIN_SIGMA_Y_M)
    sigma_z = np.maximum(sigma_z, MIN_SIGMA_Z_M)

    if np.ndim(distance_downwind) == 0:
        return float(sigma_y), float(sigma_z)
    return sigma_y, sigma_z


def estimate_emission_rate(
    volatility_level,
    stack_height: float,
    stack_diameter: float,
) -> float:
    """
    Proxy emission rate from chemical volatility and stack size.

        Q = volatility * max(1, stack_height / 10) * max(1, stack_diameter)

    A missing or zero volatility counts as 1. This is an illustrative
    driver for visualization, not an SI mass-flow rate.
    """
    emission_factor = max(1.0, stack_height / 10.0) * max(1.0, stack_diameter)
    return float(volatility_level or 1) * emission_factor


def centerline_concentration(
    emission_rate: float,
    sigma_y,
    sigma_z,
    effective_height: float,
    wind_speed: float,
):
    """
    Ground-level concentration on the plume centerline.

        C = Q / (pi * sigma_y * sigma_z * u) * exp(-H^2 / (2 * sigma_z^2))

    Args:
        emission_rate: Emission rate Q.
        sigma_y, sigma_z: Dispersion parameters in meters, scalar or array.
        effective_height: Effective release height H (meters).
        wind_speed: Wind speed in m/s, floored at 0.1.

    Returns:
        Concentration in units of Q, same shape as the sigmas. Zero
        wherever a sigma is non-positive.
    """
    u = max(wind_speed, MIN_WIND_SPEED)

    sy = np.asarray(sigma_y, dtype=float)
    sz = np.asarray(sigma_z, dtype=float)
    valid = (sy > 0) & (sz > 0)
    sy_safe = np.where(valid, sy, 1.0)
    sz_safe = np.where(valid, sz, 1.0)

    norm = emission_rate / (np.pi * sy_safe * sz_safe * u)
    height_factor = np.exp(-(effective_height * effective_height) / (2.0 * sz_safe * sz_safe))

    concentration = np.where(valid, norm * height_factor, 0.0)

    if concentration.ndim == 0:
        return float(concentration)
    return concentration
