"""
Plume Footprint Geometry.

Turns the centerline plume model into a closed geographic polygon:

  1. Sample the centerline concentration downwind until it drops below
     the visibility threshold (or the maximum distance is reached).
  2. Build a symmetric envelope of +/- k * sigma_y at each retained sample.
  3. Rotate the local (downwind, crosswind) plane into the wind direction.
  4. Project meter offsets to longitude/latitude (equirectangular).

Convention:
  - Local x is downwind, local y is crosswind.
  - Wind direction is METEOROLOGICAL (direction wind comes FROM), so
    FROM 270 blows toward +x (East).
  - Polygon vertices are (longitude, latitude) pairs, GeoJSON order.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from config import (
    CONCENTRATION_THRESHOLD,
    DISTANCE_STEP_M,
    EARTH_RADIUS_M,
    FALLBACK_OFFSET_M,
    MAX_DOWNWIND_DISTANCE_M,
    PLUME_HALF_WIDTH_SIGMAS,
    PLUME_RISE_AMPLIFICATION,
)
from errors import InvalidInputError, require_finite
from models.gaussian_plume import (
    centerline_concentration,
    compute_sigma,
    estimate_emission_rate,
)
from models.plume_rise import (
    StackParameters,
    briggs_plume_rise,
    celsius_to_kelvin,
    fahrenheit_to_celsius,
)
from models.stability import StabilityClass, classify_stability, resolve_stability_class

logger = logging.getLogger(__name__)


class SamplingOutcome(Enum):
    """Why downwind sampling stopped."""

    THRESHOLD_REACHED = "threshold_reached"
    MAX_DISTANCE_REACHED = "max_distance_reached"


@dataclass(frozen=True)
class PlumeSample:
    """Plume state at one downwind distance on the centerline."""

    distance_m: float
    sigma_y: float
    sigma_z: float
    concentration: float


@dataclass(frozen=True)
class PlumeExtent:
    """Retained samples and where the visible plume ends."""

    samples: Tuple[PlumeSample, ...]
    extent_m: float
    outcome: SamplingOutcome


@dataclass(frozen=True)
class PlumeFootprint:
    """Closed footprint polygon plus the plume parameters behind it."""

    coordinates: Tuple[Tuple[float, float], ...]
    stability_class: StabilityClass
    emission_rate: float
    plume_rise: float
    effective_height: float
    extent: PlumeExtent
    is_fallback: bool = False

    @property
    def extent_m(self) -> float:
        return self.extent.extent_m

    @property
    def outcome(self) -> SamplingOutcome:
        return self.extent.outcome


def iter_centerline(
    stability_class,
    emission_rate: float,
    effective_height: float,
    wind_speed: float,
    max_distance: float = MAX_DOWNWIND_DISTANCE_M,
    step: float = DISTANCE_STEP_M,
) -> Iterator[PlumeSample]:
    """
    Lazily yield centerline samples at x = 0, step, 2*step, ... <= max_distance.

    Each call returns a fresh generator, so the sequence can be restarted.
    Yields nothing when max_distance is negative.
    """
    if step <= 0:
        raise InvalidInputError("Sampling step must be positive.")
    if max_distance < 0:
        return
    # Distances are i * step, never accumulated, so the last sample lands on max_distance
    num_steps = int(math.floor(max_distance / step + 1e-9))
    for i in range(num_steps + 1):
        x = i * step
        sigma_y, sigma_z = compute_sigma(x, stability_class)
        concentration = centerline_concentration(
            emission_rate, sigma_y, sigma_z, effective_height, wind_speed
        )
        yield PlumeSample(x, sigma_y, sigma_z, concentration)


def sample_plume(
    stability_class,
    emission_rate: float,
    effective_height: float,
    wind_speed: float,
    max_distance: float = MAX_DOWNWIND_DISTANCE_M,
    step: float = DISTANCE_STEP_M,
    threshold: float = CONCENTRATION_THRESHOLD,
) -> PlumeExtent:
    """
    Sample the centerline until concentration drops below ``threshold``.

    The first sample beyond the source (x > 0) whose concentration is below
    the threshold ends sampling and is not retained, so the extent is the
    previous step's distance. If no sample crosses, the extent is the last
    sampled distance.

    Returns:
        PlumeExtent with the retained samples in increasing distance.
    """
    retained = []
    outcome = SamplingOutcome.MAX_DISTANCE_REACHED
    for sample in iter_centerline(
        stability_class, emission_rate, effective_height, wind_speed, max_distance, step
    ):
        if sample.distance_m > 0 and sample.concentration < threshold:
            outcome = SamplingOutcome.THRESHOLD_REACHED
            break
        retained.append(sample)

    extent_m = retained[-1].distance_m if retained else 0.0
    return PlumeExtent(tuple(retained), extent_m, outcome)


def wind_rotation_angle(wind_direction: float) -> float:
    """Angle (radians) from local +x to the downwind bearing, counter-clockwise from East."""
    return math.radians((270.0 - wind_direction) % 360.0)


def rotate_offsets(x, y, angle: float):
    """Standard 2D counter-clockwise rotation of local offsets by ``angle`` radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


def meters_to_delta_lonlat(dx, dy, latitude: float):
    """
    Convert East/North offsets in meters to (delta_lon, delta_lat) degrees.

    Equirectangular approximation, adequate over tens of kilometers away
    from the poles.
    """
    lat_rad = math.radians(latitude)
    delta_lat = np.asarray(dy, dtype=float) / EARTH_RADIUS_M * (180.0 / math.pi)
    delta_lon = np.asarray(dx, dtype=float) / (EARTH_RADIUS_M * math.cos(lat_rad)) * (180.0 / math.pi)
    return delta_lon, delta_lat


def assemble_polygon(
    samples: Sequence[PlumeSample],
    latitude: float,
    longitude: float,
    wind_direction: float,
    half_width_sigmas: float = PLUME_HALF_WIDTH_SIGMAS,
) -> list:
    """
    Trace the plume outline out along one edge and back along the other.

    Order: source, right edge (increasing distance), left edge (decreasing
    distance), source again.

    Returns:
        List of (lon, lat) tuples.
    """
    source = (float(longitude), float(latitude))
    if not samples:
        return [source, source]

    distances = np.array([s.distance_m for s in samples])
    half_widths = np.array([s.sigma_y for s in samples]) * half_width_sigmas

    # Right edge outbound, left edge back toward the source
    local_x = np.concatenate([distances, distances[::-1]])
    local_y = np.concatenate([half_widths, -half_widths[::-1]])

    angle = wind_rotation_angle(wind_direction)
    east, north = rotate_offsets(local_x, local_y, angle)
    delta_lon, delta_lat = meters_to_delta_lonlat(east, north, latitude)

    edge = [
        (float(longitude + dlon), float(latitude + dlat))
        for dlon, dlat in zip(delta_lon, delta_lat)
    ]
    return [source] + edge + [source]


def fallback_polygon(
    latitude: float,
    longitude: float,
    offset_m: float = FALLBACK_OFFSET_M,
) -> list:
    """Small closed quadrilateral at the source for degenerate plumes."""
    delta_lon, delta_lat = meters_to_delta_lonlat(offset_m, offset_m, latitude)
    source = (float(longitude), float(latitude))
    return [
        source,
        (float(longitude + delta_lon), float(latitude)),
        (float(longitude), float(latitude + delta_lat)),
        source,
    ]


def build_plume_footprint(
    latitude: float,
    longitude: float,
    weather,
    chemical,
    stack: Optional[StackParameters] = None,
    stability_class=None,
    max_distance: float = MAX_DOWNWIND_DISTANCE_M,
    step: float = DISTANCE_STEP_M,
    threshold: float = CONCENTRATION_THRESHOLD,
    half_width_sigmas: float = PLUME_HALF_WIDTH_SIGMAS,
    amplification: float = PLUME_RISE_AMPLIFICATION,
) -> PlumeFootprint:
    """
    Compute the closed ground-level footprint polygon of a release.

    Args:
        latitude, longitude: Source location (decimal degrees).
        weather: WeatherObservation with wind speed already in m/s and
            temperature in degrees F.
        chemical: ChemicalProperties; only volatility_level is used.
        stack: Release parameters. Defaults to StackParameters().
        stability_class: Optional override. By default the class is
            estimated from wind speed, which never yields E or F.
        max_distance, step, threshold: Downwind sampling controls.
        half_width_sigmas: Envelope half-width in units of sigma_y.
        amplification: Plume rise multiplier.

    Returns:
        PlumeFootprint whose coordinates are closed and have >= 4 vertices.

    Raises:
        InvalidInputError: If the coordinate or any plume rise input is
            missing or non-finite, or if an absolute temperature
            is not positive.
    """
    if stack is None:
        stack = StackParameters()
    require_finite(latitude=latitude, longitude=longitude)
    require_finite(
        stack_height=stack.stack_height,
        stack_diameter=stack.stack_diameter,
        exit_velocity=stack.exit_velocity,
        exit_temperature_offset=stack.exit_temperature_offset,
        wind_speed=weather.wind_speed,
        wind_direction=weather.wind_direction,
        temperature=weather.temperature,
    )

    if stability_class is None:
        sc = classify_stability(weather.wind_speed)
    else:
        sc = resolve_stability_class(stability_class)

    emission_rate = estimate_emission_rate(
        chemical.volatility_level, stack.stack_height, stack.stack_diameter
    )
    logger.debug(
        "Emission rate Q=%.3f (volatility=%s, stack %sm x %sm)",
        emission_rate, chemical.volatility_level, stack.stack_height, stack.stack_diameter,
    )

    ambient_c = fahrenheit_to_celsius(weather.temperature)
    ambient_k = celsius_to_kelvin(ambient_c)
    exit_k = celsius_to_kelvin(ambient_c + stack.exit_temperature_offset)

    require_finite(exit_temperature=exit_k, ambient_temperature=ambient_k)
    if exit_k <= 0 or ambient_k <= 0:
        raise InvalidInputError(
            f"Absolute temperatures must be positive: exit {exit_k:.2f} K, "
            f"ambient {ambient_k:.2f} K."
        )

    plume_rise = briggs_plume_rise(
        stack.stack_diameter,
        stack.exit_velocity,
        exit_k,
        ambient_k,
        weather.wind_speed,
        sc,
        amplification=amplification,
    )
    effective_height = stack.stack_height + plume_rise
    logger.debug(
        "Stack height %.2fm, plume rise %.2fm, effective height %.2fm",
        stack.stack_height, plume_rise, effective_height,
    )

    extent = sample_plume(
        sc, emission_rate, effective_height, weather.wind_speed,
        max_distance=max_distance, step=step, threshold=threshold,
    )

    points = assemble_polygon(
        extent.samples, latitude, longitude, weather.wind_direction,
        half_width_sigmas=half_width_sigmas,
    )
    is_fallback = len(points) < 4
    if is_fallback:
        logger.warning(
            "Generated polygon has %d points, returning small default shape.", len(points)
        )
        points = fallback_polygon(latitude, longitude)

    return PlumeFootprint(
        coordinates=tuple(points),
        stability_class=sc,
        emission_rate=emission_rate,
        plume_rise=plume_rise,
        effective_height=effective_height,
        extent=extent,
        is_fallback=is_fallback,
    )
