"""
Dispersion prediction entry point.

Validates a prediction request, looks up the chemical and current weather,
runs the footprint model and packages the result as a GeoJSON Feature.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from config import MODEL_TYPE
from data.chemicals import ChemicalProperties, ChemicalRepository
from data.weather import WeatherObservation, WeatherProvider
from errors import InvalidInputError
from models.geometry import PlumeFootprint, build_plume_footprint
from models.plume_rise import StackParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionRequest:
    """A validated request for a dispersion footprint."""

    latitude: float
    longitude: float
    chemical_id: int
    stack: StackParameters = StackParameters()


def _as_finite_number(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_prediction_request(payload: dict) -> PredictionRequest:
    """
    Validate a request body.

    Required keys: ``latitude``, ``longitude``, ``chemical_id``. Optional
    stack keys (``stackHeight``, ``stackDiameter``, ``exitVelocity``,
    ``exitTemperatureOffset``) override the defaults.

    Raises:
        InvalidInputError: If a required value is missing or not a finite
            number, or the chemical id is not a whole number.
    """
    if not isinstance(payload, dict):
        raise InvalidInputError("Request body must be a JSON object.")

    latitude = _as_finite_number(payload.get("latitude"))
    longitude = _as_finite_number(payload.get("longitude"))
    chemical_id = _as_finite_number(payload.get("chemical_id"))
    if latitude is None or longitude is None or chemical_id is None:
        raise InvalidInputError(
            "Invalid parameters. Latitude, longitude, and chemical_id are "
            "required and must be numbers."
        )
    if chemical_id != int(chemical_id):
        raise InvalidInputError("chemical_id must be a whole number.")

    return PredictionRequest(
        latitude=latitude,
        longitude=longitude,
        chemical_id=int(chemical_id),
        stack=StackParameters.from_dict(payload),
    )


def run_dispersion_prediction(
    request: PredictionRequest,
    chemicals: ChemicalRepository,
    weather: WeatherProvider,
    stability_class=None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Run a full prediction and return it as a GeoJSON Feature.

    Args:
        request: Validated request.
        chemicals: Chemical lookup; raises NotFoundError for unknown ids.
        weather: Weather lookup; raises UpstreamUnavailableError on failure.
            Must return wind speed in m/s.
        stability_class: Optional stability override passed to the model.
        now: Computation timestamp, defaults to the current UTC time.

    Returns:
        Dict with ``type="Feature"``, a Polygon geometry whose single ring
        is the footprint, and properties describing the inputs and model.
    """
    chemical = chemicals.get(request.chemical_id)
    observation = weather.get_current_weather(request.latitude, request.longitude)
    logger.info(
        "Running prediction for %s at (%.4f, %.4f), wind %.2f m/s from %.0f deg",
        chemical.name, request.latitude, request.longitude,
        observation.wind_speed, observation.wind_direction,
    )

    footprint = build_plume_footprint(
        request.latitude,
        request.longitude,
        observation,
        chemical,
        stack=request.stack,
        stability_class=stability_class,
    )
    return footprint_to_feature(footprint, chemical, observation, now=now)


def footprint_to_feature(
    footprint: PlumeFootprint,
    chemical: ChemicalProperties,
    observation: WeatherObservation,
    now: Optional[datetime] = None,
) -> dict:
    """Package a footprint as a GeoJSON Feature with a single-ring Polygon."""
    if now is None:
        now = datetime.now(timezone.utc)

    return {
        "type": "Feature",
        "properties": {
            "chemical": chemical.to_dict(),
            "weather": observation.to_dict(),
            "timestamp": now.isoformat(),
            "model_type": MODEL_TYPE,
            "stability_class": str(footprint.stability_class),
            "emission_rate": footprint.emission_rate,
            "plume_rise": footprint.plume_rise,
            "effective_height": footprint.effective_height,
            "extent_m": footprint.extent_m,
            "outcome": footprint.outcome.value,
        },
        "geometry": {
            "type": "Polygon",
            "coordinates": [[list(point) for point in footprint.coordinates]],
        },
    }
