"""Shared fixtures for the Chemical Release Footprint Estimator test suite."""

import sys
import os
import pytest

# Ensure project root is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture
def source_location():
    """Reference release point (geographic center of the contiguous US)."""
    return {"latitude": 39.8283, "longitude": -98.5795}


@pytest.fixture
def ammonia():
    """Ammonia Gas reference record (volatility 8)."""
    from data.chemicals import ChemicalProperties
    return ChemicalProperties(
        id=1,
        name="Ammonia Gas",
        volatility_level=8,
        solubility_level=9,
        hazard_type="gas",
        description="Colorless gas with pungent odor.",
    )


@pytest.fixture
def reference_weather():
    """10 mph west wind at 65 F."""
    from data.weather import WeatherObservation
    return WeatherObservation(
        wind_speed=4.47,
        wind_direction=270.0,
        temperature=65.0,
        humidity=40.0,
    )


@pytest.fixture
def default_stack():
    from models.plume_rise import StackParameters
    return StackParameters()
