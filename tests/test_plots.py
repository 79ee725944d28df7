"""Smoke tests for visualization plot functions.

Each test verifies that the function returns a valid Plotly Figure
without raising exceptions. These are not pixel-perfect tests;
they just confirm the functions work end-to-end with representative
inputs.
"""

import pytest
import plotly.graph_objects as go

from data.chemicals import InMemoryChemicalRepository
from models.geometry import PlumeExtent, SamplingOutcome, build_plume_footprint
from prediction.orchestrator import footprint_to_feature
from visualization.plots import (
    create_centerline_profile,
    create_footprint_map,
    create_local_footprint_figure,
)


@pytest.fixture
def footprint(source_location, reference_weather, ammonia):
    return build_plume_footprint(
        source_location["latitude"], source_location["longitude"],
        reference_weather, ammonia, max_distance=2000.0,
    )


@pytest.fixture
def empty_extent():
    return PlumeExtent((), 0.0, SamplingOutcome.MAX_DISTANCE_REACHED)


def test_footprint_map(footprint, reference_weather):
    chemical = InMemoryChemicalRepository().get(1)
    feature = footprint_to_feature(footprint, chemical, reference_weather)
    fig = create_footprint_map(feature)
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 2
    assert list(fig.data[0].lon) == [p[0] for p in footprint.coordinates]


def test_centerline_profile(footprint):
    fig = create_centerline_profile(footprint.extent)
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 3


def test_centerline_profile_empty(empty_extent):
    fig = create_centerline_profile(empty_extent)
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 0


def test_local_footprint_figure(footprint, reference_weather):
    fig = create_local_footprint_figure(
        footprint.extent, reference_weather.wind_speed, reference_weather.wind_direction
    )
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 3


def test_local_footprint_figure_empty(empty_extent):
    fig = create_local_footprint_figure(empty_extent, 3.0, 90.0)
    assert isinstance(fig, go.Figure)
