"""Tests for downwind sampling and footprint polygon construction."""

import math
from dataclasses import replace
from types import SimpleNamespace

import numpy as np
import pytest

from errors import InvalidInputError
from models.gaussian_plume import centerline_concentration, compute_sigma
from models.geometry import (
    SamplingOutcome,
    assemble_polygon,
    build_plume_footprint,
    fallback_polygon,
    iter_centerline,
    meters_to_delta_lonlat,
    rotate_offsets,
    sample_plume,
    wind_rotation_angle,
)
from models.plume_rise import StackParameters
from models.stability import StabilityClass


class TestIterCenterline:
    def test_sample_count_and_spacing(self):
        samples = list(iter_centerline("C", 8.0, 20.0, 4.47))
        assert len(samples) == 201
        assert samples[0].distance_m == 0.0
        assert samples[-1].distance_m == 20000.0
        assert np.allclose(np.diff([s.distance_m for s in samples]), 100.0)

    def test_source_sample_uses_floors(self):
        first = next(iter_centerline("A", 1.0, 10.0, 2.0))
        assert (first.sigma_y, first.sigma_z) == (1.0, 1.0)

    def test_restartable(self):
        """Each call yields a fresh, identical sequence."""
        a = list(iter_centerline("D", 5.0, 15.0, 6.0, max_distance=1000.0))
        b = list(iter_centerline("D", 5.0, 15.0, 6.0, max_distance=1000.0))
        assert a == b
        assert len(a) == 11

    def test_negative_max_distance_yields_nothing(self):
        assert list(iter_centerline("D", 5.0, 15.0, 6.0, max_distance=-1.0)) == []

    def test_non_positive_step_raises(self):
        with pytest.raises(InvalidInputError, match="step"):
            list(iter_centerline("D", 5.0, 15.0, 6.0, step=0.0))


class TestSamplePlume:
    def test_reaches_max_distance_without_crossing(self):
        """Ammonia under a moderate west wind stays above threshold for 20 km."""
        extent = sample_plume("C", 8.0, 20.1, 4.47)
        assert extent.outcome == SamplingOutcome.MAX_DISTANCE_REACHED
        assert extent.extent_m == 20000.0
        assert len(extent.samples) == 201

    def test_threshold_crossing_stops_at_previous_step(self):
        extent = sample_plume("D", 1.0, 14.5, 10.0)
        assert extent.outcome == SamplingOutcome.THRESHOLD_REACHED
        assert 0.0 < extent.extent_m < 20000.0
        assert extent.extent_m == extent.samples[-1].distance_m

        # Every retained sample beyond the source is at or above threshold
        assert all(s.concentration >= 1e-7 for s in extent.samples[1:])

        # The next step, which was not retained, is below threshold
        next_x = extent.extent_m + 100.0
        sy, sz = compute_sigma(next_x, "D")
        assert centerline_concentration(1.0, sy, sz, 14.5, 10.0) < 1e-7

    def test_source_sample_always_retained(self):
        """The x = 0 sample is kept even when it is below threshold."""
        extent = sample_plume("C", 8.0, 20.0, 4.47, threshold=1.0)
        assert extent.outcome == SamplingOutcome.THRESHOLD_REACHED
        assert [s.distance_m for s in extent.samples] == [0.0]
        assert extent.extent_m == 0.0

    def test_distances_increase(self):
        extent = sample_plume("B", 3.0, 12.0, 2.5)
        distances = [s.distance_m for s in extent.samples]
        assert distances == sorted(distances)
        assert len(set(distances)) == len(distances)


class TestProjection:
    @pytest.mark.parametrize(
        "direction, expected_deg",
        [(270.0, 0.0), (0.0, 270.0), (90.0, 180.0), (180.0, 90.0), (360.0, 270.0)],
    )
    def test_wind_rotation_angle(self, direction, expected_deg):
        assert wind_rotation_angle(direction) == pytest.approx(math.radians(expected_deg))

    def test_rotate_quarter_turn(self):
        x, y = rotate_offsets(1.0, 0.0, math.pi / 2)
        assert float(x) == pytest.approx(0.0, abs=1e-12)
        assert float(y) == pytest.approx(1.0)

    def test_one_degree_at_equator(self):
        one_degree_m = 6371000.0 * math.pi / 180.0
        dlon, dlat = meters_to_delta_lonlat(one_degree_m, one_degree_m, 0.0)
        assert float(dlon) == pytest.approx(1.0)
        assert float(dlat) == pytest.approx(1.0)

    def test_longitude_stretches_with_latitude(self):
        dlon_eq, _ = meters_to_delta_lonlat(1000.0, 0.0, 0.0)
        dlon_60, _ = meters_to_delta_lonlat(1000.0, 0.0, 60.0)
        assert float(dlon_60) == pytest.approx(2 * float(dlon_eq))


class TestAssemblePolygon:
    def test_empty_samples_give_degenerate_ring(self):
        assert assemble_polygon([], 10.0, 20.0, 270.0) == [(20.0, 10.0), (20.0, 10.0)]

    def test_single_sample_gives_four_points(self):
        extent = sample_plume("C", 8.0, 20.0, 4.47, max_distance=0.0)
        points = assemble_polygon(extent.samples, 10.0, 20.0, 270.0)
        assert len(points) == 4
        assert points[0] == points[-1] == (20.0, 10.0)

    def test_edges_trace_out_and_back(self):
        extent = sample_plume("C", 8.0, 20.0, 4.47, max_distance=1000.0)
        n = len(extent.samples)
        points = assemble_polygon(extent.samples, 0.0, 0.0, 270.0)
        assert len(points) == 2 * n + 2

        right = points[1:1 + n]
        left = points[1 + n:-1]
        # West wind: downwind distance maps to longitude
        assert [p[0] for p in right] == sorted(p[0] for p in right)
        assert [p[0] for p in left] == sorted((p[0] for p in left), reverse=True)
        assert all(p[1] > 0 for p in right)
        assert all(p[1] < 0 for p in left)

    def test_half_width_multiplier(self):
        extent = sample_plume("C", 8.0, 20.0, 4.47, max_distance=1000.0)
        points = assemble_polygon(extent.samples, 0.0, 0.0, 270.0, half_width_sigmas=2.15)
        last = extent.samples[-1]
        _, dlat = meters_to_delta_lonlat(0.0, 2.15 * last.sigma_y, 0.0)
        assert points[len(extent.samples)][1] == pytest.approx(float(dlat))


class TestFallbackPolygon:
    def test_shape(self, source_location):
        lat, lon = source_location["latitude"], source_location["longitude"]
        points = fallback_polygon(lat, lon)
        assert len(points) == 4
        assert points[0] == points[-1] == (lon, lat)
        assert points[1][0] > lon and points[1][1] == lat
        assert points[2][0] == lon and points[2][1] > lat


class TestBuildPlumeFootprint:
    def test_reference_ammonia_scenario(self, source_location, reference_weather, ammonia):
        lat, lon = source_location["latitude"], source_location["longitude"]
        fp = build_plume_footprint(lat, lon, reference_weather, ammonia)

        assert fp.stability_class == StabilityClass.C
        assert fp.emission_rate == 8.0
        assert len(fp.coordinates) > 4
        assert fp.coordinates[0] == (-98.5795, 39.8283)
        assert fp.coordinates[-1] == (-98.5795, 39.8283)
        assert not fp.is_fallback

        lons = np.array([p[0] for p in fp.coordinates])
        lats = np.array([p[1] for p in fp.coordinates])
        assert np.all(np.isfinite(lons)) and np.all(np.isfinite(lats))
        assert np.max(np.abs(lons - lon)) < 0.25
        assert np.max(np.abs(lats - lat)) < 0.2
        # West wind carries the plume east of the source
        assert np.min(lons) >= lon

    def test_reference_plume_rise(self, source_location, reference_weather, ammonia):
        fp = build_plume_footprint(
            source_location["latitude"], source_location["longitude"],
            reference_weather, ammonia,
        )
        assert fp.plume_rise == pytest.approx(10.1, abs=0.2)
        assert fp.effective_height == pytest.approx(10.0 + fp.plume_rise)

    def test_reaches_max_distance(self, source_location, reference_weather, ammonia):
        fp = build_plume_footprint(
            source_location["latitude"], source_location["longitude"],
            reference_weather, ammonia,
        )
        assert fp.outcome == SamplingOutcome.MAX_DISTANCE_REACHED
        assert fp.extent_m == 20000.0

    def test_cold_release_has_no_rise(self, source_location, reference_weather, ammonia):
        stack = StackParameters(exit_temperature_offset=-50.0)
        fp = build_plume_footprint(
            source_location["latitude"], source_location["longitude"],
            reference_weather, ammonia, stack=stack,
        )
        assert fp.plume_rise == 0.0
        assert fp.effective_height == 10.0

    def test_deterministic(self, source_location, reference_weather, ammonia):
        args = (source_location["latitude"], source_location["longitude"],
                reference_weather, ammonia)
        assert build_plume_footprint(*args).coordinates == build_plume_footprint(*args).coordinates

    def test_closed_and_ordered_for_many_winds(self, source_location, ammonia, reference_weather):
        lat, lon = source_location["latitude"], source_location["longitude"]
        for speed in [0.5, 2.0, 4.0, 5.5, 9.0]:
            for direction in [0.0, 45.0, 135.0, 270.0, 359.0]:
                weather = replace(reference_weather, wind_speed=speed, wind_direction=direction)
                fp = build_plume_footprint(lat, lon, weather, ammonia)
                assert fp.coordinates[0] == fp.coordinates[-1]
                assert len(fp.coordinates) >= 4
                distances = [s.distance_m for s in fp.extent.samples]
                assert distances == sorted(distances)

    def test_north_wind_blows_south(self, source_location, reference_weather, ammonia):
        lat, lon = source_location["latitude"], source_location["longitude"]
        weather = replace(reference_weather, wind_direction=0.0)
        fp = build_plume_footprint(lat, lon, weather, ammonia)
        lats = np.array([p[1] for p in fp.coordinates])
        assert np.all(lats <= lat + 1e-9)
        assert np.min(lats) < lat - 0.1

    def test_fallback_when_nothing_sampled(self, source_location, reference_weather, ammonia):
        lat, lon = source_location["latitude"], source_location["longitude"]
        fp = build_plume_footprint(lat, lon, reference_weather, ammonia, max_distance=-1.0)
        assert fp.is_fallback
        assert fp.coordinates == tuple(fallback_polygon(lat, lon))

    def test_stability_override_reaches_stable_branch(
        self, source_location, reference_weather, ammonia
    ):
        fp = build_plume_footprint(
            source_location["latitude"], source_location["longitude"],
            reference_weather, ammonia, stability_class="F",
        )
        assert fp.stability_class == StabilityClass.F
        neutral = build_plume_footprint(
            source_location["latitude"], source_location["longitude"],
            reference_weather, ammonia, stability_class="D",
        )
        assert fp.plume_rise != neutral.plume_rise

    def test_non_finite_temperature_rejected(self, source_location, reference_weather, ammonia):
        weather = SimpleNamespace(**{**vars(reference_weather), "temperature": float("nan")})
        with pytest.raises(InvalidInputError, match="temperature"):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"], weather, ammonia
            )

    def test_missing_temperature_rejected(self, source_location, reference_weather, ammonia):
        weather = SimpleNamespace(**{**vars(reference_weather), "temperature": None})
        with pytest.raises(InvalidInputError, match="temperature"):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"], weather, ammonia
            )

    def test_non_finite_stack_rejected(self, source_location, reference_weather, ammonia):
        stack = StackParameters(stack_diameter=float("inf"))
        with pytest.raises(InvalidInputError, match="stack_diameter"):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"],
                reference_weather, ammonia, stack=stack,
            )

    @pytest.mark.parametrize(
        "field",
        ["stack_height", "stack_diameter", "exit_velocity", "exit_temperature_offset"],
    )
    def test_missing_stack_field_rejected(
        self, source_location, reference_weather, ammonia, field
    ):
        stack = replace(StackParameters(), **{field: None})
        with pytest.raises(InvalidInputError, match=field):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"],
                reference_weather, ammonia, stack=stack,
            )

    @pytest.mark.parametrize("value", [float("nan"), None])
    def test_bad_wind_speed_rejected(self, source_location, reference_weather, ammonia, value):
        weather = SimpleNamespace(**{**vars(reference_weather), "wind_speed": value})
        with pytest.raises(InvalidInputError, match="wind_speed"):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"], weather, ammonia
            )

    def test_exit_at_absolute_zero_rejected(self, source_location, reference_weather, ammonia):
        weather = replace(reference_weather, temperature=32.0)
        stack = StackParameters(exit_temperature_offset=-273.15)
        with pytest.raises(InvalidInputError, match="must be positive"):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"],
                weather, ammonia, stack=stack,
            )

    def test_exit_below_absolute_zero_rejected(
        self, source_location, reference_weather, ammonia
    ):
        stack = StackParameters(exit_temperature_offset=-400.0)
        with pytest.raises(InvalidInputError, match="must be positive"):
            build_plume_footprint(
                source_location["latitude"], source_location["longitude"],
                reference_weather, ammonia, stack=stack,
            )

    @pytest.mark.parametrize("lat, lon", [(None, -98.0), (39.0, float("nan"))])
    def test_bad_coordinates_rejected(self, lat, lon, reference_weather, ammonia):
        with pytest.raises(InvalidInputError):
            build_plume_footprint(lat, lon, reference_weather, ammonia)
