#!/usr/bin/env python3
"""
One-at-a-Time Sensitivity Analysis.

Sweeps individual release and weather parameters while holding the others
at the reference scenario (Ammonia Gas, 10 mph west wind, 65 F, default
stack). For each value, builds the footprint and reports stability class,
plume rise, downwind extent and how sampling ended.

Usage:
    python experiments/run_sensitivity_analysis.py
    python experiments/run_sensitivity_analysis.py --chemical-id 8 --quiet
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import replace

import numpy as np

from config import DEFAULT_LATITUDE, DEFAULT_LONGITUDE
from data.chemicals import InMemoryChemicalRepository
from data.weather import WeatherObservation
from models.geometry import build_plume_footprint
from models.plume_rise import StackParameters


# ---------------------------------------------------------------------------
# Parameter sweep definitions
# ---------------------------------------------------------------------------

PARAM_SWEEPS = {
    "wind_speed": [1.0, 2.5, 4.47, 5.5, 8.0, 12.0],
    "volatility_level": [1, 3, 5, 8, 10],
    "stack_height": [0.0, 10.0, 30.0, 60.0],
    "exit_temperature_offset": [-50.0, 0.0, 20.0, 100.0, 250.0],
    "stability_class": ["A", "B", "C", "D", "E", "F"],
}

REFERENCE_WEATHER = WeatherObservation(
    wind_speed=4.47, wind_direction=270.0, temperature=65.0, humidity=50.0
)


# ---------------------------------------------------------------------------
# Single run helper
# ---------------------------------------------------------------------------

def run_single(chemical, weather, stack, stability_class=None) -> dict:
    """Build one footprint and return its summary metrics."""
    fp = build_plume_footprint(
        DEFAULT_LATITUDE, DEFAULT_LONGITUDE, weather, chemical,
        stack=stack, stability_class=stability_class,
    )
    lons = np.array([p[0] for p in fp.coordinates])
    lats = np.array([p[1] for p in fp.coordinates])
    return {
        "stability_class": str(fp.stability_class),
        "plume_rise_m": fp.plume_rise,
        "effective_height_m": fp.effective_height,
        "extent_m": fp.extent_m,
        "outcome": fp.outcome.value,
        "num_points": len(fp.coordinates),
        "max_dlon": float(np.max(np.abs(lons - DEFAULT_LONGITUDE))),
        "max_dlat": float(np.max(np.abs(lats - DEFAULT_LATITUDE))),
    }


# ---------------------------------------------------------------------------
# Main sweep
# ---------------------------------------------------------------------------

def run_sensitivity(chemical_id: int = 1, verbose: bool = True):
    """Run one-at-a-time sensitivity analysis.

    Returns:
        List of dicts, one per (parameter, value) pair.
    """
    base_chemical = InMemoryChemicalRepository().get(chemical_id)
    base_stack = StackParameters()
    all_rows = []

    for param_name, values in PARAM_SWEEPS.items():
        if verbose:
            print(f"\n{'='*70}")
            print(f"Sweeping: {param_name}")
            print(f"  Values:  {values}")
            print(f"{'='*70}")
            print(f"  {'Value':>8}  {'Class':>5}  {'Rise(m)':>8}  {'H(m)':>8}  "
                  f"{'Extent(m)':>10}  {'Outcome':>20}")
            print(f"  {'-'*8}  {'-'*5}  {'-'*8}  {'-'*8}  {'-'*10}  {'-'*20}")

        for value in values:
            chemical, weather, stack, stability = base_chemical, REFERENCE_WEATHER, base_stack, None
            if param_name == "wind_speed":
                weather = replace(REFERENCE_WEATHER, wind_speed=value)
            elif param_name == "volatility_level":
                chemical = replace(base_chemical, volatility_level=value)
            elif param_name == "stability_class":
                stability = value
            else:
                stack = replace(base_stack, **{param_name: value})

            metrics = run_single(chemical, weather, stack, stability_class=stability)
            row = {"param": param_name, "value": value, **metrics}
            all_rows.append(row)

            if verbose:
                print(
                    f"  {str(value):>8}  {metrics['stability_class']:>5}  "
                    f"{metrics['plume_rise_m']:>8.2f}  {metrics['effective_height_m']:>8.2f}  "
                    f"{metrics['extent_m']:>10.0f}  {metrics['outcome']:>20}"
                )

    return all_rows


def print_summary(rows):
    """Print the extent range each parameter spans."""
    print(f"\n\n{'='*70}")
    print("SENSITIVITY ANALYSIS SUMMARY")
    print(f"{'='*70}")

    for param_name in PARAM_SWEEPS:
        param_rows = [r for r in rows if r["param"] == param_name]
        extents = [r["extent_m"] for r in param_rows]
        rises = [r["plume_rise_m"] for r in param_rows]
        print(f"\n  {param_name}:")
        print(f"    Extent range: {min(extents):.0f} m to {max(extents):.0f} m")
        print(f"    Plume rise range: {min(rises):.1f} m to {max(rises):.1f} m")


def main():
    parser = argparse.ArgumentParser(description="One-at-a-Time Sensitivity Analysis")
    parser.add_argument("--chemical-id", type=int, default=1, help="Reference chemical id")
    parser.add_argument("--quiet", action="store_true", help="Suppress per-value output")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    print("Sensitivity Analysis")
    print(f"Chemical id: {args.chemical_id}")
    print(f"Parameters: {list(PARAM_SWEEPS.keys())}")

    rows = run_sensitivity(chemical_id=args.chemical_id, verbose=not args.quiet)

    print_summary(rows)

    print(f"\nTotal: {len(rows)} footprint runs completed.")


if __name__ == "__main__":
    main()
