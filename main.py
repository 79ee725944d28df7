"""
Chemical Release Footprint Estimator — Streamlit Interface.

Run with:  streamlit run main.py
"""

import sys
import os

# Ensure the project root is on the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import json
import logging

import streamlit as st

from config import (
    DEFAULT_EXIT_TEMP_OFFSET_C,
    DEFAULT_EXIT_VELOCITY,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_STACK_DIAMETER_M,
    DEFAULT_STACK_HEIGHT_M,
    DEFAULT_TEMPERATURE_F,
    DEFAULT_WIND_DIRECTION,
    DEFAULT_WIND_SPEED,
    OPENWEATHER_API_KEY,
)
from data.chemicals import InMemoryChemicalRepository
from data.weather import OpenWeatherMapProvider, StubWeatherProvider
from errors import DispersionError
from models.geometry import build_plume_footprint
from models.plume_rise import StackParameters
from models.stability import StabilityClass
from prediction.orchestrator import footprint_to_feature
from visualization.plots import (
    create_centerline_profile,
    create_footprint_map,
    create_local_footprint_figure,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ── Page Config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Chemical Release Footprint Estimator",
    page_icon="☣️",
    layout="wide",
)

st.title("Chemical Release Footprint Estimator")
st.markdown(
    "Estimates the ground-level region where a released chemical stays above a "
    "visibility threshold, from the chemical's volatility and current wind conditions. "
    "Simplified single-source Gaussian plume with Briggs plume rise, for "
    "visualization only."
)

# ── Sidebar Controls ─────────────────────────────────────────────────────────

chemicals = InMemoryChemicalRepository()

st.sidebar.header("Release")

latitude = st.sidebar.number_input(
    "Latitude", min_value=-89.0, max_value=89.0, value=DEFAULT_LATITUDE, format="%.4f"
)
longitude = st.sidebar.number_input(
    "Longitude", min_value=-180.0, max_value=180.0, value=DEFAULT_LONGITUDE, format="%.4f"
)

chemical_options = {c.name: c for c in chemicals.list_all()}
chemical_name = st.sidebar.selectbox("Chemical", list(chemical_options))
chemical = chemical_options[chemical_name]

# ── Weather ─────────────────────────────────────────────────────────────────

st.sidebar.header("Weather")

live_available = bool(OPENWEATHER_API_KEY)
use_live = st.sidebar.toggle(
    "Live weather (OpenWeatherMap)",
    value=live_available,
    disabled=not live_available,
    help="Set OPENWEATHER_API_KEY to enable live weather.",
)

if use_live:
    provider = OpenWeatherMapProvider()
else:
    provider = StubWeatherProvider(
        wind_speed=st.sidebar.slider(
            "Wind Speed (m/s)", min_value=0.0, max_value=15.0,
            value=DEFAULT_WIND_SPEED, step=0.1,
        ),
        wind_direction=st.sidebar.slider(
            "Wind Direction (degrees, meteorological — direction wind comes FROM)",
            min_value=0, max_value=359, value=DEFAULT_WIND_DIRECTION, step=5,
        ),
        temperature=st.sidebar.slider(
            "Air Temperature (°F)", min_value=-20.0, max_value=110.0,
            value=DEFAULT_TEMPERATURE_F, step=1.0,
        ),
    )

stability_choice = st.sidebar.selectbox(
    "Atmospheric Stability",
    ["Estimate from wind"] + [c.name for c in StabilityClass],
    help="A=very unstable, F=very stable. Wind-based estimate assumes daytime.",
)
stability_override = None if stability_choice == "Estimate from wind" else stability_choice

# ── Stack Settings ───────────────────────────────────────────────────────────

with st.sidebar.expander("Stack Parameters"):
    stack = StackParameters(
        stack_height=st.slider("Stack Height (m)", 0.0, 100.0, DEFAULT_STACK_HEIGHT_M, 1.0),
        stack_diameter=st.slider("Stack Diameter (m)", 0.1, 10.0, DEFAULT_STACK_DIAMETER_M, 0.1),
        exit_velocity=st.slider("Exit Velocity (m/s)", 0.0, 50.0, DEFAULT_EXIT_VELOCITY, 0.5),
        exit_temperature_offset=st.slider(
            "Exit Temperature Above Ambient (°C)", -50.0, 300.0,
            DEFAULT_EXIT_TEMP_OFFSET_C, 1.0,
        ),
    )

# ── Computation ──────────────────────────────────────────────────────────────

try:
    observation = provider.get_current_weather(latitude, longitude)
    footprint = build_plume_footprint(
        latitude, longitude, observation, chemical,
        stack=stack, stability_class=stability_override,
    )
except DispersionError as exc:
    logger.error("Prediction failed: %s", exc)
    st.error(f"Failed to run dispersion prediction: {exc}")
    st.stop()

feature = footprint_to_feature(footprint, chemical, observation)

# ── Summary Metrics Banner ───────────────────────────────────────────────────

m1, m2, m3, m4, m5 = st.columns(5)
m1.metric("Stability Class", str(footprint.stability_class))
m2.metric("Wind", f"{observation.wind_speed:.1f} m/s @ {observation.wind_direction:.0f}°")
m3.metric("Plume Rise", f"{footprint.plume_rise:.1f} m")
m4.metric("Effective Height", f"{footprint.effective_height:.1f} m")
m5.metric("Downwind Extent", f"{footprint.extent_m / 1000:.1f} km")

if footprint.is_fallback:
    st.warning("Plume too small to outline; showing a minimal marker shape.")

# ── Visualization ──────────────────────────────────────────────────────────

tab_map, tab_local, tab_profile = st.tabs(["Map", "Local Plane", "Centerline Profile"])

with tab_map:
    st.plotly_chart(create_footprint_map(feature), use_container_width=True)

with tab_local:
    st.plotly_chart(
        create_local_footprint_figure(
            footprint.extent, observation.wind_speed, observation.wind_direction
        ),
        use_container_width=True,
    )

with tab_profile:
    st.plotly_chart(create_centerline_profile(footprint.extent), use_container_width=True)

# ── Export ───────────────────────────────────────────────────────────────────

st.download_button(
    "Download GeoJSON",
    data=json.dumps(feature, indent=2),
    file_name=f"footprint_{chemical.name.lower().replace(' ', '_')}.geojson",
    mime="application/geo+json",
)

with st.expander("Chemical Details"):
    st.markdown(
        f"**{chemical.name}** ({chemical.hazard_type}) — volatility "
        f"{chemical.volatility_level}/10, solubility {chemical.solubility_level}/10\n\n"
        f"{chemical.description}"
    )
