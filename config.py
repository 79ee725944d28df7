"""
Global configuration and constants for the Chemical Release Footprint Estimator.
"""

import os

# --- Geodesy ---
EARTH_RADIUS_M = 6371000.0     # Mean Earth radius (meters)

# --- Downwind Sampling ---
MAX_DOWNWIND_DISTANCE_M = 20000.0  # Farthest downwind distance sampled (meters)
DISTANCE_STEP_M = 100.0            # Spacing between centerline samples (meters)
CONCENTRATION_THRESHOLD = 1e-7     # Visibility threshold — plume edge ends below this

# --- Floors ---
MIN_SIGMA_Y_M = 1.0            # Minimum lateral spread, avoids zero-width geometry
MIN_SIGMA_Z_M = 1.0            # Minimum vertical spread
MIN_WIND_SPEED = 0.1           # m/s — floor used wherever wind divides

# --- Units / Physics ---
MPH_TO_MPS = 0.44704           # Wind speed conversion (imperial weather feeds)
GRAVITY = 9.81                 # m/s^2
KELVIN_OFFSET = 273.15

# --- Default Stack Parameters ---
DEFAULT_STACK_HEIGHT_M = 10.0      # meters
DEFAULT_STACK_DIAMETER_M = 1.0     # meters
DEFAULT_EXIT_VELOCITY = 10.0       # m/s
DEFAULT_EXIT_TEMP_OFFSET_C = 20.0  # degrees C above ambient

# --- Visual Tuning (not physics; calibrate separately from the formulas) ---
PLUME_RISE_AMPLIFICATION = 1.5     # Multiplier applied to Briggs plume rise
PLUME_HALF_WIDTH_SIGMAS = 3.0      # Half-width in sigma_y (canonical 10% edge is 2.15)
FALLBACK_OFFSET_M = 10.0           # Size of the fallback quadrilateral (meters)

# --- Briggs Plume Rise ---
BRIGGS_LARGE_FLUX_THRESHOLD = 55.0  # m^4/s^3 — switches between the two buoyant branches
# Stability parameter s = (g / Ta) * (dTheta/dz), typical values for stable classes
STABLE_STABILITY_PARAMETER = {
    "E": 0.0005,
    "F": 0.0015,
}

# --- Pasquill-Gifford Stability Classes ---
# Coefficients for sigma_y and sigma_z: sigma_km = a * x_km^b
# Open-country power-law approximations; x and sigma in kilometers
DISPERSION_COEFFICIENTS = {
    "A": {"sigma_y": (0.22, 0.89), "sigma_z": (0.20, 1.0)},
    "B": {"sigma_y": (0.16, 0.89), "sigma_z": (0.12, 1.0)},
    "C": {"sigma_y": (0.11, 0.89), "sigma_z": (0.08, 0.7)},
    "D": {"sigma_y": (0.08, 0.89), "sigma_z": (0.06, 0.7)},
    "E": {"sigma_y": (0.06, 0.89), "sigma_z": (0.03, 0.7)},
    "F": {"sigma_y": (0.04, 0.89), "sigma_z": (0.016, 0.7)},
}
DEFAULT_STABILITY_CLASS = "D"  # Neutral — fallback for unrecognized classes

# --- Prediction Output ---
MODEL_TYPE = "Simplified Gaussian Plume with Briggs Plume Rise"

# --- Weather Service ---
OPENWEATHER_API_KEY = os.environ.get("OPENWEATHER_API_KEY", "")
OPENWEATHER_URL = os.environ.get(
    "OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
)
WEATHER_TIMEOUT_S = float(os.environ.get("WEATHER_TIMEOUT_S", "10"))

# --- Interactive Defaults ---
DEFAULT_LATITUDE = 39.8283
DEFAULT_LONGITUDE = -98.5795
DEFAULT_WIND_SPEED = 4.47      # m/s (10 mph)
DEFAULT_WIND_DIRECTION = 270   # Meteorological convention: direction wind comes FROM (degrees)
DEFAULT_TEMPERATURE_F = 65.0
