"""
Grid Subset Configuration and Constants

This module centralizes all configuration parameters, constants, and default values
for better maintainability and consistency across the codebase.
"""

import os

# ============================================================================
# Axis Roles
# ============================================================================

TIME_DIM = 'time'
VERTICAL_DIM = 'z'
Y_DIM = 'y'
X_DIM = 'x'

# Canonical axis order of every grid, data sources are transposed to it
CANONICAL_ORDER = (TIME_DIM, VERTICAL_DIM, Y_DIM, X_DIM)

# ============================================================================
# Unit Spellings
# ============================================================================

LATITUDE_UNITS = frozenset({
    "degrees_north", "degree_north", "degree_n", "degrees_n",
    "degreen", "degreesn",
})

LONGITUDE_UNITS = frozenset({
    "degrees_east", "degree_east", "degree_e", "degrees_e",
    "degreee", "degreese",
})

# Plain degrees are geographic but ambiguous, the axis type decides
DEGREE_UNITS = frozenset({"degrees", "degree", "deg"}) | LATITUDE_UNITS | LONGITUDE_UNITS

# Scale from horizontal coordinate units to meters
LENGTH_UNIT_SCALE = {
    "m": 1.0,
    "meter": 1.0,
    "meters": 1.0,
    "metre": 1.0,
    "metres": 1.0,
    "km": 1000.0,
    "kilometer": 1000.0,
    "kilometers": 1000.0,
    "kilometre": 1000.0,
    "kilometres": 1000.0,
}

# ============================================================================
# CF Conventions
# ============================================================================

VERTICAL_STANDARD_NAMES = frozenset({
    "air_pressure",
    "altitude",
    "height",
    "depth",
    "model_level_number",
    "atmosphere_sigma_coordinate",
    "atmosphere_hybrid_sigma_pressure_coordinate",
    "atmosphere_hybrid_height_coordinate",
    "atmosphere_ln_pressure_coordinate",
    "ocean_s_coordinate",
    "ocean_s_coordinate_g1",
    "ocean_s_coordinate_g2",
    "ocean_sigma_coordinate",
})

PRESSURE_UNITS = frozenset({"pa", "hpa", "mbar", "millibar", "hectopascals", "pascal", "pascals", "kpa"})

# ============================================================================
# Geographic Subsetting
# ============================================================================

# Points sampled along each edge of a lat/lon rectangle before projecting
BOUNDARY_SAMPLES = int(os.environ.get("GRIDSUBSET_BOUNDARY_SAMPLES", "32"))

# Relative tolerance for plane bounding box comparisons
BBOX_RTOL = 1e-9

# ============================================================================
# Dataset Opening
# ============================================================================

# Users can override via GRIDSUBSET_ENGINE environment variable
DEFAULT_ENGINE = os.environ.get("GRIDSUBSET_ENGINE") or None

REMOTE_PREFIXES = ("http://", "https://", "dods://", "dap4://")

DATETIME_PRECISION = "ns"

# CF calendar assumed for time axes without a calendar attribute
DEFAULT_CALENDAR = "standard"

# ============================================================================
# Helper Functions
# ============================================================================

def is_remote_locator(locator: str) -> bool:
    """Check whether a dataset locator points to a remote server."""
    return str(locator).lower().startswith(REMOTE_PREFIXES)

def normalize_unit(units: str) -> str:
    """Lower-case a unit string and strip surrounding whitespace."""
    return str(units or "").strip().lower()
