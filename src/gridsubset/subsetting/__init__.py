"""
Grid Subset Resolution

This package resolves subset requests into index ranges and derived
coordinate systems without touching any data.
"""

from .ranges import (
    full_range,
    apply_stride,
    validate_range,
    compose_ranges,
    resolve_range,
)
from .geographic import lat_lon_to_index_ranges
from .builder import build_coord_system, derive_axis

__all__ = [
    # Axis range resolution
    "full_range",
    "apply_stride",
    "validate_range",
    "compose_ranges",
    "resolve_range",
    # Geographic constraint
    "lat_lon_to_index_ranges",
    # Coordinate system
    "build_coord_system",
    "derive_axis",
]
