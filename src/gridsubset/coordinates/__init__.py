"""
Grid Subset Coordinate Handling

This package provides coordinate axes, map projections, vertical
transforms, time coordinate decoding and the grid coordinate system.
"""

from .axis import AxisType, CoordinateAxis
from .projection import (
    Projection,
    LatLonProjection,
    ProjProjection,
    projection_for,
)
from .vertical_transform import VerticalTransform
from .coord_system import GridCoordSystem
from .time_handler import (
    normalize_time_value,
    normalize_time_range,
    to_calendar_datetime,
    time_calendar,
    decode_time_axis,
    convert_time_to_range,
)

__all__ = [
    # Axes
    "AxisType",
    "CoordinateAxis",
    # Projections
    "Projection",
    "LatLonProjection",
    "ProjProjection",
    "projection_for",
    # Vertical
    "VerticalTransform",
    # Coordinate system
    "GridCoordSystem",
    # Time
    "normalize_time_value",
    "normalize_time_range",
    "to_calendar_datetime",
    "time_calendar",
    "decode_time_axis",
    "convert_time_to_range",
]
