"""
Grid Subset Conversion Utilities

This module provides functions for converting between coordinate values and
index ranges on a grid (coordinates <-> indices, time <-> indices,
vertical levels <-> indices).
"""

from typing import Union, Tuple, Optional, Dict
import numpy as np

from ..core.core_types import LatLonRect, Range, TimeRange
from ..core.exceptions import EmptySubsetResultError, IncompatibleAxisRequestError
from ..coordinates.coord_system import GridCoordSystem
from ..coordinates.time_handler import convert_time_to_range, decode_time_axis
from ..grid.geogrid import GeoGrid
from ..subsetting.geographic import lat_lon_to_index_ranges

GridOrCoordSystem = Union[GeoGrid, GridCoordSystem]


def _coord_system(grid: GridOrCoordSystem) -> GridCoordSystem:
    return grid.get_coordinate_system() if isinstance(grid, GeoGrid) else grid


def _as_range(index_range: Optional[Union[Range, Tuple[int, int]]], size: int) -> Range:
    if index_range is None:
        return Range.full(size)
    if isinstance(index_range, Range):
        return index_range
    return Range(*index_range)


# ============================================================================
# Spatial Coordinate Conversion
# ============================================================================

def convert_coordinates_to_indices(
    grid: GridOrCoordSystem,
    lon_range: Optional[Tuple[float, float]] = None,
    lat_range: Optional[Tuple[float, float]] = None
) -> Dict:
    """
    Convert longitude/latitude ranges to index ranges on a grid.

    An omitted range covers the whole grid in that direction.

    Args:
        grid: Grid or coordinate system
        lon_range: Longitude range (west, east); west > east crosses the date line
        lat_range: Latitude range (south, north)

    Returns:
        Dict: ``y_range`` and ``x_range`` as inclusive index tuples plus the
            ``lat_lon_rect`` used

    Raises:
        EmptySubsetResultError: If the box misses the grid

    Examples:
        >>> indices = convert_coordinates_to_indices(
        ...     grid,
        ...     lon_range=(120.5, 121.5),
        ...     lat_range=(23.5, 24.5)
        ... )
        >>> print(f"X indices: {indices['x_range']}")
        >>> view = grid.subset_ranges(y_range=Range(*indices['y_range']), x_range=Range(*indices['x_range']))
    """
    gcs = _coord_system(grid)
    footprint = gcs.get_lat_lon_bounding_box()

    lat_min, lat_max = lat_range if lat_range is not None else (footprint.lat_min, footprint.lat_max)
    if lon_range is not None:
        rect = LatLonRect.from_bounds(lon_range[0], lat_min, lon_range[1], lat_max)
    else:
        rect = LatLonRect(lat_min, footprint.lon_min, lat_max, footprint.width)

    y_range, x_range = lat_lon_to_index_ranges(gcs, rect)
    return {
        'y_range': (y_range.first, y_range.last),
        'x_range': (x_range.first, x_range.last),
        'lat_lon_rect': rect,
    }


def convert_indices_to_coordinates(
    grid: GridOrCoordSystem,
    x_range: Optional[Union[Range, Tuple[int, int]]] = None,
    y_range: Optional[Union[Range, Tuple[int, int]]] = None
) -> Dict:
    """
    Convert index ranges to coordinate ranges on a grid.

    Args:
        grid: Grid or coordinate system
        x_range: X-index range, whole axis when omitted
        y_range: Y-index range, whole axis when omitted

    Returns:
        Dict: ``x_coord_range`` and ``y_coord_range`` (first/last selected
            values in axis units) and ``lat_lon_rect`` covering the selection

    Examples:
        >>> coords = convert_indices_to_coordinates(grid, x_range=(10, 20), y_range=(5, 15))
        >>> print(f"Covers: {coords['lat_lon_rect']}")
    """
    gcs = _coord_system(grid)
    x_sel = _as_range(x_range, gcs.x_axis.size)
    y_sel = _as_range(y_range, gcs.y_axis.size)
    x_axis = gcs.x_axis.section(x_sel)
    y_axis = gcs.y_axis.section(y_sel)

    sub = GridCoordSystem(y_axis=y_axis, x_axis=x_axis, projection=gcs.projection)
    return {
        'x_coord_range': (float(x_axis.values[0]), float(x_axis.values[-1])),
        'y_coord_range': (float(y_axis.values[0]), float(y_axis.values[-1])),
        'units': (y_axis.units, x_axis.units),
        'lat_lon_rect': sub.get_lat_lon_bounding_box(),
    }


# ============================================================================
# Time Conversion
# ============================================================================

def convert_time_to_indices(
    grid: GridOrCoordSystem,
    time_range: TimeRange,
) -> Dict:
    """
    Convert a time range to the index range of the grid's time axis.

    Args:
        grid: Grid or coordinate system with a time axis
        time_range: Time range (start_time, end_time), either end may be None

    Returns:
        Dict: Index range and the matching timestamps

    Raises:
        IncompatibleAxisRequestError: If the grid has no time axis
        EmptySubsetResultError: If no time matches
    """
    gcs = _coord_system(grid)
    if gcs.time_axis is None:
        raise IncompatibleAxisRequestError("time", "Grid has no time axis")

    rng = convert_time_to_range(gcs.time_axis, time_range)
    times = decode_time_axis(gcs.time_axis)[rng.to_slice()]
    return {
        'time_index_range': (rng.first, rng.last),
        'actual_start_time': times[0],
        'actual_end_time': times[-1],
        'timestamps': list(times),
    }


# ============================================================================
# Vertical Conversion
# ============================================================================

def convert_levels_to_indices(
    grid: GridOrCoordSystem,
    level_range: Tuple[float, float]
) -> Dict:
    """
    Convert a vertical coordinate range to a vertical index range.

    Args:
        grid: Grid or coordinate system with a vertical axis
        level_range: (low, high) in the vertical axis units

    Returns:
        Dict: Index range and additional info

    Raises:
        IncompatibleAxisRequestError: If the grid has no vertical axis
        EmptySubsetResultError: If no level cell intersects the range
    """
    gcs = _coord_system(grid)
    axis = gcs.vertical_axis
    if axis is None:
        raise IncompatibleAxisRequestError("vertical", "Grid has no vertical axis")

    rng = axis.find_enclosing_range(*level_range)
    if rng is None:
        raise EmptySubsetResultError(
            f"level_range={level_range}",
            f"{axis.name}: [{axis.min_edge:g}, {axis.max_edge:g}] {axis.units}"
        )
    levels = axis.values[rng.to_slice()]
    return {
        'index_range': (rng.first, rng.last),
        'actual_level_range': (float(levels[0]), float(levels[-1])),
        'num_levels': int(levels.size),
        'all_levels': np.asarray(levels).tolist(),
        'units': axis.units,
    }
