"""
Grid Subset Geographic Index Projection

This module converts a geographic bounding box into index ranges on the
horizontal axes of a grid, projecting the box into the grid's plane when the
axes are not latitude/longitude.
"""

from typing import Optional, Tuple

from ..core.core_types import LatLonRect, Range
from ..core.exceptions import EmptySubsetResultError
from ..core.logging_config import get_logger
from ..coordinates.axis import CoordinateAxis
from ..coordinates.coord_system import GridCoordSystem
from .ranges import apply_stride

logger = get_logger('subsetting.geographic')

# Longitude offsets tried when matching a rectangle against a longitude axis
_LONGITUDE_SHIFTS = (-360.0, 0.0, 360.0)


def _union(current: Optional[Range], new: Optional[Range]) -> Optional[Range]:
    if new is None:
        return current
    if current is None:
        return new
    return current.union(new)


def _longitude_range(x_axis: CoordinateAxis, rect: LatLonRect) -> Optional[Range]:
    """
    Cells of a longitude axis intersecting the rectangle, modulo 360.

    Matches on either side of the seam are merged into one contiguous range.
    """
    if rect.is_all_longitudes:
        return Range.full(x_axis.size)
    result = None
    for shift in _LONGITUDE_SHIFTS:
        match = x_axis.find_enclosing_range(rect.lon_min + shift, rect.lon_max + shift)
        result = _union(result, match)
    return result


def _lat_lon_axes_ranges(gcs: GridCoordSystem, rect: LatLonRect) -> Tuple[Optional[Range], Optional[Range]]:
    y_range = gcs.y_axis.find_enclosing_range(rect.lat_min, rect.lat_max)
    x_range = _longitude_range(gcs.x_axis, rect)
    return y_range, x_range


def _projected_axes_ranges(gcs: GridCoordSystem, rect: LatLonRect) -> Tuple[Optional[Range], Optional[Range]]:
    y_range = None
    x_range = None
    for prect in gcs.projection.lat_lon_to_proj_rect(rect):
        y_match = gcs.y_axis.find_enclosing_range(prect.y_min, prect.y_max)
        x_match = gcs.x_axis.find_enclosing_range(prect.x_min, prect.x_max)
        logger.debug("Plane rect %s -> y=%s x=%s", prect, y_match, x_match)
        if y_match is None or x_match is None:
            continue
        y_range = _union(y_range, y_match)
        x_range = _union(x_range, x_match)
    return y_range, x_range


def lat_lon_to_index_ranges(
    gcs: GridCoordSystem,
    rect: LatLonRect,
    y_stride: int = 1,
    x_stride: int = 1
) -> Tuple[Range, Range]:
    """
    Index ranges on the y and x axes enclosing a geographic rectangle.

    Latitude/longitude axes are intersected directly. Otherwise the rectangle
    is split at the seam, forward-projected, and each plane rectangle is
    intersected with the x/y cell bounds; the results are unioned. A
    rectangle larger than the grid yields the full axes.

    Args:
        gcs: Coordinate system of the grid
        rect: Geographic bounding box
        y_stride: Stride applied to the y range
        x_stride: Stride applied to the x range

    Returns:
        Tuple[Range, Range]: ``(y_range, x_range)`` in absolute axis indices

    Raises:
        EmptySubsetResultError: If the rectangle misses the grid footprint
    """
    if gcs.is_lat_lon:
        y_range, x_range = _lat_lon_axes_ranges(gcs, rect)
        footprint = gcs.get_lat_lon_bounding_box
    else:
        y_range, x_range = _projected_axes_ranges(gcs, rect)
        footprint = gcs.get_bounding_box

    if y_range is None or x_range is None:
        raise EmptySubsetResultError(rect, footprint())

    y_range = apply_stride(y_range, y_stride)
    x_range = apply_stride(x_range, x_stride)
    logger.debug("Resolved %s to y=%s x=%s", rect, y_range, x_range)
    return y_range, x_range
