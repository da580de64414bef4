"""
Grid Subset Main Interface

This module provides the main API functions for opening datasets, subsetting
grids and reading subsets. Conversion helpers live in the utils package and
are re-exported here.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union
import numpy as np

from .core.core_types import LatLonRect, RangeConstraint, SubsetRequest
from .core.exceptions import ParameterError
from .grid.geogrid import KEEP_AXIS, GeoGrid, GridSectionView
from .io.dataset_loader import GridDataset, open_dataset as _open_dataset

# Get logger for this module
logger = logging.getLogger('gridsubset.main')

from .utils import (
    convert_coordinates_to_indices,
    convert_indices_to_coordinates,
    convert_time_to_indices,
    convert_levels_to_indices,
)


# ============================================================================
# Main API Functions
# ============================================================================

def open_dataset(
    locator: Union[str, Path],
    *,
    engine: Optional[str] = None,
    chunks: Optional[Union[int, str, Mapping[str, Any]]] = None,
) -> GridDataset:
    """
    Open a dataset and discover its grids.

    Args:
        locator: File path or URL
        engine: xarray backend engine (e.g. "netcdf4", "h5netcdf")
        chunks: Dask chunking; None opens lazily without dask

    Returns:
        GridDataset: Handle owning the dataset; use it as a context manager

    Examples:
        >>> with open_dataset("/path/to/file.nc") as gds:
        ...     print(gds.grid_names)
    """
    return _open_dataset(locator, engine=engine, chunks=chunks)


def subset(
    grid: GeoGrid,
    *,
    time_range: RangeConstraint = None,
    vertical_range: RangeConstraint = None,
    lat_lon_rect: Optional[LatLonRect] = None,
    lon_range: Optional[Tuple[float, float]] = None,
    lat_range: Optional[Tuple[float, float]] = None,
    time_stride: int = 1,
    vertical_stride: int = 1,
    xy_stride: int = 1,
    y_stride: Optional[int] = None,
    x_stride: Optional[int] = None,
    request: Optional[SubsetRequest] = None,
) -> GridSectionView:
    """
    Subset a grid.

    The geographic extent is given either as ``lat_lon_rect`` or as a
    ``lon_range``/``lat_range`` pair. Alternatively pass a prepared
    ``SubsetRequest``, which then supersedes every other argument.

    Args:
        grid: Grid or view to subset
        time_range: Index Range or (start, end) times
        vertical_range: Index Range or (low, high) vertical coordinates
        lat_lon_rect: Geographic bounding box
        lon_range: Longitude range (west, east) in degrees
        lat_range: Latitude range (south, north) in degrees
        time_stride: Stride on the time axis
        vertical_stride: Stride on the vertical axis
        xy_stride: Stride on both horizontal axes
        y_stride: Stride on the y axis, overrides xy_stride
        x_stride: Stride on the x axis, overrides xy_stride
        request: Consolidated subset parameters

    Returns:
        GridSectionView: Lazy view of the subset

    Examples:
        # Every third level of a region for the first day
        >>> view = subset(
        ...     grid,
        ...     time_range=("2020-01-01", "2020-01-01T23:59"),
        ...     lon_range=(120, 122), lat_range=(23, 25),
        ...     vertical_stride=3,
        ... )
        >>> data = view.read_volume_data(0)
    """
    if request is None:
        if lat_lon_rect is not None and (lon_range is not None or lat_range is not None):
            raise ParameterError("lat_lon_rect", str(lat_lon_rect),
                                 "Give either lat_lon_rect or lon_range/lat_range, not both")
        if lon_range is not None or lat_range is not None:
            lat_lon_rect = _rect_from_ranges(grid, lon_range, lat_range)
        request = SubsetRequest(
            time_range=time_range,
            vertical_range=vertical_range,
            lat_lon_rect=lat_lon_rect,
            time_stride=time_stride,
            vertical_stride=vertical_stride,
            y_stride=xy_stride if y_stride is None else y_stride,
            x_stride=xy_stride if x_stride is None else x_stride,
        )

    logger.debug("Subsetting '%s' with %s", grid.name, request)
    return grid.subset(
        request.time_range,
        request.vertical_range,
        request.lat_lon_rect,
        request.time_stride,
        request.vertical_stride,
        y_stride=request.y_stride,
        x_stride=request.x_stride,
    )


def _rect_from_ranges(
    grid: GeoGrid,
    lon_range: Optional[Tuple[float, float]],
    lat_range: Optional[Tuple[float, float]],
) -> LatLonRect:
    """Bounding box from lon/lat ranges, the grid footprint filling any omitted range."""
    footprint = grid.get_coordinate_system().get_lat_lon_bounding_box()
    lat_min, lat_max = lat_range if lat_range is not None else (footprint.lat_min, footprint.lat_max)
    if lon_range is None:
        return LatLonRect(lat_min, footprint.lon_min, lat_max, footprint.width)
    return LatLonRect.from_bounds(lon_range[0], lat_min, lon_range[1], lat_max)


def read_data_slice(
    grid: GeoGrid,
    t_index: int = KEEP_AXIS,
    z_index: int = KEEP_AXIS,
    y_index: int = KEEP_AXIS,
    x_index: int = KEEP_AXIS,
) -> np.ndarray:
    """
    Read a grid, fixing any axis given a non-negative index.

    See ``GeoGrid.read_data_slice``.
    """
    return grid.read_data_slice(t_index, z_index, y_index, x_index)


def read_volume_data(grid: GeoGrid, t_index: int) -> np.ndarray:
    """Read one time step of a grid."""
    return grid.read_volume_data(t_index)


# ============================================================================
# Convenience Functions
# ============================================================================

def read_region(
    locator: Union[str, Path],
    grid_name: str,
    lon_range: Optional[Tuple[float, float]] = None,
    lat_range: Optional[Tuple[float, float]] = None,
    **kwargs
) -> np.ndarray:
    """
    Open a dataset, read a geographic region of one grid and close it.

    Args:
        locator: File path or URL
        grid_name: Name of the grid to read
        lon_range: Longitude range (west, east) in degrees
        lat_range: Latitude range (south, north) in degrees
        **kwargs: Additional arguments passed to subset()

    Returns:
        np.ndarray: Data of the region

    Raises:
        GridNotFoundError: If the dataset has no such grid

    Examples:
        >>> data = read_region("/path/to/file.nc", "t2m", lon_range=(120, 122), lat_range=(23, 25))
    """
    with open_dataset(locator) as gds:
        grid = gds.get_grid(grid_name)
        view = subset(grid, lon_range=lon_range, lat_range=lat_range, **kwargs)
        return view.read_all()


# ============================================================================
# Export List
# ============================================================================

__all__ = [
    # Main API
    'open_dataset',
    'subset',
    'read_data_slice',
    'read_volume_data',

    # Convenience functions
    'read_region',

    # Utility functions (re-exported from utils)
    'convert_coordinates_to_indices',
    'convert_indices_to_coordinates',
    'convert_time_to_indices',
    'convert_levels_to_indices',
]
