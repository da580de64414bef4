"""
Grid Subset - A Python package for lazy subsetting of geo-referenced grids.

This package restricts gridded variables (time x vertical x y x x, or any
lower-rank variant) to a time range, a vertical range, a geographic bounding
box and per-axis strides, and reads the result straight from the underlying
xarray data source.

Key Features:
- Lazy views: no data is read until requested
- Latitude/longitude and projected grids (pyproj), date-line crossing boxes
- Per-axis strides and view-relative single-index reads
- Coordinate systems derived for every subset, vertical transforms included
- Same code path for in-memory arrays, local files and OPeNDAP URLs

Quick Start:
    >>> import gridsubset as gs
    >>> with gs.open_dataset("/path/to/file.nc") as gds:
    ...     grid = gds.find_grid("temperature")
    ...     view = grid.subset(
    ...         lat_lon_rect=gs.LatLonRect.from_bounds(120, 20, 125, 25),
    ...         vertical_stride=3,
    ...     )
    ...     data = view.read_volume_data(0)
"""

__version__ = "1.0.0"
__author__ = "Grid Subset Development Team"

# Import main interface functions
from .main import (
    # Primary interface
    open_dataset,
    subset,
    read_data_slice,
    read_volume_data,

    # Convenience functions
    read_region,

    # Utility functions
    convert_coordinates_to_indices,
    convert_indices_to_coordinates,
    convert_time_to_indices,
    convert_levels_to_indices,
)

# Import grid and dataset classes
from .grid.geogrid import GeoGrid, GridSectionView
from .io.dataset_loader import GridDataset
from .io.data_source import DataSource

# Import coordinate classes
from .coordinates import (
    AxisType,
    CoordinateAxis,
    GridCoordSystem,
    LatLonProjection,
    Projection,
    ProjProjection,
    VerticalTransform,
)

# Import parameter classes for structured interface
from .core.core_types import (
    Range,
    LatLonPoint,
    LatLonRect,
    ProjectionRect,
    SubsetRequest,
)
from .core.data_types import (
    TypeSort,
    AtomicType,
    StructureType,
    SequenceType,
)

# Import configuration for advanced users
from .core.config import (
    TIME_DIM,
    VERTICAL_DIM,
    Y_DIM,
    X_DIM,
    BOUNDARY_SAMPLES,
)

# Import exceptions for error handling
from .core.exceptions import (
    GridSubsetError,
    OpenFailureError,
    DatasetNotFoundError,
    UnsupportedFormatError,
    RemoteUnavailableError,
    RangeOutOfBoundsError,
    EmptySubsetResultError,
    IncompatibleAxisRequestError,
    ReadFailureError,
    CoordinateError,
    ParameterError,
    GridNotFoundError,
)

# Import logging configuration
from .core.logging_config import setup_logging, set_log_level

# Define what gets imported with "from gridsubset import *"
__all__ = [
    # Version info
    '__version__',

    # Main interface functions
    'open_dataset',
    'subset',
    'read_data_slice',
    'read_volume_data',
    'read_region',

    # Utility functions
    'convert_coordinates_to_indices',
    'convert_indices_to_coordinates',
    'convert_time_to_indices',
    'convert_levels_to_indices',

    # Grids and datasets
    'GeoGrid',
    'GridSectionView',
    'GridDataset',
    'DataSource',

    # Coordinates
    'AxisType',
    'CoordinateAxis',
    'GridCoordSystem',
    'LatLonProjection',
    'Projection',
    'ProjProjection',
    'VerticalTransform',

    # Parameter classes
    'Range',
    'LatLonPoint',
    'LatLonRect',
    'ProjectionRect',
    'SubsetRequest',

    # Element types
    'TypeSort',
    'AtomicType',
    'StructureType',
    'SequenceType',

    # Configuration constants
    'TIME_DIM',
    'VERTICAL_DIM',
    'Y_DIM',
    'X_DIM',
    'BOUNDARY_SAMPLES',

    # Exception classes
    'GridSubsetError',
    'OpenFailureError',
    'DatasetNotFoundError',
    'UnsupportedFormatError',
    'RemoteUnavailableError',
    'RangeOutOfBoundsError',
    'EmptySubsetResultError',
    'IncompatibleAxisRequestError',
    'ReadFailureError',
    'CoordinateError',
    'ParameterError',
    'GridNotFoundError',

    # Logging configuration
    'setup_logging',
    'set_log_level',
]

import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
