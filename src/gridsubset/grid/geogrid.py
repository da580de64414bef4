"""
Grid Subset Geo-Referenced Grids

This module defines the geo-referenced grid and its lazy section view. A view
shares the data source of the grid it was cut from and only records the
absolute index ranges to read; no data is touched until a read is requested.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple
import numpy as np

from ..core.config import TIME_DIM, VERTICAL_DIM, Y_DIM, X_DIM
from ..core.core_types import LatLonRect, Range, RangeConstraint
from ..core.data_types import ElementType, describe_dtype
from ..core.exceptions import (
    IncompatibleAxisRequestError, ParameterError, ReadFailureError, check_stride
)
from ..core.logging_config import get_logger
from ..coordinates.coord_system import GridCoordSystem
from ..io.data_source import DataSource
from ..subsetting.builder import build_coord_system
from ..subsetting.geographic import lat_lon_to_index_ranges
from ..subsetting.ranges import compose_ranges, resolve_range, validate_range

logger = get_logger('grid.geogrid')

# Directive value keeping the whole resolved range of an axis
KEEP_AXIS = -1

# ============================================================================
# Geo-Referenced Grid
# ============================================================================

class GeoGrid:
    """
    Gridded variable with its coordinate system.

    The axes present are always ordered ``(time, vertical, y, x)``; grids of
    lower rank simply omit the missing axes.

    Attributes:
        name: Variable name
        attrs: Variable attributes
        data_type: Element type of the variable
    """

    def __init__(
        self,
        name: str,
        coord_system: GridCoordSystem,
        data_source: DataSource,
        ranges: Optional[Mapping[str, Range]] = None,
        attrs: Optional[Mapping[str, Any]] = None,
        data_type: Optional[ElementType] = None,
    ):
        """
        Initialize a grid.

        Args:
            name: Variable name
            coord_system: Coordinate system describing every axis of the grid
            data_source: Raw slicing primitive over the variable
            ranges: Absolute index ranges into the data source per axis role,
                full ranges when omitted
            attrs: Variable attributes
            data_type: Element type, derived from the data source dtype when omitted

        Raises:
            ParameterError: If the ranges do not match the coordinate system
        """
        self._name = name
        self._coord_system = coord_system
        self._data_source = data_source
        self._attrs = dict(attrs or {})
        self._data_type = data_type if data_type is not None else describe_dtype(data_source.dtype, name)

        axes = coord_system.axes()
        if ranges is None:
            ranges = {role: Range.full(axis.size) for role, axis in axes.items()}
        if tuple(ranges) != tuple(axes):
            raise ParameterError("ranges", str(tuple(ranges)), f"Expected ranges for axes {tuple(axes)}")
        for role, axis in axes.items():
            if ranges[role].length != axis.size:
                raise ParameterError(
                    "ranges", str(ranges[role]),
                    f"Selects {ranges[role].length} elements but axis '{axis.name}' has {axis.size}"
                )
        if len(axes) != data_source.ndim:
            raise ParameterError(
                "data_source", data_source.name,
                f"Has {data_source.ndim} dimensions, coordinate system has {len(axes)}"
            )
        self._ranges = MappingProxyType(dict(ranges))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def attrs(self) -> Mapping[str, Any]:
        return MappingProxyType(self._attrs)

    @property
    def data_type(self) -> ElementType:
        return self._data_type

    @property
    def data_source(self) -> DataSource:
        return self._data_source

    @property
    def ranges(self) -> Mapping[str, Range]:
        """Absolute index ranges into the data source, by axis role."""
        return self._ranges

    @property
    def dims(self) -> Tuple[str, ...]:
        """Axis roles present, in canonical order."""
        return tuple(self._ranges)

    @property
    def rank(self) -> int:
        return len(self._ranges)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(rng.length for rng in self._ranges.values())

    def get_coordinate_system(self) -> GridCoordSystem:
        return self._coord_system

    @property
    def coord_system(self) -> GridCoordSystem:
        return self._coord_system

    # ------------------------------------------------------------------
    # Subsetting
    # ------------------------------------------------------------------

    def subset(
        self,
        time_range: RangeConstraint = None,
        vertical_range: RangeConstraint = None,
        lat_lon_rect: Optional[LatLonRect] = None,
        time_stride: int = 1,
        vertical_stride: int = 1,
        xy_stride: int = 1,
        *,
        y_stride: Optional[int] = None,
        x_stride: Optional[int] = None,
    ) -> GridSectionView:
        """
        Lazy view restricted in time, height and geographic extent.

        Ranges and strides are relative to this grid, so subsetting a view
        narrows it further.

        Args:
            time_range: Index Range or ``(start, end)`` time values
            vertical_range: Index Range or ``(low, high)`` coordinate values
            lat_lon_rect: Geographic bounding box
            time_stride: Stride on the time axis
            vertical_stride: Stride on the vertical axis
            xy_stride: Stride on both horizontal axes
            y_stride: Stride on the y axis, overrides ``xy_stride``
            x_stride: Stride on the x axis, overrides ``xy_stride``

        Returns:
            GridSectionView: View sharing this grid's data source

        Raises:
            IncompatibleAxisRequestError: Constraint on an axis the grid lacks
            RangeOutOfBoundsError: Explicit range outside an axis
            EmptySubsetResultError: Constraint matching no element
            ParameterError: Invalid stride
        """
        gcs = self._coord_system
        y_stride = check_stride("y", xy_stride if y_stride is None else y_stride)
        x_stride = check_stride("x", xy_stride if x_stride is None else x_stride)

        for constraint, axis, label in (
            (time_range, gcs.time_axis, "time"),
            (vertical_range, gcs.vertical_axis, "vertical"),
        ):
            if constraint is not None and axis is None:
                raise IncompatibleAxisRequestError(label, f"Grid '{self._name}' has no {label} axis")

        t_range = resolve_range(gcs.time_axis, time_range, time_stride, "time")
        z_range = resolve_range(gcs.vertical_axis, vertical_range, vertical_stride, "vertical")

        if lat_lon_rect is not None:
            y_range, x_range = lat_lon_to_index_ranges(gcs, lat_lon_rect, y_stride, x_stride)
        else:
            y_range = resolve_range(gcs.y_axis, None, y_stride, "y")
            x_range = resolve_range(gcs.x_axis, None, x_stride, "x")

        return self.subset_ranges(t_range, z_range, y_range, x_range)

    def subset_ranges(
        self,
        t_range: Optional[Range] = None,
        z_range: Optional[Range] = None,
        y_range: Optional[Range] = None,
        x_range: Optional[Range] = None,
    ) -> GridSectionView:
        """
        Lazy view from explicit index ranges relative to this grid.

        None keeps an axis whole.

        Raises:
            IncompatibleAxisRequestError: Range given for an axis the grid lacks
            RangeOutOfBoundsError: Range outside an axis
        """
        gcs = self._coord_system
        requested = {TIME_DIM: t_range, VERTICAL_DIM: z_range, Y_DIM: y_range, X_DIM: x_range}
        axes = gcs.axes()

        for role, rng in requested.items():
            if rng is None:
                continue
            if role not in axes:
                raise IncompatibleAxisRequestError(role, f"Grid '{self._name}' has no {role} axis")
            validate_range(rng, axes[role].size, axes[role].name)

        derived = build_coord_system(gcs, t_range, z_range, y_range, x_range)
        absolute = {
            role: compose_ranges(self._ranges[role], requested[role], axis.size, axis.name)
            for role, axis in axes.items()
        }
        logger.debug("Subset of '%s': %s -> %s", self._name,
                     {r: str(v) for r, v in self._ranges.items()},
                     {r: str(v) for r, v in absolute.items()})

        return GridSectionView(
            parent=self,
            name=self._name,
            coord_system=derived,
            data_source=self._data_source,
            ranges=absolute,
            attrs=self._attrs,
            data_type=self._data_type,
        )

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_data_slice(
        self,
        t_index: int = KEEP_AXIS,
        z_index: int = KEEP_AXIS,
        y_index: int = KEEP_AXIS,
        x_index: int = KEEP_AXIS,
    ) -> np.ndarray:
        """
        Read data, optionally fixing axes to a single element.

        ``-1`` keeps the whole range of an axis; ``k >= 0`` fixes the axis to
        its k-th element (counted within this grid) and drops it from the
        result. Directives for axes the grid does not carry are ignored.

        Returns:
            np.ndarray: Freshly read data, kept axes in canonical order

        Raises:
            RangeOutOfBoundsError: Directive outside an axis
            ReadFailureError: If the data source cannot be read
        """
        directives = {TIME_DIM: t_index, VERTICAL_DIM: z_index, Y_DIM: y_index, X_DIM: x_index}

        read_ranges = []
        fixed_axes = []
        expected_shape = []
        for position, (role, rng) in enumerate(self._ranges.items()):
            directive = directives[role]
            if directive == KEEP_AXIS:
                read_ranges.append(rng)
                expected_shape.append(rng.length)
            else:
                read_ranges.append(Range.single(rng.element(directive, role)))
                fixed_axes.append(position)

        data = self._data_source.read_slice(read_ranges)
        if fixed_axes:
            data = np.squeeze(data, axis=tuple(fixed_axes))

        logger.debug("Read '%s' %s -> shape %s", self._name,
                     [str(r) for r in read_ranges], data.shape)
        if data.shape != tuple(expected_shape):
            raise ReadFailureError(
                self._name, f"Read shape {data.shape} differs from expected {tuple(expected_shape)}"
            )
        return data

    def read_volume_data(self, t_index: int) -> np.ndarray:
        """Read one time step, all other axes whole."""
        return self.read_data_slice(t_index, KEEP_AXIS, KEEP_AXIS, KEEP_AXIS)

    def read_yx_data(self, t_index: int, z_index: int) -> np.ndarray:
        """Read one horizontal slice at a fixed time step and level."""
        return self.read_data_slice(t_index, z_index, KEEP_AXIS, KEEP_AXIS)

    def read_all(self) -> np.ndarray:
        """Read every element of the grid."""
        return self.read_data_slice()

    def __repr__(self) -> str:
        dims = ", ".join(f"{role}={size}" for role, size in zip(self.dims, self.shape))
        return f"{type(self).__name__}(name={self._name!r}, {dims})"

# ============================================================================
# Section View
# ============================================================================

class GridSectionView(GeoGrid):
    """Lazy subset of a grid, sharing the parent's data source."""

    def __init__(self, parent: GeoGrid, **kwargs):
        super().__init__(**kwargs)
        self._parent = parent

    @property
    def parent(self) -> GeoGrid:
        return self._parent

    def get_root(self) -> GeoGrid:
        """Grid this view was ultimately cut from."""
        grid = self._parent
        while isinstance(grid, GridSectionView):
            grid = grid.parent
        return grid
