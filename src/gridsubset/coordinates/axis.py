"""
Grid Subset Coordinate Axes

This module defines the immutable one-dimensional coordinate axis used for
every grid dimension, with cell bounds and binary-search index lookup.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional
import numpy as np

from ..core.config import LATITUDE_UNITS, LONGITUDE_UNITS, normalize_unit
from ..core.core_types import Range
from ..core.exceptions import CoordinateError, RangeOutOfBoundsError


class AxisType(Enum):
    """Role of an axis within a grid coordinate system."""
    TIME = "time"
    VERTICAL = "vertical"
    GEO_Y = "geo_y"
    GEO_X = "geo_x"
    LAT = "lat"
    LON = "lon"

    @property
    def is_horizontal(self) -> bool:
        return self in (AxisType.GEO_Y, AxisType.GEO_X, AxisType.LAT, AxisType.LON)

    @property
    def is_geographic(self) -> bool:
        return self in (AxisType.LAT, AxisType.LON)


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _midpoint_bounds(values: np.ndarray) -> np.ndarray:
    """Cell bounds halfway between neighbours, half a step beyond the ends."""
    n = values.size
    if n == 1:
        return np.array([[values[0], values[0]]], dtype=np.float64)
    edges = np.empty(n + 1, dtype=np.float64)
    edges[1:-1] = 0.5 * (values[:-1] + values[1:])
    edges[0] = values[0] - 0.5 * (values[1] - values[0])
    edges[-1] = values[-1] + 0.5 * (values[-1] - values[-2])
    return np.stack([edges[:-1], edges[1:]], axis=1)


@dataclass(frozen=True, eq=False)
class CoordinateAxis:
    """
    Strictly monotonic 1-D coordinate axis.

    Axes compare by identity so that a derived coordinate system can be
    checked for sharing an axis with its parent.

    Attributes:
        name: Axis (dimension) name
        values: Coordinate values, float64, read-only
        units: Unit string, copied verbatim into sliced axes
        axis_type: Role of the axis
        bounds: Cell bounds, shape (n, 2); derived from midpoints when omitted
        attrs: Extra metadata carried along
    """
    name: str
    values: np.ndarray
    units: str
    axis_type: AxisType
    bounds: Optional[np.ndarray] = None
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate values and derive bounds."""
        values = np.array(self.values, dtype=np.float64).reshape(-1)
        if values.size < 1:
            raise CoordinateError(self.name, "Axis must contain at least one value")
        if not np.all(np.isfinite(values)):
            raise CoordinateError(self.name, "Axis values must be finite")
        if values.size > 1:
            steps = np.diff(values)
            if not (np.all(steps > 0) or np.all(steps < 0)):
                raise CoordinateError(self.name, "Axis values must be strictly monotonic")

        if self.bounds is None:
            bounds = _midpoint_bounds(values)
            if self.axis_type is AxisType.LAT:
                bounds = np.clip(bounds, -90.0, 90.0)
        else:
            bounds = np.array(self.bounds, dtype=np.float64)
            if bounds.shape != (values.size, 2):
                raise CoordinateError(
                    self.name, f"Bounds shape {bounds.shape} does not match ({values.size}, 2)"
                )

        object.__setattr__(self, "values", _readonly(values))
        object.__setattr__(self, "bounds", _readonly(bounds))
        object.__setattr__(self, "units", str(self.units or ""))
        object.__setattr__(self, "attrs", dict(self.attrs or {}))

    @classmethod
    def regular(
        cls,
        name: str,
        start: float,
        increment: float,
        count: int,
        units: str,
        axis_type: AxisType,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> CoordinateAxis:
        """Build an axis from a ``start/increment/count`` encoding."""
        if increment == 0:
            raise CoordinateError(name, "Increment must be non-zero")
        values = start + increment * np.arange(int(count), dtype=np.float64)
        return cls(name, values, units, axis_type, attrs=attrs or {})

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return int(self.values.size)

    def __len__(self) -> int:
        return self.size

    @property
    def is_ascending(self) -> bool:
        return self.size == 1 or bool(self.values[1] > self.values[0])

    @property
    def is_geographic(self) -> bool:
        return self.axis_type.is_geographic

    @property
    def is_regular(self) -> bool:
        if self.size < 3:
            return True
        steps = np.diff(self.values)
        return bool(np.allclose(steps, steps[0], rtol=1e-6, atol=0.0))

    @property
    def increment(self) -> Optional[float]:
        """Step of a regular axis, None otherwise."""
        if self.size < 2 or not self.is_regular:
            return None
        return float(self.values[1] - self.values[0])

    @property
    def min_value(self) -> float:
        return float(self.values.min())

    @property
    def max_value(self) -> float:
        return float(self.values.max())

    @property
    def min_edge(self) -> float:
        return float(self.bounds.min())

    @property
    def max_edge(self) -> float:
        return float(self.bounds.max())

    @property
    def has_degree_units(self) -> bool:
        units = normalize_unit(self.units)
        return units in LATITUDE_UNITS or units in LONGITUDE_UNITS or units.startswith("degree")

    # ------------------------------------------------------------------
    # Slicing
    # ------------------------------------------------------------------

    def section(self, rng: Range) -> CoordinateAxis:
        """
        New axis holding the values selected by ``rng``.

        Raises:
            RangeOutOfBoundsError: If the range exceeds the axis
        """
        if rng.last_element >= self.size:
            raise RangeOutOfBoundsError(self.name, rng, self.size)
        sel = rng.to_slice()
        return CoordinateAxis(
            name=self.name,
            values=self.values[sel],
            units=self.units,
            axis_type=self.axis_type,
            bounds=self.bounds[sel],
            attrs=self.attrs,
        )

    def values_equal(self, other: CoordinateAxis) -> bool:
        """Value equality (``==`` compares identity)."""
        return (self.size == other.size and self.units == other.units and
                self.axis_type is other.axis_type and
                bool(np.array_equal(self.values, other.values)))

    # ------------------------------------------------------------------
    # Index Lookup
    # ------------------------------------------------------------------

    def _ascending_cells(self):
        lower = self.bounds.min(axis=1)
        upper = self.bounds.max(axis=1)
        if self.is_ascending:
            return lower, upper
        return lower[::-1], upper[::-1]

    def _to_axis_index(self, index: int) -> int:
        return index if self.is_ascending else self.size - 1 - index

    def find_coord_element(self, value: float, bounded: bool = False) -> int:
        """
        Index of the cell containing ``value``.

        Args:
            value: Coordinate value
            bounded: Clamp to the nearest end cell instead of returning -1

        Returns:
            int: Cell index, or -1 when outside the axis and not bounded
        """
        lower, upper = self._ascending_cells()
        pos = int(np.searchsorted(upper, value, side="left"))
        if pos >= self.size or value < lower[min(pos, self.size - 1)]:
            if not bounded:
                return -1
            pos = 0 if value < lower[0] else self.size - 1
        return self._to_axis_index(pos)

    def find_nearest_index(self, value: float) -> int:
        """Index of the coordinate value closest to ``value``."""
        return int(np.argmin(np.abs(self.values - value)))

    def find_enclosing_range(self, low: float, high: float) -> Optional[Range]:
        """
        Smallest stride-1 range of cells intersecting ``[low, high]``.

        Cells merely touching the interval are excluded unless the interval
        has zero width.

        Returns:
            Optional[Range]: None when no cell intersects
        """
        low, high = sorted((float(low), float(high)))
        lower, upper = self._ascending_cells()
        if low == high:
            start = int(np.searchsorted(upper, low, side="left"))
            stop = int(np.searchsorted(lower, high, side="right")) - 1
        else:
            start = int(np.searchsorted(upper, low, side="right"))
            stop = int(np.searchsorted(lower, high, side="left")) - 1
        if start >= self.size or stop < 0 or start > stop:
            return None
        first, last = self._to_axis_index(start), self._to_axis_index(stop)
        return Range(min(first, last), max(first, last))

    def __repr__(self) -> str:
        return (f"CoordinateAxis(name={self.name!r}, type={self.axis_type.value}, "
                f"size={self.size}, units={self.units!r}, "
                f"range=[{self.values[0]:g}, {self.values[-1]:g}])")


def is_geographic_unit_pair(y_axis: CoordinateAxis, x_axis: CoordinateAxis) -> bool:
    """Check if a y/x axis pair is latitude/longitude."""
    return y_axis.axis_type is AxisType.LAT and x_axis.axis_type is AxisType.LON
