"""
Grid Subset Type Definitions and Data Classes

This module defines the index ranges, bounding boxes and parameter structures
shared by the subsetting engine.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union, List
from datetime import datetime
import cftime
import numpy as np

from .config import BBOX_RTOL
from .exceptions import ParameterError, RangeOutOfBoundsError, check_stride

# ============================================================================
# Type Aliases
# ============================================================================

TimeValue = Union[str, datetime, np.datetime64, cftime.datetime]
TimeRange = Tuple[TimeValue, TimeValue]
CoordinateRange = Tuple[float, float]
IndexRange = Tuple[int, int]

# ============================================================================
# Index Range
# ============================================================================

@dataclass(frozen=True)
class Range:
    """
    Inclusive index selector ``(first, last, stride)`` on one axis.

    ``last`` is the requested upper bound; the last index actually selected
    is ``last_element``, which never exceeds it.

    Attributes:
        first: First selected index
        last: Inclusive upper bound
        stride: Step between selected indices
    """
    first: int
    last: int
    stride: int = 1

    def __post_init__(self):
        """Validate range bounds."""
        for name in ("first", "last", "stride"):
            value = getattr(self, name)
            if isinstance(value, (bool, np.bool_)) or int(value) != value:
                raise ParameterError(f"range.{name}", str(value), "Must be an integer")
            object.__setattr__(self, name, int(value))
        if self.first < 0:
            raise ParameterError("range", str(self), "first must be non-negative")
        if self.last < self.first:
            raise ParameterError("range", str(self), "first must be <= last")
        check_stride("range", self.stride)

    @classmethod
    def full(cls, size: int, stride: int = 1) -> Range:
        """Range over a whole axis of ``size`` elements."""
        if size < 1:
            raise ParameterError("size", str(size), "Axis size must be >= 1")
        return cls(0, size - 1, stride)

    @classmethod
    def single(cls, index: int) -> Range:
        """Range selecting exactly one index."""
        return cls(index, index, 1)

    @property
    def length(self) -> int:
        """Number of selected indices."""
        return (self.last - self.first) // self.stride + 1

    def __len__(self) -> int:
        return self.length

    @property
    def last_element(self) -> int:
        """Last index actually selected."""
        return self.first + (self.length - 1) * self.stride

    def is_full(self, size: int) -> bool:
        """Check if the range is the whole axis at stride 1."""
        return self.first == 0 and self.stride == 1 and self.last_element == size - 1

    def element(self, index: int, axis_name: str = "range") -> int:
        """
        Map an index relative to this range onto an absolute index.

        Raises:
            RangeOutOfBoundsError: If ``index`` is not within ``[0, length)``
        """
        if index < 0 or index >= self.length:
            raise RangeOutOfBoundsError(axis_name, index, self.length)
        return self.first + index * self.stride

    def compose(self, inner: Range, axis_name: str = "range") -> Range:
        """
        Compose a range expressed in this range's index space.

        Args:
            inner: Range relative to this one
            axis_name: Axis name for error messages

        Returns:
            Range: Equivalent range in absolute indices
        """
        if inner.last >= self.length:
            raise RangeOutOfBoundsError(axis_name, inner, self.length)
        return Range(
            self.element(inner.first, axis_name),
            self.element(inner.last_element, axis_name),
            self.stride * inner.stride,
        )

    def with_stride(self, stride: int) -> Range:
        """Same bounds with a different stride."""
        return Range(self.first, self.last, stride)

    def union(self, other: Range) -> Range:
        """Smallest stride-1 range covering both ranges."""
        return Range(min(self.first, other.first), max(self.last_element, other.last_element))

    def to_slice(self) -> slice:
        """Equivalent Python slice."""
        return slice(self.first, self.last_element + 1, self.stride)

    def indices(self) -> np.ndarray:
        """Selected absolute indices."""
        return np.arange(self.first, self.last_element + 1, self.stride)

    def __str__(self) -> str:
        return f"{self.first}:{self.last}:{self.stride}"

# ============================================================================
# Geographic Bounding Box
# ============================================================================

def normalize_longitude(lon: float) -> float:
    """Map a longitude onto ``[-180, 180)``."""
    return ((float(lon) + 180.0) % 360.0) - 180.0

@dataclass(frozen=True)
class LatLonPoint:
    """Geographic point in degrees."""
    lat: float
    lon: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ParameterError("lat", str(self.lat), "Latitude must be within [-90, 90]")

@dataclass(frozen=True)
class LatLonRect:
    """
    Axis-aligned geographic rectangle.

    Stored as the lower-left corner plus the upper latitude and a longitude
    width. The lower-left longitude is normalised to ``[-180, 180)`` and the
    upper-right longitude ``lon_max`` may exceed 180 when the rectangle
    crosses the date-line seam.

    Attributes:
        lat_min: Southern edge in degrees
        lon_min: Western edge in degrees
        lat_max: Northern edge in degrees
        width: Longitude extent in degrees, within [0, 360]
    """
    lat_min: float
    lon_min: float
    lat_max: float
    width: float

    def __post_init__(self):
        """Validate and normalise the rectangle."""
        for name in ("lat_min", "lat_max"):
            value = getattr(self, name)
            if not -90.0 <= value <= 90.0:
                raise ParameterError(name, str(value), "Latitude must be within [-90, 90]")
        if self.lat_min > self.lat_max:
            raise ParameterError("lat_range", f"({self.lat_min}, {self.lat_max})", "lat_min must be <= lat_max")
        if not 0.0 <= self.width <= 360.0:
            raise ParameterError("width", str(self.width), "Longitude width must be within [0, 360]")
        object.__setattr__(self, "lat_min", float(self.lat_min))
        object.__setattr__(self, "lat_max", float(self.lat_max))
        object.__setattr__(self, "width", float(self.width))
        object.__setattr__(self, "lon_min", normalize_longitude(self.lon_min))

    @classmethod
    def from_width(cls, lat: float, lon: float, delta_lat: float, delta_lon: float) -> LatLonRect:
        """Build from the lower-left corner and the lat/lon extents."""
        return cls(lat, lon, lat + delta_lat, delta_lon)

    @classmethod
    def from_corners(cls, lower_left: LatLonPoint, upper_right: LatLonPoint) -> LatLonRect:
        """
        Build from two corners.

        An upper-right longitude smaller than the lower-left one means the
        rectangle crosses the seam.
        """
        width = (upper_right.lon - lower_left.lon) % 360.0
        if width == 0.0 and upper_right.lon != lower_left.lon:
            width = 360.0
        return cls(lower_left.lat, lower_left.lon, upper_right.lat, width)

    @classmethod
    def from_bounds(cls, lon_min: float, lat_min: float, lon_max: float, lat_max: float) -> LatLonRect:
        """Build from ``(west, south, east, north)`` bounds."""
        return cls.from_corners(LatLonPoint(lat_min, lon_min), LatLonPoint(lat_max, lon_max))

    @property
    def lon_max(self) -> float:
        """Eastern edge, unnormalised (may exceed 180)."""
        return self.lon_min + self.width

    @property
    def height(self) -> float:
        return self.lat_max - self.lat_min

    @property
    def lower_left(self) -> LatLonPoint:
        return LatLonPoint(self.lat_min, self.lon_min)

    @property
    def upper_right(self) -> LatLonPoint:
        return LatLonPoint(self.lat_max, normalize_longitude(self.lon_max))

    @property
    def crosses_seam(self) -> bool:
        """True when the rectangle straddles the +/-180 longitude seam."""
        return self.lon_max > 180.0

    @property
    def is_all_longitudes(self) -> bool:
        return self.width >= 360.0

    def split_at_seam(self) -> List[LatLonRect]:
        """Split into at most two rectangles that do not cross the seam."""
        if not self.crosses_seam:
            return [self]
        west = LatLonRect(self.lat_min, self.lon_min, self.lat_max, 180.0 - self.lon_min)
        east = LatLonRect(self.lat_min, -180.0, self.lat_max, self.lon_max - 180.0)
        return [west, east]

    def contains(self, lat: float, lon: float) -> bool:
        """Check if a point lies inside the rectangle."""
        if not self.lat_min <= lat <= self.lat_max:
            return False
        offset = (float(lon) - self.lon_min) % 360.0
        return offset <= self.width

    def boundary_points(self, samples: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Sample the rectangle perimeter.

        Longitudes run continuously from ``lon_min`` to ``lon_max``.

        Args:
            samples: Points per edge, corners included

        Returns:
            Tuple[np.ndarray, np.ndarray]: Latitudes and longitudes
        """
        samples = max(int(samples), 2)
        lons = np.linspace(self.lon_min, self.lon_max, samples)
        lats = np.linspace(self.lat_min, self.lat_max, samples)
        lat_pts = np.concatenate([
            np.full(samples, self.lat_min), lats,
            np.full(samples, self.lat_max), lats,
        ])
        lon_pts = np.concatenate([
            lons, np.full(samples, self.lon_max),
            lons, np.full(samples, self.lon_min),
        ])
        return lat_pts, lon_pts

    def __str__(self) -> str:
        return (f"LatLonRect(lat=[{self.lat_min:.4f}, {self.lat_max:.4f}], "
                f"lon=[{self.lon_min:.4f}, {self.lon_max:.4f}])")

# ============================================================================
# Projected Bounding Box
# ============================================================================

@dataclass(frozen=True)
class ProjectionRect:
    """
    Axis-aligned rectangle in projection plane coordinates.

    Attributes:
        x_min, y_min: Lower-left corner
        x_max, y_max: Upper-right corner
    """
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    def __post_init__(self):
        """Order corners so that min <= max."""
        x0, x1 = sorted((float(self.x_min), float(self.x_max)))
        y0, y1 = sorted((float(self.y_min), float(self.y_max)))
        object.__setattr__(self, "x_min", x0)
        object.__setattr__(self, "x_max", x1)
        object.__setattr__(self, "y_min", y0)
        object.__setattr__(self, "y_max", y1)

    @classmethod
    def from_points(cls, xs, ys) -> Optional[ProjectionRect]:
        """
        Smallest rectangle containing the finite points.

        Returns:
            Optional[ProjectionRect]: None if no point is finite
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        finite = np.isfinite(xs) & np.isfinite(ys)
        if not finite.any():
            return None
        return cls(float(xs[finite].min()), float(ys[finite].min()),
                   float(xs[finite].max()), float(ys[finite].max()))

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def intersects(self, other: ProjectionRect) -> bool:
        return (self.x_min <= other.x_max and other.x_min <= self.x_max and
                self.y_min <= other.y_max and other.y_min <= self.y_max)

    def union(self, other: ProjectionRect) -> ProjectionRect:
        return ProjectionRect(
            min(self.x_min, other.x_min), min(self.y_min, other.y_min),
            max(self.x_max, other.x_max), max(self.y_max, other.y_max),
        )

    def isclose(self, other: ProjectionRect, rtol: float = BBOX_RTOL) -> bool:
        """Corner-wise comparison within a relative tolerance."""
        scale = max(self.width, self.height, other.width, other.height, 1.0)
        return bool(np.allclose(
            [self.x_min, self.y_min, self.x_max, self.y_max],
            [other.x_min, other.y_min, other.x_max, other.y_max],
            rtol=0.0, atol=rtol * scale,
        ))

# ============================================================================
# Subset Request
# ============================================================================

RangeConstraint = Union[Range, CoordinateRange, TimeRange, None]

@dataclass(frozen=True)
class SubsetRequest:
    """
    Consolidated subset parameters.

    Attributes:
        time_range: Index Range, or ``(start, end)`` time values
        vertical_range: Index Range, or ``(low, high)`` coordinate values
        lat_lon_rect: Geographic bounding box
        time_stride: Stride on the time axis
        vertical_stride: Stride on the vertical axis
        y_stride: Stride on the y axis
        x_stride: Stride on the x axis
    """
    time_range: RangeConstraint = None
    vertical_range: RangeConstraint = None
    lat_lon_rect: Optional[LatLonRect] = None
    time_stride: int = 1
    vertical_stride: int = 1
    y_stride: int = 1
    x_stride: int = 1

    def __post_init__(self):
        """Validate strides and constraint shapes."""
        check_stride("time", self.time_stride)
        check_stride("vertical", self.vertical_stride)
        check_stride("y", self.y_stride)
        check_stride("x", self.x_stride)
        for name in ("time_range", "vertical_range"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Range) and len(value) != 2:
                raise ParameterError(name, str(value), "Must be a Range or contain exactly 2 values")

    @property
    def is_identity(self) -> bool:
        """True when the request selects the whole grid at stride 1."""
        return (self.time_range is None and self.vertical_range is None and
                self.lat_lon_rect is None and
                self.time_stride == self.vertical_stride == self.y_stride == self.x_stride == 1)
