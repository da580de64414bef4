"""
Grid Subset Coordinate System

This module defines the grid coordinate system: the time, vertical, y and x
axes of a grid together with its horizontal projection and vertical
transform.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..core.config import TIME_DIM, VERTICAL_DIM, Y_DIM, X_DIM
from ..core.core_types import LatLonRect, ProjectionRect
from ..core.exceptions import CoordinateError
from .axis import AxisType, CoordinateAxis, is_geographic_unit_pair
from .projection import LatLonProjection, Projection
from .vertical_transform import VerticalTransform


@dataclass(frozen=True, eq=False)
class GridCoordSystem:
    """
    Coordinate system of a grid.

    Attributes:
        y_axis: Required y (or latitude) axis
        x_axis: Required x (or longitude) axis
        time_axis: Optional time axis
        vertical_axis: Optional vertical axis
        vertical_transform: Optional transform of the vertical axis
        projection: Required when y/x are not latitude/longitude
        name: Descriptive name
    """
    y_axis: CoordinateAxis
    x_axis: CoordinateAxis
    time_axis: Optional[CoordinateAxis] = None
    vertical_axis: Optional[CoordinateAxis] = None
    vertical_transform: Optional[VerticalTransform] = None
    projection: Optional[Projection] = None
    name: str = ""

    def __post_init__(self):
        """Validate axis roles and projection presence."""
        if not self.y_axis.axis_type.is_horizontal or not self.x_axis.axis_type.is_horizontal:
            raise CoordinateError(self.name or "grid", "y and x axes must be horizontal axes")

        if self.is_lat_lon:
            if self.projection is None:
                center = 0.5 * (self.x_axis.min_value + self.x_axis.max_value)
                object.__setattr__(self, "projection", LatLonProjection(center_lon=center))
        elif self.projection is None:
            raise CoordinateError(
                self.name or "grid",
                "A projection is required when the horizontal axes are not latitude/longitude"
            )

        for axis, expected, label in (
            (self.time_axis, AxisType.TIME, "time"),
            (self.vertical_axis, AxisType.VERTICAL, "vertical"),
        ):
            if axis is not None and axis.axis_type is not expected:
                raise CoordinateError(axis.name, f"Expected a {label} axis, got {axis.axis_type.value}")

        if self.vertical_transform is not None:
            if self.vertical_axis is None:
                raise CoordinateError(self.vertical_transform.name, "Vertical transform without vertical axis")
            if self.vertical_transform.num_levels != self.vertical_axis.size:
                raise CoordinateError(
                    self.vertical_transform.name,
                    f"Transform has {self.vertical_transform.num_levels} levels, "
                    f"vertical axis has {self.vertical_axis.size}"
                )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def is_lat_lon(self) -> bool:
        return is_geographic_unit_pair(self.y_axis, self.x_axis)

    def get_time_axis(self) -> Optional[CoordinateAxis]:
        return self.time_axis

    def get_vertical_axis(self) -> Optional[CoordinateAxis]:
        return self.vertical_axis

    def get_vertical_transform(self) -> Optional[VerticalTransform]:
        return self.vertical_transform

    def get_y_axis(self) -> CoordinateAxis:
        return self.y_axis

    def get_x_axis(self) -> CoordinateAxis:
        return self.x_axis

    def get_projection(self) -> Projection:
        return self.projection

    def axes(self) -> Dict[str, CoordinateAxis]:
        """Axes present, keyed by role, in canonical order."""
        candidates = (
            (TIME_DIM, self.time_axis),
            (VERTICAL_DIM, self.vertical_axis),
            (Y_DIM, self.y_axis),
            (X_DIM, self.x_axis),
        )
        return {role: axis for role, axis in candidates if axis is not None}

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(axis.size for axis in self.axes().values())

    # ------------------------------------------------------------------
    # Bounding Boxes
    # ------------------------------------------------------------------

    def get_bounding_box(self) -> ProjectionRect:
        """Plane rectangle covering the outer cell edges of the x/y axes."""
        return ProjectionRect(
            self.x_axis.min_edge, self.y_axis.min_edge,
            self.x_axis.max_edge, self.y_axis.max_edge,
        )

    def get_lat_lon_bounding_box(self) -> LatLonRect:
        """
        Geographic rectangle covering the grid.

        For lat/lon grids this is read directly from the axis edges; for
        projected grids the plane bounding box perimeter is inverse projected.
        """
        if self.is_lat_lon:
            lat_min = max(self.y_axis.min_edge, -90.0)
            lat_max = min(self.y_axis.max_edge, 90.0)
            width = min(self.x_axis.max_edge - self.x_axis.min_edge, 360.0)
            return LatLonRect(lat_min, self.x_axis.min_edge, lat_max, width)
        return self.projection.proj_to_lat_lon_bb(self.get_bounding_box())

    def __repr__(self) -> str:
        parts = [f"{role}={axis.name}[{axis.size}]" for role, axis in self.axes().items()]
        return f"GridCoordSystem({', '.join(parts)}, projection={self.projection!r})"


