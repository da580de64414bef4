"""
Grid Subset Map Projections

This module provides the bidirectional mapping between geographic
coordinates (lat/lon) and projection plane coordinates (x/y). Projections
hold no subset state and are shared by reference between a grid and all
views derived from it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import threading
from typing import Any, List, Mapping, Optional, Tuple, Union
import numpy as np
import pyproj
from pyproj.exceptions import CRSError

from ..core.config import BOUNDARY_SAMPLES, LENGTH_UNIT_SCALE, normalize_unit
from ..core.core_types import LatLonRect, ProjectionRect
from ..core.exceptions import CoordinateError, EmptySubsetResultError
from ..core.logging_config import get_logger

logger = get_logger('coordinates.projection')

ArrayLike = Union[float, np.ndarray]


# ============================================================================
# Base Projection
# ============================================================================

class Projection(ABC):
    """
    Abstract geographic <-> plane transform.

    Subclasses implement ``forward`` and ``inverse`` on numpy arrays.
    """

    name: str = "projection"

    @property
    def is_lat_lon(self) -> bool:
        return False

    @abstractmethod
    def forward(self, lat: ArrayLike, lon: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
        """Project lat/lon in degrees onto plane ``(x, y)``."""

    @abstractmethod
    def inverse(self, x: ArrayLike, y: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
        """Map plane ``(x, y)`` back onto ``(lat, lon)`` in degrees."""

    def lat_lon_to_proj_rect(
        self,
        rect: LatLonRect,
        samples: int = BOUNDARY_SAMPLES
    ) -> List[ProjectionRect]:
        """
        Project a geographic rectangle onto the plane.

        The rectangle is split at the date-line seam and the perimeter of
        each piece is sampled, so curved edges in the plane are covered.
        Points that do not project (non-finite results) are dropped.

        Args:
            rect: Geographic rectangle
            samples: Points per rectangle edge

        Returns:
            List[ProjectionRect]: One or two plane rectangles
        """
        prects = []
        for piece in rect.split_at_seam():
            lats, lons = piece.boundary_points(samples)
            xs, ys = self.forward(lats, lons)
            prect = ProjectionRect.from_points(xs, ys)
            if prect is None:
                logger.debug("No finite projected points for %s", piece)
                continue
            prects.append(prect)
        return prects

    def proj_to_lat_lon_bb(
        self,
        prect: ProjectionRect,
        samples: int = BOUNDARY_SAMPLES
    ) -> LatLonRect:
        """
        Geographic bounding box of a plane rectangle.

        Raises:
            EmptySubsetResultError: If no perimeter point has an inverse
        """
        xs = np.linspace(prect.x_min, prect.x_max, samples)
        ys = np.linspace(prect.y_min, prect.y_max, samples)
        px = np.concatenate([xs, np.full(samples, prect.x_max), xs[::-1], np.full(samples, prect.x_min)])
        py = np.concatenate([np.full(samples, prect.y_min), ys, np.full(samples, prect.y_max), ys[::-1]])
        lats, lons = self.inverse(px, py)
        lats = np.asarray(lats, dtype=np.float64)
        lons = np.asarray(lons, dtype=np.float64)
        finite = np.isfinite(lats) & np.isfinite(lons)
        if not finite.any():
            raise EmptySubsetResultError(prect, "no geographic inverse for plane rectangle")
        return lat_lon_bounds_of(lats[finite], lons[finite])

    def get_default_map_area(self, x_axis, y_axis) -> ProjectionRect:
        """
        Plane rectangle of an x/y axis pair as this projection maps it.

        The outermost cell centres are carried through ``inverse`` and back
        through ``forward``, and the cell edges keep their offset from them.
        Axes reaching past the plane the projection covers come back
        displaced. Centres without a geographic inverse are kept as given.
        """
        centres_x = np.array([x_axis.min_value, x_axis.max_value, x_axis.max_value, x_axis.min_value])
        centres_y = np.array([y_axis.min_value, y_axis.min_value, y_axis.max_value, y_axis.max_value])
        with np.errstate(invalid="ignore"):
            lats, lons = self.inverse(centres_x, centres_y)
            xs, ys = self.forward(lats, lons)
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        mapped = np.isfinite(xs) & np.isfinite(ys)
        area = ProjectionRect.from_points(np.where(mapped, xs, centres_x), np.where(mapped, ys, centres_y))
        return ProjectionRect(
            area.x_min - (x_axis.min_value - x_axis.min_edge),
            area.y_min - (y_axis.min_value - y_axis.min_edge),
            area.x_max + (x_axis.max_edge - x_axis.max_value),
            area.y_max + (y_axis.max_edge - y_axis.max_value),
        )


def lat_lon_bounds_of(lats: np.ndarray, lons: np.ndarray) -> LatLonRect:
    """
    Geographic rectangle enclosing a closed path of points.

    Longitudes are unwrapped along the path so a path straddling the seam
    gets a contiguous longitude interval.
    """
    lons = np.unwrap(np.asarray(lons, dtype=np.float64), period=360.0)
    lat_min = float(np.clip(lats.min(), -90.0, 90.0))
    lat_max = float(np.clip(lats.max(), -90.0, 90.0))
    width = min(float(lons.max() - lons.min()), 360.0)
    return LatLonRect(lat_min, float(lons.min()), lat_max, width)


# ============================================================================
# Lat/Lon Projection
# ============================================================================

class LatLonProjection(Projection):
    """
    Plate carree identity projection: ``x = lon``, ``y = lat``.

    Plane longitudes lie within ``[center_lon - 180, center_lon + 180)``.
    """

    name = "latitude_longitude"

    def __init__(self, center_lon: float = 0.0):
        self.center_lon = float(center_lon)

    @property
    def is_lat_lon(self) -> bool:
        return True

    def _wrap(self, lon):
        west = self.center_lon - 180.0
        return (np.asarray(lon, dtype=np.float64) - west) % 360.0 + west

    def forward(self, lat, lon):
        return self._wrap(lon), np.asarray(lat, dtype=np.float64)

    def inverse(self, x, y):
        lon = (np.asarray(x, dtype=np.float64) + 180.0) % 360.0 - 180.0
        return np.asarray(y, dtype=np.float64), lon

    def lat_lon_to_proj_rect(self, rect: LatLonRect, samples: int = BOUNDARY_SAMPLES) -> List[ProjectionRect]:
        """Split at this projection's own seam, ``center_lon + 180``."""
        east_edge = self.center_lon + 180.0
        x0 = float(self._wrap(rect.lon_min))
        x1 = x0 + rect.width
        if rect.is_all_longitudes or x1 <= east_edge:
            x1 = min(x1, east_edge)
            return [ProjectionRect(x0, rect.lat_min, x1, rect.lat_max)]
        west_edge = self.center_lon - 180.0
        return [
            ProjectionRect(x0, rect.lat_min, east_edge, rect.lat_max),
            ProjectionRect(west_edge, rect.lat_min, west_edge + (x1 - east_edge), rect.lat_max),
        ]

    def get_default_map_area(self, x_axis, y_axis) -> ProjectionRect:
        """Cell edges of an x/y axis pair, the first cell centre placed in this projection's window."""
        x0 = float(self._wrap(x_axis.min_value)) - (x_axis.min_value - x_axis.min_edge)
        return ProjectionRect(
            x0, float(y_axis.min_edge), x0 + (x_axis.max_edge - x_axis.min_edge), float(y_axis.max_edge)
        )

    def __repr__(self) -> str:
        return f"LatLonProjection(center_lon={self.center_lon})"


# ============================================================================
# PROJ-backed Projection
# ============================================================================

class ProjProjection(Projection):
    """
    Projection backed by a pyproj CRS.

    Plane coordinates are expressed in the grid's x/y units; ``xy_units``
    scales them to and from the CRS's native meters.
    """

    def __init__(self, crs: Union[str, pyproj.CRS], xy_units: str = "m"):
        try:
            self.crs = pyproj.CRS.from_user_input(crs)
        except CRSError as e:
            raise CoordinateError("projection", f"Invalid CRS: {e}") from e
        units = normalize_unit(xy_units) or "m"
        if units not in LENGTH_UNIT_SCALE:
            raise CoordinateError("projection", f"Unsupported x/y units: {xy_units}")
        self.xy_units = units
        self.scale = LENGTH_UNIT_SCALE[units]
        self.name = self.crs.name
        self._geodetic = pyproj.CRS("EPSG:4326")
        self._local = threading.local()

    @classmethod
    def from_cf(cls, grid_mapping: Mapping[str, Any], xy_units: str = "m") -> ProjProjection:
        """Build from CF ``grid_mapping`` variable attributes."""
        try:
            crs = pyproj.CRS.from_cf(dict(grid_mapping))
        # pyproj reports missing or malformed CF parameters as plain Python errors
        except (CRSError, KeyError, ValueError, TypeError) as e:
            raise CoordinateError("grid_mapping", f"Cannot interpret grid mapping: {e}") from e
        return cls(crs, xy_units)

    def _transformers(self) -> Tuple[pyproj.Transformer, pyproj.Transformer]:
        # Transformer objects must not be shared across threads
        pair = getattr(self._local, "pair", None)
        if pair is None:
            pair = (
                pyproj.Transformer.from_crs(self._geodetic, self.crs, always_xy=True),
                pyproj.Transformer.from_crs(self.crs, self._geodetic, always_xy=True),
            )
            self._local.pair = pair
        return pair

    @property
    def is_lat_lon(self) -> bool:
        return self.crs.is_geographic

    def forward(self, lat, lon):
        fwd, _ = self._transformers()
        x, y = fwd.transform(np.asarray(lon, dtype=np.float64), np.asarray(lat, dtype=np.float64))
        return np.asarray(x) / self.scale, np.asarray(y) / self.scale

    def inverse(self, x, y):
        _, inv = self._transformers()
        lon, lat = inv.transform(
            np.asarray(x, dtype=np.float64) * self.scale,
            np.asarray(y, dtype=np.float64) * self.scale,
        )
        return np.asarray(lat), np.asarray(lon)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProjProjection):
            return NotImplemented
        return self.crs == other.crs and self.scale == other.scale

    def __hash__(self) -> int:
        return hash((self.crs.to_wkt(), self.scale))

    def __repr__(self) -> str:
        return f"ProjProjection({self.name!r}, xy_units={self.xy_units!r})"


def projection_for(crs: Optional[Any], xy_units: str = "m") -> Projection:
    """
    Build a projection from a CRS description.

    Args:
        crs: None for plain lat/lon, otherwise anything pyproj accepts
        xy_units: Units of the grid's x/y coordinates
    """
    if crs is None:
        return LatLonProjection()
    return ProjProjection(crs, xy_units)
