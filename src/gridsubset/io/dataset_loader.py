"""
Grid Subset Dataset Loader

This module opens datasets through xarray and discovers their grids: every
data variable whose dimensions map onto CF coordinate axes becomes a
``GeoGrid`` owned by a ``GridDataset`` handle.
"""

from __future__ import annotations
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import numpy as np
import xarray as xr
from xarray.coding.times import contains_cftime_datetimes, encode_cf_datetime

from ..core.config import (
    DEFAULT_ENGINE, LATITUDE_UNITS, LONGITUDE_UNITS, PRESSURE_UNITS,
    TIME_DIM, VERTICAL_DIM, VERTICAL_STANDARD_NAMES, X_DIM, Y_DIM,
    is_remote_locator, normalize_unit
)
from ..core.data_types import describe_dtype
from ..core.exceptions import (
    CoordinateError, DatasetNotFoundError,
    RemoteUnavailableError, UnsupportedFormatError, check_grids_availability
)
from ..core.logging_config import get_logger
from ..coordinates.axis import AxisType, CoordinateAxis
from ..coordinates.coord_system import GridCoordSystem
from ..coordinates.projection import Projection, ProjProjection
from ..coordinates.vertical_transform import VerticalTransform
from ..grid.geogrid import GeoGrid
from .data_source import DataSource

logger = get_logger('io.dataset_loader')

_ROLE_OF_AXIS_TYPE = {
    AxisType.TIME: TIME_DIM,
    AxisType.VERTICAL: VERTICAL_DIM,
    AxisType.GEO_Y: Y_DIM,
    AxisType.LAT: Y_DIM,
    AxisType.GEO_X: X_DIM,
    AxisType.LON: X_DIM,
}

_FORMULA_TERMS_PATTERN = re.compile(r"(\w+):\s*(\S+)")

# ============================================================================
# CF Axis Discovery
# ============================================================================

def classify_axis(variable: xr.DataArray) -> Optional[AxisType]:
    """
    Role of a 1-D coordinate variable from its CF attributes.

    Checks the ``axis`` attribute, then ``standard_name``, ``positive`` and
    the units.

    Returns:
        Optional[AxisType]: None when the variable is not a recognised axis
    """
    attrs = variable.attrs
    axis_attr = str(attrs.get("axis", "")).upper()
    standard_name = str(attrs.get("standard_name", "")).lower()
    units = normalize_unit(attrs.get("units", ""))

    if np.issubdtype(variable.dtype, np.datetime64) or contains_cftime_datetimes(variable.variable):
        return AxisType.TIME
    if units in LATITUDE_UNITS or standard_name == "latitude":
        return AxisType.LAT
    if units in LONGITUDE_UNITS or standard_name == "longitude":
        return AxisType.LON
    if axis_attr == "T" or standard_name == "time" or " since " in units:
        return AxisType.TIME
    if (axis_attr == "Z" or "positive" in attrs or standard_name in VERTICAL_STANDARD_NAMES
            or units in PRESSURE_UNITS):
        return AxisType.VERTICAL
    if axis_attr == "Y" or standard_name in ("projection_y_coordinate", "grid_latitude"):
        return AxisType.GEO_Y
    if axis_attr == "X" or standard_name in ("projection_x_coordinate", "grid_longitude"):
        return AxisType.GEO_X
    return None


def _axis_values(variable: xr.DataArray) -> Tuple[np.ndarray, str, Dict[str, Any]]:
    """
    Numeric axis values, their units and attributes.

    Decoded times (datetime64 or cftime) are re-encoded with the units and
    calendar they were decoded from, which are recorded in the attributes.
    """
    attrs = dict(variable.attrs)
    values = variable.values
    if np.issubdtype(values.dtype, np.datetime64) or contains_cftime_datetimes(variable.variable):
        try:
            numbers, units, calendar = encode_cf_datetime(
                values,
                units=variable.encoding.get("units"),
                calendar=variable.encoding.get("calendar"),
            )
        except (ValueError, TypeError, OverflowError) as e:
            raise CoordinateError(str(variable.name), f"Cannot encode decoded times: {e}") from e
        attrs["units"] = units
        attrs["calendar"] = calendar
        return np.asarray(numbers, dtype=np.float64), units, attrs
    return np.asarray(values, dtype=np.float64), str(attrs.get("units", "")), attrs


def _axis_bounds(ds: xr.Dataset, variable: xr.DataArray) -> Optional[np.ndarray]:
    bounds_name = variable.attrs.get("bounds")
    if bounds_name is None or bounds_name not in ds.variables:
        return None
    bounds = ds[bounds_name]
    if bounds.ndim != 2 or bounds.shape != (variable.size, 2):
        logger.warning("Ignoring bounds '%s' of '%s' with shape %s", bounds_name, variable.name, bounds.shape)
        return None
    if np.issubdtype(bounds.dtype, np.datetime64) or bounds.dtype == object:
        return None
    return np.asarray(bounds.values, dtype=np.float64)


def discover_axes(ds: xr.Dataset) -> Dict[str, CoordinateAxis]:
    """
    Coordinate axes of a dataset, keyed by dimension name.

    Only 1-D coordinate variables named after their dimension are
    considered. Axes are built once and shared by every grid using them.
    """
    axes: Dict[str, CoordinateAxis] = {}
    for dim in ds.dims:
        if dim not in ds.variables:
            continue
        variable = ds[dim]
        if variable.ndim != 1:
            continue
        axis_type = classify_axis(variable)
        if axis_type is None:
            logger.debug("Dimension '%s' is not a recognised coordinate axis", dim)
            continue
        try:
            values, units, attrs = _axis_values(variable)
            axes[dim] = CoordinateAxis(
                name=str(dim),
                values=values,
                units=units,
                axis_type=axis_type,
                bounds=_axis_bounds(ds, variable),
                attrs=attrs,
            )
        except CoordinateError as e:
            logger.warning("Skipping coordinate '%s': %s", dim, e)
    return axes

# ============================================================================
# Projection and Vertical Transform Discovery
# ============================================================================

def discover_projection(ds: xr.Dataset, variable: xr.DataArray, x_axis: CoordinateAxis) -> Optional[Projection]:
    """
    Projection named by a variable's ``grid_mapping`` attribute.

    Returns:
        Optional[Projection]: None when the variable has no grid mapping

    Raises:
        CoordinateError: If the grid mapping cannot be interpreted
    """
    mapping_name = variable.attrs.get("grid_mapping", variable.encoding.get("grid_mapping"))
    if mapping_name is None or x_axis.axis_type is AxisType.LON:
        return None
    # "crs: x y" form, only the variable name matters
    mapping_name = str(mapping_name).split(":")[0].strip()
    if mapping_name not in ds.variables:
        raise CoordinateError(mapping_name, f"Grid mapping of '{variable.name}' not found in dataset")
    return ProjProjection.from_cf(ds[mapping_name].attrs, xy_units=x_axis.units or "m")


def parse_formula_terms(formula_terms: str) -> Dict[str, str]:
    """Parse a CF ``formula_terms`` attribute into ``{term: variable}``."""
    return dict(_FORMULA_TERMS_PATTERN.findall(formula_terms or ""))


def discover_vertical_transform(ds: xr.Dataset, vertical_axis: CoordinateAxis) -> Optional[VerticalTransform]:
    """
    Vertical transform described by the ``formula_terms`` of a vertical axis.

    Terms that are 1-D along the vertical dimension are copied and re-indexed
    on subset; any other term is kept as a reference to its variable. The
    transform unit string comes from the first field term carrying units.
    """
    terms = parse_formula_terms(vertical_axis.attrs.get("formula_terms", ""))
    if not terms:
        return None

    level_terms: Dict[str, np.ndarray] = {}
    field_terms: Dict[str, str] = {}
    unit_string = ""
    for term, var_name in terms.items():
        if var_name not in ds.variables:
            logger.warning("Formula term '%s' of '%s' refers to missing variable '%s'",
                           term, vertical_axis.name, var_name)
            continue
        term_var = ds[var_name]
        if term_var.dims == (vertical_axis.name,):
            level_terms[term] = np.asarray(term_var.values, dtype=np.float64)
        else:
            field_terms[term] = var_name
            if not unit_string:
                unit_string = str(term_var.attrs.get("units", ""))

    return VerticalTransform(
        name=str(vertical_axis.attrs.get("standard_name", vertical_axis.name)),
        unit_string=unit_string or vertical_axis.units,
        num_levels=vertical_axis.size,
        level_terms=level_terms,
        field_terms=field_terms,
        attrs={"formula_terms": vertical_axis.attrs.get("formula_terms", "")},
    )

# ============================================================================
# Dataset Handle
# ============================================================================

class GridDataset:
    """
    Open dataset and the grids discovered in it.

    The handle owns the grid mapping and the underlying ``xarray.Dataset``.
    Closing it invalidates every data source it issued, so reads through
    grids or views of a closed dataset raise ``ReadFailureError``.

    Examples:
        >>> with open_dataset("/path/to/file.nc") as gds:
        ...     grid = gds.find_grid("temperature")
        ...     view = grid.subset(lat_lon_rect=LatLonRect.from_bounds(120, 20, 125, 25))
        ...     data = view.read_volume_data(0)
    """

    def __init__(self, dataset: xr.Dataset, locator: Optional[str] = None):
        """
        Initialize a dataset handle.

        Args:
            dataset: Open xarray dataset, owned by the handle from now on
            locator: Path or URL the dataset was opened from
        """
        self._dataset = dataset
        self._locator = locator if locator is not None else str(dataset.encoding.get("source", "<memory>"))
        self._closed = False
        self._sources: List[DataSource] = []
        self._grids: Dict[str, GeoGrid] = self._discover_grids()
        logger.info("Opened %s with %d grids", self._locator, len(self._grids))

    @classmethod
    def from_xarray(cls, dataset: xr.Dataset) -> GridDataset:
        """Wrap an already open xarray dataset."""
        return cls(dataset)

    # ------------------------------------------------------------------
    # Grid Discovery
    # ------------------------------------------------------------------

    def _discover_grids(self) -> Dict[str, GeoGrid]:
        ds = self._dataset
        axes = discover_axes(ds)
        transforms: Dict[str, Optional[VerticalTransform]] = {}
        grids: Dict[str, GeoGrid] = {}

        for name, variable in ds.data_vars.items():
            try:
                grid = self._build_grid(str(name), variable, axes, transforms)
            except CoordinateError as e:
                logger.warning("Skipping variable '%s': %s", name, e)
                continue
            if grid is not None:
                grids[str(name)] = grid
        return grids

    def _build_grid(
        self,
        name: str,
        variable: xr.DataArray,
        axes: Mapping[str, CoordinateAxis],
        transforms: Dict[str, Optional[VerticalTransform]],
    ) -> Optional[GeoGrid]:
        by_role: Dict[str, Tuple[str, CoordinateAxis]] = {}
        for dim in variable.dims:
            axis = axes.get(dim)
            if axis is None:
                logger.debug("Variable '%s' has non-axis dimension '%s'", name, dim)
                return None
            role = _ROLE_OF_AXIS_TYPE[axis.axis_type]
            if role in by_role:
                logger.warning("Skipping variable '%s': dimensions '%s' and '%s' share role %s",
                               name, by_role[role][0], dim, role)
                return None
            by_role[role] = (str(dim), axis)

        if Y_DIM not in by_role or X_DIM not in by_role:
            logger.debug("Variable '%s' has no horizontal axes", name)
            return None

        y_axis = by_role[Y_DIM][1]
        x_axis = by_role[X_DIM][1]
        time_axis = by_role.get(TIME_DIM, (None, None))[1]
        vertical_axis = by_role.get(VERTICAL_DIM, (None, None))[1]

        vertical_transform = None
        if vertical_axis is not None:
            if vertical_axis.name not in transforms:
                transforms[vertical_axis.name] = discover_vertical_transform(self._dataset, vertical_axis)
            vertical_transform = transforms[vertical_axis.name]

        coord_system = GridCoordSystem(
            y_axis=y_axis,
            x_axis=x_axis,
            time_axis=time_axis,
            vertical_axis=vertical_axis,
            vertical_transform=vertical_transform,
            projection=discover_projection(self._dataset, variable, x_axis),
            name=name,
        )

        ordered_dims = [by_role[role][0] for role in coord_system.axes()]
        source = DataSource(variable.transpose(*ordered_dims), name=name)
        self._sources.append(source)

        return GeoGrid(
            name=name,
            coord_system=coord_system,
            data_source=source,
            attrs=dict(variable.attrs),
            data_type=describe_dtype(variable.dtype, name),
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def locator(self) -> str:
        return self._locator

    @property
    def dataset(self) -> xr.Dataset:
        return self._dataset

    @property
    def grids(self) -> Mapping[str, GeoGrid]:
        """Read-only mapping of grid name to grid."""
        return MappingProxyType(self._grids)

    @property
    def grid_names(self) -> List[str]:
        return list(self._grids)

    def find_grid(self, name: str) -> Optional[GeoGrid]:
        """Grid with the given name, or None when absent."""
        return self._grids.get(name)

    def get_grid(self, name: str) -> GeoGrid:
        """
        Grid with the given name.

        Raises:
            GridNotFoundError: If the dataset has no such grid
        """
        check_grids_availability([name], self.grid_names)
        return self._grids[name]

    def get_grids(self, names: List[str]) -> Dict[str, GeoGrid]:
        """Several grids by name, all of which must exist."""
        check_grids_availability(names, self.grid_names)
        return {name: self._grids[name] for name in names}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the dataset and invalidate its data sources. Idempotent."""
        if self._closed:
            return
        for source in self._sources:
            source.close()
        self._dataset.close()
        self._closed = True
        logger.info("Closed %s", self._locator)

    def __enter__(self) -> GridDataset:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __contains__(self, name: str) -> bool:
        return name in self._grids

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"grids={self.grid_names}"
        return f"GridDataset({self._locator!r}, {state})"

# ============================================================================
# Opening
# ============================================================================

def open_dataset(
    locator: Union[str, Path],
    engine: Optional[str] = None,
    chunks: Optional[Union[int, str, Mapping[str, Any]]] = None,
) -> GridDataset:
    """
    Open a local file or remote dataset.

    Args:
        locator: File path or URL (OPeNDAP endpoints included)
        engine: xarray backend engine, GRIDSUBSET_ENGINE when omitted
        chunks: Dask chunking passed to xarray; None reads lazily without dask

    Returns:
        GridDataset: Handle owning the opened dataset

    Raises:
        DatasetNotFoundError: Local path does not exist
        RemoteUnavailableError: Remote dataset cannot be opened
        UnsupportedFormatError: No backend can read the file
    """
    locator = str(locator)
    remote = is_remote_locator(locator)
    if not remote and not Path(locator).exists():
        raise DatasetNotFoundError(locator)

    kwargs: Dict[str, Any] = {"decode_times": False}
    engine = engine or DEFAULT_ENGINE
    if engine is not None:
        kwargs["engine"] = engine
    if chunks is not None:
        kwargs["chunks"] = chunks

    logger.debug("Opening %s with %s", locator, kwargs)
    try:
        dataset = xr.open_dataset(locator, **kwargs)
    except (OSError, RuntimeError, ValueError) as e:
        if remote:
            raise RemoteUnavailableError(locator, f"{type(e).__name__}: {e}") from e
        raise UnsupportedFormatError(locator, f"{type(e).__name__}: {e}") from e

    try:
        return GridDataset(dataset, locator=locator)
    except Exception:
        dataset.close()
        raise
