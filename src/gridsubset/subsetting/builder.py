"""
Grid Subset Coordinate System Builder

This module assembles the coordinate system of a grid section from the
parent coordinate system and the resolved per-axis index ranges.
"""

from typing import Optional

from ..core.core_types import Range
from ..core.exceptions import CoordinateError, IncompatibleAxisRequestError
from ..core.logging_config import get_logger
from ..coordinates.axis import CoordinateAxis
from ..coordinates.coord_system import GridCoordSystem
from .ranges import is_identity

logger = get_logger('subsetting.builder')


def derive_axis(
    axis: Optional[CoordinateAxis],
    rng: Optional[Range],
    axis_name: str
) -> Optional[CoordinateAxis]:
    """
    Axis of the derived coordinate system.

    The parent axis object itself is returned when the range leaves it
    unchanged.

    Raises:
        IncompatibleAxisRequestError: Range on a missing axis, or larger than the axis
    """
    if axis is None:
        if rng is not None:
            raise IncompatibleAxisRequestError(axis_name, f"Grid has no {axis_name} axis but range {rng} was given")
        return None
    if is_identity(rng, axis.size):
        return axis
    if rng.last >= axis.size:
        raise IncompatibleAxisRequestError(
            axis_name, f"Range {rng} inconsistent with axis '{axis.name}' of size {axis.size}"
        )
    return axis.section(rng)


def build_coord_system(
    parent: GridCoordSystem,
    t_range: Optional[Range] = None,
    z_range: Optional[Range] = None,
    y_range: Optional[Range] = None,
    x_range: Optional[Range] = None
) -> GridCoordSystem:
    """
    Build the coordinate system of a subset.

    Unchanged axes are shared with the parent by identity, changed axes are
    sliced copies. The vertical transform is re-indexed with the vertical
    axis and the projection is shared by reference.

    Args:
        parent: Coordinate system being subset
        t_range, z_range, y_range, x_range: Ranges relative to the parent axes

    Returns:
        GridCoordSystem: Derived coordinate system

    Raises:
        IncompatibleAxisRequestError: Range inconsistent with an axis
        CoordinateError: If the derived bounding box disagrees with the
            projection's map area for the sliced axes
    """
    time_axis = derive_axis(parent.time_axis, t_range, "time")
    vertical_axis = derive_axis(parent.vertical_axis, z_range, "vertical")
    y_axis = derive_axis(parent.y_axis, y_range, "y")
    x_axis = derive_axis(parent.x_axis, x_range, "x")

    vertical_transform = parent.vertical_transform
    if vertical_transform is not None and vertical_axis is not parent.vertical_axis:
        vertical_transform = vertical_transform.subset(z_range)

    derived = GridCoordSystem(
        y_axis=y_axis,
        x_axis=x_axis,
        time_axis=time_axis,
        vertical_axis=vertical_axis,
        vertical_transform=vertical_transform,
        projection=parent.projection,
        name=parent.name,
    )

    map_area = derived.projection.get_default_map_area(derived.x_axis, derived.y_axis)
    bounding_box = derived.get_bounding_box()
    if not map_area.isclose(bounding_box):
        raise CoordinateError(
            parent.name or "grid",
            f"Derived bounding box {bounding_box} differs from projection map area {map_area}"
        )

    logger.debug("Derived coordinate system %r from %r", derived, parent)
    return derived
