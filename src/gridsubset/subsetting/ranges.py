"""
Grid Subset Axis Range Resolution

This module turns time and vertical constraints plus per-axis strides into
concrete index ranges. All functions are pure and perform no I/O.
"""

from typing import Optional, Union
import numpy as np

from ..core.core_types import Range, RangeConstraint
from ..core.exceptions import (
    EmptySubsetResultError, RangeOutOfBoundsError, check_stride
)
from ..core.logging_config import get_logger
from ..coordinates.axis import CoordinateAxis
from ..coordinates.time_handler import convert_time_to_range

logger = get_logger('subsetting.ranges')

AxisOrSize = Union[CoordinateAxis, int]


# ============================================================================
# Range Primitives
# ============================================================================

def full_range(size: int, stride: int = 1) -> Range:
    """
    Full-axis range with a stride.

    The result has ``ceil(size / stride)`` elements, starts at index 0 and
    its last element never exceeds ``size - 1``.
    """
    return Range.full(size, check_stride("axis", stride))

def apply_stride(rng: Range, stride: int) -> Range:
    """Apply a stride to a stride-1 range, keeping its first index as anchor."""
    stride = check_stride("axis", stride)
    if stride == 1:
        return rng
    return Range(rng.first, rng.last_element, rng.stride * stride)

def validate_range(rng: Range, size: int, axis_name: str) -> Range:
    """
    Check that a range lies within an axis of ``size`` elements.

    Raises:
        RangeOutOfBoundsError: If the range exceeds the axis
    """
    if rng.last >= size:
        raise RangeOutOfBoundsError(axis_name, rng, size)
    return rng

def compose_ranges(outer: Optional[Range], inner: Optional[Range], size: int, axis_name: str) -> Range:
    """
    Compose a range relative to ``outer`` into absolute indices.

    A None ``outer`` is the full axis of ``size`` elements; a None ``inner``
    keeps ``outer`` unchanged.
    """
    outer = outer if outer is not None else Range.full(size)
    if inner is None:
        return outer
    return outer.compose(inner, axis_name)

def is_identity(rng: Optional[Range], size: int) -> bool:
    """True when ``rng`` is None or the full axis at stride 1."""
    return rng is None or rng.is_full(size)

# ============================================================================
# Constraint Resolution
# ============================================================================

def _axis_size(axis: AxisOrSize) -> int:
    return axis.size if isinstance(axis, CoordinateAxis) else int(axis)

def _value_constraint_to_range(axis: CoordinateAxis, constraint, axis_name: str) -> Range:
    """Convert a coordinate- or time-valued ``(low, high)`` pair into indices."""
    low, high = constraint
    if isinstance(low, (int, float, np.integer, np.floating)) and isinstance(high, (int, float, np.integer, np.floating)):
        rng = axis.find_enclosing_range(float(low), float(high))
        if rng is None:
            raise EmptySubsetResultError(
                f"{axis_name}_range={constraint}",
                f"{axis.name}: [{axis.min_edge:g}, {axis.max_edge:g}] {axis.units}"
            )
        return rng
    return convert_time_to_range(axis, constraint)

def resolve_range(
    axis: Optional[AxisOrSize],
    constraint: RangeConstraint = None,
    stride: int = 1,
    axis_name: str = "axis"
) -> Optional[Range]:
    """
    Resolve an axis constraint and stride into the index range to apply.

    Args:
        axis: Axis, or its size, or None when the grid lacks the axis
        constraint: Explicit Range, a ``(low, high)`` coordinate/time pair, or None
        stride: Stride >= 1
        axis_name: Axis name for error messages

    Returns:
        Optional[Range]: None means "full axis, stride 1"

    Raises:
        RangeOutOfBoundsError: Explicit range outside the axis
        EmptySubsetResultError: Value constraint matching no element
        ParameterError: Invalid stride
    """
    stride = check_stride(axis_name, stride)
    if axis is None:
        return None
    size = _axis_size(axis)

    if constraint is None:
        if stride == 1:
            return None
        rng = full_range(size, stride)
        logger.debug("Axis %s: full range with stride %d -> %s (%d elements)", axis_name, stride, rng, rng.length)
        return rng

    if isinstance(constraint, Range):
        rng = validate_range(constraint, size, axis_name)
    elif isinstance(axis, CoordinateAxis):
        rng = _value_constraint_to_range(axis, constraint, axis_name)
    else:
        raise RangeOutOfBoundsError(axis_name, constraint, size)

    if stride > 1 and rng.stride == 1:
        rng = apply_stride(rng, stride)
    logger.debug("Axis %s: constraint %s resolved to %s", axis_name, constraint, rng)
    return rng
