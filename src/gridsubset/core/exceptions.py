"""
Grid Subset Custom Exception Classes

This module defines all custom exception classes for better error handling
and more informative error messages.
"""

from typing import Any, Optional, Sequence

# ============================================================================
# Base Exception
# ============================================================================

class GridSubsetError(Exception):
    """Base exception class for all grid subsetting errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        full_message = f"{message}\nDetails: {details}" if details else message
        super().__init__(full_message)

# ============================================================================
# Dataset Open Errors
# ============================================================================

class OpenFailureError(GridSubsetError):
    """
    Base class for dataset open failures.

    Open failures are fatal to the request and never retried.
    """

    def __init__(self, locator: str, reason: str):
        super().__init__(f"Cannot open dataset: {locator}", reason)
        self.locator = locator
        self.reason = reason

class DatasetNotFoundError(OpenFailureError):
    """Local dataset path does not exist."""

    def __init__(self, locator: str):
        super().__init__(locator, "No such file or directory")

class UnsupportedFormatError(OpenFailureError):
    """No backend could decode the dataset."""

class RemoteUnavailableError(OpenFailureError):
    """Remote dataset could not be reached."""

# ============================================================================
# Subset Resolution Errors
# ============================================================================

class RangeOutOfBoundsError(GridSubsetError):
    """Index range or fixed index outside the axis bounds."""

    def __init__(self, axis_name: str, requested: Any, size: int):
        super().__init__(
            f"Index selection {requested} out of bounds for axis '{axis_name}'",
            f"Valid index range: [0, {size - 1}]"
        )
        self.axis_name = axis_name
        self.requested = requested
        self.size = size

class EmptySubsetResultError(GridSubsetError):
    """Constraint does not intersect the grid footprint."""

    def __init__(self, constraint: Any, footprint: Any = None):
        super().__init__(
            f"Constraint {constraint} does not intersect the grid",
            f"Grid footprint: {footprint}" if footprint is not None else None
        )
        self.constraint = constraint
        self.footprint = footprint

class IncompatibleAxisRequestError(GridSubsetError):
    """Constraint applied to a missing axis, or inconsistent with its size."""

    def __init__(self, axis_name: str, reason: str):
        super().__init__(f"Incompatible request for axis '{axis_name}'", reason)
        self.axis_name = axis_name

# ============================================================================
# Read Errors
# ============================================================================

class ReadFailureError(GridSubsetError):
    """I/O failure while reading grid data."""

    def __init__(self, grid_name: str, reason: str):
        super().__init__(f"Failed to read data for grid '{grid_name}'", reason)
        self.grid_name = grid_name
        self.reason = reason

# ============================================================================
# Coordinate and Parameter Errors
# ============================================================================

class CoordinateError(GridSubsetError):
    """Coordinate system related errors."""

    def __init__(self, coord_name: str, issue: str):
        super().__init__(f"Coordinate error in '{coord_name}': {issue}")
        self.coord_name = coord_name

class ParameterError(GridSubsetError):
    """Parameter validation errors."""

    def __init__(self, parameter: str, value: str, reason: str):
        super().__init__(f"Invalid parameter '{parameter}': {value}", reason)
        self.parameter = parameter
        self.value = value

class GridNotFoundError(GridSubsetError):
    """Grids not found in a dataset."""

    def __init__(self, missing_grids: Sequence[str], available_grids: Optional[Sequence[str]] = None):
        grids_str = ", ".join(missing_grids)
        super().__init__(
            f"Grids not found: {grids_str}",
            f"Available grids: {', '.join(sorted(available_grids))}" if available_grids else None
        )
        self.missing_grids = list(missing_grids)
        self.available_grids = list(available_grids) if available_grids else None

# ============================================================================
# Utility Functions
# ============================================================================

def check_grids_availability(requested: Sequence[str], available: Sequence[str]) -> None:
    """Check if all requested grids are available."""
    missing = [g for g in requested if g not in available]
    if missing:
        raise GridNotFoundError(missing, available)

def check_stride(axis_name: str, stride: int) -> int:
    """
    Validate a stride value.

    Args:
        axis_name: Axis the stride applies to
        stride: Requested stride

    Returns:
        int: The validated stride

    Raises:
        ParameterError: If stride is not a positive integer
    """
    if int(stride) != stride or stride < 1:
        raise ParameterError(f"{axis_name}_stride", str(stride), "Stride must be an integer >= 1")
    return int(stride)
