"""
Grid Subset Utilities

This package provides coordinate, time and vertical level conversion
functions for grids.
"""

# Conversion functions
from .conversion import (
    convert_coordinates_to_indices,
    convert_indices_to_coordinates,
    convert_time_to_indices,
    convert_levels_to_indices,
)

__all__ = [
    # Conversion functions
    "convert_coordinates_to_indices",
    "convert_indices_to_coordinates",
    "convert_time_to_indices",
    "convert_levels_to_indices",
]
