"""
Grid Subset Grids

This package provides the geo-referenced grid and its lazy section view.
"""

from .geogrid import GeoGrid, GridSectionView, KEEP_AXIS

__all__ = [
    "GeoGrid",
    "GridSectionView",
    "KEEP_AXIS",
]
