"""
Grid Subset Data Sources

This module provides the raw slicing primitive behind every grid: given one
index range per axis, return the selected elements as a numpy array. Arrays
are held in canonical axis order and sliced lazily through xarray, so the
same code path serves in-memory arrays, local files and remote datasets.
"""

from typing import Optional, Sequence, Tuple, Union
import numpy as np
import xarray as xr

from ..core.core_types import Range
from ..core.exceptions import ReadFailureError
from ..core.logging_config import get_logger

logger = get_logger('io.data_source')

ArrayLike = Union[xr.DataArray, np.ndarray]

# Backend failures surfaced as ReadFailureError
_BACKEND_ERRORS = (OSError, RuntimeError, ValueError, KeyError, IndexError)


class DataSource:
    """
    Sliceable array of one variable.

    The source can be closed by the dataset handle that issued it; reads
    after that fail with ``ReadFailureError``.
    """

    def __init__(self, array: ArrayLike, name: Optional[str] = None):
        """
        Initialize a data source.

        Args:
            array: DataArray or numpy array, axes in canonical order
            name: Variable name used in error messages
        """
        if not isinstance(array, (xr.DataArray, np.ndarray)):
            array = np.asarray(array)
        self._array = array
        self._shape = tuple(int(n) for n in array.shape)
        self._dtype = array.dtype
        self._name = name if name is not None else str(getattr(array, "name", None) or "array")
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Invalidate the source; the underlying array is released."""
        self._closed = True
        self._array = None

    def read_slice(self, ranges: Sequence[Range]) -> np.ndarray:
        """
        Read the elements selected by one range per axis.

        Args:
            ranges: Absolute index ranges, one per axis in canonical order

        Returns:
            np.ndarray: Newly allocated array of shape ``[len(r) for r in ranges]``

        Raises:
            ReadFailureError: If the source is closed or the backend fails
        """
        # Taken once so a concurrent close cannot swap the array out mid-read
        array = self._array
        if self._closed or array is None:
            raise ReadFailureError(self._name, "Data source is closed")
        if len(ranges) != self.ndim:
            raise ReadFailureError(
                self._name, f"Expected {self.ndim} ranges, got {len(ranges)}"
            )

        slices = tuple(rng.to_slice() for rng in ranges)
        try:
            if isinstance(array, xr.DataArray):
                selected = array.isel(dict(zip(array.dims, slices)))
                data = np.array(selected.values)
            else:
                data = np.array(array[slices])
        except _BACKEND_ERRORS as e:
            raise ReadFailureError(self._name, f"{type(e).__name__}: {e}") from e

        logger.debug("Read %s%s -> %s", self._name, [str(r) for r in ranges], data.shape)
        return data

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"shape={self.shape}"
        return f"DataSource(name={self._name!r}, {state})"
