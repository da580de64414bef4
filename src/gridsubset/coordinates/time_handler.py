"""
Grid Subset Time Coordinate Processing

This module decodes CF time axes through xarray and cftime, normalizes time
values and converts time-valued constraints into index ranges on a time axis.
Non-standard calendars (``noleap``, ``360_day``, ...) are compared in their
own calendar.
"""

from typing import Optional, Tuple
from datetime import datetime
import cftime
import numpy as np
from xarray.coding.times import decode_cf_datetime

from ..core.config import DATETIME_PRECISION, DEFAULT_CALENDAR
from ..core.core_types import Range, TimeRange, TimeValue
from ..core.exceptions import CoordinateError, EmptySubsetResultError, ParameterError
from .axis import CoordinateAxis

# ============================================================================
# Time Value Normalization
# ============================================================================

def normalize_time_value(time_value: TimeValue) -> np.datetime64:
    """
    Normalize various time formats to numpy.datetime64.

    Args:
        time_value: Time value (str, datetime, or np.datetime64)

    Returns:
        np.datetime64: Normalized time value

    Raises:
        ParameterError: If time format is invalid
    """
    try:
        if isinstance(time_value, np.datetime64):
            return time_value.astype(f'datetime64[{DATETIME_PRECISION}]')

        if isinstance(time_value, datetime):
            if time_value.tzinfo is not None:
                time_value = time_value.replace(tzinfo=None) - time_value.utcoffset()
            return np.datetime64(time_value, DATETIME_PRECISION)

        if isinstance(time_value, str):
            text = time_value.strip()
            if text.endswith("Z"):
                text = text[:-1]
            dt = datetime.fromisoformat(text)
            return normalize_time_value(dt)

        return np.datetime64(time_value, DATETIME_PRECISION)

    except Exception as e:
        raise ParameterError("time_value", str(time_value), f"Cannot parse time value: {e}") from e

def normalize_time_range(time_range: Optional[TimeRange]) -> Tuple[Optional[np.datetime64], Optional[np.datetime64]]:
    """
    Normalize time range to numpy.datetime64 values.

    Args:
        time_range: Time range (start, end)

    Returns:
        Tuple[Optional[np.datetime64], Optional[np.datetime64]]: Normalized time range
    """
    if time_range is None:
        return None, None

    if len(time_range) != 2:
        raise ParameterError("time_range", str(time_range), "Must contain exactly 2 values")

    start_time = normalize_time_value(time_range[0]) if time_range[0] is not None else None
    end_time = normalize_time_value(time_range[1]) if time_range[1] is not None else None

    if start_time is not None and end_time is not None and start_time > end_time:
        raise ParameterError("time_range", str(time_range), "Start time must be <= end time")

    return start_time, end_time

def to_calendar_datetime(time_value: TimeValue, calendar: str) -> cftime.datetime:
    """
    Express a time value as a ``cftime.datetime`` in the given calendar.

    ``cftime.datetime`` values are re-expressed field by field, which is how
    dates that do not exist in the proleptic Gregorian calendar (such as
    ``2000-02-30`` in ``360_day``) are given.

    Raises:
        ParameterError: If the value cannot be parsed or does not exist in the calendar
    """
    if isinstance(time_value, cftime.datetime):
        dt = time_value
    else:
        dt = normalize_time_value(time_value).astype("datetime64[us]").item()
        if not isinstance(dt, datetime):
            raise ParameterError("time_value", str(time_value), "Outside the representable date range")
    try:
        return cftime.datetime(
            dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, dt.microsecond,
            calendar=calendar,
        )
    except ValueError as e:
        raise ParameterError("time_value", str(time_value), f"Not a valid '{calendar}' date: {e}") from e

# ============================================================================
# CF Time Axis Decoding
# ============================================================================

def time_calendar(axis: CoordinateAxis) -> str:
    """CF calendar of a time axis, ``standard`` when not declared."""
    return str(axis.attrs.get("calendar", DEFAULT_CALENDAR)).lower()

def decode_time_axis(axis: CoordinateAxis, use_cftime: Optional[bool] = None) -> np.ndarray:
    """
    Decode the values of a CF time axis.

    Args:
        axis: Time axis with ``<unit> since <reference>`` units
        use_cftime: Force ``cftime.datetime`` objects (True) or datetime64 (False);
            by default datetime64 is used for standard calendars within its range

    Returns:
        np.ndarray: ``datetime64`` values, or an object array of ``cftime.datetime``

    Raises:
        CoordinateError: If the units or calendar cannot be decoded
    """
    try:
        return decode_cf_datetime(axis.values, axis.units, calendar=time_calendar(axis), use_cftime=use_cftime)
    except (ValueError, TypeError, KeyError, OverflowError) as e:
        raise CoordinateError(axis.name, f"Cannot decode times '{axis.units}': {e}") from e

def convert_time_to_range(axis: CoordinateAxis, time_range: TimeRange) -> Range:
    """
    Index range of the time axis elements within ``[start, end]``.

    Either end may be None for an open interval. Bounds are compared in the
    axis calendar.

    Raises:
        ParameterError: If a bound is invalid or start is after end
        CoordinateError: If the axis cannot be decoded
        EmptySubsetResultError: If no time falls in the interval
    """
    if time_range is None or len(time_range) != 2:
        raise ParameterError("time_range", str(time_range), "Must contain exactly 2 values")

    times = decode_time_axis(axis, use_cftime=True)
    calendar = times[0].calendar
    start, end = (
        None if value is None else to_calendar_datetime(value, calendar)
        for value in time_range
    )
    if start is not None and end is not None and start > end:
        raise ParameterError("time_range", str(time_range), "Start time must be <= end time")

    mask = np.ones(times.shape, dtype=bool)
    if start is not None:
        mask &= np.array([t >= start for t in times], dtype=bool)
    if end is not None:
        mask &= np.array([t <= end for t in times], dtype=bool)

    indices = np.where(mask)[0]
    if indices.size == 0:
        raise EmptySubsetResultError(
            f"time_range={time_range}",
            f"{axis.name}: [{times.min()}, {times.max()}] ({calendar})"
        )
    return Range(int(indices.min()), int(indices.max()))
