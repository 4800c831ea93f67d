"""Conversions between CDF epoch values, calendar components, text and seconds.

The calendar arithmetic itself (including the TT2000 leap second table) is
delegated to :class:`cdflib.cdfepoch`. Everything here works on whole
arrays; single values are length-1 :class:`~xarray_cdf.epoch.EpochArray`.

Conversion between epoch types always goes through :func:`breakdown` and
:func:`compute` so that rounding and truncation follow one set of rules.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable

import cdflib
import numpy as np

from ._errors import (
    CDF_ERROR_INSUFFICIENT_TIME_COMPONENTS,
    CDF_ERROR_INVALID_TIME_FORMAT,
    CDF_ERROR_VARIANT_MISMATCH,
    CdfError,
)
from .epoch import COMPONENT_NAMES, EpochArray, EpochType, TimeComponents

__all__ = [
    "breakdown",
    "components",
    "compute",
    "convert",
    "encode",
    "from_relative_seconds",
    "from_seconds_since_midnight",
    "parse",
    "seconds_since_midnight",
    "to_datetime64",
    "to_relative_seconds",
]

_N_FIELDS = len(COMPONENT_NAMES)
_PICO = 1e12

# yyyy-mm-dd[Thh:mm[:ss[.fraction]]], fraction up to picoseconds
_TIME_RE = re.compile(
    r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})"
    r"(?:[T ](\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,12}))?)?)?"
    r"\s*Z?\s*$"
)


def _as_epoch(epoch, epoch_type=None) -> EpochArray:
    if isinstance(epoch, EpochArray):
        if epoch_type is not None and EpochType.from_name(epoch_type) is not epoch.epoch_type:
            raise CdfError(
                CDF_ERROR_VARIANT_MISMATCH,
                f"Expected {EpochType.from_name(epoch_type).value}, got {epoch.epoch_type.value}.",
            )
        return epoch
    return EpochArray.from_raw(epoch, epoch_type)


# -- calendar components ------------------------------------------------------


def breakdown(epoch, epoch_type=None) -> np.ndarray:
    """Break epoch values into calendar components.

    Parameters
    ----------
    epoch : EpochArray or array_like
        Epoch values. Raw values are typed with ``epoch_type`` or, when
        that is None, from their dtype and shape.
    epoch_type : EpochType or str, optional

    Returns
    -------
    numpy.ndarray
        int64 array of shape ``(n, 10)`` with the fields of
        :data:`~xarray_cdf.epoch.COMPONENT_NAMES`. Fields the epoch type
        does not store are zero.
    """
    epoch = _as_epoch(epoch, epoch_type)
    n = len(epoch)
    out = np.zeros((n, _N_FIELDS), dtype=np.int64)
    if n == 0:
        return out

    n_stored = epoch.epoch_type.n_components
    if epoch.epoch_type is EpochType.CDF_EPOCH:
        parts = cdflib.cdfepoch.breakdown_epoch(epoch.values)
    elif epoch.epoch_type is EpochType.CDF_EPOCH16:
        parts = cdflib.cdfepoch.breakdown_epoch16(epoch.seconds + 1j * epoch.picoseconds)
    else:
        parts = cdflib.cdfepoch.breakdown_tt2000(epoch.values)

    parts = np.asarray(parts, dtype=np.float64).reshape(n, -1)
    out[:, :n_stored] = np.rint(parts[:, :n_stored]).astype(np.int64)
    if epoch.epoch_type is EpochType.CDF_TIME_TT2000:
        # cdflib reports a leap second as hh:60:00
        leap = out[:, 4] == 60
        out[leap, 4] = 59
        out[leap, 5] = 60
    return out


def components(epoch, epoch_type=None) -> list[TimeComponents]:
    """Return :func:`breakdown` as a list of :class:`TimeComponents`."""
    return [TimeComponents(*row) for row in breakdown(epoch, epoch_type).tolist()]


def _component_rows(timevec) -> np.ndarray:
    """Coerce *timevec* to an ``(n, k)`` int64 array with 3 <= k <= 10."""
    if isinstance(timevec, TimeComponents):
        timevec = [tuple(timevec)]
    if isinstance(timevec, np.ndarray):
        arr = timevec.astype(np.float64)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
    else:
        rows = list(timevec)
        if all(np.ndim(row) == 0 for row in rows):
            rows = [rows]
        if any(np.ndim(row) != 1 for row in rows):
            raise CdfError(CDF_ERROR_INSUFFICIENT_TIME_COMPONENTS, "Rows must be sequences of numbers.")
        lengths = [len(row) for row in rows]
        if min(lengths) < 3:
            raise CdfError(
                CDF_ERROR_INSUFFICIENT_TIME_COMPONENTS, f"Got a row of {min(lengths)} fields."
            )
        # shorter rows get zeros for their missing trailing fields
        arr = np.zeros((len(rows), max(lengths)), dtype=np.float64)
        for i, row in enumerate(rows):
            arr[i, : lengths[i]] = row
    if arr.ndim != 2 or not 3 <= arr.shape[1] <= _N_FIELDS:
        raise CdfError(CDF_ERROR_INSUFFICIENT_TIME_COMPONENTS, f"Got shape {arr.shape}.")
    return np.rint(arr).astype(np.int64)


def compute(timevec, epoch_type=EpochType.CDF_TIME_TT2000) -> EpochArray:
    """Compute epoch values from calendar components.

    Parameters
    ----------
    timevec : TimeComponents, sequence or array_like
        One row ``[year, month, day, hour, ...]`` or an ``(n, k)`` array of
        rows. At least year, month and day are required; missing trailing
        fields are zero and fields beyond what *epoch_type* stores are
        dropped (microseconds and below for CDF_EPOCH, picoseconds for
        CDF_TIME_TT2000).
    epoch_type : EpochType or str
        Target type, CDF_TIME_TT2000 by default.

    Returns
    -------
    EpochArray

    Examples
    --------
    >>> compute([2015, 3, 18]).values[0]
    479908867184000000
    >>> compute([2015, 3, 18], "CDF_EPOCH").values[0]
    63593856000000.0
    """
    epoch_type = EpochType.from_name(epoch_type)
    rows = _component_rows(timevec)
    n = rows.shape[0]
    if n == 0:
        return EpochArray.empty(epoch_type)

    n_stored = epoch_type.n_components
    padded = np.zeros((n, n_stored), dtype=np.int64)
    n_given = min(rows.shape[1], n_stored)
    padded[:, :n_given] = rows[:, :n_given]

    if epoch_type is EpochType.CDF_EPOCH:
        values = cdflib.cdfepoch.compute_epoch(padded.tolist())
    elif epoch_type is EpochType.CDF_EPOCH16:
        values = cdflib.cdfepoch.compute_epoch16(padded.tolist())
    else:
        # a leap second is one second after hh:mm:59 on the continuous TT2000 scale
        leap = padded[:, 5] == 60
        padded[leap, 5] = 59
        values = cdflib.cdfepoch.compute_tt2000(padded.tolist())
        values = np.atleast_1d(np.asarray(values, dtype=np.int64))
        values[leap] += 1_000_000_000

    return EpochArray(epoch_type, np.atleast_1d(np.asarray(values)))


def convert(epoch, to_type, from_type=None) -> EpochArray:
    """Convert epoch values to another epoch type.

    Goes through :func:`breakdown` and :func:`compute`; converting to a
    coarser type truncates (CDF_EPOCH16 to CDF_EPOCH keeps whole
    milliseconds). Converting to the same type returns *epoch* unchanged.
    """
    epoch = _as_epoch(epoch, from_type)
    to_type = EpochType.from_name(to_type)
    if to_type is epoch.epoch_type:
        return epoch
    return compute(breakdown(epoch), to_type)


# -- text ---------------------------------------------------------------------


def encode(epoch, epoch_type=None) -> list[str]:
    """Format epoch values as ``yyyy-mm-ddThh:mm:ss.fff``.

    The fraction has 3 digits for CDF_EPOCH, 9 for CDF_TIME_TT2000 and 12
    for CDF_EPOCH16.
    """
    epoch = _as_epoch(epoch, epoch_type)
    n_groups = epoch.epoch_type.fraction_digits // 3
    strings = []
    for row in breakdown(epoch).tolist():
        text = "{:04d}-{:02d}-{:02d}T{:02d}:{:02d}:{:02d}.".format(*row[:6])
        text += "".join(f"{v:03d}" for v in row[6 : 6 + n_groups])
        strings.append(text)
    return strings


def _days_in_month(year: int, month: int) -> int:
    return calendar.mdays[month] + (month == 2 and calendar.isleap(year))


def _parse_one(text: str) -> list[int]:
    match = _TIME_RE.match(str(text))
    if match is None:
        raise CdfError(
            CDF_ERROR_INVALID_TIME_FORMAT,
            f"Expected 'yyyy-mm-ddThh:mm:ss[.fff]', got {text!r}.",
        )
    year, month, day, hour, minute, second, fraction = match.groups()
    fields = [int(year), int(month), int(day), int(hour or 0), int(minute or 0), int(second or 0)]
    fraction = (fraction or "").ljust(12, "0")
    fields += [int(fraction[i : i + 3]) for i in range(0, 12, 3)]

    if not 1 <= fields[1] <= 12 or not 1 <= fields[2] <= _days_in_month(fields[0], fields[1]):
        raise CdfError(CDF_ERROR_INVALID_TIME_FORMAT, f"Date out of range in {text!r}.")
    # second 60 is a leap second
    if not (fields[3] <= 23 and fields[4] <= 59 and fields[5] <= 60):
        raise CdfError(CDF_ERROR_INVALID_TIME_FORMAT, f"Time out of range in {text!r}.")
    return fields


def parse(text, epoch_type=EpochType.CDF_TIME_TT2000) -> EpochArray:
    """Parse ISO-8601 like text into epoch values.

    Accepts ``yyyy-mm-dd`` optionally followed by ``Thh:mm``, ``:ss`` and
    a fraction of up to 12 digits. A space may replace the ``T`` and a
    trailing ``Z`` is ignored.

    Parameters
    ----------
    text : str or iterable of str
    epoch_type : EpochType or str
        CDF_TIME_TT2000 by default.
    """
    if isinstance(text, (str, bytes)):
        text = [text.decode("ascii") if isinstance(text, bytes) else text]
    elif not isinstance(text, Iterable):
        raise CdfError(CDF_ERROR_INVALID_TIME_FORMAT, f"Expected text, got {type(text).__name__}.")
    rows = [_parse_one(t) for t in text]
    if not rows:
        return EpochArray.empty(epoch_type)
    return compute(rows, epoch_type)


def to_datetime64(epoch, epoch_type=None) -> np.ndarray:
    """Convert epoch values to ``datetime64[ns]``.

    Digits below the nanosecond are truncated and a leap second rolls over
    into the following minute.
    """
    parts = breakdown(epoch, epoch_type)
    if len(parts) == 0:
        return np.empty(0, dtype="datetime64[ns]")
    days = np.array(
        ["{:04d}-{:02d}-{:02d}".format(*row) for row in parts[:, :3].tolist()],
        dtype="datetime64[D]",
    )
    hour, minute, second, msec, usec, nsec = (parts[:, i] for i in range(3, 9))
    offset = ((hour * 60 + minute) * 60 + second) * 1_000_000_000 + msec * 1_000_000
    offset += usec * 1_000 + nsec
    return days.astype("datetime64[ns]") + offset.astype("timedelta64[ns]")


# -- relative seconds ---------------------------------------------------------


def _reference(epoch: EpochArray, reference) -> EpochArray:
    if reference is None:
        if len(epoch) == 0:
            raise ValueError("A reference epoch is required for an empty epoch array.")
        return epoch[0]
    reference = _as_epoch(reference)
    if reference.epoch_type is not epoch.epoch_type:
        raise CdfError(
            CDF_ERROR_VARIANT_MISMATCH,
            f"Reference is {reference.epoch_type.value}, epochs are {epoch.epoch_type.value}.",
        )
    if len(reference) == 0:
        raise ValueError("The reference epoch is empty.")
    return reference[0]


def to_relative_seconds(epoch, reference=None, epoch_type=None) -> np.ndarray:
    """Seconds elapsed from *reference* to each epoch value.

    Parameters
    ----------
    epoch : EpochArray or array_like
    reference : EpochArray or array_like, optional
        Same epoch type as *epoch*; defaults to its first element.
    epoch_type : EpochType or str, optional
        Type of raw *epoch* values.

    Returns
    -------
    numpy.ndarray of float64

    Notes
    -----
    CDF_EPOCH16 differences are taken separately on whole seconds and on
    picoseconds, so the result is exact up to float64 rounding of the sum.
    CDF_TIME_TT2000 differences are taken in int64 before scaling.
    """
    epoch = _as_epoch(epoch, epoch_type)
    if len(epoch) == 0 and reference is None:
        return np.empty(0)
    ref = _reference(epoch, reference)

    if epoch.epoch_type is EpochType.CDF_EPOCH:
        return (epoch.values - ref.values[0]) * 1e-3
    if epoch.epoch_type is EpochType.CDF_EPOCH16:
        return (epoch.seconds - ref.seconds[0]) + (epoch.picoseconds - ref.picoseconds[0]) * 1e-12
    return (epoch.values - ref.values[0]).astype(np.float64) * 1e-9


def from_relative_seconds(seconds, reference, epoch_type=None) -> EpochArray:
    """Inverse of :func:`to_relative_seconds`.

    The result has the epoch type of *reference*. CDF_EPOCH results are
    rounded to the millisecond, CDF_TIME_TT2000 to the nanosecond and
    CDF_EPOCH16 to the picosecond, with picoseconds kept in ``[0, 1e12)``.
    """
    ref = _as_epoch(reference, epoch_type)
    if len(ref) == 0:
        raise ValueError("The reference epoch is empty.")
    ref = ref[0]
    seconds = np.asarray(seconds, dtype=np.float64).reshape(-1)

    if ref.epoch_type is EpochType.CDF_EPOCH:
        return EpochArray(ref.epoch_type, np.rint(seconds * 1e3) + ref.values[0])

    if ref.epoch_type is EpochType.CDF_EPOCH16:
        whole = np.trunc(seconds)
        pico = np.rint((seconds - whole) * _PICO) + ref.picoseconds[0]
        whole = whole + ref.seconds[0]
        carry = np.floor_divide(pico, _PICO)
        return EpochArray(ref.epoch_type, np.column_stack((whole + carry, pico - carry * _PICO)))

    nanos = np.rint(seconds * 1e9).astype(np.int64)
    return EpochArray(ref.epoch_type, nanos + ref.values[0])


def seconds_since_midnight(epoch, reference=None, epoch_type=None):
    """Seconds since midnight of the date of *reference*.

    Parameters
    ----------
    epoch : EpochArray or array_like
    reference : EpochArray or array_like, optional
        Defaults to the first element of *epoch*.

    Returns
    -------
    tuple of (numpy.ndarray, EpochArray)
        Seconds as float64 and the midnight epoch they are relative to.
    """
    epoch = _as_epoch(epoch, epoch_type)
    ref = _reference(epoch, reference)
    midnight = compute(breakdown(ref)[:, :3], epoch.epoch_type)
    return to_relative_seconds(epoch, midnight), midnight


def from_seconds_since_midnight(
    seconds, date, epoch_type=EpochType.CDF_TIME_TT2000
) -> EpochArray:
    """Convert seconds since midnight on *date* to epoch values.

    *date* is ``yyyy-mm-dd`` text (the result is of *epoch_type*) or an
    epoch value whose type is used instead.
    """
    if isinstance(date, str):
        midnight = parse(date, epoch_type)
    else:
        date = _as_epoch(date)
        midnight = compute(breakdown(date[0])[:, :3], date.epoch_type)
    return from_relative_seconds(seconds, midnight)
