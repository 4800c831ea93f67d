"""Locate the records of a non-decreasing time axis that fall in a time window."""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field

import numpy as np

from . import codec
from ._errors import (
    CDF_ERROR_NO_RECORDS_AFTER_START,
    CDF_ERROR_NO_RECORDS_BEFORE_END,
    CDF_ERROR_NON_MONOTONIC_TIME_AXIS,
    CDF_ERROR_PROBABLE_DATA_GAP,
    CDF_ERROR_VARIANT_MISMATCH,
    CdfError,
)
from .epoch import EpochArray, EpochType

logger = logging.getLogger(__name__)

_WHOLE_SECONDS = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}[T ]\d{1,2}:\d{2}:\d{2}$")


@dataclass(frozen=True)
class RecordRange:
    """Inclusive, 0-based record indices ``first..last``.

    ``last < first`` is an empty selection. ``warning`` holds the
    recoverable :class:`~xarray_cdf.CdfError` that emptied the range, if any.
    """

    first: int
    last: int
    warning: CdfError | None = field(default=None, compare=False)

    @classmethod
    def full(cls, n_records: int) -> RecordRange:
        return cls(0, n_records - 1)

    @classmethod
    def empty(cls, warning: CdfError | None = None) -> RecordRange:
        return cls(0, -1, warning)

    @property
    def is_empty(self) -> bool:
        return self.last < self.first

    def __len__(self) -> int:
        return max(0, self.last - self.first + 1)

    def to_slice(self) -> slice:
        """Slice selecting the range along the record axis."""
        return slice(self.first, max(self.first, self.last + 1))


def parse_bound(bound, epoch_type) -> EpochArray | None:
    """Turn a window bound into a single epoch value of *epoch_type*.

    Parameters
    ----------
    bound : None, str, datetime, numpy.datetime64, EpochArray or number
        Text in ``yyyy-mm-ddThh:mm:ss`` form gets ``.000`` appended before
        parsing. Raw numbers are taken as values of *epoch_type*.
    epoch_type : EpochType or str
        Epoch type of the time axis the bound is compared against.
    """
    if bound is None:
        return None
    epoch_type = EpochType.from_name(epoch_type)

    if isinstance(bound, (datetime.datetime, np.datetime64)):
        bound = np.datetime_as_string(np.datetime64(bound, "ns"))
    if isinstance(bound, str):
        text = bound.strip()
        if _WHOLE_SECONDS.match(text):
            text += ".000"
        return codec.parse(text, epoch_type)

    if isinstance(bound, EpochArray):
        if bound.epoch_type is not epoch_type:
            raise CdfError(
                CDF_ERROR_VARIANT_MISMATCH,
                f"Bound is {bound.epoch_type.value}, time axis is {epoch_type.value}.",
            )
    else:
        bound = EpochArray.from_raw(bound, epoch_type)
    if len(bound) != 1:
        raise ValueError(f"A window bound must be a single epoch value, got {len(bound)}.")
    return bound


def select_window(axis, start=None, end=None, library_version: str | None = None) -> RecordRange:
    """Find the records of *axis* inside the closed interval ``[start, end]``.

    Parameters
    ----------
    axis : EpochArray or array_like
        Non-decreasing time axis. The order is assumed, not checked.
    start, end : optional
        Window bounds, see :func:`parse_bound`. ``None`` leaves that side open.
    library_version : str or None
        CDF library version used to type a raw *axis*.

    Returns
    -------
    RecordRange
        ``first`` is the first record at or after *start*, ``last`` the last
        record at or before *end*. A window that falls between two
        consecutive records gives an empty range carrying a
        ``CDF_ERROR_PROBABLE_DATA_GAP`` warning.

    Raises
    ------
    CdfError
        ``CDF_ERROR_NO_RECORDS_AFTER_START`` or
        ``CDF_ERROR_NO_RECORDS_BEFORE_END`` (both recoverable) when the
        window lies entirely after or before the axis, and
        ``CDF_ERROR_NON_MONOTONIC_TIME_AXIS`` when the records found are
        inconsistent with a sorted axis. On a sorted axis that only happens
        when *start* is after *end*.
    """
    axis = EpochArray.from_raw(axis, library_version=library_version)
    n = len(axis)
    start = parse_bound(start, axis.epoch_type)
    end = parse_bound(end, axis.epoch_type)

    if start is None and end is None:
        return RecordRange.full(n)

    first = 0
    if start is not None:
        hits = np.flatnonzero(axis.ge(start))
        if hits.size == 0:
            last_time = codec.encode(axis[-1])[0] if n else None
            raise CdfError(
                CDF_ERROR_NO_RECORDS_AFTER_START,
                f"The last record is at {last_time}." if last_time else None,
                last_time,
            )
        first = int(hits[0])

    last = n - 1
    if end is not None:
        hits = np.flatnonzero(axis.le(end))
        if hits.size == 0:
            first_time = codec.encode(axis[0])[0] if n else None
            raise CdfError(
                CDF_ERROR_NO_RECORDS_BEFORE_END,
                f"The first record is at {first_time}." if first_time else None,
                first_time,
            )
        last = int(hits[-1])

    if last == first - 1:
        warning = CdfError(
            CDF_ERROR_PROBABLE_DATA_GAP,
            f"No records between index {last} and {first}.",
            (first, last),
        )
        logger.warning("%s", warning)
        return RecordRange(first, last, warning)
    if last < first - 1:
        reversed_window = start is not None and end is not None and not end.ge(start)[0]
        raise CdfError(
            CDF_ERROR_NON_MONOTONIC_TIME_AXIS,
            f"first={first}, last={last}"
            + (" (the window start is after its end)" if reversed_window else ""),
            (first, last),
        )

    logger.debug("Selected records %d..%d of %d", first, last, n)
    return RecordRange(first, last)
