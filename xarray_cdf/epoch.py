"""CDF epoch types and the array wrapper shared by the codec and the selector.

CDF stores timestamps in one of three encodings::

    CDF_EPOCH        float64 milliseconds since 0000-01-01T00:00:00
    CDF_EPOCH16      (seconds, picoseconds) since 0000-01-01T00:00:00
    CDF_TIME_TT2000  int64 nanoseconds since 2000-01-01T12:00:00 TT

An :class:`EpochArray` holds values of exactly one of these types.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from ._errors import (
    CDF_ERROR_INVALID_EPOCH_TYPE,
    CDF_ERROR_UNRECOGNIZED_EPOCH_SHAPE,
    CDF_ERROR_VARIANT_MISMATCH,
    CdfError,
)
from .version import epoch16_is_column_pair

COMPONENT_NAMES = (
    "year",
    "month",
    "day",
    "hour",
    "minute",
    "second",
    "millisecond",
    "microsecond",
    "nanosecond",
    "picosecond",
)


class EpochType(enum.Enum):
    """The three CDF epoch encodings."""

    CDF_EPOCH = "CDF_EPOCH"
    CDF_EPOCH16 = "CDF_EPOCH16"
    CDF_TIME_TT2000 = "CDF_TIME_TT2000"

    @property
    def n_components(self) -> int:
        """Number of leading :data:`COMPONENT_NAMES` fields the type stores."""
        return _N_COMPONENTS[self]

    @property
    def fraction_digits(self) -> int:
        """Digits after the decimal point in the canonical text form."""
        # one group of three digits per stored sub-second field
        return 3 * (self.n_components - 6)

    @classmethod
    def from_name(cls, name) -> EpochType:
        """Look up an epoch type by name (case insensitive, ``CDF_`` prefix optional)."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise CdfError(CDF_ERROR_INVALID_EPOCH_TYPE, f"Got {name!r}.") from None


_N_COMPONENTS = {
    EpochType.CDF_EPOCH: 7,
    EpochType.CDF_EPOCH16: 10,
    EpochType.CDF_TIME_TT2000: 9,
}

_ALIASES = {
    "EPOCH": "CDF_EPOCH",
    "EPOCH16": "CDF_EPOCH16",
    "TT2000": "CDF_TIME_TT2000",
    "TIME_TT2000": "CDF_TIME_TT2000",
}


class TimeComponents(NamedTuple):
    """Calendar breakdown of a single epoch value."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    millisecond: int = 0
    microsecond: int = 0
    nanosecond: int = 0
    picosecond: int = 0


def epoch_type_of(sample, library_version: str | None = None) -> EpochType:
    """Determine the CDF epoch type of *sample* from its dtype and shape.

    Parameters
    ----------
    sample : array_like or EpochArray
        Raw epoch values as returned by a CDF library.
    library_version : str or None
        Version of the library that produced *sample*. From 3.5.1 on
        (and for ``None``) CDF_EPOCH16 arrives as an Nx2 float64 array and
        CDF_EPOCH as N or Nx1. Before 3.5.1 CDF_EPOCH16 arrives as 2xN and
        CDF_EPOCH as N or 1xN.

    Returns
    -------
    EpochType

    Notes
    -----
    int64 values are always CDF_TIME_TT2000 and complex values (cdflib's
    native form) always CDF_EPOCH16. A one-dimensional float64 array is
    CDF_EPOCH under both rules.
    """
    if isinstance(sample, EpochArray):
        return sample.epoch_type

    arr = np.asarray(sample)
    if np.iscomplexobj(arr):
        return EpochType.CDF_EPOCH16
    if arr.dtype == np.int64:
        return EpochType.CDF_TIME_TT2000
    if arr.dtype == np.float64:
        if arr.ndim <= 1:
            return EpochType.CDF_EPOCH
        if arr.ndim == 2:
            if epoch16_is_column_pair(library_version):
                n_cols = arr.shape[1]
            else:
                n_cols = arr.shape[0]
            if n_cols == 2:
                return EpochType.CDF_EPOCH16
            if n_cols == 1:
                return EpochType.CDF_EPOCH

    raise CdfError(
        CDF_ERROR_UNRECOGNIZED_EPOCH_SHAPE,
        f"Got dtype {arr.dtype} with shape {arr.shape}.",
    )


def _normalise(values, epoch_type: EpochType) -> np.ndarray:
    """Return a private copy of *values* in the canonical layout of *epoch_type*."""
    if epoch_type is EpochType.CDF_TIME_TT2000:
        return np.array(values, dtype=np.int64).reshape(-1)

    if epoch_type is EpochType.CDF_EPOCH:
        return np.array(values, dtype=np.float64).reshape(-1)

    arr = np.asarray(values)
    if np.iscomplexobj(arr):
        arr = arr.reshape(-1)
        return np.column_stack((arr.real, arr.imag)).astype(np.float64)
    arr = np.array(arr, dtype=np.float64)
    if arr.ndim <= 1 and arr.size == 2:
        arr = arr.reshape(1, 2)
    elif arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, 2)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise CdfError(
            CDF_ERROR_UNRECOGNIZED_EPOCH_SHAPE,
            f"CDF_EPOCH16 values must be Nx2, got shape {arr.shape}.",
        )
    return arr


@dataclass(frozen=True, eq=False)
class EpochArray:
    """Immutable array of epoch values sharing one :class:`EpochType`.

    ``values`` is float64 ``(n,)`` for CDF_EPOCH, float64 ``(n, 2)`` of
    ``(seconds, picoseconds)`` for CDF_EPOCH16 and int64 ``(n,)`` for
    CDF_TIME_TT2000. Scalars are stored as length-1 arrays.
    """

    epoch_type: EpochType
    values: np.ndarray

    def __post_init__(self):
        epoch_type = EpochType.from_name(self.epoch_type)
        values = _normalise(self.values, epoch_type)
        values.setflags(write=False)
        object.__setattr__(self, "epoch_type", epoch_type)
        object.__setattr__(self, "values", values)

    @classmethod
    def from_raw(cls, raw, epoch_type=None, library_version: str | None = None) -> EpochArray:
        """Wrap raw library output, detecting the epoch type when not given."""
        if isinstance(raw, EpochArray):
            return raw
        if epoch_type is None:
            epoch_type = epoch_type_of(raw, library_version)
        else:
            epoch_type = EpochType.from_name(epoch_type)

        arr = np.asarray(raw)
        if (
            epoch_type is EpochType.CDF_EPOCH16
            and not np.iscomplexobj(arr)
            and arr.ndim == 2
            and not epoch16_is_column_pair(library_version)
        ):
            arr = arr.T
        return cls(epoch_type, arr)

    @classmethod
    def empty(cls, epoch_type) -> EpochArray:
        epoch_type = EpochType.from_name(epoch_type)
        if epoch_type is EpochType.CDF_EPOCH16:
            return cls(epoch_type, np.empty((0, 2)))
        return cls(epoch_type, np.empty(0))

    # -- container protocol --------------------------------------------------

    def __len__(self) -> int:
        return self.values.shape[0]

    def __getitem__(self, key) -> EpochArray:
        if isinstance(key, (int, np.integer)):
            n = len(self)
            index = key + n if key < 0 else key
            if not 0 <= index < n:
                raise IndexError(f"index {key} is out of bounds for {n} epochs")
            key = slice(index, index + 1)
        return EpochArray(self.epoch_type, self.values[key])

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def __eq__(self, other):
        if not isinstance(other, EpochArray):
            return NotImplemented
        return self.epoch_type is other.epoch_type and np.array_equal(self.values, other.values)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self):
        return f"EpochArray({self.epoch_type.value}, {self.values.tolist()!r})"

    # -- accessors -----------------------------------------------------------

    @property
    def seconds(self) -> np.ndarray:
        """Whole seconds of CDF_EPOCH16 values."""
        self._require(EpochType.CDF_EPOCH16)
        return self.values[:, 0]

    @property
    def picoseconds(self) -> np.ndarray:
        """Picoseconds within the second of CDF_EPOCH16 values."""
        self._require(EpochType.CDF_EPOCH16)
        return self.values[:, 1]

    def to_raw(self) -> np.ndarray:
        """Writable copy of the values in the Nx2 (3.5.1+) convention."""
        return self.values.copy()

    # -- comparisons against a single bound ----------------------------------

    def ge(self, bound: EpochArray) -> np.ndarray:
        """Mask of elements at or after *bound*."""
        bound = self._scalar(bound)
        if self.epoch_type is EpochType.CDF_EPOCH16:
            s, ps = bound.values[0]
            return (self.seconds > s) | ((self.seconds == s) & (self.picoseconds >= ps))
        return self.values >= bound.values[0]

    def le(self, bound: EpochArray) -> np.ndarray:
        """Mask of elements at or before *bound*."""
        bound = self._scalar(bound)
        if self.epoch_type is EpochType.CDF_EPOCH16:
            s, ps = bound.values[0]
            return (self.seconds < s) | ((self.seconds == s) & (self.picoseconds <= ps))
        return self.values <= bound.values[0]

    def _scalar(self, bound: EpochArray) -> EpochArray:
        if not isinstance(bound, EpochArray):
            bound = EpochArray.from_raw(bound)
        if bound.epoch_type is not self.epoch_type:
            raise CdfError(
                CDF_ERROR_VARIANT_MISMATCH,
                f"Expected {self.epoch_type.value}, got {bound.epoch_type.value}.",
            )
        if len(bound) != 1:
            raise ValueError(f"Expected a single epoch value, got {len(bound)}.")
        return bound

    def _require(self, epoch_type: EpochType) -> None:
        if self.epoch_type is not epoch_type:
            raise CdfError(
                CDF_ERROR_VARIANT_MISMATCH,
                f"Expected {epoch_type.value}, got {self.epoch_type.value}.",
            )
