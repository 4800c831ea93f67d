"""
Read one CDF variable and its dependencies across a set of files
"""

from __future__ import annotations

import glob
import logging
from dataclasses import dataclass, field

import numpy as np

from . import codec
from ._errors import (
    CDF_ERROR_EMPTY_VARIABLE,
    CDF_ERROR_NO_DEPENDENCY,
    CDF_ERROR_NO_FILES,
    CdfError,
)
from .cdffile import CDFFile, validation
from .epoch import EpochArray, EpochType
from .selector import RecordRange, select_window

logger = logging.getLogger(__name__)

MAX_DEPENDS = 4

_LAYOUTS = {
    "row": "row",
    "row-major": "row",
    "c": "row",
    "column": "column",
    "column-major": "column",
    "f": "column",
}

EPOCH_OUTPUTS = ("raw", "seconds", "string", "datetime")


def normalize_layout(layout: str) -> str:
    """Map a layout name or alias to ``"row"`` or ``"column"``."""
    try:
        return _LAYOUTS[str(layout).lower()]
    except KeyError:
        raise ValueError(
            f"Unknown layout {layout!r}, expected one of {sorted(_LAYOUTS)}"
        ) from None


def reorder(array: np.ndarray) -> np.ndarray:
    """Reverse the axis order of *array*; applying it twice is a no-op."""
    return np.transpose(array)


@dataclass
class CDFReadResult:
    """Arrays returned by :meth:`MultiCDF.read`.

    ``depends`` and ``depend_names`` always have four entries, ``None`` where
    the variable has no such dependency. ``record_range`` indexes the records
    concatenated across all files. Recoverable conditions (no records in the
    window, a probable data gap, an empty variable) are listed in
    ``warnings`` instead of being raised.
    """

    variable: str
    data: np.ndarray
    depends: tuple
    depend_names: tuple
    record_range: RecordRange
    epoch_type: EpochType | None
    layout: str
    n_files: int
    record_varying: tuple = ()
    warnings: list = field(default_factory=list)

    @property
    def n_records(self) -> int:
        return len(self.record_range)


class MultiCDF:
    """Read variables from a set of CDF files as if they were one file.

    Parameters
    ----------
    filenames : list of str or str
        Files in record order, or a glob pattern whose matches are sorted.
    validate : bool
        Validate each file while opening it (see :func:`validation`).
    library_version : str or None
        CDF library version whose CDF_EPOCH16 layout raw arrays follow.
        ``None`` means the current Nx2 layout.
    opener : callable or None
        ``opener(path)`` returns an object with the :class:`CDFFile`
        interface usable as a context manager. Defaults to :class:`CDFFile`.

    Notes
    -----
    Dependency names and record variance are taken from the first file and
    assumed identical in the others. Files are assumed to be in time order.
    """

    def __init__(self, filenames, validate=False, library_version=None, opener=None):
        if isinstance(filenames, str):
            filenames = sorted(glob.glob(filenames))
        self.filenames = [str(f) for f in (filenames or [])]
        if not self.filenames:
            raise CdfError(CDF_ERROR_NO_FILES)
        self.validate = bool(validate)
        self.library_version = library_version
        self.opener = CDFFile if opener is None else opener

    def __repr__(self):
        return f"MultiCDF({len(self.filenames)} files)"

    # -- public methods ----------------------------------------------------------

    def variables(self) -> list[str]:
        """Variable names of the first file."""
        with validation(self.validate), self.opener(self.filenames[0]) as cdf:
            return cdf.variables()

    def read(
        self,
        variable: str,
        start=None,
        end=None,
        layout: str = "row",
        epoch_output: str = "raw",
        n_depends: int = MAX_DEPENDS,
    ) -> CDFReadResult:
        """Read *variable* and its ``DEPEND_0..DEPEND_3`` from every file.

        Parameters
        ----------
        variable : str
            Variable to read.
        start, end : str, EpochArray or None
            Closed time window applied to the concatenated DEPEND_0 axis.
            Text is ``yyyy-mm-ddThh:mm:ss[.fff]``.
        layout : str
            ``"row"`` keeps the record axis first, ``"column"`` reverses the
            axes of every record-varying array.
        epoch_output : str
            How epoch-typed arrays are returned: ``"raw"`` values,
            ``"seconds"`` relative to the first returned DEPEND_0 sample,
            ``"string"`` text or ``"datetime"`` (``datetime64[ns]``).
        n_depends : int
            Number of DEPEND_n attributes to resolve, 0 to 4.

        Returns
        -------
        CDFReadResult

        Raises
        ------
        CdfError
            ``CDF_ERROR_NO_SUCH_VARIABLE``, ``CDF_ERROR_NO_DEPENDENCY`` or
            ``CDF_ERROR_NON_MONOTONIC_TIME_AXIS``; errors from opening or
            reading a file propagate unchanged.
        """
        layout = normalize_layout(layout)
        if epoch_output not in EPOCH_OUTPUTS:
            raise ValueError(f"Unknown epoch output {epoch_output!r}, expected one of {EPOCH_OUTPUTS}")
        if not 0 <= n_depends <= MAX_DEPENDS:
            raise ValueError(f"n_depends must be between 0 and {MAX_DEPENDS}, got {n_depends}")
        windowed = start is not None or end is not None

        warnings: list[CdfError] = []
        chunks: dict[str, list[np.ndarray]] = {}
        with validation(self.validate):
            for index, filename in enumerate(self.filenames):
                with self.opener(filename) as cdf:
                    if index == 0:
                        names, varying, epoch_types = self._resolve(cdf, variable, n_depends)
                        if windowed and names[1] is None:
                            raise CdfError(
                                CDF_ERROR_NO_DEPENDENCY,
                                f"{variable!r} has no DEPEND_0 to apply the time window to.",
                            )
                        to_read = [n for n in dict.fromkeys(names) if n is not None]
                        chunks = {name: [] for name in to_read}
                    for name in to_read:
                        if index and not varying[name]:
                            continue
                        chunks[name].append(self._read_one(cdf, name, epoch_types[name]))
                    if index == 0 and cdf.record_count(variable) == 0:
                        empty = CdfError(CDF_ERROR_EMPTY_VARIABLE, f"{variable!r} in {filename}.")
                        logger.warning("%s", empty)
                        warnings.append(empty)
                        break

        arrays = {
            name: np.concatenate(parts, axis=0) if varying[name] and len(parts) > 1 else parts[0]
            for name, parts in chunks.items()
        }
        data = arrays[variable]
        n_records = data.shape[0] if varying[variable] and data.ndim else 0
        time_name = names[1]
        if time_name is not None and varying[time_name] and not varying[variable]:
            n_records = arrays[time_name].shape[0]

        record_range = self._select(
            arrays, time_name, epoch_types, n_records, start, end, warnings
        )

        out = {}
        for name, arr in arrays.items():
            record_axis = varying[name] and arr.ndim > 0 and arr.shape[0] == n_records
            if record_axis:
                arr = arr[record_range.to_slice()]
            out[name] = (arr, record_axis)

        reference = None
        if time_name is not None and epoch_types[time_name] is not None:
            axis = out[time_name][0]
            if len(axis):
                reference = EpochArray(epoch_types[time_name], axis[:1])
        for name, (arr, record_axis) in out.items():
            if epoch_types[name] is not None:
                arr = self._epoch_output(arr, epoch_types[name], epoch_output, reference)
            if layout == "column" and record_axis:
                arr = reorder(arr)
            out[name] = (arr, record_axis)

        depend_names = tuple(names[1:]) + (None,) * (MAX_DEPENDS - n_depends)
        return CDFReadResult(
            variable=variable,
            data=out[variable][0],
            depends=tuple(None if n is None else out[n][0] for n in depend_names),
            depend_names=depend_names,
            record_range=record_range,
            epoch_type=epoch_types.get(time_name) if time_name else None,
            layout=layout,
            n_files=len(self.filenames),
            record_varying=tuple(
                False if n is None else out[n][1] for n in (variable, *depend_names)
            ),
            warnings=warnings,
        )

    # -- private helpers ---------------------------------------------------------

    @staticmethod
    def _resolve(cdf, variable, n_depends):
        """Dependency names, record variance and epoch types from one file."""
        cdf.variable_info(variable)  # raises for an unknown variable
        names = [variable] + [cdf.dependency_name(variable, i) for i in range(n_depends)]
        varying = {}
        epoch_types = {}
        for name in names:
            if name is None or name in varying:
                continue
            varying[name] = cdf.record_variance(name)
            epoch_types[name] = cdf.epoch_type(name)
        logger.debug("%s depends on %s", variable, names[1:])
        return names, varying, epoch_types

    def _read_one(self, cdf, name, epoch_type):
        arr = np.asarray(cdf.read(name))
        if epoch_type is not None:
            arr = EpochArray.from_raw(arr, epoch_type, self.library_version).to_raw()
        return arr

    def _select(self, arrays, time_name, epoch_types, n_records, start, end, warnings):
        if warnings:
            return RecordRange.empty(warnings[0])
        if start is None and end is None:
            return RecordRange.full(n_records)

        axis = EpochArray.from_raw(arrays[time_name], epoch_types[time_name])
        try:
            record_range = select_window(axis, start, end)
        except CdfError as e:
            if not e.recoverable:
                raise
            logger.warning("%s", e)
            warnings.append(e)
            return RecordRange.empty(e)
        if record_range.warning is not None:
            warnings.append(record_range.warning)
        return record_range

    @staticmethod
    def _epoch_output(arr, epoch_type, mode, reference):
        if mode == "raw":
            return arr
        epoch = EpochArray(epoch_type, arr)
        if mode == "seconds":
            if reference is None or reference.epoch_type is not epoch_type:
                reference = None
            return codec.to_relative_seconds(epoch, reference)
        if mode == "string":
            return np.array(codec.encode(epoch), dtype=str)
        return codec.to_datetime64(epoch)


def read_cdf(filenames, variable, validate=False, library_version=None, opener=None, **kwargs):
    """Read *variable* across *filenames*; keyword arguments go to :meth:`MultiCDF.read`."""
    reader = MultiCDF(
        filenames, validate=validate, library_version=library_version, opener=opener
    )
    return reader.read(variable, **kwargs)


def time_record_range(filename, time_variable, start=None, end=None, validate=False, opener=None):
    """Record range of a single file's time variable inside ``[start, end]``.

    Returns
    -------
    tuple of (RecordRange, EpochArray)
        The range and the selected time stamps. A window outside the data
        gives an empty range carrying the recoverable error as its warning.
    """
    opener = CDFFile if opener is None else opener
    with validation(validate), opener(filename) as cdf:
        epoch_type = cdf.epoch_type(time_variable)
        axis = EpochArray.from_raw(cdf.read(time_variable), epoch_type)
    try:
        record_range = select_window(axis, start, end)
    except CdfError as e:
        if not e.recoverable:
            raise
        logger.warning("%s", e)
        return RecordRange.empty(e), EpochArray.empty(axis.epoch_type)
    return record_range, axis[record_range.to_slice()]
