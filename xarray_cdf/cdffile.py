"""Thin adapter over :class:`cdflib.CDF` used by the multi-file reader."""

from __future__ import annotations

import contextlib
import logging
import os

import cdflib
import numpy as np

from . import codec
from ._errors import (
    CDF_ERROR_FILE_NOT_FOUND,
    CDF_ERROR_NO_DEPENDENCY,
    CDF_ERROR_NO_SUCH_VARIABLE,
    CdfError,
)
from .epoch import EpochArray, EpochType

logger = logging.getLogger(__name__)

# CDF data type numbers of the epoch types
_EPOCH_TYPE_NUMBERS = {
    31: EpochType.CDF_EPOCH,
    32: EpochType.CDF_EPOCH16,
    33: EpochType.CDF_TIME_TT2000,
}


def _text(value) -> str | None:
    """Normalise an attribute entry (ndarray, bytes or str) to stripped text."""
    if value is None:
        return None
    if isinstance(value, np.ndarray):
        if value.size == 0:
            return None
        value = value.flat[0]
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    if isinstance(value, (bytes, np.bytes_)):
        value = value.decode("utf-8", errors="replace")
    return str(value).strip()


class CDFFile:
    """One open CDF file.

    Parameters
    ----------
    path : str or os.PathLike
        CDF file to open.
    validate : bool or None
        Ask cdflib to validate the file's internal checksums and pointers.
        Defaults to ``CDFFile.VALIDATE``.

    Raises
    ------
    CdfError
        ``CDF_ERROR_FILE_NOT_FOUND`` when *path* does not exist.
    """

    VALIDATE = False

    def __init__(self, path, validate=None):
        self.path = os.fspath(path)
        if not os.path.isfile(self.path):
            raise CdfError(CDF_ERROR_FILE_NOT_FOUND, self.path)
        if validate is None:
            validate = CDFFile.VALIDATE
        self.validate = bool(validate)
        logger.debug("Opening %s (validate=%s)", self.path, self.validate)
        self._cdf = cdflib.CDF(self.path, validate=self.validate)
        info = self._cdf.cdf_info()
        self._variables = list(info.zVariables) + list(info.rVariables)
        self.version = getattr(info, "Version", None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return f"CDFFile({self.path!r})"

    # -- metadata ----------------------------------------------------------------

    def variables(self) -> list[str]:
        return list(self._variables)

    def has_variable(self, name) -> bool:
        return name in self._variables

    def attributes(self, variable=None) -> dict:
        """Variable attributes of *variable*, or the global attributes."""
        if variable is None:
            return dict(self._cdf.globalattsget())
        self._check(variable)
        return dict(self._cdf.varattsget(variable))

    def attribute_value(self, attribute, variable=None):
        """Value of *attribute* for *variable* (or globally), ``None`` if absent."""
        return self.attributes(variable).get(attribute)

    def variable_info(self, name):
        self._check(name)
        return self._cdf.varinq(name)

    def record_count(self, name) -> int:
        return int(self.variable_info(name).Last_Rec) + 1

    def record_variance(self, name) -> bool:
        return bool(self.variable_info(name).Rec_Vary)

    def epoch_type(self, name) -> EpochType | None:
        """Epoch type of *name*, ``None`` for non-epoch variables."""
        info = self.variable_info(name)
        description = getattr(info, "Data_Type_Description", None)
        if description in EpochType.__members__:
            return EpochType(description)
        return _EPOCH_TYPE_NUMBERS.get(getattr(info, "Data_Type", None))

    def dependency_name(self, name, axis: int) -> str | None:
        """Variable named by the ``DEPEND_<axis>`` attribute of *name*.

        Returns None when the attribute is absent, empty or ``NONE``.

        Raises
        ------
        CdfError
            ``CDF_ERROR_NO_DEPENDENCY`` when the attribute names a variable
            that is not in the file.
        """
        depend = _text(self.attribute_value(f"DEPEND_{axis}", name))
        if not depend or depend.upper() == "NONE":
            return None
        if not self.has_variable(depend):
            raise CdfError(CDF_ERROR_NO_DEPENDENCY, f"DEPEND_{axis}={depend!r} of {name!r}.")
        return depend

    # -- data --------------------------------------------------------------------

    def read(self, name, epoch_as_raw=True) -> np.ndarray:
        """Read every record of *name*.

        CDF_EPOCH16 values come back as an ``(n, 2)`` float64 array of
        seconds and picoseconds. With ``epoch_as_raw=False`` epoch variables
        are returned as ``datetime64[ns]`` instead.
        """
        epoch_type = self.epoch_type(name)
        if self.record_count(name) == 0:
            if epoch_type is None:
                dims = self.variable_info(name).Dim_Sizes or ()
                return np.empty((0, *(int(d) for d in dims)))
            epoch = EpochArray.empty(epoch_type)
        else:
            data = np.asarray(self._cdf.varget(name))
            logger.debug("Read %s %s from %s", name, data.shape, self.path)
            if epoch_type is None:
                return data
            epoch = EpochArray.from_raw(data, epoch_type)

        if not epoch_as_raw:
            return codec.to_datetime64(epoch)
        return epoch.to_raw()

    def close(self):
        if self._cdf is None:
            return
        # older cdflib releases close the file when the object is collected
        close = getattr(self._cdf, "close", None)
        if close is not None:
            close()
        self._cdf = None

    # -- private helpers ---------------------------------------------------------

    def _check(self, name):
        if self._cdf is None:
            raise ValueError(f"{self.path} is closed.")
        if not self.has_variable(name):
            raise CdfError(CDF_ERROR_NO_SUCH_VARIABLE, f"{name!r} in {self.path}.")


@contextlib.contextmanager
def validation(flag):
    """Set ``CDFFile.VALIDATE`` to *flag* for the duration of the block.

    The previous setting is restored on every exit path.
    """
    previous = CDFFile.VALIDATE
    CDFFile.VALIDATE = bool(flag)
    try:
        yield previous
    finally:
        CDFFile.VALIDATE = previous
