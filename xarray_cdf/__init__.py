"""
xarray-cdf: CDF epoch handling and time-windowed multi-file reads

This package provides a unified model of the three CDF epoch encodings
(CDF_EPOCH, CDF_EPOCH16 and CDF_TIME_TT2000), a selector that finds the
records of a time axis inside a time window, and a reader that concatenates
one variable and its dependencies across many CDF files. Results can be
turned into xarray Datasets, and ``engine="cdf"`` is registered with xarray.
"""

from ._errors import CdfError
from .backend import (
    CDFBackendEntrypoint,
    open_cdf_dataset,
    to_dataset,
)
from .cdffile import CDFFile, validation
from .codec import (
    breakdown,
    components,
    compute,
    convert,
    encode,
    from_relative_seconds,
    from_seconds_since_midnight,
    parse,
    seconds_since_midnight,
    to_datetime64,
    to_relative_seconds,
)
from .epoch import EpochArray, EpochType, TimeComponents, epoch_type_of
from .reader import CDFReadResult, MultiCDF, read_cdf, time_record_range
from .selector import RecordRange, select_window
from .version import compare_versions

__version__ = "0.1"
__all__ = [
    "CDFBackendEntrypoint",
    "CDFFile",
    "CDFReadResult",
    "CdfError",
    "EpochArray",
    "EpochType",
    "MultiCDF",
    "RecordRange",
    "TimeComponents",
    "breakdown",
    "compare_versions",
    "components",
    "compute",
    "convert",
    "encode",
    "epoch_type_of",
    "from_relative_seconds",
    "from_seconds_since_midnight",
    "open_cdf_dataset",
    "parse",
    "read_cdf",
    "seconds_since_midnight",
    "select_window",
    "time_record_range",
    "to_dataset",
    "to_datetime64",
    "to_relative_seconds",
    "validation",
]
