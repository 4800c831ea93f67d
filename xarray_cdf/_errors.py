"""Error codes and exception class for CDF epoch handling and record selection."""

from __future__ import annotations

CDF_ERROR_UNRECOGNIZED_EPOCH_SHAPE = 1
CDF_ERROR_VARIANT_MISMATCH = 2
CDF_ERROR_INSUFFICIENT_TIME_COMPONENTS = 3
CDF_ERROR_INVALID_TIME_FORMAT = 4
CDF_ERROR_NON_MONOTONIC_TIME_AXIS = 5
CDF_ERROR_FILE_NOT_FOUND = 6
CDF_ERROR_NO_SUCH_VARIABLE = 7
CDF_ERROR_NO_DEPENDENCY = 8
CDF_ERROR_INVALID_EPOCH_TYPE = 9
CDF_ERROR_NO_FILES = 10
CDF_ERROR_NO_RECORDS_AFTER_START = 11
CDF_ERROR_NO_RECORDS_BEFORE_END = 12
CDF_ERROR_PROBABLE_DATA_GAP = 13
CDF_ERROR_EMPTY_VARIABLE = 14

# Conditions a reader may turn into an empty result plus a warning
RECOVERABLE_ERRORS = frozenset(
    {
        CDF_ERROR_NO_RECORDS_AFTER_START,
        CDF_ERROR_NO_RECORDS_BEFORE_END,
        CDF_ERROR_PROBABLE_DATA_GAP,
        CDF_ERROR_EMPTY_VARIABLE,
    }
)

_MESSAGES = {
    CDF_ERROR_UNRECOGNIZED_EPOCH_SHAPE: "Cannot determine the CDF epoch type.",
    CDF_ERROR_VARIANT_MISMATCH: "Epoch values are not of the same CDF epoch type.",
    CDF_ERROR_INSUFFICIENT_TIME_COMPONENTS: (
        "Time components must contain at least YEAR, MONTH, DAY and at most 10 fields."
    ),
    CDF_ERROR_INVALID_TIME_FORMAT: "Invalid time string.",
    CDF_ERROR_NON_MONOTONIC_TIME_AXIS: "The time axis is not monotonically increasing.",
    CDF_ERROR_FILE_NOT_FOUND: "File does not exist.",
    CDF_ERROR_NO_SUCH_VARIABLE: "The requested variable was not found.",
    CDF_ERROR_NO_DEPENDENCY: "The dependency variable could not be resolved.",
    CDF_ERROR_INVALID_EPOCH_TYPE: (
        'Epoch type must be "CDF_EPOCH", "CDF_EPOCH16" or "CDF_TIME_TT2000".'
    ),
    CDF_ERROR_NO_FILES: "No files were found.",
    CDF_ERROR_NO_RECORDS_AFTER_START: "No records found after the start time.",
    CDF_ERROR_NO_RECORDS_BEFORE_END: "No records found before the end time.",
    CDF_ERROR_PROBABLE_DATA_GAP: "The time interval probably falls in a data gap.",
    CDF_ERROR_EMPTY_VARIABLE: "The variable has no records.",
}


class CdfError(Exception):
    """Error raised by the epoch codec, the record selector and the readers.

    Parameters
    ----------
    value : int
        One of the ``CDF_ERROR_*`` codes.
    mesg : str or None
        Extra detail appended to the standard message.
    data : any
        Diagnostic payload, e.g. the boundary timestamp of the time axis.
    """

    def __init__(self, value=CDF_ERROR_UNRECOGNIZED_EPOCH_SHAPE, mesg=None, data=None):
        super().__init__(value, mesg)
        self.value = value
        self.mesg = mesg
        self.data = data

    @property
    def recoverable(self) -> bool:
        """True for conditions that only empty the result."""
        return self.value in RECOVERABLE_ERRORS

    def __str__(self):
        mesg = _MESSAGES.get(self.value, f"Undefined error. ({self.value})")
        if self.mesg:
            mesg = " ".join((mesg, self.mesg))
        return mesg
