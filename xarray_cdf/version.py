"""CDF library version numbers.

The in-memory layout of ``CDF_EPOCH16`` arrays changed with CDF 3.5.1: older
libraries hand back a 2xN array, newer ones an Nx2 array. Version strings
have the form ``version.release.increment[.patch]``.
"""

from __future__ import annotations

# First library release that returns CDF_EPOCH16 values as an Nx2 array
EPOCH16_COLUMNS_VERSION = "3.5.1"


def _parts(version: str) -> tuple[int, ...]:
    fields = str(version).strip().split(".")
    if not 1 <= len(fields) <= 4:
        raise ValueError(f"Invalid CDF version string: {version!r}")
    try:
        parts = [int(f) for f in fields]
    except ValueError:
        raise ValueError(f"Invalid CDF version string: {version!r}") from None
    # cdflib-style versions have 3 values, patched ones 4
    parts += [0] * (4 - len(parts))
    return tuple(parts)


def compare_versions(version1: str, version2: str) -> int:
    """Compare two CDF library versions.

    Returns
    -------
    int
        -1 if *version1* is older, 0 if equal, 1 if newer than *version2*.
    """
    v1 = _parts(version1)
    v2 = _parts(version2)
    return (v1 > v2) - (v1 < v2)


def epoch16_is_column_pair(library_version: str | None) -> bool:
    """True when *library_version* returns CDF_EPOCH16 as an Nx2 array.

    ``None`` stands for the current convention (3.5.1 and later).
    """
    if library_version is None:
        return True
    return compare_versions(library_version, EPOCH16_COLUMNS_VERSION) >= 0
