"""Shared fixtures and constants for xarray-cdf tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import SimpleNamespace

import cdflib
import numpy as np
import pytest

# 2015-03-18T00:00:00 in each epoch type
TT2000_2015_03_18 = 479908867184000000
EPOCH_2015_03_18 = 63593856000000.0
EPOCH16_2015_03_18 = (63593856000.0, 0.0)

NS_PER_SECOND = 1_000_000_000

_DATA_TYPES = {
    "CDF_INT4": 4,
    "CDF_REAL4": 21,
    "CDF_DOUBLE": 45,
    "CDF_EPOCH": 31,
    "CDF_EPOCH16": 32,
    "CDF_TIME_TT2000": 33,
    "CDF_CHAR": 51,
}


def tt2000_axis(n: int, step_ns: int = NS_PER_SECOND, start: int = TT2000_2015_03_18) -> np.ndarray:
    """Evenly spaced TT2000 time stamps (no leap second inside)."""
    return start + np.arange(n, dtype=np.int64) * np.int64(step_ns)


@dataclass
class FakeVariable:
    """Contents of one variable of a fake CDF file.

    ``data`` has the record axis first for record-varying variables.
    CDF_EPOCH16 data is given as an ``(n, 2)`` float array and handed out
    as complex numbers, the way cdflib does.
    """

    data: np.ndarray
    data_type: str = "CDF_DOUBLE"
    attrs: dict = field(default_factory=dict)
    rec_vary: bool = True


class FakeCDFLibrary:
    """Stand-in for ``cdflib.CDF`` serving registered in-memory files."""

    def __init__(self, directory: Path):
        self.directory = directory
        self.files: dict[str, dict[str, FakeVariable]] = {}
        self.opened: list[tuple[str, bool]] = []
        self.closed: list[str] = []

    def add(self, name: str, variables: dict[str, FakeVariable]) -> str:
        """Create an empty file on disk and register its contents."""
        path = self.directory / name
        path.touch()
        self.files[str(path)] = variables
        return str(path)

    def __call__(self, path, validate=False):
        self.opened.append((str(path), validate))
        return _FakeCDF(self, str(path), self.files[str(path)])


class _FakeCDF:
    def __init__(self, library, path, variables):
        self._library = library
        self._path = path
        self._variables = variables

    def cdf_info(self):
        return SimpleNamespace(
            zVariables=list(self._variables), rVariables=[], Version="3.9.0"
        )

    def varinq(self, name):
        var = self._variables[name]
        data = np.asarray(var.data)
        if var.rec_vary:
            last_rec = data.shape[0] - 1
            dims = list(data.shape[1:])
        else:
            last_rec = 0
            dims = list(data.shape)
        if var.data_type == "CDF_EPOCH16":
            dims = []
        return SimpleNamespace(
            Variable=name,
            Data_Type=_DATA_TYPES[var.data_type],
            Data_Type_Description=var.data_type,
            Last_Rec=last_rec,
            Rec_Vary=var.rec_vary,
            Dim_Sizes=dims,
        )

    def varattsget(self, name):
        return dict(self._variables[name].attrs)

    def globalattsget(self):
        return {"Project": ["xarray-cdf tests"]}

    def varget(self, name):
        var = self._variables[name]
        data = np.array(var.data)
        if data.shape[:1] == (0,):
            raise ValueError(f"No records found for variable {name}")
        if var.data_type == "CDF_EPOCH16":
            return data[:, 0] + 1j * data[:, 1]
        return data

    def close(self):
        self._library.closed.append(self._path)


@pytest.fixture()
def fake_cdflib(monkeypatch, tmp_path) -> FakeCDFLibrary:
    """Replace ``cdflib.CDF`` with an in-memory file library."""
    library = FakeCDFLibrary(tmp_path)
    monkeypatch.setattr(cdflib, "CDF", library)
    return library


def magnetic_field_file(library: FakeCDFLibrary, name: str, time: np.ndarray, first: int = 0) -> str:
    """Register a file with a 3-component field ``B`` on TT2000 ``Epoch``.

    ``B[i] = (first + i) * [1, 10, 100]`` so values identify their record.
    """
    n = len(time)
    records = np.arange(first, first + n, dtype=np.float64)[:, None]
    return library.add(
        name,
        {
            "Epoch": FakeVariable(np.asarray(time, dtype=np.int64), "CDF_TIME_TT2000"),
            "B": FakeVariable(
                records * np.array([1.0, 10.0, 100.0]),
                attrs={"DEPEND_0": "Epoch", "DEPEND_1": "component", "UNITS": "nT"},
            ),
            "component": FakeVariable(
                np.array([0.0, 1.0, 2.0]), "CDF_REAL4", rec_vary=False
            ),
            "label": FakeVariable(
                np.array([b"Bx", b"By", b"Bz"]),
                "CDF_CHAR",
                attrs={"DEPEND_0": np.array(["NONE"])},
                rec_vary=False,
            ),
        },
    )


@pytest.fixture()
def two_files(fake_cdflib) -> list[str]:
    """Two files of 5 one-second records each with a continuous time axis."""
    time = tt2000_axis(10)
    return [
        magnetic_field_file(fake_cdflib, "b_20150318_a.cdf", time[:5], first=0),
        magnetic_field_file(fake_cdflib, "b_20150318_b.cdf", time[5:], first=5),
    ]
