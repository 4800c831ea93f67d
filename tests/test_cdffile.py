"""Tests for the cdflib adapter (xarray_cdf.cdffile)."""

from __future__ import annotations

import numpy as np
import pytest
from conftest import EPOCH16_2015_03_18, FakeVariable, magnetic_field_file, tt2000_axis

from xarray_cdf import CDFFile, CdfError, EpochType, validation
from xarray_cdf._errors import (
    CDF_ERROR_FILE_NOT_FOUND,
    CDF_ERROR_NO_DEPENDENCY,
    CDF_ERROR_NO_SUCH_VARIABLE,
)


@pytest.fixture()
def field_file(fake_cdflib) -> str:
    return magnetic_field_file(fake_cdflib, "b.cdf", tt2000_axis(4))


class TestCDFFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(CdfError) as excinfo:
            CDFFile(tmp_path / "nope.cdf")
        assert excinfo.value.value == CDF_ERROR_FILE_NOT_FOUND

    def test_variables(self, field_file):
        with CDFFile(field_file) as cdf:
            assert cdf.variables() == ["Epoch", "B", "component", "label"]
            assert cdf.has_variable("B")
            assert not cdf.has_variable("E")

    def test_record_count_and_variance(self, field_file):
        with CDFFile(field_file) as cdf:
            assert cdf.record_count("B") == 4
            assert cdf.record_variance("B")
            assert not cdf.record_variance("component")

    def test_epoch_type(self, field_file):
        with CDFFile(field_file) as cdf:
            assert cdf.epoch_type("Epoch") is EpochType.CDF_TIME_TT2000
            assert cdf.epoch_type("B") is None

    def test_dependency_names(self, field_file):
        with CDFFile(field_file) as cdf:
            assert cdf.dependency_name("B", 0) == "Epoch"
            assert cdf.dependency_name("B", 1) == "component"
            assert cdf.dependency_name("B", 2) is None
            assert cdf.dependency_name("label", 0) is None  # "NONE"

    def test_dependency_name_bytes(self, fake_cdflib):
        path = fake_cdflib.add(
            "bytes.cdf",
            {
                "t": FakeVariable(tt2000_axis(2), "CDF_TIME_TT2000"),
                "x": FakeVariable(np.zeros(2), attrs={"DEPEND_0": b"t  "}),
            },
        )
        with CDFFile(path) as cdf:
            assert cdf.dependency_name("x", 0) == "t"

    def test_dependency_on_missing_variable(self, fake_cdflib):
        path = fake_cdflib.add("bad.cdf", {"x": FakeVariable(np.zeros(2), attrs={"DEPEND_0": "t"})})
        with CDFFile(path) as cdf, pytest.raises(CdfError) as excinfo:
            cdf.dependency_name("x", 0)
        assert excinfo.value.value == CDF_ERROR_NO_DEPENDENCY

    def test_unknown_variable(self, field_file):
        with CDFFile(field_file) as cdf, pytest.raises(CdfError) as excinfo:
            cdf.read("E")
        assert excinfo.value.value == CDF_ERROR_NO_SUCH_VARIABLE

    def test_attributes(self, field_file):
        with CDFFile(field_file) as cdf:
            assert cdf.attribute_value("UNITS", "B") == "nT"
            assert cdf.attribute_value("FILLVAL", "B") is None
            assert cdf.attribute_value("Project") == ["xarray-cdf tests"]

    def test_read(self, field_file):
        with CDFFile(field_file) as cdf:
            np.testing.assert_array_equal(cdf.read("Epoch"), tt2000_axis(4))
            assert cdf.read("B").shape == (4, 3)

    def test_read_epoch16_as_pairs(self, fake_cdflib):
        s = EPOCH16_2015_03_18[0]
        path = fake_cdflib.add(
            "e16.cdf", {"t": FakeVariable(np.array([[s, 1.0], [s + 1, 2.0]]), "CDF_EPOCH16")}
        )
        with CDFFile(path) as cdf:
            np.testing.assert_array_equal(cdf.read("t"), [[s, 1.0], [s + 1, 2.0]])

    def test_read_epoch_as_datetime(self, field_file):
        with CDFFile(field_file) as cdf:
            times = cdf.read("Epoch", epoch_as_raw=False)
        assert times[1] == np.datetime64("2015-03-18T00:00:01")

    def test_read_empty_variable(self, fake_cdflib):
        path = fake_cdflib.add(
            "empty.cdf",
            {
                "t": FakeVariable(np.empty(0, dtype=np.int64), "CDF_TIME_TT2000"),
                "x": FakeVariable(np.empty((0, 3))),
            },
        )
        with CDFFile(path) as cdf:
            assert cdf.record_count("x") == 0
            assert cdf.read("x").shape == (0, 3)
            assert cdf.read("t").dtype == np.int64

    def test_close(self, fake_cdflib, field_file):
        cdf = CDFFile(field_file)
        cdf.close()
        cdf.close()
        assert fake_cdflib.closed == [field_file]
        with pytest.raises(ValueError):
            cdf.read("B")


class TestValidation:
    def test_default_is_used_when_opening(self, fake_cdflib, field_file):
        with validation(True):
            CDFFile(field_file).close()
        CDFFile(field_file).close()
        assert [v for _, v in fake_cdflib.opened] == [True, False]

    def test_explicit_flag_wins(self, fake_cdflib, field_file):
        with validation(True):
            CDFFile(field_file, validate=False).close()
        assert fake_cdflib.opened[-1][1] is False

    def test_restored_after_error(self):
        assert CDFFile.VALIDATE is False
        with pytest.raises(RuntimeError), validation(True) as previous:
            assert previous is False
            assert CDFFile.VALIDATE is True
            raise RuntimeError("boom")
        assert CDFFile.VALIDATE is False
