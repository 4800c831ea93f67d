"""Tests for CLI entry points - smoke tests + unit tests."""

from __future__ import annotations

import logging
import subprocess
import sys
from argparse import Namespace

import pytest

from xarray_cdf import __version__
from xarray_cdf.cli.main import build_parser, main


def run_cli(args: list[str], check: bool = True) -> subprocess.CompletedProcess:
    """Run a CLI command and return the result."""
    return subprocess.run(
        [sys.executable, "-m", *args],
        capture_output=True,
        text=True,
        check=check,
    )


def run_main(argv: list[str]) -> int:
    """Run xcdf in-process and return its exit code."""
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def logger_args(**kwargs) -> Namespace:
    defaults = {
        "logfile": None,
        "log_bytes": 10000000,
        "log_count": 3,
        "debug": False,
        "verbose": False,
        "quiet": False,
    }
    defaults.update(kwargs)
    return Namespace(**defaults)


# =============================================================================
# logger.py - unit tests
# =============================================================================


class TestMkLogger:
    """Unit tests for xarray_cdf.cli.logger.mk_logger."""

    def test_mk_logger_default(self):
        """Default logger has a StreamHandler at WARNING level."""
        from xarray_cdf.cli.logger import mk_logger

        lg = mk_logger(logger_args(), name="test_default")
        assert lg.level == logging.WARNING
        assert len(lg.handlers) == 1
        assert isinstance(lg.handlers[0], logging.StreamHandler)

    def test_mk_logger_debug(self):
        """--debug sets DEBUG level."""
        from xarray_cdf.cli.logger import mk_logger

        lg = mk_logger(logger_args(debug=True), name="test_debug")
        assert lg.level == logging.DEBUG

    def test_mk_logger_verbose(self):
        """--verbose sets INFO level."""
        from xarray_cdf.cli.logger import mk_logger

        lg = mk_logger(logger_args(verbose=True), name="test_verbose")
        assert lg.level == logging.INFO

    def test_mk_logger_quiet(self):
        """--quiet only lets errors through."""
        from xarray_cdf.cli.logger import mk_logger

        lg = mk_logger(logger_args(quiet=True), name="test_quiet")
        assert lg.level == logging.ERROR

    def test_mk_logger_logfile(self, tmp_path):
        """--logfile uses a RotatingFileHandler."""
        from logging.handlers import RotatingFileHandler

        from xarray_cdf.cli.logger import mk_logger

        logfile = tmp_path / "test.log"
        lg = mk_logger(logger_args(logfile=str(logfile)), name="test_logfile")
        assert isinstance(lg.handlers[0], RotatingFileHandler)
        lg.handlers[0].close()

    def test_mk_logger_replaces_handlers(self):
        """Calling twice does not stack handlers."""
        from xarray_cdf.cli.logger import mk_logger

        mk_logger(logger_args(), name="test_twice")
        lg = mk_logger(logger_args(), name="test_twice")
        assert len(lg.handlers) == 1


# =============================================================================
# xcdf - smoke tests
# =============================================================================


def test_xcdf_help():
    result = run_cli(["xarray_cdf.cli.main", "--help"])
    assert "read" in result.stdout
    assert "vars" in result.stdout
    assert "epoch" in result.stdout


def test_xcdf_version():
    result = run_cli(["xarray_cdf.cli.main", "--version"])
    assert __version__ in result.stdout


def test_xcdf_needs_subcommand():
    result = run_cli(["xarray_cdf.cli.main"], check=False)
    assert result.returncode != 0


def test_read_needs_variable():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["read", "a.cdf"])


# =============================================================================
# epoch subcommand
# =============================================================================


class TestEpochRun:
    def test_parse_tt2000(self, capsys):
        assert run_main(["epoch", "2015-03-18"]) == 0
        assert capsys.readouterr().out == "479908867184000000\n"

    def test_parse_epoch(self, capsys):
        assert run_main(["epoch", "-t", "EPOCH", "2015-03-18T00:00:01"]) == 0
        assert capsys.readouterr().out == "63593856001000.0\n"

    def test_decode_tt2000(self, capsys):
        assert run_main(["epoch", "-d", "479908867184000000"]) == 0
        assert capsys.readouterr().out == "2015-03-18T00:00:00.000000000\n"

    def test_decode_epoch16(self, capsys):
        assert run_main(["epoch", "-t", "CDF_EPOCH16", "-d", "63593856000,5"]) == 0
        assert capsys.readouterr().out == "2015-03-18T00:00:00.000000000005\n"

    def test_breakdown(self, capsys):
        assert run_main(["epoch", "-b", "2015-03-18T01:02:03.004"]) == 0
        assert capsys.readouterr().out == "2015 3 18 1 2 3 4 0 0 0\n"

    def test_convert(self, capsys):
        assert run_main(["epoch", "--convert", "EPOCH", "2015-03-18"]) == 0
        assert capsys.readouterr().out == "63593856000000.0\n"

    def test_invalid_text(self, capsys):
        assert run_main(["epoch", "18/03/2015"]) == 1

    def test_invalid_type(self):
        assert run_main(["epoch", "-t", "JULIAN", "2015-03-18"]) == 1


# =============================================================================
# read and vars subcommands
# =============================================================================


class TestReadRun:
    def test_summary(self, two_files, capsys):
        argv = ["read", *two_files, "-n", "B", "-s", "2015-03-18T00:00:03", "-e", "2015-03-18T00:00:07"]
        assert run_main(argv) == 0
        out = capsys.readouterr().out
        assert "variable: B (5, 3) float64" in out
        assert "files: 2" in out
        assert "records: 3..7" in out
        assert "DEPEND_0: Epoch (5,)" in out
        assert "first: 2015-03-18T00:00:03.000000000" in out
        assert "last:  2015-03-18T00:00:07.000000000" in out
        assert "DEPEND_1: component (3,)" in out

    def test_no_records(self, two_files, capsys):
        assert run_main(["read", *two_files, "-n", "B", "-s", "2015-03-19T00:00:00"]) == 0
        out = capsys.readouterr().out
        assert "records: none" in out
        assert "warning: No records found after the start time." in out

    def test_unknown_variable(self, two_files):
        assert run_main(["read", *two_files, "-n", "E"]) == 1

    def test_to_netcdf(self, two_files, tmp_path):
        pytest.importorskip("scipy")
        output = tmp_path / "out" / "b.nc"
        argv = ["read", *two_files, "-n", "B", "--epoch-output", "datetime", "-o", str(output)]
        assert run_main(argv) == 0
        assert output.exists()


class TestVarsRun:
    def test_single_file(self, two_files, capsys):
        assert run_main(["vars", two_files[0]]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Epoch CDF_TIME_TT2000 5 -"
        assert lines[1] == "B CDF_DOUBLE 5 Epoch"
        assert len(lines) == 4

    def test_file_headers(self, two_files, capsys):
        assert run_main(["vars", *two_files]) == 0
        out = capsys.readouterr().out
        assert f"# {two_files[0]}" in out
        assert f"# {two_files[1]}" in out

    def test_to_file(self, two_files, tmp_path):
        output = tmp_path / "vars.txt"
        assert run_main(["vars", two_files[0], "-o", str(output)]) == 0
        assert "B CDF_DOUBLE 5 Epoch" in output.read_text()

    def test_missing_file(self, tmp_path):
        assert run_main(["vars", str(tmp_path / "nope.cdf")]) == 1
