#
# vars subcommand
#
# List the variables of CDF files with their data type, record count and
# DEPEND_0, without reading any data.
#

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser
from pathlib import Path

import xarray_cdf as xcdf
from xarray_cdf.cli import logger


def _add_common_args(parser) -> None:
    """Add arguments shared between the subcommand and standalone entry point."""
    parser.add_argument("files", nargs="+", type=Path, help="CDF files to scan")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="filename",
        help="Where to store the output (default: stdout)",
    )
    logger.add_args(parser)


def add_args(subparsers) -> None:
    """Register the 'vars' subcommand."""
    parser = subparsers.add_parser(
        "vars",
        help="List the variables of CDF files",
        description="List variable name, data type, record count and DEPEND_0 of CDF files",
    )
    _add_common_args(parser)
    parser.set_defaults(func=run)


def describe(cdf) -> list[str]:
    """One line per variable of an open :class:`~xarray_cdf.CDFFile`."""
    lines = []
    for name in cdf.variables():
        info = cdf.variable_info(name)
        depend = cdf.dependency_name(name, 0) or "-"
        lines.append(
            f"{name} {info.Data_Type_Description} {cdf.record_count(name)} {depend}"
        )
    return lines


def run(args) -> int:
    """Execute the vars subcommand."""
    logger.mk_logger(args)

    lines = []
    for filename in args.files:
        try:
            with xcdf.CDFFile(filename) as cdf:
                if len(args.files) > 1:
                    lines.append(f"# {filename}")
                lines.extend(describe(cdf))
        except xcdf.CdfError as e:
            logging.error("%s", e)
            return 1

    output = "\n".join(lines) + "\n"
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output, encoding="utf-8")
        logging.info("Wrote variable list to %s", args.output)
    else:
        sys.stdout.write(output)
    return 0


def main():
    """Standalone entry point."""
    parser = ArgumentParser(description="List the variables of CDF files")
    _add_common_args(parser)
    args = parser.parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
