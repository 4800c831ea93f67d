#
# read subcommand
#
# Read one variable and its dependencies across CDF files, optionally inside
# a time window, and either print a summary or write the result to NetCDF.
#

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser
from pathlib import Path

import xarray_cdf as xcdf
from xarray_cdf.cli import logger
from xarray_cdf.reader import EPOCH_OUTPUTS


def _add_common_args(parser) -> None:
    """Add arguments shared between the subcommand and standalone entry point."""
    parser.add_argument("files", nargs="+", type=Path, help="CDF files in record order")
    parser.add_argument(
        "-n",
        "--variable",
        type=str,
        required=True,
        metavar="name",
        help="Variable to read",
    )
    parser.add_argument(
        "-s",
        "--start",
        type=str,
        metavar="yyyy-mm-ddThh:mm:ss",
        help="Start of the time window (inclusive)",
    )
    parser.add_argument(
        "-e",
        "--end",
        type=str,
        metavar="yyyy-mm-ddThh:mm:ss",
        help="End of the time window (inclusive)",
    )
    parser.add_argument(
        "--layout",
        choices=("row", "column"),
        default="row",
        help="Axis order of record-varying arrays (default: row)",
    )
    parser.add_argument(
        "--epoch-output",
        choices=EPOCH_OUTPUTS,
        default="string",
        help="How epoch values are returned (default: string)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the files while opening them",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="filename",
        help="Write the result to this NetCDF file instead of printing a summary",
    )
    logger.add_args(parser)


def add_args(subparsers) -> None:
    """Register the 'read' subcommand."""
    parser = subparsers.add_parser(
        "read",
        help="Read a variable across CDF files",
        description="Read a variable and its DEPEND_n variables across CDF files",
    )
    _add_common_args(parser)
    parser.set_defaults(func=run)


def summarize(result: xcdf.CDFReadResult) -> str:
    """Human readable summary of a read."""
    lines = [
        f"variable: {result.variable} {result.data.shape} {result.data.dtype}",
        f"files: {result.n_files}",
        f"layout: {result.layout}",
    ]
    if result.record_range.is_empty:
        lines.append("records: none")
    else:
        lines.append(f"records: {result.record_range.first}..{result.record_range.last}")
    if result.epoch_type is not None:
        lines.append(f"epoch type: {result.epoch_type.value}")
    for i, (name, dep) in enumerate(zip(result.depend_names, result.depends, strict=True)):
        if name is None:
            continue
        lines.append(f"DEPEND_{i}: {name} {dep.shape}")
        if i == 0 and result.epoch_type is not None and dep.ndim == 1 and len(dep):
            lines.append(f"  first: {dep[0]}")
            lines.append(f"  last:  {dep[-1]}")
    for warning in result.warnings:
        lines.append(f"warning: {warning}")
    return "\n".join(lines) + "\n"


def run(args) -> int:
    """Execute the read subcommand."""
    logger.mk_logger(args)

    try:
        result = xcdf.read_cdf(
            [str(f) for f in args.files],
            args.variable,
            validate=args.validate,
            start=args.start,
            end=args.end,
            layout=args.layout,
            epoch_output=args.epoch_output,
        )
    except xcdf.CdfError as e:
        logging.error("%s", e)
        return 1

    if args.output is None:
        sys.stdout.write(summarize(result))
        return 0

    try:
        ds = xcdf.to_dataset(result)
        args.output.parent.mkdir(parents=True, exist_ok=True)
        ds.to_netcdf(str(args.output))
    except (OSError, ValueError) as e:
        logging.error("Error writing %s: %s", args.output, e)
        logging.debug("Traceback:", exc_info=True)
        return 1
    logging.info("Wrote %d records to %s", result.n_records, args.output)
    return 0


def main():
    """Standalone entry point."""
    parser = ArgumentParser(
        description="Read a variable and its DEPEND_n variables across CDF files",
    )
    _add_common_args(parser)
    args = parser.parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
