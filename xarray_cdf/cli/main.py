#!/usr/bin/env python3
"""
Unified CLI for xarray-cdf: xcdf

Subcommands:
    read   - Read a variable across CDF files, optionally inside a time window
    vars   - List the variables of CDF files
    epoch  - Convert between time text and CDF epoch values
"""

import sys
from argparse import ArgumentParser

import xarray_cdf as xcdf
from xarray_cdf.cli import epoch, read, variables


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="xcdf",
        description="xarray-cdf command-line tools for CDF time series",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {xcdf.__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    read.add_args(subparsers)
    variables.add_args(subparsers)
    epoch.add_args(subparsers)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
