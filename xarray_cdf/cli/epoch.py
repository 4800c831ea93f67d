#
# epoch subcommand
#
# Convert between time text and CDF epoch values:
#   xcdf epoch 2015-03-18T00:00:00            -> 479908867184000000
#   xcdf epoch -d 479908867184000000          -> 2015-03-18T00:00:00.000000000
#   xcdf epoch -t EPOCH16 -d 63593856000,0    -> 2015-03-18T00:00:00.000000000000
#

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser

import xarray_cdf as xcdf
from xarray_cdf.cli import logger


def _add_common_args(parser) -> None:
    """Add arguments shared between the subcommand and standalone entry point."""
    parser.add_argument(
        "values",
        nargs="+",
        help="Time text, or epoch values with --decode (seconds,picoseconds for EPOCH16)",
    )
    parser.add_argument(
        "-t",
        "--type",
        default="CDF_TIME_TT2000",
        metavar="type",
        help="CDF_EPOCH, CDF_EPOCH16 or CDF_TIME_TT2000 (default)",
    )
    parser.add_argument(
        "-d",
        "--decode",
        action="store_true",
        help="Decode epoch values to text",
    )
    parser.add_argument(
        "-b",
        "--breakdown",
        action="store_true",
        help="Print the calendar components instead of text or values",
    )
    parser.add_argument(
        "--convert",
        metavar="type",
        help="Convert the epoch values to this type before printing",
    )
    logger.add_args(parser)


def add_args(subparsers) -> None:
    """Register the 'epoch' subcommand."""
    parser = subparsers.add_parser(
        "epoch",
        help="Convert between time text and CDF epoch values",
        description="Parse time text into CDF epoch values or decode them back to text",
    )
    _add_common_args(parser)
    parser.set_defaults(func=run)


def _decode_values(values: list[str], epoch_type: xcdf.EpochType) -> xcdf.EpochArray:
    if epoch_type is xcdf.EpochType.CDF_EPOCH16:
        pairs = []
        for value in values:
            seconds, _, picoseconds = value.partition(",")
            pairs.append((float(seconds), float(picoseconds or 0)))
        return xcdf.EpochArray(epoch_type, pairs)
    if epoch_type is xcdf.EpochType.CDF_EPOCH:
        return xcdf.EpochArray(epoch_type, [float(v) for v in values])
    return xcdf.EpochArray(epoch_type, [int(v) for v in values])


def format_values(epoch: xcdf.EpochArray) -> list[str]:
    """Raw epoch values as text, EPOCH16 as ``seconds,picoseconds``."""
    if epoch.epoch_type is xcdf.EpochType.CDF_EPOCH16:
        return [f"{s:.0f},{ps:.0f}" for s, ps in epoch.values.tolist()]
    if epoch.epoch_type is xcdf.EpochType.CDF_EPOCH:
        return [f"{v:.1f}" for v in epoch.values.tolist()]
    return [str(v) for v in epoch.values.tolist()]


def run(args) -> int:
    """Execute the epoch subcommand."""
    logger.mk_logger(args)

    try:
        epoch_type = xcdf.EpochType.from_name(args.type)
        if args.decode:
            epoch = _decode_values(args.values, epoch_type)
        else:
            epoch = xcdf.parse(args.values, epoch_type)
        if args.convert:
            epoch = xcdf.convert(epoch, args.convert)
    except xcdf.CdfError as e:
        logging.error("%s", e)
        return 1
    except ValueError as e:
        logging.error("Invalid epoch value: %s", e)
        return 1

    if args.breakdown:
        lines = [" ".join(str(f) for f in row) for row in xcdf.breakdown(epoch).tolist()]
    elif args.decode:
        lines = xcdf.encode(epoch)
    else:
        lines = format_values(epoch)

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


def main():
    """Standalone entry point."""
    parser = ArgumentParser(description="Convert between time text and CDF epoch values")
    _add_common_args(parser)
    args = parser.parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
