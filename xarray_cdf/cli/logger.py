#
# Logging setup shared by the xcdf subcommands
#
# Console or rotating file output, with --debug/--verbose/--quiet levels.
#

from __future__ import annotations

import logging
import logging.handlers
from argparse import ArgumentParser, Namespace


def add_args(parser: ArgumentParser) -> None:
    """Add logger-related command line arguments."""
    grp = parser.add_argument_group("Logger Related Options")
    grp.add_argument("--logfile", type=str, metavar="filename", help="Name of logfile")
    grp.add_argument(
        "--log-bytes",
        type=int,
        default=10000000,
        metavar="length",
        help="Maximum logfile size in bytes",
    )
    grp.add_argument(
        "--log-count",
        type=int,
        default=3,
        metavar="count",
        help="Number of backup files to keep",
    )
    gg = grp.add_mutually_exclusive_group()
    gg.add_argument("--debug", action="store_true", help="Enable very verbose logging")
    gg.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    gg.add_argument("--quiet", action="store_true", help="Only log errors")


def mk_logger(
    args: Namespace,
    fmt: str | None = None,
    name: str | None = None,
    log_level: str = "WARNING",
) -> logging.Logger:
    """Configure the logger *name* (the root logger by default) and return it.

    Recoverable read conditions, such as a window inside a data gap, are
    logged at WARNING by the library and show up with the default level.
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()

    if fmt is None:
        fmt = "%(asctime)s %(levelname)s: %(message)s"

    ch: logging.Handler
    if getattr(args, "logfile", None):
        ch = logging.handlers.RotatingFileHandler(
            args.logfile,
            maxBytes=args.log_bytes,
            backupCount=args.log_count,
        )
    else:
        ch = logging.StreamHandler()

    if getattr(args, "debug", False):
        level: int | str = logging.DEBUG
    elif getattr(args, "verbose", False):
        level = logging.INFO
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = log_level
    logger.setLevel(level)
    ch.setLevel(level)

    ch.setFormatter(logging.Formatter(fmt))
    logger.addHandler(ch)
    return logger
