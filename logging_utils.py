"""Shared logging configuration helpers.

Log records go to stderr so commands can write JSON results to stdout.
The DBPOST_LOG_LEVEL environment variable sets a default level when no
--log-level flag is given.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_LEVEL_ENV = "DBPOST_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# verbose - quiet offset -> level; anything beyond the ends is clamped
_OFFSET_LEVELS = {
    1: logging.DEBUG,
    0: logging.INFO,
    -1: logging.WARNING,
    -2: logging.ERROR,
}


def add_logging_args(parser) -> None:
    """Add --log-level, -v and -q to an argparse parser."""
    parser.add_argument(
        "--log-level",
        choices=tuple(LOG_LEVELS),
        help=f"Set log verbosity (default: ${LOG_LEVEL_ENV} or info)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v shows per-candidate rejections)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="count",
        default=0,
        help="Reduce log verbosity (use -qq for errors only)",
    )


def resolve_log_level(
    log_level: str | None = None,
    verbose: int = 0,
    quiet: int = 0,
) -> int:
    """Pick the numeric log level.

    An explicit level wins, then the environment, then -v/-q counts.
    """
    name = log_level or os.environ.get(LOG_LEVEL_ENV)
    if name:
        try:
            return LOG_LEVELS[name.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown log level {name!r}") from None

    offset = max(-2, min(1, verbose - quiet))
    return _OFFSET_LEVELS[offset]


def configure_logging(
    log_level: str | None = None,
    verbose: int = 0,
    quiet: int = 0,
) -> int:
    """Configure root logging on stderr and return the active level."""
    level = resolve_log_level(log_level=log_level, verbose=verbose, quiet=quiet)
    root_logger = logging.getLogger()

    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return level

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    return level
