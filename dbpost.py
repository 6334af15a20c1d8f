#!/usr/bin/env python3
"""
Command line interface for DB text detection postprocessing.

Usage:
    dbpost run pred.npy                          # Boxes for an unresized map, JSON on stdout
    dbpost run pred.npy -s shapes.json -o out.json
    dbpost run pred.npy --config det.yaml --box-thresh 0.5 --include-rejected
    dbpost config --config det.yaml              # Show the effective configuration
"""

import argparse
import logging
import sys

from logging_utils import configure_logging, add_logging_args
from cli.run import add_run_subparser
from cli.show_config import add_config_subparser

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbpost",
        description="DB text detection postprocessing - probability maps to text boxes",
    )
    add_logging_args(parser)
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_run_subparser(subparsers)
    add_config_subparser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level, args.verbose, args.quiet)
    except ValueError as exc:
        parser.error(str(exc))

    cmd = getattr(args, "_cmd", None)
    if cmd is None:
        parser.print_help()
        return 1
    return cmd(args)


if __name__ == "__main__":
    sys.exit(main())
