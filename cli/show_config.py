"""Config command: print the effective postprocess configuration."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .run import add_config_args, resolve_config

logger = logging.getLogger(__name__)


def add_config_subparser(subparsers: argparse._SubParsersAction) -> None:
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective configuration after file and flag overrides",
    )
    add_config_args(config_parser)
    config_parser.set_defaults(_cmd=cmd_show_config)


def cmd_show_config(args: argparse.Namespace) -> int:
    try:
        config = resolve_config(args)
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    sys.stdout.write(json.dumps(config.to_dict(), indent=2) + "\n")
    return 0
