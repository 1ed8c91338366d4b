"""Shared CLI utilities for consistent argument parsing."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import IO, Optional

LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class StderrHelpAction(argparse.Action):
    """Print the parser help to standard error and exit successfully."""

    def __init__(
        self,
        option_strings,
        dest=argparse.SUPPRESS,
        default=argparse.SUPPRESS,
        help=None,
    ):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            default=default,
            nargs=0,
            help=help,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help(sys.stderr)
        parser.exit(0)


def add_log_level_argument(
    parser: argparse.ArgumentParser, help: Optional[str] = "Logging verbosity"
) -> None:
    """Add standard --log-level argument.

    Args:
        parser: ArgumentParser to add the argument to
        help: Help string, or argparse.SUPPRESS for tools with their own manual
    """
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="INFO",
        help=help,
    )


def setup_logging(level: str, stream: Optional[IO[str]] = None) -> None:
    """Configure logging for a tool whose stdout carries its result.

    Args:
        level: Logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)
        stream: Destination for log records (default: standard error)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=stream if stream is not None else sys.stderr,
    )
