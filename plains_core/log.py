"""Logging setup for the plains command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "[plains] %(levelname)s %(message)s"


def configure_logging(*, verbose: bool = False, silent: bool = False) -> int:
    """Configure the root logger and return the chosen level."""

    if silent:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    return level
