"""
Diagnostic logging for scriptshell.

The script transcript goes through the reporter; this is only for
troubleshooting the engine itself and is written to stderr.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "scriptshell"


def configure_logging(debug: bool = False) -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Safe to call more than once; the level is updated each time.

    Args:
        debug: Log engine decisions at DEBUG level instead of warnings only.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    if not any(getattr(h, "_scriptshell", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handler._scriptshell = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.propagate = False

    return logger
