"""Logging setup for applications that embed surfacemesh.

Library modules only create loggers with ``logging.getLogger(__name__)``
and report clamped or degenerate input at DEBUG level.  Nothing is
printed until an application attaches a handler, for example through
``setup_logging``.
"""

import logging
import sys
from typing import Optional, TextIO, Union

LOGGER_NAME = "surfacemesh"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _as_level(level: Union[int, str]) -> int:
    ## accept logging constants or their names, e.g. "debug"
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        if not isinstance(value, int):
            raise ValueError("unknown logging level: {}".format(level))
        return value
    return int(level)


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[str] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach handlers to the ``surfacemesh`` logger and return it.

    Handlers left by an earlier call are removed and closed, so calling
    this again reconfigures the logger instead of duplicating output.
    Records go to ``stream`` (``sys.stderr`` by default) and, when
    ``log_file`` is given, to that file, which is overwritten.
    """
    lvl = _as_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(lvl)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stderr if stream is None else stream)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(lvl)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
