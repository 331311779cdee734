"""Module containing utilities for logging, along with a standard logger."""

import logging
import sys
from typing import Any, Optional

_FORMAT = "%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def _make_handler(handler: logging.StreamHandler) -> logging.StreamHandler:
    # Explicitly emit a carriage return since the remote shell may have put the
    # terminal in raw mode.
    handler.terminator = "\r\n"
    handler.setFormatter(logging.Formatter(_FORMAT))

    return handler


def _get_logger(name: Optional[str] = "syncspace") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout)))
    logger.setLevel(logging.INFO)

    return logger


def configure(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Set the verbosity of the standard logger and optionally redirect it to a file.

    The log file is truncated if it already exists.
    """
    log.setLevel(logging.DEBUG if verbose else logging.INFO)

    if log_file is not None:
        file_handler = _make_handler(logging.FileHandler(log_file, mode="w"))

        for handler in list(log.handlers):
            log.removeHandler(handler)
            handler.close()

        log.addHandler(file_handler)


def summarize(obj: Any, max_length: int = 255) -> str:
    """Return a stringified representation of the object up to the given length."""
    stringified_obj = str(obj)

    if len(stringified_obj) <= max_length:
        return stringified_obj
    else:
        return stringified_obj[: max_length - 3] + "..."


# Default logger
log = _get_logger()
