"""Process logging configuration for the engine and the API server."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s [%(levelname)-5s] %(name)-28s | %(message)s"

# Chatty third-party loggers kept one level above the engine's
_NOISY_LOGGERS = ("uvicorn.access",)


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the root logger for simulation output.

    Logs always go to stdout; when *log_file* is given a second handler
    appends the same records to that file.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
