"""Logger hierarchy shared by the CLI, the service and the pipeline stages."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "pomgen"

CONSOLE_FORMAT = "[pomgen] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``pomgen.<name>``, or the hierarchy root when no name is given."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler (and an optional file sink) on the pomgen root.

    Stage loggers only emit per-component counts at DEBUG, so ``verbose`` is
    what makes selector and route totals visible.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8")
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(sink)

    set_debug(verbose)
    return logger


def set_debug(enabled: bool = True) -> None:
    """Switch the pomgen root and its handlers between DEBUG and INFO."""
    level = logging.DEBUG if enabled else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "configure_logging", "get_logger", "set_debug"]
