"""Logging setup shared by every facadegen module.

Modules obtain their logger with ``get_logger(__name__)``; the CLI calls
``setup_logging`` once to attach a rich handler to the package logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "facadegen"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package logger.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        The logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        verbose: Emit INFO records (progress, timestamps) when True,
            only warnings and errors otherwise.
        console: Console the handler writes to; defaults to stderr.

    Returns:
        The configured package logger.
    """
    global _configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.INFO if verbose else logging.WARNING)

    if not _configured:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        _configured = True

    return logger
