"""
Logging setup shared by every typemirror module.

Modules obtain their logger with ``get_logger(__name__)``; the CLI calls
``configure_logging`` once to attach a rich handler writing to stderr.
"""

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "typemirror"


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger namespaced under the package root logger.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        The logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Attach a rich handler to the package root logger.

    Calling it again only updates the level.

    Args:
        level: Logging level name or number

    Returns:
        The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)

    return root
