"""Logging helper for Tinta.

Wraps the standard library logging with a consistent ``tinta.`` namespace.
The library never installs handlers; applications configure logging.

Example:
    >>> from tinta.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("closing unterminated fence")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``tinta`` namespace.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> get_logger("scanner").name
        'tinta.scanner'
    """
    if not (name == "tinta" or name.startswith("tinta.")):
        name = f"tinta.{name}"
    return logging.getLogger(name)
