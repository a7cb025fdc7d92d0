"""Logging helpers for scriptorium.

All modules obtain their loggers through get_logger so that every record
lands under the "scriptorium" namespace. The library never installs
handlers; applications configure logging themselves.

Example:
    >>> from scriptorium.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Extracted %d segments", 42)
"""

from __future__ import annotations

import logging

_ROOT = "scriptorium"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger under the "scriptorium." namespace

    Example:
        >>> get_logger("patching").name
        'scriptorium.patching'
        >>> get_logger("scriptorium.lexer").name
        'scriptorium.lexer'
    """
    if not (name == _ROOT or name.startswith(_ROOT + ".")):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
