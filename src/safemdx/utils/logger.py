"""Logger factory for safemdx.

Every module logs under the ``safemdx`` namespace so applications can tune
the whole renderer with one ``logging.getLogger("safemdx")`` call. The
package root carries a ``NullHandler``; nothing is printed unless the host
application configures logging.

Render problems that callers need to act on are reported as diagnostics.
Logging only traces the recoverable paths (rejected imports, failed
expressions, unsupported components) at debug level.

Example:
    >>> from safemdx.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Unsupported jsx component %s", "Card")
"""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "safemdx"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` inside the safemdx namespace.

    Example:
        >>> get_logger("walker").name
        'safemdx.walker'
        >>> get_logger("safemdx.walker").name
        'safemdx.walker'
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
