import logging
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: int = logging.INFO, fmt: Optional[str] = None) -> None:
    """Configure root logging once. Subsequent calls are no-ops.
    If fmt is not provided, DEFAULT_FORMAT is used.
    """
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=level, format=fmt or DEFAULT_FORMAT)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger by name without touching the root configuration.

    Library modules call this at import time, so configuring handlers is left
    to applications (see setup_logging).
    """
    return logging.getLogger(name) if name else logging.getLogger("registry_login")

