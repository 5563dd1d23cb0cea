"""Logging setup for the hashnames CLI."""

from __future__ import annotations

import logging
from typing import Final

# Transport loggers that emit one record per page request or retry.
TRANSPORT_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "httpx_retries")

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Route records to stderr at INFO, or DEBUG when ``verbose``.

    Outside verbose mode the transport loggers stay at WARNING so that a long
    cursor walk does not print a line per page. ``force`` replaces handlers a
    previous call (or a test harness) installed.
    """

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    transport_level = logging.DEBUG if verbose else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
