"""Root logger setup for the ``leasesync`` command."""

from __future__ import annotations

import logging

# Transport libraries that log every request or cache decision at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "hishel")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    Lifecycle events arrive on ``leasesync.lifecycle`` at ``level``. Transport
    loggers stay at WARNING or above so per-request lines do not bury them.
    ``force=True`` replaces existing handlers, as ``--verbose`` and tests need.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", force=force)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
