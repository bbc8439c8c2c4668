"""Observability port for lifecycle runs.

Callers may pass any object implementing :class:`LifecycleObserver`; when none is
given the engine logs through the standard library.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

EVENT_PREFIX = "tenant-lifecycle"

type EventMeta = Mapping[str, object]


@runtime_checkable
class LifecycleObserver(Protocol):
    def event(self, name: str, meta: EventMeta | None = None) -> None: ...

    def warn(self, name: str, meta: EventMeta | None = None) -> None: ...

    def error(self, error: BaseException, meta: EventMeta | None = None) -> None: ...


class NullObserver:
    """Discards every notification."""

    def event(self, name: str, meta: EventMeta | None = None) -> None:
        del name, meta

    def warn(self, name: str, meta: EventMeta | None = None) -> None:
        del name, meta

    def error(self, error: BaseException, meta: EventMeta | None = None) -> None:
        del error, meta


class LoggingObserver:
    """Routes lifecycle notifications to a ``logging`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger("leasesync.lifecycle")

    def event(self, name: str, meta: EventMeta | None = None) -> None:
        self._log.info("%s.%s%s", EVENT_PREFIX, name, _format_meta(meta))

    def warn(self, name: str, meta: EventMeta | None = None) -> None:
        self._log.warning("%s.%s%s", EVENT_PREFIX, name, _format_meta(meta))

    def error(self, error: BaseException, meta: EventMeta | None = None) -> None:
        self._log.error(
            "%s.error %s%s",
            EVENT_PREFIX,
            error,
            _format_meta(meta),
            exc_info=(type(error), error, error.__traceback__),
        )


def _format_meta(meta: EventMeta | None) -> str:
    if not meta:
        return ""
    return " " + " ".join(f"{key}={value}" for key, value in meta.items())
