"""
Stock event handlers.
"""

from __future__ import annotations

import logging

from ..errors import NativeExecutionError
from ..security.redaction import redact_params
from ..utils import get_logger
from .event import Event, EventType


class LoggingEventHandler:
    """
    Writes each completed event to the ``sqlweave.events`` logger.

    Failed events are logged at ERROR, everything else at ``level``.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        level: int = logging.INFO,
        mask: EventType = EventType.ALL,
    ) -> None:
        self.logger = logger or get_logger("events")
        self.level = level
        self.mask = mask

    def __call__(self, event: Event) -> None:
        if not event.type & self.mask:
            return
        extra = {
            "sql": event.sql,
            "params": redact_params(event.params),
            "elapsed_ms": event.elapsed_ms,
            "source": event.source,
        }
        if event.failed:
            code = event.result.code if isinstance(event.result, NativeExecutionError) else None
            self.logger.error(
                "%s failed after %.2fms: %s (code %s)",
                event.type.name,
                event.elapsed_ms or 0.0,
                event.sql or event.type.name.lower(),
                code,
                extra=extra,
            )
            return
        if event.type & EventType.QUERY:
            rows = "" if event.count is None else f" [{event.count} rows]"
            self.logger.log(
                self.level,
                "%s in %.2fms%s: %s",
                event.type.name,
                event.elapsed_ms or 0.0,
                rows,
                event.sql,
                extra=extra,
            )
        else:
            self.logger.log(self.level, "%s in %.2fms", event.type.name, event.elapsed_ms or 0.0, extra=extra)
