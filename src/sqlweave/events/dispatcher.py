"""
Event dispatcher routing completed events to registered handlers.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

from .event import Event, EventType

EventHandler = Callable[[Event], None]


class EventDispatcher:
    """
    Maintains handlers, each registered with an event-type mask.
    """

    def __init__(self) -> None:
        self._handlers: List[Tuple[EventType, EventHandler]] = []

    def __bool__(self) -> bool:
        return bool(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, handler: EventHandler, mask: EventType = EventType.ALL) -> None:
        self._handlers.append((EventType(mask), handler))

    def unregister(self, handler: EventHandler) -> None:
        self._handlers = [(mask, h) for mask, h in self._handlers if h is not handler]

    def fire(self, event: Event) -> None:
        for mask, handler in list(self._handlers):
            if event.type & mask:
                handler(event)

    def clear(self) -> None:
        self._handlers.clear()
