"""
Connection events, dispatching, and stock handlers.
"""

from .dispatcher import EventDispatcher, EventHandler
from .event import Event, EventType
from .handlers import LoggingEventHandler

__all__ = ["Event", "EventDispatcher", "EventHandler", "EventType", "LoggingEventHandler"]
