"""
sqlweave public package initialization.

Database-agnostic SQL translation and binding: modifier-driven argument
lists become dialect-correct SQL executed through a uniform driver layer.
"""

from .connection import Connection  # noqa: F401
from .dialects import get_dialect  # noqa: F401
from .drivers import ConnectionConfig, SSLConfig, create_driver, get_driver_class  # noqa: F401
from .errors import (  # noqa: F401
    ConnectionStateError,
    DialectCapabilityError,
    DriverConfigurationError,
    InvalidArgumentError,
    NativeExecutionError,
    ReleasedResourceError,
    SqlWeaveError,
    TranslationError,
)
from .events import Event, EventType, LoggingEventHandler  # noqa: F401
from .parameters import ParameterKind, ParameterValue  # noqa: F401
from .results import BufferedCursor, ResultCursor, Row, StreamingCursor  # noqa: F401
from .translation import Substitutions, Translator, translate  # noqa: F401
from .utils.performance import QueryProfiler  # noqa: F401

__all__ = [
    "Connection",
    "ConnectionConfig",
    "SSLConfig",
    "create_driver",
    "get_driver_class",
    "get_dialect",
    "Translator",
    "Substitutions",
    "translate",
    "ParameterKind",
    "ParameterValue",
    "ResultCursor",
    "BufferedCursor",
    "StreamingCursor",
    "Row",
    "Event",
    "EventType",
    "LoggingEventHandler",
    "QueryProfiler",
    "SqlWeaveError",
    "ConnectionStateError",
    "DialectCapabilityError",
    "DriverConfigurationError",
    "InvalidArgumentError",
    "NativeExecutionError",
    "ReleasedResourceError",
    "TranslationError",
]
