"""
Result cursors and rows.
"""

from .cursor import BufferedCursor, ResultCursor, StreamingCursor, describe_columns
from .row import Row

__all__ = ["BufferedCursor", "ResultCursor", "Row", "StreamingCursor", "describe_columns"]
