"""
Schema reflection for every supported engine.
"""

from .base import (
    ColumnInfo,
    DriverReflector,
    ForeignKeyInfo,
    IndexInfo,
    Reflector,
    TableInfo,
)
from .mysql import MySQLReflector
from .postgres import PostgresReflector
from .sqlite import SQLiteReflector
from .sqlserver import SQLServerReflector

__all__ = [
    "ColumnInfo",
    "DriverReflector",
    "ForeignKeyInfo",
    "IndexInfo",
    "Reflector",
    "TableInfo",
    "SQLiteReflector",
    "PostgresReflector",
    "MySQLReflector",
    "SQLServerReflector",
]
