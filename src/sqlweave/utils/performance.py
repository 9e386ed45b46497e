"""
Query profiling built on completed connection events.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from ..errors import DriverConfigurationError

if TYPE_CHECKING:
    from ..events.event import Event

SLOW_QUERY_ENV = "SQLWEAVE_SLOW_QUERY_MS"


def resolve_slow_query_ms(default: int, override: int | None = None) -> int:
    """
    Slow-statement threshold: explicit override, then ``SQLWEAVE_SLOW_QUERY_MS``, then default.
    """

    if override is not None:
        return override
    raw = os.getenv(SLOW_QUERY_ENV)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise DriverConfigurationError(f"Invalid integer value for {SLOW_QUERY_ENV}: {raw!r}") from exc


@dataclass
class QueryStat:
    sql: str
    count: int = 0
    total_ms: float = 0.0
    rows: int = 0

    def record(self, elapsed_ms: float, rows: int | None) -> None:
        self.count += 1
        self.total_ms += elapsed_ms
        if rows:
            self.rows += rows

    @property
    def average_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_ms / self.count


class QueryProfiler:
    """
    Aggregates completed events per statement and warns about slow ones.

    Register it with ``Connection.on_event`` or call ``record`` directly.
    """

    def __init__(self, logger: logging.Logger, *, slow_query_ms: int | None = None) -> None:
        self.logger = logger
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self.stats: dict[str, QueryStat] = {}
        self.num_queries = 0
        self.total_time_ms = 0.0
        self.last_elapsed_ms: float | None = None

    def __call__(self, event: "Event") -> None:
        self.record(event)

    def record(self, event: "Event") -> None:
        elapsed_ms = event.elapsed_ms or 0.0
        self.num_queries += 1
        self.total_time_ms += elapsed_ms
        self.last_elapsed_ms = elapsed_ms
        if not event.sql:
            return
        normalized_sql = self._normalize_sql(event.sql)
        stat = self.stats.setdefault(normalized_sql, QueryStat(sql=normalized_sql))
        stat.record(elapsed_ms, event.count)
        if elapsed_ms >= self.slow_query_ms:
            self.logger.warning(
                "Slow statement '%s' took %.2fms",
                self._abbreviate(normalized_sql),
                elapsed_ms,
                extra={"sql": normalized_sql, "elapsed_ms": elapsed_ms},
            )

    def summary(self) -> List[dict[str, object]]:
        return [
            {
                "sql": stat.sql,
                "count": stat.count,
                "total_ms": stat.total_ms,
                "average_ms": stat.average_ms,
                "rows": stat.rows,
            }
            for stat in self.stats.values()
        ]

    def reset(self) -> None:
        self.stats.clear()
        self.num_queries = 0
        self.total_time_ms = 0.0
        self.last_elapsed_ms = None

    @staticmethod
    def _normalize_sql(sql: str) -> str:
        return " ".join(sql.strip().split())

    @staticmethod
    def _abbreviate(sql: str, max_length: int = 80) -> str:
        if len(sql) <= max_length:
            return sql
        return sql[: max_length - 3] + "..."
