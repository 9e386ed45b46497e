import logging
import types

import pytest

from sqlweave.errors import DriverConfigurationError
from sqlweave.utils import get_logger
from sqlweave.utils.performance import QueryProfiler, resolve_slow_query_ms


def _event(sql, elapsed_ms, count=None):
    return types.SimpleNamespace(sql=sql, elapsed_ms=elapsed_ms, count=count)


def test_profiler_aggregates_by_normalized_statement():
    profiler = QueryProfiler(get_logger("tests.profiler"), slow_query_ms=1000)
    profiler(_event("SELECT *\n  FROM foo", 1.5, count=2))
    profiler(_event("SELECT * FROM foo", 2.5, count=3))
    profiler(_event("", 4.0))

    assert profiler.num_queries == 3
    assert profiler.total_time_ms == pytest.approx(8.0)
    assert profiler.last_elapsed_ms == 4.0
    assert profiler.summary() == [
        {"sql": "SELECT * FROM foo", "count": 2, "total_ms": 4.0, "average_ms": 2.0, "rows": 5}
    ]


def test_profiler_warns_about_slow_statements(caplog):
    caplog.set_level(logging.WARNING, logger="sqlweave.tests.profiler")
    profiler = QueryProfiler(get_logger("tests.profiler"), slow_query_ms=10)
    profiler.record(_event("SELECT 1", 5.0))
    profiler.record(_event("SELECT " + "x, " * 40 + "y", 25.0))
    messages = [record.message for record in caplog.records]
    assert len(messages) == 1
    assert messages[0].startswith("Slow statement 'SELECT x, ")
    assert "...' took 25.00ms" in messages[0]


def test_profiler_reset():
    profiler = QueryProfiler(get_logger("tests.profiler"))
    profiler.record(_event("SELECT 1", 0.5))
    profiler.reset()
    assert profiler.summary() == []
    assert profiler.num_queries == 0
    assert profiler.last_elapsed_ms is None


def test_slow_query_threshold_resolution(monkeypatch):
    monkeypatch.delenv("SQLWEAVE_SLOW_QUERY_MS", raising=False)
    assert resolve_slow_query_ms(100) == 100
    monkeypatch.setenv("SQLWEAVE_SLOW_QUERY_MS", "5")
    assert resolve_slow_query_ms(100) == 5
    assert resolve_slow_query_ms(100, override=7) == 7
    monkeypatch.setenv("SQLWEAVE_SLOW_QUERY_MS", "slow")
    with pytest.raises(DriverConfigurationError):
        resolve_slow_query_ms(100)
