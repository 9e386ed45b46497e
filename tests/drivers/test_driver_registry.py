import pytest

from sqlweave.drivers import (
    ConnectionConfig,
    MySQLDriver,
    PostgresDriver,
    SQLiteDriver,
    SQLServerDriver,
    create_driver,
    get_driver_class,
)
from sqlweave.errors import DriverConfigurationError


@pytest.mark.parametrize(
    "name, expected",
    [
        ("sqlite", SQLiteDriver),
        ("postgresql", PostgresDriver),
        ("postgres", PostgresDriver),
        ("postgresql+psycopg", PostgresDriver),
        ("MySQL", MySQLDriver),
        ("mssql", SQLServerDriver),
        ("sqlserver", SQLServerDriver),
    ],
)
def test_get_driver_class(name, expected):
    assert get_driver_class(name) is expected


def test_unknown_driver_lists_available_names():
    with pytest.raises(DriverConfigurationError, match="Available: mssql"):
        get_driver_class("oracle")


def test_create_driver_does_not_connect():
    driver = create_driver(ConnectionConfig.from_dsn("sqlite:///:memory:"), slow_query_ms=5)
    assert isinstance(driver, SQLiteDriver)
    assert driver.slow_query_ms == 5
    assert not driver.is_connected()
    assert driver.get_resource() is None


def test_slow_query_threshold_from_environment(monkeypatch):
    monkeypatch.setenv("SQLWEAVE_SLOW_QUERY_MS", "250")
    assert SQLiteDriver().slow_query_ms == 250
    monkeypatch.setenv("SQLWEAVE_SLOW_QUERY_MS", "fast")
    with pytest.raises(DriverConfigurationError):
        SQLiteDriver()


def test_streaming_default_per_engine():
    assert SQLiteDriver().buffered is True
    assert SQLServerDriver().buffered is False
