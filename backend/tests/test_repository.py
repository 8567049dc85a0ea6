from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from sensor_api.errors import StorageError
from sensor_api.models import SensorReading
from sensor_api.services import DatabaseConfig, SensorDataRepository, create_db_engine

from .conftest import count_rows, insert_row


def test_insert_then_fetch(repository: SensorDataRepository, engine: Engine) -> None:
    repository.insert(SensorReading(location="12", temp=22.5, co2=640.0, indoor_dew_point=10.0))

    readings = repository.fetch(limit=10)

    assert count_rows(engine) == 1
    assert len(readings) == 1
    reading = readings[0]
    assert reading.id is not None
    assert reading.location == "12"
    assert reading.temp == 22.5
    assert reading.co2 == 640.0
    assert reading.indoor_dew_point == 10.0
    assert reading.rec_time is not None


def test_insert_coerces_location_and_sanitizes(repository: SensorDataRepository) -> None:
    repository.insert(SensorReading(location="lobby", temp=float("inf"), hcho=float("nan")))

    reading = repository.fetch(limit=1)[0]

    assert reading.location == "0"
    assert reading.temp == 0.0
    assert reading.hcho == 0.0


def test_fetch_empty_table_returns_empty_list(repository: SensorDataRepository) -> None:
    assert repository.fetch(limit=15000) == []


def test_fetch_orders_filters_and_limits(repository: SensorDataRepository, engine: Engine) -> None:
    for day in (1, 2, 3, 4):
        insert_row(engine, datetime(2025, 1, day, 12, 0), temp=float(day))

    assert [r.temp for r in repository.fetch(limit=10)] == [4.0, 3.0, 2.0, 1.0]
    assert [r.temp for r in repository.fetch(limit=2)] == [4.0, 3.0]
    assert [r.temp for r in repository.fetch(limit=10, start_date=datetime(2025, 1, 3))] == [4.0, 3.0]
    assert [r.temp for r in repository.fetch(limit=10, end_date=datetime(2025, 1, 2, 12, 0))] == [2.0, 1.0]
    assert [
        r.temp
        for r in repository.fetch(
            limit=10, start_date=datetime(2025, 1, 2, 12, 0), end_date=datetime(2025, 1, 3, 12, 0)
        )
    ] == [3.0, 2.0]


def test_fetch_sanitizes_values_written_by_someone_else(repository: SensorDataRepository, engine: Engine) -> None:
    insert_row(engine, datetime(2025, 1, 1), temp=float("inf"), CO2=float("-inf"), rH=float("nan"))

    reading = repository.fetch(limit=1)[0]

    assert reading.temp == 0.0
    assert reading.co2 == 0.0
    assert reading.relative_humidity == 0.0


def test_missing_table_raises_storage_error(engine: Engine) -> None:
    repo = SensorDataRepository(engine)

    with pytest.raises(StorageError) as fetch_error:
        repo.fetch(limit=1)
    with pytest.raises(StorageError) as insert_error:
        repo.insert(SensorReading(temp=20.0))

    assert fetch_error.value.message == "Failed to fetch sensor data"
    assert insert_error.value.message == "Failed to insert sensor data"
    assert fetch_error.value.cause is not None


def test_ping(repository: SensorDataRepository, tmp_path) -> None:
    repository.ping()

    unreachable = SensorDataRepository(create_engine(f"sqlite:///{tmp_path}/missing/dir/db.sqlite"))
    with pytest.raises(StorageError):
        unreachable.ping()


def test_database_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MYSQL_HOST", "db.local")
    monkeypatch.setenv("MYSQL_USER", "sensor")
    monkeypatch.setenv("MYSQL_PASS", "secret")
    monkeypatch.setenv("MYSQL_DB", "buildingData")
    monkeypatch.setenv("MYSQL_PORT", "3307")
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = DatabaseConfig.from_env()

    assert config.host == "db.local"
    assert config.port == 3307
    url = config.sqlalchemy_url()
    assert url.drivername == "mysql+pymysql"
    assert url.database == "buildingData"
    assert url.username == "sensor"


@pytest.mark.parametrize("port", ["", "not-a-port"])
def test_database_config_defaults_port(monkeypatch: pytest.MonkeyPatch, port: str) -> None:
    monkeypatch.setenv("MYSQL_PORT", port)
    assert DatabaseConfig.from_env().port == 3306


def test_database_url_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    assert DatabaseConfig.from_env().sqlalchemy_url() == "sqlite://"


def test_engine_pool_settings() -> None:
    config = DatabaseConfig(host="db.local", user="sensor", password="secret", database="buildingData")
    engine = create_db_engine(config)
    try:
        assert engine.pool.size() == 5
        assert engine.pool._max_overflow == 20
        assert engine.pool._recycle == 300
    finally:
        engine.dispose()
