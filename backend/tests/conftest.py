from collections.abc import Iterator
from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from sensor_api.main import create_app
from sensor_api.models import NUMERIC_FIELDS
from sensor_api.services import SensorDataRepository, sensor_readings


@pytest.fixture()
def engine() -> Iterator[Engine]:
    # One shared in-memory SQLite connection stands in for MySQL
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture()
def repository(engine: Engine) -> SensorDataRepository:
    repo = SensorDataRepository(engine)
    repo.create_schema()
    return repo


@pytest.fixture()
def client(repository: SensorDataRepository) -> Iterator[TestClient]:
    with TestClient(create_app(repository=repository)) as test_client:
        yield test_client


def insert_row(engine: Engine, rec_time: datetime, location: int = 1, **measurements: Any) -> None:
    """Write a row straight to the table, bypassing sanitization."""
    values: dict[str, Any] = {column: 0.0 for _, column in NUMERIC_FIELDS}
    values.update(measurements)
    with engine.begin() as conn:
        conn.execute(sensor_readings.insert().values(location=location, recTime=rec_time, **values))


def count_rows(engine: Engine) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(sensor_readings)).scalar_one()
