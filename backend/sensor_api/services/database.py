"""
Database Service
================

Everything that talks to MySQL lives here.

WHAT THIS DOES:
--------------
1. Reads the connection settings from the environment (DatabaseConfig)
2. Builds ONE pooled SQLAlchemy engine for the whole process
3. Builds the SELECT for the read endpoints (build_select_query)
4. Runs INSERT/SELECT against the IAQ_SEN55 table (SensorDataRepository)

THE POOL:
--------
    max 25 open connections  (pool_size=5 + max_overflow=20)
    max 5 kept idle
    every connection recycled after 5 minutes

The pool does its own locking. When all 25 are busy, the next request waits
for one (up to pool_timeout) and then fails with a StorageError.

THE TABLE:
---------
    IAQ_SEN55(id, location, recTime, temp, rH, VOC, NOx,
              pmass1, pmass25, pmass4, pmass10, HCHO, CO2, indoorTd)
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Double,
    Integer,
    MetaData,
    Select,
    Table,
    create_engine,
    func,
    select,
    text,
)
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from sensor_api.errors import StorageError
from sensor_api.models import NUMERIC_FIELDS, SensorReading
from sensor_api.utils import parse_location, sanitize_reading

logger = logging.getLogger(__name__)


TABLE_NAME = "IAQ_SEN55"
DEFAULT_LIMIT = 15000
DEFAULT_MYSQL_PORT = 3306

POOL_SIZE = 5
MAX_OVERFLOW = 20
POOL_RECYCLE_SECONDS = 300


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class DatabaseConfig:
    """
    Database connection configuration.

    Environment Variables:
        MYSQL_HOST: Database host (default: localhost)
        MYSQL_USER: Database user
        MYSQL_PASS: Database password
        MYSQL_DB: Database name
        MYSQL_PORT: Database port (default: 3306, also used if unparseable)
        DATABASE_URL: Full SQLAlchemy URL, overrides all of the above
    """
    host: str
    user: str
    password: str
    database: str
    port: int = DEFAULT_MYSQL_PORT
    url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Create config from environment variables."""
        raw_port = os.getenv("MYSQL_PORT", "")
        try:
            port = int(raw_port)
        except ValueError:
            logger.warning(f"Invalid MYSQL_PORT {raw_port!r}, using default port {DEFAULT_MYSQL_PORT}")
            port = DEFAULT_MYSQL_PORT

        return cls(
            host=os.getenv("MYSQL_HOST", "localhost"),
            user=os.getenv("MYSQL_USER", ""),
            password=os.getenv("MYSQL_PASS", ""),
            database=os.getenv("MYSQL_DB", ""),
            port=port,
            url=os.getenv("DATABASE_URL") or None,
        )

    def sqlalchemy_url(self):
        """The URL handed to create_engine()."""
        if self.url:
            return self.url
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


def create_db_engine(config: DatabaseConfig) -> Engine:
    """
    Create the process-wide pooled engine.

    Created once by the app at startup and disposed at shutdown.
    """
    engine = create_engine(
        config.sqlalchemy_url(),
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_recycle=POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
    )
    logger.info(
        f"Database engine created for {config.host}:{config.port}/{config.database} "
        f"(pool_size={POOL_SIZE}, max_overflow={MAX_OVERFLOW})"
    )
    return engine


# =============================================================================
# TABLE DEFINITION
# =============================================================================

metadata = MetaData()

sensor_readings = Table(
    TABLE_NAME,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("location", Integer, nullable=False, server_default=text("0")),
    Column("recTime", DateTime, nullable=False, server_default=func.current_timestamp()),
    *[Column(column, Double) for _, column in NUMERIC_FIELDS],
)

SELECT_COLUMNS = ("id", "location", "recTime") + tuple(column for _, column in NUMERIC_FIELDS)


# =============================================================================
# QUERY BUILDER
# =============================================================================

def build_select_query(
    limit: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    table: Table = sensor_readings,
) -> Select:
    """
    Build the read query.

        SELECT <columns> FROM IAQ_SEN55
        [WHERE recTime >= :start] [AND recTime <= :end]
        ORDER BY recTime DESC
        LIMIT :limit

    Both bounds are inclusive. Every value (bounds and limit) is a bound
    parameter, never pasted into the SQL.

    Args:
        limit: Max rows. Zero or negative falls back to DEFAULT_LIMIT
        start: Earliest recTime to include
        end: Latest recTime to include
    """
    if limit is None or limit <= 0:
        limit = DEFAULT_LIMIT

    query = select(*[table.c[name] for name in SELECT_COLUMNS])

    conditions = []
    if start is not None:
        conditions.append(table.c.recTime >= start)
    if end is not None:
        conditions.append(table.c.recTime <= end)
    if conditions:
        query = query.where(*conditions)

    return query.order_by(table.c.recTime.desc()).limit(limit)


# =============================================================================
# REPOSITORY
# =============================================================================

class SensorDataRepository:
    """
    Reads and writes rows of the sensor table through the shared pool.

    Every call checks a connection out of the pool, runs ONE statement and
    gives the connection back. No transaction spans more than one statement.
    """

    def __init__(self, engine: Engine, table: Table = sensor_readings):
        """
        Args:
            engine: The pooled engine from create_db_engine()
            table: The sensor table (override for tests)
        """
        self.engine = engine
        self.table = table

    def fetch(
        self,
        limit: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[SensorReading]:
        """
        Fetch readings, newest first.

        Returns:
            Sanitized readings (empty list if nothing matches)

        Raises:
            StorageError: If the pool or the query fails
        """
        query = build_select_query(limit, start_date, end_date, self.table)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching sensor data: {e}")
            raise StorageError("Failed to fetch sensor data", cause=e) from e

        return [sanitize_reading(SensorReading.from_row(row)) for row in rows]

    def insert(self, reading: SensorReading) -> None:
        """
        Insert one reading.

        The location is parsed to an integer (0 if it isn't one) and the
        measurements are sanitized first. recTime is left to the database
        default. The new id is not returned.

        Raises:
            StorageError: On constraint violation or connection failure
        """
        sanitize_reading(reading)
        values = {"location": parse_location(reading.location)}
        for attr, column in NUMERIC_FIELDS:
            values[column] = getattr(reading, attr)

        try:
            with self.engine.begin() as conn:
                conn.execute(self.table.insert().values(**values))
        except SQLAlchemyError as e:
            logger.error(f"Error inserting sensor data: {e}")
            raise StorageError("Failed to insert sensor data", cause=e) from e

    def ping(self) -> None:
        """
        Check that a connection can be checked out and used.

        Raises:
            StorageError: If the database is unreachable
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StorageError("Database unreachable", cause=e) from e

    def create_schema(self) -> None:
        """Create the sensor table if it doesn't exist (local dev and tests)."""
        try:
            self.table.metadata.create_all(self.engine, tables=[self.table])
        except SQLAlchemyError as e:
            raise StorageError("Failed to create sensor table", cause=e) from e

    def close(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
