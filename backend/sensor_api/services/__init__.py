"""
Services Package
================

These are the "workers" that do the actual work.

- SensorDataRepository: Talks to the MySQL table through the pool
- SensorDataService: What the endpoints call (read + write)
- annotate_tags: Labels readings that cross a threshold
"""

from .database import (
    DatabaseConfig,
    SensorDataRepository,
    build_select_query,
    create_db_engine,
    sensor_readings,
)
from .tagging import annotate_tags, apply_tags
from .sensor_data_service import SensorDataService

__all__ = [
    "DatabaseConfig",
    "SensorDataRepository",
    "build_select_query",
    "create_db_engine",
    "sensor_readings",
    "annotate_tags",
    "apply_tags",
    "SensorDataService",
]
