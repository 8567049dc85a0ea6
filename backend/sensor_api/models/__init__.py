"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from sensor_api.models import SensorReading, NUMERIC_FIELDS
"""

from .sensor import (
    # Measurement attribute -> column name map
    NUMERIC_FIELDS,
    format_rfc3339,

    # The reading itself (POST body and database row)
    SensorReading,
    SensorReadingResponse,

    # What we send back
    MessageResponse,
    HealthResponse,
)

__all__ = [
    "NUMERIC_FIELDS",
    "format_rfc3339",
    "SensorReading",
    "SensorReadingResponse",
    "MessageResponse",
    "HealthResponse",
]
