"""
Sensor Reading Models
=====================
Pydantic models for sensor reading validation and serialization.

This module defines the data structures used throughout the application:
- SensorReading: one row of the IAQ_SEN55 table, also the POST body
- SensorReadingResponse: the JSON shape of one reading on the GET endpoints
- MessageResponse: what we send back after a successful insert
- HealthResponse: what /health returns

WHAT'S IN A READING:
-------------------
The sensor (a Sensirion SEN55 plus CO2 and formaldehyde add-ons) reports
eleven numbers. The JSON keys match the database columns exactly, so the
dashboard can use the same names everywhere:

    temp      Temperature (°C)
    rH        Relative humidity (%)
    VOC       VOC index
    NOx       NOx index
    pmass1    PM1.0 mass concentration (µg/m³)
    pmass25   PM2.5 mass concentration (µg/m³)
    pmass4    PM4.0 mass concentration (µg/m³)
    pmass10   PM10 mass concentration (µg/m³)
    HCHO      Formaldehyde (ppb)
    CO2       Carbon dioxide (ppm)
    indoorTd  Indoor dew point (°C)
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# FIELD MAP
# =============================================================================

# (python attribute, JSON key / column name) for every measurement.
# Order matches the SELECT list and the JSON output.
NUMERIC_FIELDS = (
    ("temp", "temp"),
    ("relative_humidity", "rH"),
    ("voc_index", "VOC"),
    ("nox_index", "NOx"),
    ("pmass1", "pmass1"),
    ("pmass25", "pmass25"),
    ("pmass4", "pmass4"),
    ("pmass10", "pmass10"),
    ("hcho", "HCHO"),
    ("co2", "CO2"),
    ("indoor_dew_point", "indoorTd"),
)


def format_rfc3339(value: Optional[datetime]) -> Optional[str]:
    """
    Format a timestamp as an RFC3339 UTC string (e.g. 2025-01-01T12:00:00Z).

    The database hands us naive datetimes in UTC, so a naive value is
    treated as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# SENSOR READING
# =============================================================================

class SensorReading(BaseModel):
    """
    One environmental sensor reading.

    Used both ways:
    - POST /api/sensor-data body (id, recTime and tags are ignored)
    - rows coming back from the database on the GET endpoints

    Fields:
        id: Assigned by the database
        location: Location identifier. Stored as an integer, but the
            sensors send it as a string, so anything goes here and
            parse_location() sorts it out on insert
        rec_time: When the row was recorded (set by the database)
        indoor_dew_point: Optional on insert; derived from temp and rH
            when the client leaves it out
        tags: Labels added at read time (never stored)

    Example Request:
        POST /api/sensor-data
        {
            "location": "12",
            "temp": 22.5,
            "rH": 41.0,
            "CO2": 640
        }
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(None, description="Row id (assigned by the database)")
    location: Optional[Union[str, int, float]] = Field(
        "0",
        description="Location identifier (numeric string)",
        examples=["12"],
    )
    rec_time: Optional[datetime] = Field(None, alias="recTime", description="Record timestamp")

    temp: Optional[float] = Field(0.0, description="Temperature (°C)")
    relative_humidity: Optional[float] = Field(0.0, alias="rH", description="Relative humidity (%)")
    voc_index: Optional[float] = Field(0.0, alias="VOC", description="VOC index")
    nox_index: Optional[float] = Field(0.0, alias="NOx", description="NOx index")
    pmass1: Optional[float] = Field(0.0, description="PM1.0 (µg/m³)")
    pmass25: Optional[float] = Field(0.0, description="PM2.5 (µg/m³)")
    pmass4: Optional[float] = Field(0.0, description="PM4.0 (µg/m³)")
    pmass10: Optional[float] = Field(0.0, description="PM10 (µg/m³)")
    hcho: Optional[float] = Field(0.0, alias="HCHO", description="Formaldehyde (ppb)")
    co2: Optional[float] = Field(0.0, alias="CO2", description="CO2 (ppm)")
    indoor_dew_point: Optional[float] = Field(None, alias="indoorTd", description="Indoor dew point (°C)")

    tags: Optional[List[str]] = Field(None, description="Labels derived at read time")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SensorReading":
        """Build a reading from a database row keyed by column name."""
        data = dict(row)
        location = data.get("location")
        data["location"] = "0" if location is None else str(location)
        return cls.model_validate(data)

    def to_response(self) -> dict:
        """
        Convert to the JSON shape the dashboard expects.

        `recTime` and `timestamp` carry the same RFC3339 string; `tags`
        only shows up when there is at least one.
        """
        recorded = format_rfc3339(self.rec_time)
        body = {
            "id": self.id,
            "location": str(self.location),
            "recTime": recorded,
            "timestamp": recorded,
        }
        for attr, key in NUMERIC_FIELDS:
            body[key] = getattr(self, attr)
        if self.tags:
            body["tags"] = list(self.tags)
        return body


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class SensorReadingResponse(BaseModel):
    """
    One reading as the GET endpoints return it (see SensorReading.to_response).

    `recTime` and `timestamp` are the same RFC3339 UTC string. `tags` is
    left out when empty.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = Field(None, description="Row id")
    location: str = Field(..., description="Location identifier", examples=["12"])
    rec_time: Optional[str] = Field(None, alias="recTime", description="Record time (RFC3339)")
    timestamp: Optional[str] = Field(None, description="Record time (RFC3339)")

    temp: float = Field(..., description="Temperature (°C)")
    relative_humidity: float = Field(..., alias="rH", description="Relative humidity (%)")
    voc_index: float = Field(..., alias="VOC", description="VOC index")
    nox_index: float = Field(..., alias="NOx", description="NOx index")
    pmass1: float = Field(..., description="PM1.0 (µg/m³)")
    pmass25: float = Field(..., description="PM2.5 (µg/m³)")
    pmass4: float = Field(..., description="PM4.0 (µg/m³)")
    pmass10: float = Field(..., description="PM10 (µg/m³)")
    hcho: float = Field(..., alias="HCHO", description="Formaldehyde (ppb)")
    co2: float = Field(..., alias="CO2", description="CO2 (ppm)")
    indoor_dew_point: float = Field(..., alias="indoorTd", description="Indoor dew point (°C)")

    tags: Optional[List[str]] = Field(None, description="Threshold labels (history endpoint only)")


class MessageResponse(BaseModel):
    """Response returned after a successful insert."""
    message: str = Field(..., description="What happened")


class HealthResponse(BaseModel):
    """Response from GET /health."""
    status: str = Field(..., description="'healthy' or 'unhealthy'")
    database: str = Field(..., description="'connected' or 'unreachable'")
    version: str = Field(..., description="API version")
