"""
Sensor Data API Router
======================

This is where the sensor data endpoints live.

HOW IT WORKS:
------------
1. A sensor (or the dashboard) sends an HTTP request
2. FastAPI routes it to the right function here
3. We call the SensorDataService to do the work
4. We send back JSON

ALL ENDPOINTS:
-------------
GET    /api/sensor-data         - Historical readings (startDate, endDate, limit)
POST   /api/sensor-data         - Store one reading
GET    /api/sensor-data/latest  - Most recent reading(s) (limit)

ERRORS:
------
Bad input raises ValidationError (400), database trouble raises StorageError
(500). main.py turns them into plain-text responses.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from sensor_api.errors import SerializationError, StorageError
from sensor_api.models import MessageResponse, SensorReading, SensorReadingResponse
from sensor_api.services import SensorDataService
from sensor_api.utils import parse_datetime, parse_limit


# Create the router - this groups all our sensor data endpoints together
router = APIRouter(prefix="/api/sensor-data", tags=["sensor-data"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================
# The service is built by the app at startup and parked on app.state.

def get_sensor_data_service(request: Request) -> SensorDataService:
    """Get the sensor data service for use in endpoints."""
    return request.app.state.sensor_data_service


def _readings_response(readings) -> JSONResponse:
    """Serialize readings, turning encoder failures into SerializationError."""
    try:
        return JSONResponse(content=[reading.to_response() for reading in readings])
    except (TypeError, ValueError) as e:
        raise SerializationError(cause=e) from e


# =============================================================================
# READ ENDPOINTS
# =============================================================================

@router.get("", response_model=list[SensorReadingResponse])
def get_sensor_data(
    start_date: Optional[str] = Query(None, alias="startDate", description="Earliest recTime (ISO 8601)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Latest recTime (ISO 8601)"),
    limit: Optional[str] = Query(None, description="Max readings (default 15000)"),
    service: SensorDataService = Depends(get_sensor_data_service),
):
    """
    Get historical readings, newest first.

    Each reading gets tags like "high-temperature" or "high-co2" when it
    crosses a threshold. A missing, zero or junk limit means 15000.
    """
    readings = service.get_readings(
        limit=parse_limit(limit, SensorDataService.HISTORY_DEFAULT_LIMIT),
        start=parse_datetime(start_date),
        end=parse_datetime(end_date),
        annotate=True,
    )
    return _readings_response(readings)


@router.get("/latest", response_model=list[SensorReadingResponse])
def get_latest_sensor_data(
    limit: Optional[str] = Query(None, description="Max readings (default 1)"),
    service: SensorDataService = Depends(get_sensor_data_service),
):
    """Get the most recent reading(s). No tags on this one."""
    try:
        readings = service.get_readings(
            limit=parse_limit(limit, SensorDataService.LATEST_DEFAULT_LIMIT),
        )
    except StorageError as e:
        raise StorageError("Failed to fetch latest sensor data", cause=e.cause) from e
    return _readings_response(readings)


# =============================================================================
# WRITE ENDPOINT
# =============================================================================

@router.post("", status_code=201, response_model=MessageResponse)
def post_sensor_data(
    reading: SensorReading,
    service: SensorDataService = Depends(get_sensor_data_service),
):
    """
    Store one reading.

    Send us the measurements (temp, rH, VOC, NOx, pmass1, pmass25, pmass4,
    pmass10, HCHO, CO2, indoorTd) and a location. Anything missing is 0,
    except indoorTd which we work out from temp and rH.
    """
    service.add_reading(reading)
    return MessageResponse(message="Sensor data inserted successfully")
