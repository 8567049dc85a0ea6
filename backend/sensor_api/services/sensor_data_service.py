"""
Sensor Data Service
===================

The one place both read endpoints and the write endpoint go through.

    GET /api/sensor-data         -> get_readings(limit=15000 default, tags ON)
    GET /api/sensor-data/latest  -> get_readings(limit=1 default, tags OFF)
    POST /api/sensor-data        -> add_reading()
"""

import logging
from datetime import datetime
from typing import List, Optional

from sensor_api.models import SensorReading
from sensor_api.services.database import DEFAULT_LIMIT, SensorDataRepository
from sensor_api.services.tagging import apply_tags
from sensor_api.utils import derive_dew_point

logger = logging.getLogger(__name__)


class SensorDataService:
    """
    Read and write sensor readings.

    HOW TO USE:
    ----------
    service = SensorDataService(repository)

    # Last day of data, with tags
    readings = service.get_readings(
        limit=SensorDataService.HISTORY_DEFAULT_LIMIT,
        start=datetime(2025, 1, 1),
        annotate=True,
    )

    # Store a new reading
    service.add_reading(SensorReading(location="12", temp=22.5))
    """

    HISTORY_DEFAULT_LIMIT = DEFAULT_LIMIT
    LATEST_DEFAULT_LIMIT = 1

    def __init__(self, repository: SensorDataRepository):
        self.repository = repository

    def get_readings(
        self,
        limit: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        annotate: bool = False,
    ) -> List[SensorReading]:
        """
        Fetch readings newest first, optionally tagged.

        Raises:
            StorageError: If the database query fails
        """
        logger.info(f"Fetching data with range: {start} to {end}, limit: {limit}")
        readings = self.repository.fetch(limit, start, end)
        if annotate:
            apply_tags(readings)
        logger.info(f"Returned {len(readings)} records")
        return readings

    def add_reading(self, reading: SensorReading) -> None:
        """
        Store one reading.

        If the sensor didn't send a dew point we work it out from temp and rH.

        Raises:
            StorageError: If the insert fails
        """
        if reading.indoor_dew_point is None:
            reading.indoor_dew_point = derive_dew_point(reading.temp, reading.relative_humidity)
        self.repository.insert(reading)
