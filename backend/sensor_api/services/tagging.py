"""
Reading Tags
============

Labels we stick on readings when the historical endpoint returns them, so
the dashboard can highlight rooms that are too warm, too cold, or stuffy.

    temp > 25.0    -> "high-temperature"
    temp < 18.0    -> "low-temperature"
    CO2  > 1000.0  -> "high-co2"

Tags are never stored. They're worked out again on every read.
"""

from typing import Iterable, List

from sensor_api.models import SensorReading

HIGH_TEMPERATURE_C = 25.0
LOW_TEMPERATURE_C = 18.0
HIGH_CO2_PPM = 1000.0


def annotate_tags(reading: SensorReading) -> List[str]:
    """Work out the tags for one (already sanitized) reading."""
    tags = []
    if reading.temp > HIGH_TEMPERATURE_C:
        tags.append("high-temperature")
    elif reading.temp < LOW_TEMPERATURE_C:
        tags.append("low-temperature")

    if reading.co2 > HIGH_CO2_PPM:
        tags.append("high-co2")
    return tags


def apply_tags(readings: Iterable[SensorReading]) -> None:
    """Set `tags` on each reading (None when there are none)."""
    for reading in readings:
        reading.tags = annotate_tags(reading) or None
