"""
Utility modules for the sensor data API.
"""

from sensor_api.utils.validation import (
    sanitize_float,
    sanitize_reading,
    parse_location,
    parse_limit,
    parse_datetime,
    derive_dew_point,
)

__all__ = [
    "sanitize_float",
    "sanitize_reading",
    "parse_location",
    "parse_limit",
    "parse_datetime",
    "derive_dew_point",
]
