"""
Input Validation Utilities
===========================

Sanitizing sensor numbers and parsing request parameters.

Nothing in here raises for bad sensor data. A NaN temperature becomes 0.0,
a location of "lab" becomes 0, a limit of "-5" becomes the default. The
only thing that raises is parse_datetime(), because a date range we can't
read is the client's mistake.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from sensor_api.errors import ValidationError
from sensor_api.models import NUMERIC_FIELDS, SensorReading

# Integers outside a signed 64-bit column count as unparseable
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _parse_int64(raw: Any) -> Optional[int]:
    """Parse a whole number that fits in 64 bits, or return None."""
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return None
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return value


def sanitize_float(value: Optional[float]) -> float:
    """
    Replace a non-finite number with 0.0.

    Args:
        value: A measurement (may be NaN, +/-inf or None)

    Returns:
        The value unchanged if finite, otherwise 0.0
    """
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def sanitize_reading(reading: SensorReading) -> SensorReading:
    """
    Sanitize all eleven measurements of a reading in place.

    Same field set on the way in (insert) and the way out (fetch), so the
    client never sees a NaN no matter who wrote the row.
    """
    for attr, _ in NUMERIC_FIELDS:
        setattr(reading, attr, sanitize_float(getattr(reading, attr)))
    return reading


def parse_location(raw: Any) -> int:
    """
    Parse a location identifier into the integer we store.

    This is lossy on purpose: anything that isn't a plain 64-bit integer
    ("lab", "12.5", None, "99999999999999999999") becomes location 0
    instead of an error.

    Args:
        raw: Location as sent by the sensor (usually a numeric string)

    Returns:
        The integer location, or 0
    """
    if raw is None or isinstance(raw, bool):
        return 0
    value = _parse_int64(raw)
    return 0 if value is None else value


def parse_limit(raw: Optional[str], default: int) -> int:
    """
    Parse the `limit` query parameter.

    Args:
        raw: The raw query string value (may be None)
        default: What to use when raw is missing, not a 64-bit number, or not positive

    Returns:
        A positive row limit
    """
    if raw is None or raw == "":
        return default
    limit = _parse_int64(raw)
    if limit is None or limit <= 0:
        return default
    return limit


def parse_datetime(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse a startDate/endDate query parameter.

    Accepts ISO 8601 dates and datetimes ("2025-01-31", "2025-01-31T08:00:00Z",
    "2025-01-31 08:00:00"). Timezone-aware values are converted to naive UTC
    so they compare correctly against recTime.

    Raises:
        ValidationError: If the value isn't a date we understand
    """
    if raw is None or raw.strip() == "":
        return None
    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError as e:
        raise ValidationError("Invalid query parameters", cause=e) from e
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def derive_dew_point(temp: Optional[float], relative_humidity: Optional[float]) -> float:
    """
    Approximate the indoor dew point from temperature and humidity.

    Uses the simple rule the data loggers have always used:
    Td = T - (100 - RH) / 5. Good to about 1°C above 50% RH.
    """
    return sanitize_float(
        sanitize_float(temp) - (100.0 - sanitize_float(relative_humidity)) / 5.0
    )
