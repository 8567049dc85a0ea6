"""
API Errors
==========

Every failure that reaches a route ends up as one of these.

    ValidationError    -> 400  (the client sent something we can't read)
    StorageError       -> 500  (the database said no)
    SerializationError -> 500  (we couldn't turn the result into JSON)

The HTTP body is always a short generic message. The real cause only goes
to the server log.
"""

from typing import Optional


class SensorApiError(Exception):
    """Base class for errors raised by the sensor data API."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(SensorApiError):
    """Malformed request body or query parameters."""

    status_code = 400
    default_message = "Invalid request body"


class StorageError(SensorApiError):
    """Connection pool, statement execution or constraint failure."""

    status_code = 500
    default_message = "Database error"


class SerializationError(SensorApiError):
    """Failure while encoding a response body."""

    status_code = 500
    default_message = "Error encoding response"
