"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .sensor_data import router as sensor_data_router, get_sensor_data_service

__all__ = [
    "sensor_data_router",
    "get_sensor_data_service",
]
