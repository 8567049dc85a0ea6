"""
Sensor Data API Backend
=======================

This is the Python package for the sensor data API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading look like?)
- services/  = Workers (talk to the database, tag readings)
- routers/   = API endpoints (the doors into our app)
- utils/     = Small helpers (sanitizing numbers, parsing parameters)
- errors.py  = The errors we turn into HTTP responses
- main.py    = Puts it all together and starts the server
"""

__version__ = "1.0.0"
