"""
TempMon Backend
===============

This is the Python package for the measurement API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a measurement look like?)
- services/  = Workers (decode submissions, talk to the database)
- routers/   = API endpoints (the doors into our app)
- utils/     = Small helpers for parsing query parameters
- config.py  = Settings loaded once from the environment
- main.py    = Puts it all together and starts the server
"""

__version__ = "1.0.0"
