"""
Weather Data API Backend
========================

This is the Python package for the backend API.

HOW IT'S ORGANIZED:
------------------
- models/      = Data structures (what does a reading / an account look like?)
- services/    = Workers (credential store, authorizer, telemetry repository)
- routers/     = API endpoints and the API key gate in front of them
- utils/       = Validation and time helpers
- database.py  = MongoDB connection and indexes
- exceptions.py = Authorization failures
- main.py      = Puts it all together and starts the server
"""
