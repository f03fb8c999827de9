"""
Weather Readings API Backend
============================

This is the Python package for the backend API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading or an account look like?)
- services/  = Workers (store documents, check API keys, run reports)
- routers/   = API endpoints (the doors into our app)
- config.py  = Settings from environment variables / .env
- errors.py  = The errors endpoints can end in, with their HTTP status
- main.py    = Puts it all together and starts the server
"""
