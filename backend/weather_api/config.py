"""
Configuration
=============

Application configuration loaded from environment variables.

Environment Variables:
    DATABASE_FILE: JSON file the document store persists to
                   (default: weather_db.json next to the backend folder;
                   set to an empty string to keep everything in memory)
    FRONTEND_URL: URL of the frontend for CORS
    PRECIPITATION_WINDOW_MONTHS: Trailing window for the max precipitation
                                 report (default: 5)
    INACTIVE_ACCOUNT_DAYS: Default age for the delete-inactive endpoint (default: 30)
    ENABLE_BULK_ACCOUNT_CREATE: "true" to expose POST /api/accounts/create-many
    BOOTSTRAP_ADMIN_USERNAME / BOOTSTRAP_ADMIN_PASSWORD: Seed an Admin account
                                 when the account collection is empty
    LOG_LEVEL: Logging level name (default: INFO)
"""

import os
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Settings are read once at import time.

    Defaults are set for local development.
    """

    DATABASE_FILE = os.getenv(
        "DATABASE_FILE",
        str(Path(__file__).parent.parent / "weather_db.json")
    )

    PRECIPITATION_WINDOW_MONTHS = int(os.getenv("PRECIPITATION_WINDOW_MONTHS", "5"))

    INACTIVE_ACCOUNT_DAYS = int(os.getenv("INACTIVE_ACCOUNT_DAYS", "30"))

    # Bulk account creation skips the username check, so it stays off unless asked for
    ENABLE_BULK_ACCOUNT_CREATE = _env_flag("ENABLE_BULK_ACCOUNT_CREATE")

    BOOTSTRAP_ADMIN_USERNAME = os.getenv("BOOTSTRAP_ADMIN_USERNAME", "")
    BOOTSTRAP_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Frontend URL for CORS
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

    CORS_ORIGINS = [
        FRONTEND_URL,
        "http://localhost:5173",    # Vite dev server
        "http://localhost:3000",    # Create React App
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]
