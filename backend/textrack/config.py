# backend/textrack/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/textrack.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///textrack.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Shown on reports and exports
    COMPANY_NAME = os.environ.get("COMPANY_NAME", "REG MARKETING S.A.S")

    SALES_HISTORY_DEFAULT_LIMIT = int(os.environ.get("SALES_HISTORY_DEFAULT_LIMIT", "50"))
    DUE_SOON_DAYS = int(os.environ.get("DUE_SOON_DAYS", "7"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Comma-separated browser origins allowed to call the API; empty disables CORS headers
    CORS_ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()
    ]
