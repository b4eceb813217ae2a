# backend/textrack/routes/system.py
"""
System health and version endpoints.
"""

import sys
import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Product, ArchivedSale, ProgressEvent
from textrack.time_utils import utcnow

API_VERSION = "1.0.0"

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and that each table is readable.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        history_count = db.session.query(ArchivedSale).count()
        progress_count = db.session.query(ProgressEvent).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "sales_history": history_count,
                "progress_history": progress_count,
            }
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: Database reachable
    - 503: Database unhealthy
    """
    database_health = check_database_health()
    healthy = database_health["status"] == "healthy"

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
        }
    }

    return response, 200 if healthy else 503


@system_bp.get("/version")
def version():
    """
    Version endpoint for deployment debugging.

    Does NOT expose secret keys, database credentials or internal paths.
    """
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": utcnow().isoformat() + "Z",
    }
