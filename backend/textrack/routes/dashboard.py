# Overview: Flask API route for dashboard analytics over the live inventory.

from flask import Blueprint, current_app, request

from ..services import analytics_service
from ..services.lifecycle_service import InventoryState


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
def dashboard_route():
    """
    Revenue, completion, due-date pressure and rankings for the live set.

    Query params:
    - q: str (optional) - compute over the filtered products only
    """
    state = InventoryState.load()
    products = state.filtered(request.args.get("q"))
    return analytics_service.dashboard_summary(
        products,
        due_soon_days=current_app.config.get("DUE_SOON_DAYS", 7),
    )
