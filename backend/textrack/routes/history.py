# Overview: Flask API routes for the sales history; archived rows and monthly reports.

from flask import Blueprint, current_app, jsonify, request

from ..services import analytics_service, history_service
from ..validation import ValidationError, parse_year_month
from ..time_utils import today


history_bp = Blueprint("history", __name__, url_prefix="/api/history")


@history_bp.get("")
def list_history_route():
    """
    Most recent archived orders.

    Query params:
    - limit: int (optional) - defaults to SALES_HISTORY_DEFAULT_LIMIT, max 500
    """
    limit = request.args.get("limit", type=int)
    rows = history_service.list_sales_history(limit)
    return jsonify({
        "items": rows,
        "count": len(rows),
        "completed": sum(1 for r in rows if r["action"] == "completed"),
        "deleted": sum(1 for r in rows if r["action"] == "deleted"),
    })


@history_bp.get("/monthly")
def monthly_report_route():
    """
    Archived orders for one calendar month plus their summary.

    Query params default to the current month.
    """
    try:
        year, month = parse_year_month(request.args, default=today())
        rows = history_service.monthly_report(year, month)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({
        "year": year,
        "month": month,
        "items": rows,
        "summary": analytics_service.history_summary(rows),
    })


@history_bp.delete("")
def clear_history_route():
    try:
        deleted = history_service.clear_all_history()
    except Exception:
        current_app.logger.exception("Failed to clear history")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"ok": True, "deleted": deleted})
