# Overview: Flask API routes that stream report and export downloads.

from flask import Blueprint, Response, current_app, jsonify, request

from ..services import export_service, history_service
from ..services.lifecycle_service import InventoryState
from ..validation import ValidationError, parse_year_month
from ..time_utils import today


exports_bp = Blueprint("exports", __name__, url_prefix="/api/exports")

FILE_PREFIX = "textrack"


def _download(body, *, mimetype: str, filename: str) -> Response:
    return Response(
        body,
        mimetype=mimetype,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _live_products():
    products = list(InventoryState.load().products)
    if not products:
        return None, (jsonify({"error": "No data to export"}), 404)
    return products, None


@exports_bp.get("/products.csv")
def products_csv_route():
    products, error = _live_products()
    if error:
        return error
    return _download(
        export_service.products_csv(products),
        mimetype="text/csv; charset=utf-8",
        filename=export_service.export_filename(f"{FILE_PREFIX}_inventory", "csv"),
    )


@exports_bp.get("/analytics.json")
def analytics_json_route():
    products, error = _live_products()
    if error:
        return error
    return _download(
        export_service.product_analytics_json(products, company=current_app.config["COMPANY_NAME"]),
        mimetype="application/json; charset=utf-8",
        filename=export_service.export_filename(f"{FILE_PREFIX}_analytics", "json"),
    )


@exports_bp.get("/backup.json")
def backup_json_route():
    products, error = _live_products()
    if error:
        return error
    return _download(
        export_service.backup_json(products),
        mimetype="application/json",
        filename=export_service.export_filename(f"{FILE_PREFIX}_backup", "json"),
    )


@exports_bp.get("/report.txt")
def report_text_route():
    products = list(InventoryState.load().products)
    return _download(
        export_service.inventory_report_text(products, company=current_app.config["COMPANY_NAME"]),
        mimetype="text/plain; charset=utf-8",
        filename=export_service.export_filename(f"{FILE_PREFIX}_report", "txt"),
    )


@exports_bp.get("/monthly-report.txt")
def monthly_report_text_route():
    try:
        year, month = parse_year_month(request.args, default=today())
        rows = history_service.monthly_report(year, month)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    products = list(InventoryState.load().products)
    kind = "monthly" if rows else "current"
    return _download(
        export_service.monthly_report_text(
            year, month, rows, products, company=current_app.config["COMPANY_NAME"]
        ),
        mimetype="text/plain; charset=utf-8",
        filename=f"{FILE_PREFIX}_{kind}_{month}_{year}.txt",
    )


@exports_bp.get("/report.pdf")
def report_pdf_route():
    products = list(InventoryState.load().products)
    try:
        body = export_service.inventory_report_pdf(products, company=current_app.config["COMPANY_NAME"])
    except Exception:
        current_app.logger.exception("Failed to render PDF report")
        return jsonify({"error": "Internal server error"}), 500
    return _download(
        body,
        mimetype="application/pdf",
        filename=export_service.export_filename(f"{FILE_PREFIX}_report", "pdf"),
    )
