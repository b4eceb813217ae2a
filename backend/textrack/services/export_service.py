# Overview: Renders product and history snapshots into downloadable CSV, JSON, text and PDF.

from __future__ import annotations

import csv
import io
import json
from datetime import date

from fpdf import FPDF

from . import analytics_service
from ..time_utils import today as current_date, utcnow, to_utc_z

BACKUP_VERSION = "2.0"

CSV_HEADERS = [
    "ID",
    "Client",
    "Product",
    "Quantity",
    "Completed",
    "Remaining",
    "Size",
    "Color",
    "Status",
    "Due Date",
    "Price",
    "Notes",
    "Created",
    "Updated",
]


def format_money(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


def export_filename(prefix: str, ext: str, *, today: date | None = None) -> str:
    return f"{prefix}_{(today or current_date()).isoformat()}.{ext}"


def products_csv(products: list[dict]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for p in products:
        writer.writerow(
            [
                p["id"],
                p["client_name"],
                p["product_type"],
                p["quantity"],
                p["quantity_completed"],
                p["quantity"] - p["quantity_completed"],
                p["size"],
                p["color"],
                analytics_service.status_label(p["status"]),
                p["due_date"],
                f"{p['price_cents'] / 100:.2f}",
                p.get("notes") or "",
                p.get("created_at") or "",
                p.get("updated_at") or "",
            ]
        )
    return buf.getvalue()


def product_analytics_json(products: list[dict], *, company: str) -> str:
    ranking = analytics_service.product_type_ranking(products, limit=None)
    report = {
        "generated_at": to_utc_z(utcnow()),
        "company": company,
        "report_type": "Product analytics",
        "summary": {
            "total_products": len(ranking),
            "total_orders": len(products),
            "total_quantity": analytics_service.total_quantity(products),
            "total_value_cents": analytics_service.total_revenue_cents(products),
            "overall_completion_rate": analytics_service.completion_percentage(products),
        },
        "product_analytics": ranking,
    }
    return json.dumps(report, indent=2, ensure_ascii=False)


def backup_json(products: list[dict]) -> str:
    backup = {
        "inventory": products,
        "export_date": to_utc_z(utcnow()),
        "version": BACKUP_VERSION,
    }
    return json.dumps(backup, indent=2, ensure_ascii=False)


def inventory_report_text(products: list[dict], *, company: str) -> str:
    counts = analytics_service.status_counts(products)
    total_qty = analytics_service.total_quantity(products)
    done_qty = analytics_service.completed_quantity(products)

    lines = [
        f"=== REPORT {company} ===",
        "",
        f"Date: {to_utc_z(utcnow())}",
        "",
        "GENERAL STATISTICS:",
        f"- Total orders: {len(products)}",
        f"- Completed orders: {counts.get('completed', 0)}",
        f"- Pending orders: {counts.get('pending', 0)}",
        f"- Priority orders: {counts.get('priority', 0)}",
        f"- Total quantity ordered: {total_qty}",
        f"- Quantity completed: {done_qty}",
        f"- Quantity pending: {total_qty - done_qty}",
        f"- Overall progress: {analytics_service.completion_percentage(products):.1f}%",
        f"- Total inventory value: {format_money(analytics_service.total_revenue_cents(products))}",
        "",
        "PRODUCTS BY CLIENT:",
    ]
    for c in analytics_service.client_ranking(products, limit=None):
        lines.append(
            f"- {c['client_name']}: {c['orders']} orders, "
            f"{c['completed_quantity']}/{c['total_quantity']} pieces, {format_money(c['total_value_cents'])}"
        )

    lines.extend(["", "MOST REQUESTED PRODUCT TYPES:"])
    for row in analytics_service.product_type_ranking(products, limit=None):
        lines.append(f"- {row['product_type']}: {row['total_quantity']} units")

    return "\n".join(lines) + "\n"


def monthly_report_text(
    year: int,
    month: int,
    rows: list[dict],
    products: list[dict],
    *,
    company: str,
) -> str:
    """
    Monthly report from archived rows. A month without history falls back to
    a summary of the current live orders.
    """
    header = [f"=== MONTHLY REPORT {month}/{year} ===", company, ""]

    if not rows:
        lines = header + [
            "CURRENT DATA (NO ARCHIVED HISTORY):",
            f"Value of current orders: {format_money(analytics_service.total_revenue_cents(products))}",
            f"Pieces in process: {analytics_service.completed_quantity(products)}/{analytics_service.total_quantity(products)}",
            f"Active orders: {len(products)}",
            f"Active clients: {len({p['client_name'] for p in products})}",
            "",
            f"NOTE: no completed sales were archived for {month}/{year};",
            "this report shows the live orders instead.",
            "",
            "CURRENT ORDERS BY CLIENT:",
        ]
        for p in products:
            lines.append(
                f"- {p['client_name']}: {p['product_type']} - "
                f"{p['quantity_completed']}/{p['quantity']} completed - "
                f"{format_money(analytics_service.order_value_cents(p))}"
            )
        return "\n".join(lines) + "\n"

    summary = analytics_service.history_summary(rows)
    lines = header + [
        "FINANCIAL SUMMARY:",
        f"Total income: {format_money(summary['total_income_cents'])}",
        f"Pieces completed: {summary['pieces_completed']}",
        f"Clients served: {summary['clients_served']}",
        f"Average ticket: {format_money(summary['average_ticket_cents'])}",
        "",
        "MONTH ACTIVITY:",
        f"Completed orders: {summary['completed_orders']}",
        f"Deleted orders: {summary['deleted_orders']}",
        f"Total processed: {summary['total_processed']}",
        "",
        "SALES BY CLIENT:",
    ]
    if summary["sales_by_client"]:
        for c in summary["sales_by_client"]:
            lines.append(
                f"- {c['client_name']}: {format_money(c['total_value_cents'])} "
                f"({c['quantity']} pieces, {c['orders']} orders)"
            )
    else:
        lines.append("No client data")

    lines.extend(["", "BEST SELLING PRODUCTS:"])
    if summary["best_sellers"]:
        for row in summary["best_sellers"]:
            lines.append(f"- {row['product_type']}: {row['quantity']} units")
    else:
        lines.append("No completed products")

    lines.extend(["", f"Generated: {to_utc_z(utcnow())}"])
    return "\n".join(lines) + "\n"


class _ReportPDF(FPDF):
    def __init__(self, title: str):
        super().__init__()
        self.report_title = title

    def header(self):
        self.set_font("Helvetica", "B", 15)
        self.cell(0, 10, self.report_title, border=1, align="C")
        self.ln(20)


def inventory_report_pdf(products: list[dict], *, company: str) -> bytes:
    """The plain-text inventory report laid out on PDF pages."""
    content = inventory_report_text(products, company=company)
    # Core PDF fonts are latin-1 only
    content = content.encode("latin-1", "replace").decode("latin-1")

    pdf = _ReportPDF(title=company.encode("latin-1", "replace").decode("latin-1"))
    pdf.add_page()
    pdf.set_font("Helvetica", size=11)
    pdf.multi_cell(0, 7, content)
    return bytes(pdf.output())
