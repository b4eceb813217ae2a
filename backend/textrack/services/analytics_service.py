# Overview: Pure aggregations over product and history snapshots for dashboards and reports.

from __future__ import annotations

from datetime import date
from typing import Iterable

from ..models import STATUS_LABELS, STATUS_LABELS_ES
from ..time_utils import days_until, parse_iso_date, today as current_date
"""
Aggregation rules (authoritative)

- Inputs are product dicts (Product.to_dict()) or history dicts
  (ArchivedSale.to_dict()). Nothing here touches the database.
- Live-set value is price_cents * quantity (ordered value). History value is
  total_value_cents (price_cents * quantity_completed at archival).
- Every function is total on empty input: zero, 0.0 or [] and never a
  division error.
- Integer averages of cents and days use half-up rounding.
"""


def _div_half_up(total: int, count: int) -> int:
    if count <= 0:
        return 0
    return (total + (count // 2)) // count


def _pct(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100.0, 2)


def _due_date(p: dict) -> date | None:
    value = p.get("due_date")
    if value is None or isinstance(value, date):
        return value
    return parse_iso_date(value)


def order_value_cents(p: dict) -> int:
    return p["price_cents"] * p["quantity"]


def status_label(status: str | None) -> str:
    return STATUS_LABELS.get(status or "", STATUS_LABELS["pending"])


# =============================================================================
# LIVE SET TOTALS
# =============================================================================


def total_revenue_cents(products: Iterable[dict]) -> int:
    return sum(order_value_cents(p) for p in products)


def total_quantity(products: Iterable[dict]) -> int:
    return sum(p["quantity"] for p in products)


def completed_quantity(products: Iterable[dict]) -> int:
    return sum(p["quantity_completed"] for p in products)


def completion_percentage(products: list[dict]) -> float:
    """Units completed over units ordered, as a percentage. 0.0 for an empty set."""
    return _pct(completed_quantity(products), total_quantity(products))


def average_days_to_due(products: list[dict], *, today: date | None = None) -> int:
    """
    Mean days left until due, overdue orders counting as 0.
    """
    as_of = today or current_date()
    days = []
    for p in products:
        due = _due_date(p)
        if due is None:
            continue
        days.append(max(0, days_until(due, as_of=as_of)))
    return _div_half_up(sum(days), len(days))


def average_ticket_cents(products: list[dict]) -> int:
    return _div_half_up(total_revenue_cents(products), len(products))


def status_counts(products: Iterable[dict]) -> dict:
    counts = {status: 0 for status in STATUS_LABELS}
    for p in products:
        counts[p["status"]] = counts.get(p["status"], 0) + 1
    return counts


def production_status(products: list[dict], *, today: date | None = None, due_soon_days: int = 7) -> dict:
    """
    Dashboard production card: in-process, due-soon and priority counts.

    - in process: not completed and at least one unit made
    - due soon: not completed and due within [0, due_soon_days] days
    """
    as_of = today or current_date()
    in_process = 0
    due_soon = 0
    priority = 0
    pending_units = 0
    priority_units = 0
    for p in products:
        open_order = p["status"] != "completed"
        if open_order and p["quantity_completed"] > 0:
            in_process += 1
        due = _due_date(p)
        if open_order and due is not None and 0 <= days_until(due, as_of=as_of) <= due_soon_days:
            due_soon += 1
        remaining = p["quantity"] - p["quantity_completed"]
        if p["status"] == "priority":
            priority += 1
            priority_units += remaining
        elif p["status"] == "pending":
            pending_units += remaining

    return {
        "completion_percentage": completion_percentage(products),
        "in_process_count": in_process,
        "due_soon_count": due_soon,
        "priority_count": priority,
        "pending_units": pending_units,
        "priority_units": priority_units,
        "completed_units": completed_quantity(products),
        "total_units": total_quantity(products),
    }


# =============================================================================
# RANKINGS
# =============================================================================


def client_ranking(products: Iterable[dict], *, limit: int | None = 5) -> list[dict]:
    """Clients by ordered value, highest first."""
    stats: dict[str, dict] = {}
    for p in products:
        row = stats.setdefault(
            p["client_name"],
            {"client_name": p["client_name"], "orders": 0, "total_value_cents": 0, "total_quantity": 0, "completed_quantity": 0},
        )
        row["orders"] += 1
        row["total_value_cents"] += order_value_cents(p)
        row["total_quantity"] += p["quantity"]
        row["completed_quantity"] += p["quantity_completed"]

    ranked = sorted(stats.values(), key=lambda r: r["total_value_cents"], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    for rank, row in enumerate(ranked, start=1):
        row["rank"] = rank
    return ranked


def product_type_ranking(products: Iterable[dict], *, limit: int | None = 5) -> list[dict]:
    """
    Product types by ordered quantity, highest first, with average unit price
    (total value / total quantity) and completion rate.
    """
    stats: dict[str, dict] = {}
    clients: dict[str, set] = {}
    for p in products:
        row = stats.setdefault(
            p["product_type"],
            {
                "product_type": p["product_type"],
                "orders": 0,
                "total_quantity": 0,
                "completed_quantity": 0,
                "pending_quantity": 0,
                "total_value_cents": 0,
            },
        )
        row["orders"] += 1
        row["total_quantity"] += p["quantity"]
        row["completed_quantity"] += p["quantity_completed"]
        row["pending_quantity"] += p["quantity"] - p["quantity_completed"]
        row["total_value_cents"] += order_value_cents(p)
        clients.setdefault(p["product_type"], set()).add(p["client_name"])

    for product_type, row in stats.items():
        row["average_price_cents"] = _div_half_up(row["total_value_cents"], row["total_quantity"])
        row["completion_rate"] = _pct(row["completed_quantity"], row["total_quantity"])
        row["unique_clients"] = len(clients[product_type])
        row["client_list"] = ", ".join(sorted(clients[product_type]))

    ranked = sorted(stats.values(), key=lambda r: r["total_quantity"], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    for rank, row in enumerate(ranked, start=1):
        row["rank"] = rank
    return ranked


def dashboard_summary(products: list[dict], *, today: date | None = None, due_soon_days: int = 7) -> dict:
    clients = client_ranking(products)
    product_types = product_type_ranking(products)
    return {
        "total_orders": len(products),
        "total_revenue_cents": total_revenue_cents(products),
        "completion_percentage": completion_percentage(products),
        "average_days_to_due": average_days_to_due(products, today=today),
        "average_ticket_cents": average_ticket_cents(products),
        "status_counts": status_counts(products),
        "production": production_status(products, today=today, due_soon_days=due_soon_days),
        "top_client": clients[0] if clients else None,
        "client_ranking": clients,
        "top_product_type": product_types[0]["product_type"] if product_types else None,
        "product_type_ranking": product_types,
    }


# =============================================================================
# FILTERING
# =============================================================================


def matches(p: dict, term: str) -> bool:
    needle = term.lower()
    haystack = (
        p.get("client_name") or "",
        p.get("product_type") or "",
        status_label(p.get("status")),
        STATUS_LABELS_ES.get(p.get("status") or "", STATUS_LABELS_ES["pending"]),
        p.get("color") or "",
        p.get("size") or "",
    )
    return any(needle in field.lower() for field in haystack)


def filter_products(products: list[dict], term: str | None) -> list[dict]:
    """
    Case-insensitive substring search over client, product type, status
    label (English or Spanish), color and size. A blank term returns every
    product.
    """
    term = (term or "").strip()
    if not term:
        return list(products)
    return [p for p in products if matches(p, term)]


# =============================================================================
# HISTORY
# =============================================================================


def history_summary(rows: list[dict]) -> dict:
    """
    Totals over archived rows (a month or any other window).

    Best sellers only count completed orders; per-client sales count both.
    """
    income = sum(r.get("total_value_cents") or 0 for r in rows)
    pieces = sum(r.get("quantity_completed") or 0 for r in rows)

    per_client: dict[str, dict] = {}
    best_sellers: dict[str, int] = {}
    for r in rows:
        c = per_client.setdefault(
            r["client_name"],
            {"client_name": r["client_name"], "total_value_cents": 0, "quantity": 0, "orders": 0},
        )
        c["total_value_cents"] += r.get("total_value_cents") or 0
        c["quantity"] += r.get("quantity_completed") or 0
        c["orders"] += 1
        if r.get("action") == "completed":
            best_sellers[r["product_type"]] = best_sellers.get(r["product_type"], 0) + (r.get("quantity_completed") or 0)

    clients = sorted(per_client.values(), key=lambda c: c["total_value_cents"], reverse=True)
    products = [
        {"product_type": product_type, "quantity": qty}
        for product_type, qty in sorted(best_sellers.items(), key=lambda item: item[1], reverse=True)
    ]

    return {
        "total_income_cents": income,
        "pieces_completed": pieces,
        "clients_served": len(per_client),
        "average_ticket_cents": _div_half_up(income, len(per_client)),
        "completed_orders": sum(1 for r in rows if r.get("action") == "completed"),
        "deleted_orders": sum(1 for r in rows if r.get("action") == "deleted"),
        "total_processed": len(rows),
        "sales_by_client": clients,
        "best_sellers": products,
    }
