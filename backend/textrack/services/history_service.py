# Overview: Service-layer operations for the sales history; archival and history reads.

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ArchivedSale, Product, ARCHIVE_ACTIONS
from ..validation import ValidationError
from ..time_utils import month_bounds, today, utcnow
from .concurrency import lock_for_update
from .products_service import ProductNotFoundError
"""
Archival Invariants (authoritative)

- Archival moves a product out of the live table: the history insert and the
  live delete are flushed in one DB transaction and committed together.
  A failure rolls back both, so there is never a duplicate (row in both
  tables) nor an orphan (row in neither).
- Archival is idempotent per product id. sales_history.original_product_id is
  unique; calling archive again after a successful archive returns the
  existing history row.
- total_value_cents = price_cents * quantity_completed at archival time.
- History rows are never updated. The only delete path is clear_all_history().
"""

MAX_HISTORY_LIMIT = 500


def _snapshot(p: Product, *, action: str, completed_date: date | None) -> ArchivedSale:
    return ArchivedSale(
        original_product_id=p.id,
        client_name=p.client_name,
        product_type=p.product_type,
        size=p.size,
        color=p.color,
        notes=p.notes,
        status=p.status,
        quantity=p.quantity,
        quantity_completed=p.quantity_completed,
        price_cents=p.price_cents,
        total_value_cents=p.price_cents * p.quantity_completed,
        due_date=p.due_date,
        completed_date=completed_date,
        action=action,
        archived_at=utcnow(),
    )


def get_archived_sale(product_id: int) -> dict | None:
    row = db.session.query(ArchivedSale).filter_by(original_product_id=product_id).first()
    return row.to_dict() if row else None


def archive_product(*, product_id: int, action: str, completed_date: date | None = None) -> dict:
    """
    Move a live product into the sales history.

    Args:
        product_id: Live product ID
        action: "completed" or "deleted"
        completed_date: Defaults to today for "completed"; ignored for "deleted"

    Returns:
        The history row as a dict (the existing one on a repeated call)

    Raises:
        ValidationError: Unknown action
        ProductNotFoundError: Neither a live product nor a history row exists
    """
    if action not in ARCHIVE_ACTIONS:
        raise ValidationError(f"action must be one of: {', '.join(ARCHIVE_ACTIONS)}")

    p = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if p is None:
        db.session.rollback()
        existing = get_archived_sale(product_id)
        if existing is not None:
            return existing
        raise ProductNotFoundError(product_id)

    if action == "completed":
        completed_date = completed_date or today()
    else:
        completed_date = None

    row = _snapshot(p, action=action, completed_date=completed_date)
    try:
        db.session.add(row)
        db.session.delete(p)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to archive product %s (%s)", product_id, action)
        raise

    current_app.logger.info(
        "Archived product id=%s action=%s client=%r total_value_cents=%s",
        product_id, action, row.client_name, row.total_value_cents,
    )
    return row.to_dict()


def list_sales_history(limit: int | None = None) -> list[dict]:
    """
    Most recent history rows by archived_at, newest first.

    Returns [] when the store cannot be read; the failure is logged.
    """
    if limit is None:
        limit = current_app.config.get("SALES_HISTORY_DEFAULT_LIMIT", 50)
    limit = max(1, min(limit, MAX_HISTORY_LIMIT))

    try:
        rows = (
            db.session.query(ArchivedSale)
            .order_by(ArchivedSale.archived_at.desc(), ArchivedSale.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to load sales history")
        return []
    return [r.to_dict() for r in rows]


def monthly_report(year: int, month: int) -> list[dict]:
    """
    History rows archived in [year-month-01, next-month-01), newest first.

    Raises:
        ValidationError: month outside 1..12

    Returns [] when the month is empty or the store cannot be read.
    """
    try:
        start, end = month_bounds(year, month)
    except ValueError as exc:
        raise ValidationError(str(exc))

    try:
        rows = (
            db.session.query(ArchivedSale)
            .filter(ArchivedSale.archived_at >= start, ArchivedSale.archived_at < end)
            .order_by(ArchivedSale.archived_at.desc(), ArchivedSale.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to load monthly report for %s-%02d", year, month)
        return []
    return [r.to_dict() for r in rows]


def clear_all_history() -> int:
    """Delete every history row. Returns how many were removed."""
    try:
        deleted = db.session.query(ArchivedSale).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to clear sales history")
        raise

    current_app.logger.info("Cleared sales history (%s rows)", deleted)
    return deleted
