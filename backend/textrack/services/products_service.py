# backend/textrack/services/products_service.py
"""
Products Service (data access for the live order table)

FAILURE POLICY:
- Reads (list_products, list_progress_events) log and degrade to [].
- Writes roll back the session and re-raise to the caller.

Progress writes the product and its ProgressEvent in one DB transaction,
so a product is never left updated but unlogged.
"""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, ProgressEvent
from ..validation import ConflictError, ValidationError, enforce_rules_progress
from .concurrency import lock_for_update

PRODUCT_MUTABLE_FIELDS = {
    "client_name",
    "product_type",
    "quantity",
    "size",
    "color",
    "status",
    "due_date",
    "price_cents",
    "notes",
}

SIZE_UNSPECIFIED = "No especificada"
COLOR_UNSPECIFIED = "No especificado"


class ProductNotFoundError(LookupError):
    """Raised when a product id is not in the live table."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


@dataclass(frozen=True)
class ProgressResult:
    """
    Outcome of a progress addition. Archival is the caller's decision:
    is_complete only reports that nothing remains.
    """
    product: dict
    quantity_added: int
    quantity_before: int
    quantity_after: int

    @property
    def is_complete(self) -> bool:
        return self.quantity_after >= self.product["quantity"]


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _apply_text_defaults(p: Product) -> None:
    if not p.size:
        p.size = SIZE_UNSPECIFIED
    if not p.color:
        p.color = COLOR_UNSPECIFIED
    if p.notes is None:
        p.notes = ""


def _derive_status(p: Product) -> None:
    if p.quantity_completed >= p.quantity:
        p.status = "completed"
    elif p.status == "completed":
        # Quantity was raised above what is already made
        p.status = "pending"


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise


def list_products() -> list[dict]:
    """
    All live products, newest first.

    Returns [] when the store cannot be read; the failure is logged.
    """
    try:
        products = (
            db.session.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to list products")
        return []
    return [p.to_dict() for p in products]


def get_product(product_id: int) -> dict | None:
    p = db.session.get(Product, product_id)
    return p.to_dict() if p else None


def create_product(*, patch: dict) -> dict:
    """
    Create a product from a validated patch dict.

    quantity_completed always starts at 0 regardless of input.
    """
    p = Product(status="pending", price_cents=0)
    apply_product_patch(p, patch)
    p.quantity_completed = 0
    _apply_text_defaults(p)

    db.session.add(p)
    _commit("create product")
    current_app.logger.info("Created product id=%s client=%r", p.id, p.client_name)
    return p.to_dict()


def update_product(*, product_id: int, patch: dict, expected_version: int | None = None) -> dict | None:
    """
    Update the editable fields of a product.

    Args:
        product_id: Product ID to update
        patch: Validated fields to update
        expected_version: version_id the client last saw; rejects stale edits

    Returns:
        Updated product dict, or None if not found

    Raises:
        ValidationError: If quantity would drop below quantity_completed
        ConflictError: If expected_version does not match
    """
    p = db.session.get(Product, product_id)
    if not p:
        return None

    if expected_version is not None and expected_version != p.version_id:
        raise ConflictError("Product was modified by another request. Reload and try again.")

    new_quantity = patch.get("quantity", p.quantity)
    if new_quantity < p.quantity_completed:
        raise ValidationError(
            f"quantity cannot be less than the {p.quantity_completed} units already completed"
        )

    apply_product_patch(p, patch)
    _apply_text_defaults(p)
    _derive_status(p)

    _commit("update product")
    return p.to_dict()


def delete_product(*, product_id: int) -> bool:
    """
    Hard-delete a product row.

    Returns:
        True if deleted, False if not found
    """
    p = db.session.get(Product, product_id)
    if not p:
        return False

    db.session.delete(p)
    _commit("delete product")
    return True


def add_progress(*, product_id: int, quantity: int, notes: str = "") -> ProgressResult:
    """
    Add finished units to a product.

    The row is locked, the quantity re-checked against what actually remains,
    and both the product update and its ProgressEvent are committed together.

    Raises:
        ProductNotFoundError: If the product is not live
        ValidationError: If quantity is not in 1..remaining
    """
    query = lock_for_update(db.session.query(Product).filter_by(id=product_id))
    p = query.first()
    if p is None:
        db.session.rollback()
        raise ProductNotFoundError(product_id)

    try:
        qty = enforce_rules_progress(quantity, remaining=p.remaining)
    except ValidationError:
        db.session.rollback()
        raise

    before = p.quantity_completed
    after = before + qty

    p.quantity_completed = after
    p.status = "completed" if after >= p.quantity else p.status

    db.session.add(
        ProgressEvent(
            product_id=p.id,
            quantity_added=qty,
            quantity_before=before,
            quantity_after=after,
            notes=notes or "",
        )
    )
    _commit("add progress")

    return ProgressResult(
        product=p.to_dict(),
        quantity_added=qty,
        quantity_before=before,
        quantity_after=after,
    )


def list_progress_events(product_id: int) -> list[dict]:
    """Audit trail for one product id, newest first. Degrades to [] on read failure."""
    try:
        events = (
            db.session.query(ProgressEvent)
            .filter(ProgressEvent.product_id == product_id)
            .order_by(ProgressEvent.created_at.desc(), ProgressEvent.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to list progress events for product %s", product_id)
        return []
    return [e.to_dict() for e in events]
