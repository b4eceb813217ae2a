# Overview: Product lifecycle orchestration over an explicit inventory snapshot.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app

from . import analytics_service, history_service, products_service
from .products_service import ProductNotFoundError, ProgressResult
from ..validation import enforce_rules_progress
from ..time_utils import today, utcnow
"""
Product lifecycle (authoritative)

    pending <-> priority   (manual, via edit)
        |
        v
    completed              (automatic once quantity_completed == quantity,
        |                   or manual via complete_product)
        v
    archived               (terminal; row moves to sales_history)

Every operation takes an InventoryState and returns a LifecycleResult whose
state is reloaded from the store after the write. Snapshots are never
patched in place.

Progress and archival are two phases. add_progress reports is_complete;
record_progress then archives explicitly. If that archive step fails the
product stays live with status "completed", and complete_product is the
retry: with nothing remaining it archives directly.
"""

COMPLETE_REMAINING_NOTE = "Completed remaining units"


@dataclass(frozen=True)
class InventoryState:
    """Point-in-time snapshot of the live product set."""
    products: tuple = ()
    loaded_at: datetime | None = None

    @classmethod
    def load(cls) -> "InventoryState":
        return cls(products=tuple(products_service.list_products()), loaded_at=utcnow())

    def refreshed(self) -> "InventoryState":
        return InventoryState.load()

    def find(self, product_id: int) -> dict | None:
        for p in self.products:
            if p["id"] == product_id:
                return p
        return None

    def require(self, product_id: int) -> dict:
        p = self.find(product_id)
        if p is None:
            raise ProductNotFoundError(product_id)
        return p

    def filtered(self, term: str | None) -> list[dict]:
        return analytics_service.filter_products(list(self.products), term)


@dataclass(frozen=True)
class LifecycleResult:
    state: InventoryState
    product: dict | None = None
    progress: ProgressResult | None = None
    archived: dict | None = None

    def to_dict(self) -> dict:
        out = {
            "product": self.product,
            "archived": self.archived,
            "products": list(self.state.products),
        }
        if self.progress is not None:
            out["progress"] = {
                "quantity_added": self.progress.quantity_added,
                "quantity_before": self.progress.quantity_before,
                "quantity_after": self.progress.quantity_after,
                "is_complete": self.progress.is_complete,
            }
        return out


def add_product(state: InventoryState, patch: dict) -> LifecycleResult:
    created = products_service.create_product(patch=patch)
    return LifecycleResult(state=state.refreshed(), product=created)


def edit_product(
    state: InventoryState,
    product_id: int,
    patch: dict,
    *,
    expected_version: int | None = None,
) -> LifecycleResult:
    updated = products_service.update_product(
        product_id=product_id,
        patch=patch,
        expected_version=expected_version,
    )
    if updated is None:
        raise ProductNotFoundError(product_id)
    return LifecycleResult(state=state.refreshed(), product=updated)


def record_progress(state: InventoryState, product_id: int, quantity, notes: str = "") -> LifecycleResult:
    """
    Add finished units, archiving the product when nothing remains.

    The quantity is validated against the snapshot before any store call.

    Raises:
        ProductNotFoundError: product not in the snapshot or no longer live
        ValidationError: quantity not a positive integer within what remains
    """
    product = state.require(product_id)
    qty = enforce_rules_progress(quantity, remaining=product["quantity"] - product["quantity_completed"])

    progress = products_service.add_progress(product_id=product_id, quantity=qty, notes=notes)

    archived = None
    if progress.is_complete:
        archived = history_service.archive_product(
            product_id=product_id,
            action="completed",
            completed_date=today(),
        )
        current_app.logger.info("Product %s fully progressed and archived", product_id)

    return LifecycleResult(
        state=state.refreshed(),
        product=progress.product,
        progress=progress,
        archived=archived,
    )


def complete_product(state: InventoryState, product_id: int) -> LifecycleResult:
    """
    Finish every remaining unit and archive as completed.

    Also the recovery path for a product left fully progressed but unarchived.
    """
    product = state.require(product_id)
    remaining = product["quantity"] - product["quantity_completed"]

    progress = None
    if remaining > 0:
        progress = products_service.add_progress(
            product_id=product_id,
            quantity=remaining,
            notes=COMPLETE_REMAINING_NOTE,
        )

    archived = history_service.archive_product(
        product_id=product_id,
        action="completed",
        completed_date=today(),
    )
    return LifecycleResult(
        state=state.refreshed(),
        product=progress.product if progress else product,
        progress=progress,
        archived=archived,
    )


def remove_product(state: InventoryState, product_id: int) -> LifecycleResult:
    """
    Delete from the live set by archiving with action "deleted".

    The snapshot keeps whatever quantity_completed the product had.
    """
    product = state.require(product_id)
    archived = history_service.archive_product(product_id=product_id, action="deleted")
    return LifecycleResult(state=state.refreshed(), product=product, archived=archived)
