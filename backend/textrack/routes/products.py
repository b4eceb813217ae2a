# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/textrack/routes/products.py
"""
Product lifecycle routes.

Every write reloads the inventory snapshot and returns it as "products",
so clients never patch their own list.
"""
from flask import Blueprint, current_app, request
from sqlalchemy.orm.exc import StaleDataError

from ..services import lifecycle_service, products_service
from ..services.lifecycle_service import InventoryState
from ..services.products_service import ProductNotFoundError
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "client_name",
        "product_type",
        "quantity",
        "size",
        "color",
        "status",
        "due_date",
        "price_cents",
        "notes",
    },
    required_on_create={"client_name", "product_type", "quantity", "due_date"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _not_found():
    return {"error": "Product not found"}, 404


@products_bp.get("")
def list_products():
    """
    List live products, newest first.

    Query params:
    - q: str (optional) - case-insensitive search over client, product type,
      status, color and size
    """
    state = InventoryState.load()
    items = state.filtered(request.args.get("q"))
    return {"items": items, "count": len(items), "total": len(state.products)}


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        result = lifecycle_service.add_product(InventoryState(), patch)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Failed to create product"}, 500

    return result.to_dict(), 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = products_service.get_product(product_id)
    if product is None:
        return _not_found()
    return product


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """
    Update a product.

    An optional "version_id" in the payload rejects the edit with 409 if the
    product changed since the client loaded it.
    """
    payload = dict(request.get_json(silent=True) or {})
    expected_version = payload.pop("version_id", None)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        if expected_version is not None and (isinstance(expected_version, bool) or not isinstance(expected_version, int)):
            raise ValidationError("version_id must be an integer")
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        result = lifecycle_service.edit_product(
            InventoryState(),
            product_id,
            patch,
            expected_version=expected_version,
        )
    except ProductNotFoundError:
        return _not_found()
    except ValidationError as e:
        return {"error": str(e)}, 400
    except (ConflictError, StaleDataError) as e:
        return {"error": str(e) or "Product was modified by another request"}, 409
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Failed to update product"}, 500

    return result.to_dict(), 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    """Delete a product by archiving it with action "deleted"."""
    try:
        result = lifecycle_service.remove_product(InventoryState.load(), product_id)
    except ProductNotFoundError:
        return _not_found()
    except StaleDataError:
        return {"error": "Product was modified by another request"}, 409
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Failed to delete product"}, 500

    return result.to_dict(), 200


@products_bp.post("/<int:product_id>/progress")
def add_progress_route(product_id: int):
    """
    Add finished units.

    Body: {"quantity": int, "notes": str (optional)}
    A product that reaches its ordered quantity is archived in the same call;
    the response carries the history row under "archived".
    """
    payload = request.get_json(silent=True) or {}
    notes = str(payload.get("notes") or "").strip()

    try:
        result = lifecycle_service.record_progress(
            InventoryState.load(),
            product_id,
            payload.get("quantity"),
            notes=notes,
        )
    except ProductNotFoundError:
        return _not_found()
    except ValidationError as e:
        return {"error": str(e)}, 400
    except StaleDataError:
        return {"error": "Product was modified by another request"}, 409
    except Exception:
        current_app.logger.exception("Failed to add progress")
        return {"error": "Failed to add progress"}, 500

    return result.to_dict(), 200


@products_bp.post("/<int:product_id>/complete")
def complete_product_route(product_id: int):
    """Complete all remaining units and archive the product."""
    try:
        result = lifecycle_service.complete_product(InventoryState.load(), product_id)
    except ProductNotFoundError:
        return _not_found()
    except StaleDataError:
        return {"error": "Product was modified by another request"}, 409
    except Exception:
        current_app.logger.exception("Failed to complete product")
        return {"error": "Failed to complete product"}, 500

    return result.to_dict(), 200


@products_bp.get("/<int:product_id>/progress")
def list_progress_route(product_id: int):
    events = products_service.list_progress_events(product_id)
    return {"items": events, "count": len(events)}
