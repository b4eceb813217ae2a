# Overview: Pytest coverage for product lifecycle transitions.

"""
Product lifecycle tests.

Verifies:
- progress is validated against the snapshot before any store call
- completing a product archives it with action "completed"
- deleting archives with action "deleted" and keeps completed units
- a failed auto-archive is recoverable through complete_product
"""

import pytest

from textrack.models import ArchivedSale, Product, ProgressEvent
from textrack.services import history_service, lifecycle_service, products_service
from textrack.services.lifecycle_service import InventoryState
from textrack.services.products_service import ProductNotFoundError
from textrack.validation import ValidationError


def _live_ids(state: InventoryState) -> set:
    return {p["id"] for p in state.products}


class TestInventoryState:

    def test_load_and_find(self, make_product):
        product = make_product()

        state = InventoryState.load()

        assert state.find(product["id"])["client_name"] == product["client_name"]
        assert state.find(999) is None
        assert state.loaded_at is not None

    def test_require_missing_raises(self, db_session):
        with pytest.raises(ProductNotFoundError):
            InventoryState.load().require(1)

    def test_snapshot_is_not_patched_by_writes(self, make_product):
        product = make_product(quantity=10)
        before = InventoryState.load()

        result = lifecycle_service.record_progress(before, product["id"], 3)

        assert before.find(product["id"])["quantity_completed"] == 0
        assert result.state.find(product["id"])["quantity_completed"] == 3

    def test_add_and_edit_return_reloaded_state(self, db_session):
        from datetime import date

        added = lifecycle_service.add_product(InventoryState(), {
            "client_name": "Club Deportivo",
            "product_type": "Sudadera",
            "quantity": 5,
            "due_date": date(2030, 6, 1),
        })
        assert _live_ids(added.state) == {added.product["id"]}

        edited = lifecycle_service.edit_product(added.state, added.product["id"], {"status": "priority"})
        assert edited.state.find(added.product["id"])["status"] == "priority"

    def test_edit_missing_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            lifecycle_service.edit_product(InventoryState(), 77, {"status": "priority"})


class TestRecordProgress:

    def test_scenario_partial_then_complete(self, make_product, db_session):
        product = make_product(quantity=10, price_cents=5)
        state = InventoryState.load()

        first = lifecycle_service.record_progress(state, product["id"], 4)

        assert first.archived is None
        assert first.product["quantity_completed"] == 4
        assert first.product["status"] == "pending"
        event = db_session.query(ProgressEvent).filter_by(product_id=product["id"]).one()
        assert (event.quantity_before, event.quantity_after) == (0, 4)

        second = lifecycle_service.record_progress(first.state, product["id"], 6)

        assert second.progress.is_complete is True
        assert second.product["status"] == "completed"
        assert second.archived["action"] == "completed"
        assert second.archived["total_value_cents"] == 50
        assert second.archived["completed_date"] is not None
        assert product["id"] not in _live_ids(second.state)
        assert db_session.get(Product, product["id"]) is None

    @pytest.mark.parametrize("quantity", [0, -3, 7, None, "x"])
    def test_invalid_quantity_rejected_before_store_call(self, make_product, monkeypatch, quantity):
        product = make_product(quantity=10)
        products_service.add_progress(product_id=product["id"], quantity=4)
        state = InventoryState.load()

        def must_not_run(**kwargs):
            raise AssertionError("store must not be called")

        monkeypatch.setattr(products_service, "add_progress", must_not_run)

        with pytest.raises(ValidationError):
            lifecycle_service.record_progress(state, product["id"], quantity)

    def test_quantity_stays_within_bounds(self, make_product):
        product = make_product(quantity=5)
        state = InventoryState.load()

        for _ in range(4):
            state = lifecycle_service.record_progress(state, product["id"], 1).state
            live = state.find(product["id"])
            assert 0 <= live["quantity_completed"] <= live["quantity"]

    def test_stale_snapshot_is_caught_by_store(self, make_product):
        product = make_product(quantity=10)
        stale = InventoryState.load()
        products_service.add_progress(product_id=product["id"], quantity=8)

        # Snapshot still says 10 remain; the locked row says 2.
        with pytest.raises(ValidationError):
            lifecycle_service.record_progress(stale, product["id"], 5)

    def test_unknown_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            lifecycle_service.record_progress(InventoryState.load(), 55, 1)

    def test_failed_auto_archive_is_recoverable(self, make_product, db_session, monkeypatch):
        product = make_product(quantity=3, price_cents=1000)
        state = InventoryState.load()

        def archive_fails(**kwargs):
            raise RuntimeError("history store unavailable")

        monkeypatch.setattr(history_service, "archive_product", archive_fails)
        with pytest.raises(RuntimeError):
            lifecycle_service.record_progress(state, product["id"], 3)
        monkeypatch.undo()

        stuck = InventoryState.load().find(product["id"])
        assert stuck["status"] == "completed"
        assert stuck["quantity_completed"] == 3

        result = lifecycle_service.complete_product(InventoryState.load(), product["id"])

        assert result.progress is None
        assert result.archived["total_value_cents"] == 3000
        assert db_session.query(ProgressEvent).filter_by(product_id=product["id"]).count() == 1
        assert product["id"] not in _live_ids(result.state)


class TestCompleteAndRemove:

    def test_complete_adds_remaining_then_archives(self, make_product, db_session):
        product = make_product(quantity=10, price_cents=200)
        products_service.add_progress(product_id=product["id"], quantity=3)

        result = lifecycle_service.complete_product(InventoryState.load(), product["id"])

        assert result.progress.quantity_added == 7
        assert result.archived["action"] == "completed"
        assert result.archived["quantity_completed"] == 10
        assert result.archived["total_value_cents"] == 2000
        events = products_service.list_progress_events(product["id"])
        assert events[0]["notes"] == lifecycle_service.COMPLETE_REMAINING_NOTE
        assert result.state.products == ()

    def test_remove_archives_as_deleted_keeping_progress(self, make_product, db_session):
        product = make_product(quantity=10, price_cents=500)
        products_service.add_progress(product_id=product["id"], quantity=4)

        result = lifecycle_service.remove_product(InventoryState.load(), product["id"])

        assert result.archived["action"] == "deleted"
        assert result.archived["quantity_completed"] == 4
        assert result.archived["total_value_cents"] == 2000
        assert result.archived["completed_date"] is None
        assert db_session.query(ArchivedSale).filter_by(original_product_id=product["id"]).count() == 1
        assert product["id"] not in _live_ids(result.state)

    def test_remove_unknown_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            lifecycle_service.remove_product(InventoryState.load(), 404)

    def test_result_serializes_for_api(self, make_product):
        product = make_product(quantity=2)

        payload = lifecycle_service.record_progress(InventoryState.load(), product["id"], 2).to_dict()

        assert payload["progress"] == {
            "quantity_added": 2,
            "quantity_before": 0,
            "quantity_after": 2,
            "is_complete": True,
        }
        assert payload["archived"]["original_product_id"] == product["id"]
        assert payload["products"] == []
