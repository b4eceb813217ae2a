# Overview: Pytest coverage for dashboard aggregations and filtering.

"""
Aggregation and filtering tests. Pure functions, no database.
"""

from datetime import date

import pytest

from textrack.services import analytics_service


TODAY = date(2030, 1, 10)


def _product(**overrides) -> dict:
    p = {
        "id": 1,
        "client_name": "Colegio Andino",
        "product_type": "Camiseta",
        "quantity": 10,
        "quantity_completed": 0,
        "size": "M",
        "color": "Azul",
        "status": "pending",
        "due_date": "2030-01-20",
        "price_cents": 1000,
    }
    p.update(overrides)
    return p


@pytest.fixture
def products():
    return [
        _product(id=1, client_name="Colegio Andino", product_type="Camiseta", quantity=10, quantity_completed=5, price_cents=1000),
        _product(id=2, client_name="Club Norte", product_type="Sudadera", quantity=20, quantity_completed=0, price_cents=3000, status="priority", due_date="2030-01-12"),
        _product(id=3, client_name="Colegio Andino", product_type="Camiseta", quantity=30, quantity_completed=15, price_cents=800, due_date="2030-01-01"),
    ]


# =============================================================================
# EMPTY INPUT
# =============================================================================


class TestEmptySet:

    def test_totals_are_zero(self):
        assert analytics_service.total_revenue_cents([]) == 0
        assert analytics_service.completion_percentage([]) == 0.0
        assert analytics_service.average_days_to_due([], today=TODAY) == 0
        assert analytics_service.average_ticket_cents([]) == 0

    def test_rankings_are_empty(self):
        assert analytics_service.client_ranking([]) == []
        assert analytics_service.product_type_ranking([]) == []

    def test_dashboard_summary(self):
        summary = analytics_service.dashboard_summary([], today=TODAY)

        assert summary["total_orders"] == 0
        assert summary["top_client"] is None
        assert summary["top_product_type"] is None
        assert summary["production"]["completion_percentage"] == 0.0

    def test_history_summary(self):
        summary = analytics_service.history_summary([])

        assert summary["total_income_cents"] == 0
        assert summary["average_ticket_cents"] == 0
        assert summary["sales_by_client"] == []


# =============================================================================
# LIVE SET
# =============================================================================


class TestLiveSetAggregates:

    def test_total_revenue_is_price_times_ordered_quantity(self, products):
        assert analytics_service.total_revenue_cents(products) == 10 * 1000 + 20 * 3000 + 30 * 800

    def test_completion_percentage(self, products):
        # 20 of 60 units
        assert analytics_service.completion_percentage(products) == pytest.approx(33.33)

    def test_average_days_to_due_counts_overdue_as_zero(self, products):
        # 10, 2 and overdue(0) -> 12 / 3
        assert analytics_service.average_days_to_due(products, today=TODAY) == 4

    def test_average_days_rounds_half_up(self):
        items = [_product(due_date="2030-01-11"), _product(due_date="2030-01-12")]

        # (1 + 2) / 2 = 1.5
        assert analytics_service.average_days_to_due(items, today=TODAY) == 2

    def test_status_counts(self, products):
        assert analytics_service.status_counts(products) == {"pending": 2, "priority": 1, "completed": 0}

    def test_production_status(self, products):
        status = analytics_service.production_status(products, today=TODAY)

        assert status["in_process_count"] == 2
        assert status["due_soon_count"] == 1
        assert status["priority_count"] == 1
        assert status["priority_units"] == 20

    def test_client_ranking_by_value(self, products):
        ranking = analytics_service.client_ranking(products)

        assert [r["client_name"] for r in ranking] == ["Club Norte", "Colegio Andino"]
        assert ranking[0]["total_value_cents"] == 60000
        assert ranking[1]["orders"] == 2
        assert ranking[1]["total_quantity"] == 40
        assert ranking[0]["rank"] == 1

    def test_client_ranking_limit(self):
        items = [_product(id=i, client_name=f"Client {i}", price_cents=i) for i in range(1, 8)]

        ranking = analytics_service.client_ranking(items, limit=5)

        assert len(ranking) == 5
        assert ranking[0]["client_name"] == "Client 7"

    def test_product_type_ranking_by_quantity(self, products):
        ranking = analytics_service.product_type_ranking(products)

        camiseta, sudadera = ranking
        assert camiseta["product_type"] == "Camiseta"
        assert camiseta["total_quantity"] == 40
        assert camiseta["completed_quantity"] == 20
        assert camiseta["pending_quantity"] == 20
        assert camiseta["completion_rate"] == 50.0
        # (10*1000 + 30*800) / 40 = 850
        assert camiseta["average_price_cents"] == 850
        assert camiseta["unique_clients"] == 1
        assert sudadera["completion_rate"] == 0.0

    def test_average_ticket(self, products):
        assert analytics_service.average_ticket_cents(products) == (10000 + 60000 + 24000) // 3


# =============================================================================
# FILTERING
# =============================================================================


class TestFilterProducts:

    def test_color_matches_case_insensitively(self):
        rojo = _product(id=1, color="Rojo", product_type="Gorra")
        azul = _product(id=2, color="Azul", product_type="Camiseta")

        assert analytics_service.filter_products([rojo, azul], "rojo") == [rojo]

    @pytest.mark.parametrize(
        "term,expected_ids",
        [
            ("andino", [1]),
            ("SUDADERA", [2]),
            ("priority", [2]),
            ("pend", [1]),
            ("xl", [2]),
            ("nothing", []),
        ],
    )
    def test_searches_client_type_status_size(self, term, expected_ids):
        items = [
            _product(id=1, client_name="Colegio Andino", product_type="Camiseta", size="M"),
            _product(id=2, client_name="Club Norte", product_type="Sudadera", size="XL", status="priority"),
        ]

        assert [p["id"] for p in analytics_service.filter_products(items, term)] == expected_ids

    @pytest.mark.parametrize(
        "term,expected_ids",
        [
            ("pendiente", [1]),
            ("PRIORITARIO", [2]),
            ("completado", [3]),
        ],
    )
    def test_spanish_status_labels_match(self, term, expected_ids):
        items = [
            _product(id=1, status="pending"),
            _product(id=2, status="priority"),
            _product(id=3, status="completed", quantity_completed=10),
        ]

        assert [p["id"] for p in analytics_service.filter_products(items, term)] == expected_ids

    def test_blank_term_returns_everything(self, products):
        assert analytics_service.filter_products(products, "  ") == products
        assert analytics_service.filter_products(products, None) == products


# =============================================================================
# HISTORY
# =============================================================================


class TestHistorySummary:

    def test_totals_and_best_sellers(self):
        rows = [
            {"client_name": "A", "product_type": "Camiseta", "quantity_completed": 10, "total_value_cents": 5000, "action": "completed"},
            {"client_name": "B", "product_type": "Gorra", "quantity_completed": 4, "total_value_cents": 8000, "action": "completed"},
            {"client_name": "A", "product_type": "Gorra", "quantity_completed": 2, "total_value_cents": 1000, "action": "deleted"},
        ]

        summary = analytics_service.history_summary(rows)

        assert summary["total_income_cents"] == 14000
        assert summary["pieces_completed"] == 16
        assert summary["clients_served"] == 2
        assert summary["average_ticket_cents"] == 7000
        assert summary["completed_orders"] == 2
        assert summary["deleted_orders"] == 1
        assert [c["client_name"] for c in summary["sales_by_client"]] == ["B", "A"]
        # Deleted rows do not count as sold
        assert summary["best_sellers"] == [
            {"product_type": "Camiseta", "quantity": 10},
            {"product_type": "Gorra", "quantity": 4},
        ]
