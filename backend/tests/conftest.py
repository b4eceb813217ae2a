# Overview: Pytest fixtures and shared test setup.

"""
Pytest fixtures for textrack backend tests.

Provides the application on an in-memory database, a per-test table wipe,
the Flask test client, and product/history factories.
"""

from datetime import date, datetime

import pytest
from textrack import create_app
from textrack.extensions import db
from textrack.models import ArchivedSale
from textrack.services import products_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'COMPANY_NAME': 'Test Textiles',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    # Cleanup after test
    db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: create a live product through the service layer."""
    def _make(**overrides) -> dict:
        patch = {
            "client_name": "Colegio San José",
            "product_type": "Camiseta",
            "quantity": 10,
            "size": "M",
            "color": "Azul",
            "status": "pending",
            "due_date": date(2030, 1, 15),
            "price_cents": 500,
            "notes": "",
        }
        patch.update(overrides)
        return products_service.create_product(patch=patch)
    return _make


@pytest.fixture(scope='function')
def make_archived(db_session):
    """Factory: insert a history row directly with a chosen archived_at."""
    counter = {"next_id": 9000}

    def _make(*, archived_at: datetime, **overrides) -> ArchivedSale:
        counter["next_id"] += 1
        fields = {
            "original_product_id": counter["next_id"],
            "client_name": "Cliente",
            "product_type": "Camiseta",
            "quantity": 10,
            "quantity_completed": 10,
            "price_cents": 500,
            "total_value_cents": 5000,
            "due_date": date(2030, 1, 15),
            "completed_date": archived_at.date(),
            "action": "completed",
            "archived_at": archived_at,
        }
        fields.update(overrides)
        row = ArchivedSale(**fields)
        db_session.add(row)
        db_session.commit()
        return row
    return _make
