"""
Pytest fixtures for Cat Coin backend tests.

Provides an in-memory database per session, a per-test clean slate, the
Flask test client, and catalog fixtures.
"""

from datetime import datetime

import pytest
from catcoin import create_app
from catcoin.extensions import db
from catcoin.models import Product
from catcoin.services import checkout_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'TAX_RATE': '0.08',
        'ENFORCE_STOCK_CHECK': True,
        'TREATS_RULE': 'floor_total',
        'LOW_STOCK_THRESHOLD': 10,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        db.session.rollback()
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        # Config tweaks made by a test do not leak into the next one
        saved = {k: app.config[k] for k in ('TAX_RATE', 'ENFORCE_STOCK_CHECK', 'TREATS_RULE')}

        yield db.session

        # Cleanup after test
        db.session.rollback()
        app.config.update(saved)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(name="Milk Tea", price_cents=550, stock=40, ...)."""
    def _make(name="Test Product", price_cents=100, stock=10, category="Misc", emoji="📦"):
        product = Product(name=name, price_cents=price_cents, stock=stock, category=category, emoji=emoji)
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def latte(make_product):
    """Catnip Latte at 4.50 with 5 in stock."""
    return make_product(name="Catnip Latte", price_cents=450, stock=5, category="Drinks", emoji="☕")


@pytest.fixture(scope='function')
def frozen_clock(monkeypatch):
    """
    Pin the commit timestamp: frozen_clock.set(datetime(...)).
    """
    class _Clock:
        now = datetime(2026, 3, 14, 12, 0, 0)

        def set(self, value: datetime):
            self.now = value

    clock = _Clock()
    monkeypatch.setattr(checkout_service, "utcnow", lambda: clock.now)
    return clock


@pytest.fixture(scope='function')
def cart_line():
    """Cart item in the register's wire shape: cart_line(product, qty, price=None)."""
    def _line(product, quantity, price=None):
        return {
            "id": product.id,
            "price": price if price is not None else product.price_cents / 100,
            "quantity": quantity,
        }
    return _line
