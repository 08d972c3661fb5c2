"""
Pytest configuration and fixtures for the marketplace tests
"""
import os

# Logging is configured on first import; keep test runs off the log files
os.environ.setdefault('LOG_TO_FILE', 'False')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from decimal import Decimal

import pytest
from flask import g, has_app_context
from flask.testing import FlaskClient

from marketplace import create_app
from marketplace import db as _db
from marketplace.buisness.carts.cart_store import CartStore
from marketplace.data.catalog.inventory_item import InventoryItem

VENDOR_ID = 201
OTHER_VENDOR_ID = 202
SUPPLIER_ID = 101
OTHER_SUPPLIER_ID = 102
PARTNER_ID = 301
ADMIN_ID = 1


class IdentityHeaderClient(FlaskClient):
    """
    Test client that resolves the principal from each request's headers.

    The app fixture holds one app context for the whole test and Flask reuses it
    for every client request, so the user Flask-Login caches on ``g`` has to be
    dropped around each request.
    """

    def open(self, *args, **kwargs):
        self._forget_principal()
        try:
            return super().open(*args, **kwargs)
        finally:
            self._forget_principal()

    @staticmethod
    def _forget_principal():
        if has_app_context():
            g.pop('_login_user', None)


def build_test_app(database_uri='sqlite:///:memory:'):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': database_uri,
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
        'RATELIMIT_ENABLED': False,
    })
    app.test_client_class = IdentityHeaderClient
    return app


@pytest.fixture(scope='function')
def app():
    """Create Flask application with a fresh in-memory database"""
    app = build_test_app()
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def db(app):
    return _db


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


def auth_headers(user_id, role):
    """Headers the upstream identity provider would forward"""
    return {'X-User-Id': str(user_id), 'X-User-Role': role}


@pytest.fixture
def vendor_headers():
    return auth_headers(VENDOR_ID, 'vendor')


@pytest.fixture
def supplier_headers():
    return auth_headers(SUPPLIER_ID, 'supplier')


@pytest.fixture
def partner_headers():
    return auth_headers(PARTNER_ID, 'delivery_partner')


@pytest.fixture
def make_item(db):
    """Factory for committed catalog items"""
    def _make_item(name='Basmati Rice 25kg', price='100.00', quantity=10, supplier_id=SUPPLIER_ID):
        item = InventoryItem(
            supplier_id=supplier_id,
            name=name,
            price=Decimal(str(price)),
            quantity_available=quantity,
            out_of_stock=quantity == 0,
            created_by_id=supplier_id,
        )
        db.session.add(item)
        db.session.commit()
        return item
    return _make_item


@pytest.fixture
def fill_cart(db):
    """Factory that puts (item, quantity) lines in a vendor's cart"""
    def _fill_cart(lines, vendor_id=VENDOR_ID):
        store = CartStore()
        for item, quantity in lines:
            store.set_line(vendor_id, item.id, quantity)
        db.session.commit()
    return _fill_cart


@pytest.fixture
def delivery_address():
    return {
        'addressLine1': '12 Market Road',
        'addressLine2': 'Stall 4',
        'city': 'Pune',
        'state': 'Maharashtra',
        'pincode': '411001',
        'contactPerson': 'R. Patil',
        'contactPhone': '9820000000',
    }


@pytest.fixture
def pickup_address():
    return {
        'addressLine1': 'Godown 7, APMC Yard',
        'city': 'Pune',
        'state': 'Maharashtra',
        'pincode': '411037',
    }
