"""
Configuration for the wholesale marketplace service.

Values come from the environment (a .env file is loaded by the run script).
create_app() accepts a mapping that overrides anything defined here.
"""

import os
from pathlib import Path


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


BASE_DIR = Path(__file__).parent.parent
INSTANCE_DIR = BASE_DIR / 'instance'


class Config:
    # SECURITY: no fallback; create_app refuses to start without it
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f"sqlite:///{(INSTANCE_DIR / 'marketplace.db').resolve()}",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Concurrent writers wait on the SQLite lock instead of failing immediately
    SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 30}} if SQLALCHEMY_DATABASE_URI.startswith('sqlite') else {}

    # Tax policy (flat, per order)
    CGST_RATE = os.environ.get('CGST_RATE', '0.09')
    SGST_RATE = os.environ.get('SGST_RATE', '0.09')
    IGST_RATE = os.environ.get('IGST_RATE', '0.0')

    # Deliveries
    DEFAULT_DELIVERY_ETA_MINUTES = int(os.environ.get('DEFAULT_DELIVERY_ETA_MINUTES', '30'))

    # Listings
    ORDERS_PAGE_SIZE = int(os.environ.get('ORDERS_PAGE_SIZE', '10'))
    ORDERS_MAX_PAGE_SIZE = int(os.environ.get('ORDERS_MAX_PAGE_SIZE', '100'))

    # Rate limiting
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', 'True')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    CHECKOUT_RATE_LIMIT = os.environ.get('CHECKOUT_RATE_LIMIT', '30 per minute')

    # Identity headers set by the upstream identity provider
    IDENTITY_USER_HEADER = os.environ.get('IDENTITY_USER_HEADER', 'X-User-Id')
    IDENTITY_ROLE_HEADER = os.environ.get('IDENTITY_ROLE_HEADER', 'X-User-Role')

    JSON_SORT_KEYS = False
