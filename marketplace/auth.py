"""
Identity adapter.

Credentials are handled by the upstream identity provider, which forwards the
authenticated principal as two request headers. This module only turns those
headers into a Flask-Login user and provides role guards for the routes.
"""

from functools import wraps

from flask import current_app, request
from flask_login import UserMixin, current_user

from marketplace import login_manager
from marketplace.errors import Forbidden, Unauthorized
from marketplace.logger import get_logger

logger = get_logger("marketplace.auth")

VENDOR = 'vendor'
SUPPLIER = 'supplier'
DELIVERY_PARTNER = 'delivery_partner'
ADMIN = 'admin'
ROLES = {VENDOR, SUPPLIER, DELIVERY_PARTNER, ADMIN}


class Principal(UserMixin):
    """Authenticated caller as asserted by the identity provider."""

    def __init__(self, user_id: int, role: str):
        self.id = user_id
        self.role = role

    @property
    def is_vendor(self):
        return self.role == VENDOR

    @property
    def is_supplier(self):
        return self.role == SUPPLIER

    @property
    def is_delivery_partner(self):
        return self.role == DELIVERY_PARTNER

    @property
    def is_admin(self):
        return self.role == ADMIN

    def __repr__(self):
        return f'<Principal {self.role}:{self.id}>'


@login_manager.request_loader
def load_principal_from_request(req):
    raw_id = req.headers.get(current_app.config['IDENTITY_USER_HEADER'])
    role = req.headers.get(current_app.config['IDENTITY_ROLE_HEADER'])
    if not raw_id or not role:
        return None
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        logger.warning(f"Rejected non-numeric principal id header: {raw_id!r}")
        return None
    role = role.strip().lower()
    if role not in ROLES:
        logger.warning(f"Rejected unknown role header: {role!r}")
        return None
    return Principal(user_id, role)


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized("Access denied. Please login first.")


def role_required(*roles):
    """Require an authenticated principal holding one of ``roles``."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                raise Unauthorized("Access denied. Please login first.")
            if roles and current_user.role not in roles:
                logger.warning(
                    f"Access denied for {current_user!r} on {request.endpoint}; expected one of {roles}"
                )
                raise Forbidden(f"Access denied: requires role {' or '.join(roles)}")
            return view(*args, **kwargs)
        return wrapped
    return decorator
