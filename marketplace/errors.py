"""
Marketplace error taxonomy.

Raised by the business layer when a rule is violated. The presentation layer
renders every MarketplaceError as {"error": {"code", "message", "details"}}
with the class's HTTP status; nothing below the routes builds responses.
"""

from __future__ import annotations

from typing import Any


class MarketplaceError(Exception):
    status_code = 400
    code = "MarketplaceError"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            'code': self.code,
            'message': self.message,
            'details': self.details,
        }


class ValidationError(MarketplaceError):
    """Missing or malformed input."""
    code = "ValidationError"


class Unauthorized(MarketplaceError):
    """No usable principal on the request."""
    status_code = 401
    code = "Unauthorized"


class Forbidden(MarketplaceError):
    """Authenticated, but the wrong role or not a party to the resource."""
    status_code = 403
    code = "Forbidden"


class NotFound(MarketplaceError):
    status_code = 404
    code = "NotFound"


class IllegalTransition(MarketplaceError):
    """The state machine rejects the requested move."""
    code = "IllegalTransition"

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            f"Cannot change {entity} status from {current} to {requested}",
            details={'entity': entity, 'current': current, 'requested': requested},
        )


class InsufficientStock(MarketplaceError):
    code = "InsufficientStock"

    def __init__(self, item_id: int, item_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {item_name}. Available: {available}, Requested: {requested}",
            details={
                'inventory_item_id': item_id,
                'item_name': item_name,
                'available': available,
                'requested': requested,
            },
        )
        self.item_id = item_id
        self.item_name = item_name
        self.available = available
        self.requested = requested


class EmptyCart(MarketplaceError):
    code = "EmptyCart"

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class OrderNotReady(MarketplaceError):
    code = "OrderNotReady"


class OrderAlreadyAssigned(MarketplaceError):
    code = "OrderAlreadyAssigned"


class OrderNotDelivered(MarketplaceError):
    code = "OrderNotDelivered"


class PaymentAlreadyConfirmed(OrderNotDelivered):
    """Second confirmation of an order that is already paid."""
    code = "PaymentAlreadyConfirmed"


class ConcurrentModification(MarketplaceError):
    """Another request changed the same record first; nothing was committed."""
    status_code = 409
    code = "ConcurrentModification"
