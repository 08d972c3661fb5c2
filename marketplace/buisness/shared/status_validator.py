from __future__ import annotations

from enum import Enum

from marketplace.data.deliveries.delivery import DeliveryStatus
from marketplace.data.orders.statuses import OrderStatus


def _value(status) -> str:
    # Enum members hash by name, so tables are keyed by the plain string value
    return status.value if isinstance(status, Enum) else status


class StatusValidator:
    """
    Centralized status transition tables for orders and deliveries.

    A (entity, status) pair missing from the table has no outgoing transitions.
    Cancelling an order is not in the table: it is a separate path checked by
    can_cancel() before the table is consulted.
    """

    ORDER = 'order'
    DELIVERY = 'delivery'

    ORDER_TERMINAL = frozenset({'delivered', 'cancelled', 'rejected'})
    DELIVERY_TERMINAL = frozenset({'delivered', 'failed', 'cancelled'})

    _RULES = {
        ORDER: {
            OrderStatus.PLACED: (OrderStatus.CONFIRMED, OrderStatus.REJECTED),
            OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.REJECTED),
            OrderStatus.CONFIRMED: (OrderStatus.PROCESSING,),
            OrderStatus.PROCESSING: (OrderStatus.READY,),
            OrderStatus.READY: (OrderStatus.DELIVERED,),
        },
        DELIVERY: {
            DeliveryStatus.ASSIGNED: (
                DeliveryStatus.PARTNER_CONFIRMED, DeliveryStatus.FAILED, DeliveryStatus.CANCELLED,
            ),
            DeliveryStatus.PARTNER_CONFIRMED: (
                DeliveryStatus.PICKED_UP, DeliveryStatus.FAILED, DeliveryStatus.CANCELLED,
            ),
            DeliveryStatus.PICKED_UP: (DeliveryStatus.ON_THE_WAY, DeliveryStatus.FAILED),
            DeliveryStatus.ON_THE_WAY: (DeliveryStatus.DELIVERED, DeliveryStatus.FAILED),
        },
    }

    _NEXT = {
        (entity, _value(current)): frozenset(_value(s) for s in allowed)
        for entity, rules in _RULES.items()
        for current, allowed in rules.items()
    }

    @classmethod
    def next_states(cls, entity_type: str, current_status) -> frozenset:
        return cls._NEXT.get((entity_type, _value(current_status)), frozenset())

    @classmethod
    def can_transition(cls, entity_type: str, current_status, new_status) -> bool:
        return _value(new_status) in cls.next_states(entity_type, current_status)

    @classmethod
    def is_order_terminal(cls, status) -> bool:
        return _value(status) in cls.ORDER_TERMINAL

    @classmethod
    def is_delivery_terminal(cls, status) -> bool:
        return _value(status) in cls.DELIVERY_TERMINAL

    @classmethod
    def can_cancel(cls, current_status) -> bool:
        # Any non-terminal order, including the delivery-mirrored states
        return not cls.is_order_terminal(current_status)
