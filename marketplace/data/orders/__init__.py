from marketplace.data.orders.order import Order, OrderLine
from marketplace.data.orders.order_status_history import OrderStatusHistory
from marketplace.data.orders.statuses import (
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    PAYMENT_CONFIRMED,
)

__all__ = [
    'Order',
    'OrderLine',
    'OrderStatusHistory',
    'OrderStatus',
    'OrderType',
    'PaymentMethod',
    'PaymentStatus',
    'PAYMENT_CONFIRMED',
]
