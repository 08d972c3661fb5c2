from marketplace.buisness.orders.order_splitter import CheckoutResult, OrderSplitter
from marketplace.buisness.orders.order_status_manager import OrderStatusManager, StatusChange
from marketplace.buisness.orders.payment_confirmation import PaymentConfirmation
from marketplace.buisness.orders.pricing import TaxPolicy, to_money

__all__ = [
    'CheckoutResult',
    'OrderSplitter',
    'OrderStatusManager',
    'PaymentConfirmation',
    'StatusChange',
    'TaxPolicy',
    'to_money',
]
