from enum import Enum


class OrderStatus(str, Enum):
    PLACED = 'placed'
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    PROCESSING = 'processing'
    READY = 'ready'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'
    REJECTED = 'rejected'
    # Mirrored from the delivery partner's progress
    PICKED_UP = 'picked_up'
    ON_DELIVERY = 'on_delivery'

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    PAID = 'paid'
    CASH_ON_DELIVERY = 'cash_on_delivery'
    CREDIT = 'credit'


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = 'cash_on_delivery'
    ADVANCE_PAYMENT = 'advance_payment'
    CREDIT = 'credit'

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def initial_payment_status(self) -> PaymentStatus:
        if self is PaymentMethod.CASH_ON_DELIVERY:
            return PaymentStatus.CASH_ON_DELIVERY
        if self is PaymentMethod.CREDIT:
            return PaymentStatus.CREDIT
        return PaymentStatus.PENDING


class OrderType(str, Enum):
    PICKUP = 'pickup'
    DELIVERY = 'delivery'


# Status history tag written by payment confirmation; not an order status
PAYMENT_CONFIRMED = 'payment_confirmed'
