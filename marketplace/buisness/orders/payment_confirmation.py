from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from marketplace import db
from marketplace.buisness.orders.order_status_manager import flush_or_conflict, load_order_for_update
from marketplace.data.orders.order import Order
from marketplace.data.orders.order_status_history import OrderStatusHistory
from marketplace.data.orders.statuses import PAYMENT_CONFIRMED, OrderStatus, PaymentMethod, PaymentStatus
from marketplace.errors import (
    Forbidden,
    MarketplaceError,
    OrderNotDelivered,
    PaymentAlreadyConfirmed,
    ValidationError,
)
from marketplace.logger import get_logger

logger = get_logger("marketplace.buisness.orders.payment")


class PaymentConfirmation:
    """Supplier confirms payment for a delivered order. Not reversible."""

    def confirm(self, order_id: int, *, actor_id: int, payment_method: str | None = None) -> Order:
        """
        Raises:
            NotFound: unknown order
            Forbidden: caller is not the order's supplier
            OrderNotDelivered: order is not delivered yet
            PaymentAlreadyConfirmed: payment was confirmed before
        """
        if payment_method is not None and PaymentMethod.parse(payment_method) is None:
            raise ValidationError(
                f"Invalid payment method: {payment_method}",
                details={'paymentMethod': payment_method},
            )
        try:
            order = load_order_for_update(order_id)
            if order.supplier_id != actor_id:
                raise Forbidden("Only the order's supplier can confirm payment")
            if order.order_status != OrderStatus.DELIVERED.value:
                raise OrderNotDelivered(
                    "Payment can only be confirmed for delivered orders",
                    details={'order_status': order.order_status},
                )
            if order.payment_status == PaymentStatus.PAID.value:
                raise PaymentAlreadyConfirmed(
                    f"Payment for order {order.id} is already confirmed",
                    details={'payment_status': order.payment_status},
                )

            method = payment_method or order.payment_method
            order.payment_status = PaymentStatus.PAID.value
            if payment_method:
                order.payment_method = payment_method
            order.updated_by_id = actor_id
            order.status_history.append(OrderStatusHistory(
                status=PAYMENT_CONFIRMED,
                updated_by_id=actor_id,
                note=f"Payment confirmed via {method}",
            ))
            flush_or_conflict('order', order.id)
            db.session.commit()
        except MarketplaceError:
            db.session.rollback()
            raise
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Payment confirmation of order {order_id} failed")
            raise

        logger.info(f"Payment confirmed for order {order.id} by supplier {actor_id} via {method}")
        return order
