from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from marketplace import db
from marketplace.buisness.inventory.reservation_service import InventoryReservationService
from marketplace.buisness.shared.field_validation import optional_text
from marketplace.buisness.shared.status_validator import StatusValidator
from marketplace.data.deliveries.delivery import DeliveryStatus, DeliveryTimelineEntry
from marketplace.data.orders.order import Order
from marketplace.data.orders.order_status_history import OrderStatusHistory
from marketplace.data.orders.statuses import OrderStatus
from marketplace.errors import (
    ConcurrentModification,
    Forbidden,
    IllegalTransition,
    MarketplaceError,
    NotFound,
    ValidationError,
)
from marketplace.logger import get_logger
from marketplace.utils.clock import utcnow

logger = get_logger("marketplace.buisness.orders.status")

RELEASING_STATUSES = frozenset({OrderStatus.CANCELLED.value, OrderStatus.REJECTED.value})


@dataclass(frozen=True)
class StatusChange:
    entity_type: str
    entity_id: int
    from_status: str | None
    to_status: str


def load_order_for_update(order_id: int) -> Order:
    order = Order.query.filter_by(id=order_id).with_for_update().populate_existing().first()
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    return order


def flush_or_conflict(entity: str, entity_id: int) -> None:
    """Flush pending changes, turning a lost version race into ConcurrentModification."""
    try:
        db.session.flush()
    except StaleDataError:
        raise ConcurrentModification(
            f"{entity.capitalize()} {entity_id} was modified by another request",
            details={'entity': entity, 'id': entity_id},
        )


class OrderStatusManager:
    """
    Order lifecycle transitions.

    Responsibilities:
    - authorize the caller (supplier for table moves, anyone for cancel)
    - validate the move against StatusValidator
    - append the status history entry
    - run the compensating actions of the move: releasing reserved stock on
      cancel/reject and cancelling a delivery still in progress

    The order row is flushed before stock is released, so a request that lost
    a race on the same order fails before any quantity is returned.
    """

    def __init__(self, reservations: InventoryReservationService | None = None):
        self.reservations = reservations or InventoryReservationService()

    @staticmethod
    def _parse(new_status) -> OrderStatus:
        status = OrderStatus.parse(new_status)
        if status is None:
            raise ValidationError(
                f"Invalid status: {new_status}",
                details={'status': new_status, 'allowed': [s.value for s in OrderStatus]},
            )
        return status

    @staticmethod
    def _authorize(order: Order, new_status: OrderStatus, actor_id: int) -> None:
        current = order.order_status
        if new_status is OrderStatus.CANCELLED:
            if not StatusValidator.can_cancel(current):
                raise IllegalTransition(StatusValidator.ORDER, current, new_status.value)
            return

        if order.supplier_id != actor_id:
            raise Forbidden("Only the order's supplier can update its status")
        if not StatusValidator.can_transition(StatusValidator.ORDER, current, new_status):
            raise IllegalTransition(StatusValidator.ORDER, current, new_status.value)

    def transition(
        self,
        order_id: int,
        new_status,
        *,
        actor_id: int,
        note: str | None = None,
        supplier_notes: str | None = None,
        expected_date: datetime | None = None,
    ) -> Order:
        """
        Move an order to ``new_status`` and commit.

        Raises:
            ValidationError: unknown status or non-text notes
            NotFound: unknown order
            Forbidden: a non-supplier attempted a move other than cancel
            IllegalTransition: the move is not allowed from the current status
            ConcurrentModification: another request changed the order first
        """
        status = self._parse(new_status)
        note = optional_text(note, 'note')
        supplier_notes = optional_text(supplier_notes, 'supplierNotes')
        try:
            order = load_order_for_update(order_id)
            self._authorize(order, status, actor_id)

            change = StatusChange(StatusValidator.ORDER, order.id, order.order_status, status.value)
            now = utcnow()
            order.order_status = status.value
            order.updated_by_id = actor_id
            if supplier_notes is not None:
                order.supplier_notes = supplier_notes
            if expected_date is not None:
                order.expected_date = expected_date
            if status is OrderStatus.DELIVERED:
                order.actual_completion_date = now
            order.status_history.append(OrderStatusHistory(
                status=status.value,
                timestamp=now,
                updated_by_id=actor_id,
                note=note or supplier_notes or f"Status updated to {status.value}",
            ))
            flush_or_conflict(StatusValidator.ORDER, order.id)

            if status.value in RELEASING_STATUSES:
                self.release_order_stock(order, actor_id=actor_id)
                self.cancel_active_delivery(order, actor_id=actor_id)

            db.session.commit()
        except MarketplaceError:
            db.session.rollback()
            raise
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Status update of order {order_id} failed")
            raise

        logger.info(
            f"Order {change.entity_id}: {change.from_status} -> {change.to_status} by user {actor_id}"
        )
        return order

    def release_order_stock(self, order: Order, *, actor_id: int) -> None:
        """Return every line's quantity to stock. Called once, on the move into cancelled/rejected."""
        for line in order.lines:
            self.reservations.release(
                line.inventory_item_id, line.quantity,
                actor_id=actor_id,
                reference_type='order',
                reference_id=order.id,
                notes=f"Order {order.id} {order.order_status}",
            )

    @staticmethod
    def cancel_active_delivery(order: Order, *, actor_id: int) -> None:
        delivery = order.delivery
        if delivery is None or StatusValidator.is_delivery_terminal(delivery.status):
            return
        previous = delivery.status
        delivery.status = DeliveryStatus.CANCELLED.value
        delivery.updated_by_id = actor_id
        delivery.timeline.append(DeliveryTimelineEntry(
            status=DeliveryStatus.CANCELLED.value,
            note=f"Order {order.id} {order.order_status}",
        ))
        flush_or_conflict(StatusValidator.DELIVERY, delivery.id)
        logger.info(f"Delivery {delivery.id}: {previous} -> cancelled with order {order.id}")
