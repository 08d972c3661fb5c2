from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from marketplace import db
from marketplace.buisness.orders.order_status_manager import (
    StatusChange,
    flush_or_conflict,
    load_order_for_update,
)
from marketplace.buisness.orders.pricing import to_money
from marketplace.buisness.shared.field_validation import optional_text
from marketplace.buisness.shared.status_validator import StatusValidator
from marketplace.data.deliveries.delivery import Delivery, DeliveryStatus, DeliveryTimelineEntry
from marketplace.data.orders.order_status_history import OrderStatusHistory
from marketplace.data.orders.statuses import OrderStatus, OrderType
from marketplace.errors import (
    Forbidden,
    IllegalTransition,
    MarketplaceError,
    NotFound,
    OrderAlreadyAssigned,
    OrderNotReady,
    ValidationError,
)
from marketplace.logger import get_logger
from marketplace.utils.clock import utcnow

logger = get_logger("marketplace.buisness.deliveries")

# Delivery progress that is reflected on the parent order; other statuses leave it alone
ORDER_STATUS_MIRROR = {
    DeliveryStatus.PICKED_UP.value: OrderStatus.PICKED_UP.value,
    DeliveryStatus.ON_THE_WAY.value: OrderStatus.ON_DELIVERY.value,
    DeliveryStatus.DELIVERED.value: OrderStatus.DELIVERED.value,
}

DELIVERY_ELIGIBLE_ORDER_STATUSES = frozenset({OrderStatus.READY.value})


def parse_location(location) -> tuple[float, float] | None:
    if location is None:
        return None
    if not isinstance(location, dict):
        raise ValidationError("location must be an object with latitude and longitude")
    try:
        latitude = float(location['latitude'])
        longitude = float(location['longitude'])
    except (KeyError, TypeError, ValueError):
        raise ValidationError(
            "location requires numeric latitude and longitude",
            details={'location': location},
        )
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise ValidationError("location is out of range", details={'location': location})
    return latitude, longitude


class DeliverySynchronizer:
    """
    Delivery assignment and progress.

    Each accepted delivery update appends a timeline entry and, through
    ORDER_STATUS_MIRROR, moves the parent order in the same transaction. The
    order keeps its own history of mirrored changes, attributed to the partner.
    """

    def assign(
        self,
        order_id: int,
        *,
        actor,
        delivery_partner_id: int,
        pickup_address: dict,
        estimated_delivery_time: datetime | None = None,
        delivery_instructions: str | None = None,
        delivery_fee=0,
        distance_km=None,
    ) -> Delivery:
        """
        Hand a ready delivery order to a partner.

        Raises:
            ValidationError: bad input, or the order is a pickup order
            NotFound: unknown order
            Forbidden: caller is neither the order's supplier nor an admin
            OrderAlreadyAssigned: the order already has a delivery
            OrderNotReady: the order is not ready for pickup
        """
        if isinstance(delivery_partner_id, bool) or not isinstance(delivery_partner_id, int):
            raise ValidationError("deliveryPartnerId must be an integer")
        if not isinstance(pickup_address, dict) or not pickup_address:
            raise ValidationError("pickupAddress is required")
        fee = self._parse_fee(delivery_fee)
        distance = self._parse_distance(distance_km)
        delivery_instructions = optional_text(delivery_instructions, 'deliveryInstructions')

        try:
            order = load_order_for_update(order_id)
            if not (actor.is_admin or order.supplier_id == actor.id):
                raise Forbidden("Only the order's supplier can assign a delivery")
            if order.delivery is not None:
                raise OrderAlreadyAssigned(
                    f"Order {order.id} already has a delivery assigned",
                    details={'delivery_id': order.delivery.id},
                )
            if order.order_status not in DELIVERY_ELIGIBLE_ORDER_STATUSES:
                raise OrderNotReady(
                    f"Order {order.id} is not ready for pickup",
                    details={'order_status': order.order_status},
                )
            if order.order_type != OrderType.DELIVERY.value or not order.delivery_address:
                raise ValidationError(f"Order {order.id} is not a delivery order")

            now = utcnow()
            eta = estimated_delivery_time or now + timedelta(
                minutes=current_app.config.get('DEFAULT_DELIVERY_ETA_MINUTES', 30)
            )
            delivery = Delivery(
                order=order,
                delivery_partner_id=delivery_partner_id,
                customer_address=order.delivery_address,
                pickup_address=pickup_address,
                delivery_instructions=delivery_instructions,
                delivery_fee=fee,
                distance_km=distance,
                status=DeliveryStatus.ASSIGNED.value,
                estimated_delivery_time=eta,
                created_by_id=actor.id,
                updated_by_id=actor.id,
            )
            delivery.timeline.append(DeliveryTimelineEntry(
                status=DeliveryStatus.ASSIGNED.value,
                timestamp=now,
                note=f"Assigned to delivery partner {delivery_partner_id}",
            ))
            db.session.add(delivery)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            existing = Delivery.query.filter_by(order_id=order_id).first()
            if existing is None:
                logger.exception(f"Delivery assignment for order {order_id} violated a constraint")
                raise
            # Lost the race for the one delivery this order may have
            raise OrderAlreadyAssigned(
                f"Order {order_id} already has a delivery assigned",
                details={'delivery_id': existing.id},
            )
        except MarketplaceError:
            db.session.rollback()
            raise
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Delivery assignment for order {order_id} failed")
            raise

        logger.info(f"Delivery {delivery.id} assigned for order {order_id} to partner {delivery_partner_id}")
        return delivery

    def update_status(
        self,
        delivery_id: int,
        new_status,
        *,
        actor,
        location=None,
        note: str | None = None,
    ) -> Delivery:
        """
        Advance a delivery and mirror the change onto its order.

        Raises:
            ValidationError: unknown status, malformed location or non-text note
            NotFound: unknown delivery
            Forbidden: caller is neither the assigned partner nor an admin
            IllegalTransition: the move is not allowed from the current status
            ConcurrentModification: another request changed the delivery or order first
        """
        status = DeliveryStatus.parse(new_status)
        if status is None:
            raise ValidationError(
                f"Invalid status: {new_status}",
                details={'status': new_status, 'allowed': [s.value for s in DeliveryStatus]},
            )
        coordinates = parse_location(location)
        note = optional_text(note, 'note')

        try:
            delivery = (
                Delivery.query.filter_by(id=delivery_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if delivery is None:
                raise NotFound(f"Delivery {delivery_id} not found")
            if not (actor.is_admin or delivery.delivery_partner_id == actor.id):
                raise Forbidden("Only the assigned delivery partner can update this delivery")
            if not StatusValidator.can_transition(StatusValidator.DELIVERY, delivery.status, status):
                raise IllegalTransition(StatusValidator.DELIVERY, delivery.status, status.value)

            changes = [StatusChange(StatusValidator.DELIVERY, delivery.id, delivery.status, status.value)]
            now = utcnow()
            delivery.status = status.value
            delivery.updated_by_id = actor.id
            if coordinates is not None:
                delivery.current_latitude, delivery.current_longitude = coordinates
                delivery.location_updated_at = now
            if status is DeliveryStatus.DELIVERED:
                delivery.actual_delivery_time = now
            delivery.timeline.append(DeliveryTimelineEntry(
                status=status.value,
                timestamp=now,
                latitude=coordinates[0] if coordinates else None,
                longitude=coordinates[1] if coordinates else None,
                note=note,
            ))
            flush_or_conflict(StatusValidator.DELIVERY, delivery.id)

            mirrored = self._mirror_onto_order(delivery, status, actor_id=actor.id, now=now)
            if mirrored is not None:
                changes.append(mirrored)
            db.session.commit()
        except MarketplaceError:
            db.session.rollback()
            raise
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Status update of delivery {delivery_id} failed")
            raise

        for change in changes:
            logger.info(
                f"{change.entity_type.capitalize()} {change.entity_id}: "
                f"{change.from_status} -> {change.to_status} by user {actor.id}"
            )
        return delivery

    @staticmethod
    def _mirror_onto_order(delivery: Delivery, status: DeliveryStatus, *, actor_id: int, now: datetime):
        order_status = ORDER_STATUS_MIRROR.get(status.value)
        if order_status is None:
            return None

        order = load_order_for_update(delivery.order_id)
        if StatusValidator.is_order_terminal(order.order_status):
            logger.warning(
                f"Order {order.id} is already {order.order_status}; delivery {delivery.id} "
                f"status {status.value} not mirrored"
            )
            return None

        change = StatusChange(StatusValidator.ORDER, order.id, order.order_status, order_status)
        order.order_status = order_status
        order.updated_by_id = actor_id
        if order_status == OrderStatus.DELIVERED.value:
            order.actual_completion_date = now
        order.status_history.append(OrderStatusHistory(
            status=order_status,
            timestamp=now,
            updated_by_id=actor_id,
            note=f"Delivery {delivery.id} {status.value}",
        ))
        flush_or_conflict(StatusValidator.ORDER, order.id)
        return change

    @staticmethod
    def _parse_fee(value) -> Decimal:
        try:
            fee = to_money(value if value is not None else 0)
        except (InvalidOperation, ValueError):
            raise ValidationError("deliveryFee must be a number", details={'deliveryFee': value})
        if fee < 0:
            raise ValidationError("deliveryFee cannot be negative", details={'deliveryFee': value})
        return fee

    @staticmethod
    def _parse_distance(value) -> float | None:
        if value is None:
            return None
        try:
            distance = float(value)
        except (TypeError, ValueError):
            raise ValidationError("distance must be a number", details={'distance': value})
        if distance < 0:
            raise ValidationError("distance cannot be negative", details={'distance': value})
        return distance
