"""
Delivery Query Service
Read-side queries over deliveries: customer tracking, details and partner listings.
"""

from typing import Any, Dict, List, Optional

from marketplace import db
from marketplace.data.deliveries.delivery import Delivery, DeliveryStatus
from marketplace.errors import Forbidden, NotFound, ValidationError
from marketplace.utils.clock import utcnow


class DeliveryQueryService:

    @staticmethod
    def estimated_minutes_remaining(delivery: Delivery, now=None) -> int:
        """Whole minutes until the ETA, never negative."""
        now = now or utcnow()
        remaining = (delivery.estimated_delivery_time - now).total_seconds()
        return max(0, int(remaining // 60))

    @staticmethod
    def track(order_id: int) -> Dict[str, Any]:
        """
        Customer-facing tracking view of an order's delivery.

        The timeline and addresses are never part of this view.

        Raises:
            NotFound: no delivery has been assigned for the order
        """
        delivery = Delivery.query.filter_by(order_id=order_id).first()
        if delivery is None:
            raise NotFound(f"No delivery found for order {order_id}")
        return {
            'orderId': delivery.order_id,
            'status': delivery.status,
            'estimatedDeliveryTime': delivery.estimated_delivery_time.isoformat(),
            'estimatedTimeRemaining': DeliveryQueryService.estimated_minutes_remaining(delivery),
            'actualDeliveryTime': delivery.actual_delivery_time.isoformat() if delivery.actual_delivery_time else None,
            'currentLocation': delivery.current_location,
            'deliveryPartner': {'id': delivery.delivery_partner_id},
            'deliveryInstructions': delivery.delivery_instructions,
        }

    @staticmethod
    def get_details(delivery_id: int, principal) -> Delivery:
        """
        Full delivery record including its timeline.

        Raises:
            NotFound: unknown delivery
            Forbidden: principal is not the partner, a party to the order or an admin
        """
        delivery = db.session.get(Delivery, delivery_id)
        if delivery is None:
            raise NotFound(f"Delivery {delivery_id} not found")
        allowed = (
            principal.is_admin
            or delivery.delivery_partner_id == principal.id
            or delivery.order.is_party(principal.id)
        )
        if not allowed:
            raise Forbidden("Access denied to this delivery")
        return delivery

    @staticmethod
    def partner_deliveries(partner_id: int, status: Optional[str] = None) -> List[Delivery]:
        query = Delivery.query.filter_by(delivery_partner_id=partner_id)
        if status and status != 'all':
            if DeliveryStatus.parse(status) is None:
                raise ValidationError(f"Invalid status filter: {status}", details={'status': status})
            query = query.filter_by(status=status)
        return query.order_by(Delivery.created_at.desc(), Delivery.id.desc()).all()
