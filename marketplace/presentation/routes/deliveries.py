"""
Delivery endpoints: assignment, partner progress updates and customer tracking.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user

from marketplace.auth import ADMIN, DELIVERY_PARTNER, SUPPLIER, role_required
from marketplace.buisness.deliveries import DeliverySynchronizer
from marketplace.presentation.routes.parsing import json_body, parse_iso_datetime, required_int
from marketplace.services.delivery_query_service import DeliveryQueryService

bp = Blueprint('deliveries', __name__)


@bp.post('')
@role_required(SUPPLIER, ADMIN)
def assign_delivery():
    data = json_body()
    delivery = DeliverySynchronizer().assign(
        required_int(data, 'orderId'),
        actor=current_user,
        delivery_partner_id=required_int(data, 'deliveryPartnerId'),
        pickup_address=data.get('pickupAddress'),
        estimated_delivery_time=parse_iso_datetime(data.get('estimatedDeliveryTime'), 'estimatedDeliveryTime'),
        delivery_instructions=data.get('deliveryInstructions'),
        delivery_fee=data.get('deliveryFee', 0),
        distance_km=data.get('distance'),
    )
    return jsonify({
        'message': 'Delivery assigned successfully',
        'data': delivery.to_dict(),
    }), 201


@bp.put('/<int:delivery_id>/status')
@role_required(DELIVERY_PARTNER, ADMIN)
def update_delivery_status(delivery_id):
    data = json_body()
    delivery = DeliverySynchronizer().update_status(
        delivery_id,
        data.get('status'),
        actor=current_user,
        location=data.get('location'),
        note=data.get('note'),
    )
    return jsonify({
        'message': 'Delivery status updated successfully',
        'data': {
            'delivery': delivery.to_dict(),
            'orderStatus': delivery.order.order_status,
        },
    })


@bp.get('/partner')
@role_required(DELIVERY_PARTNER)
def partner_deliveries():
    deliveries = DeliveryQueryService.partner_deliveries(current_user.id, request.args.get('status'))
    return jsonify({
        'data': [delivery.to_dict(include_timeline=False) for delivery in deliveries],
        'count': len(deliveries),
    })


@bp.get('/<int:delivery_id>')
@role_required()
def get_delivery(delivery_id):
    delivery = DeliveryQueryService.get_details(delivery_id, current_user)
    return jsonify({'data': delivery.to_dict()})


@bp.get('/track/<int:order_id>')
def track_delivery(order_id):
    """Public tracking view; the timeline stays internal"""
    return jsonify({'data': DeliveryQueryService.track(order_id)})
