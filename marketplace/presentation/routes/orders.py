"""
Order endpoints: checkout, lifecycle transitions, listings and payment confirmation.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from marketplace import limiter
from marketplace.auth import ADMIN, SUPPLIER, VENDOR, role_required
from marketplace.buisness.orders import OrderSplitter, OrderStatusManager, PaymentConfirmation
from marketplace.presentation.routes.parsing import json_body, parse_iso_datetime, positive_int_arg
from marketplace.services.order_query_service import OrderQueryService

bp = Blueprint('orders', __name__)


def _checkout_limit():
    return current_app.config.get('CHECKOUT_RATE_LIMIT', '30 per minute')


@bp.post('')
@role_required(VENDOR)
@limiter.limit(_checkout_limit)
def create_orders():
    """Split the vendor's cart into one order per supplier"""
    data = json_body()
    result = OrderSplitter().checkout(
        vendor_id=current_user.id,
        order_type=data.get('orderType'),
        delivery_address=data.get('deliveryAddress'),
        payment_method=data.get('paymentMethod'),
        vendor_notes=data.get('vendorNotes'),
    )
    return jsonify({
        'message': 'Orders created successfully',
        'data': {
            'checkoutReference': result.checkout_reference,
            'orders': [order.to_dict() for order in result.orders],
            'totalValue': float(result.total_value),
        },
    }), 201


@bp.put('/<int:order_id>/status')
@role_required()
def update_order_status(order_id):
    data = json_body()
    order = OrderStatusManager().transition(
        order_id,
        data.get('status'),
        actor_id=current_user.id,
        note=data.get('note'),
        supplier_notes=data.get('supplierNotes'),
        expected_date=parse_iso_datetime(data.get('expectedDate'), 'expectedDate'),
    )
    return jsonify({
        'message': 'Order status updated successfully',
        'data': order.to_dict(),
    })


@bp.get('/<int:order_id>')
@role_required(VENDOR, SUPPLIER, ADMIN)
def get_order(order_id):
    order = OrderQueryService.get_order_for(order_id, current_user)
    return jsonify({'data': order.to_dict()})


@bp.get('/vendor/history')
@role_required(VENDOR)
def vendor_history():
    pagination = OrderQueryService.vendor_history(
        current_user.id,
        page=positive_int_arg('page'),
        limit=positive_int_arg('limit'),
        status=request.args.get('status'),
    )
    return jsonify({
        'data': {
            'orders': [order.to_dict(include_history=False) for order in pagination.items],
            'pagination': OrderQueryService.pagination_meta(pagination),
        },
    })


@bp.get('/supplier/orders')
@role_required(SUPPLIER)
def supplier_orders():
    pagination = OrderQueryService.supplier_orders(
        current_user.id,
        page=positive_int_arg('page'),
        limit=positive_int_arg('limit'),
        status=request.args.get('status'),
    )
    return jsonify({
        'data': {
            'orders': [order.to_dict(include_history=False) for order in pagination.items],
            'pagination': OrderQueryService.pagination_meta(pagination),
            'statusCounts': OrderQueryService.status_counts(current_user.id),
        },
    })


@bp.post('/<int:order_id>/confirm-payment')
@role_required(SUPPLIER)
def confirm_payment(order_id):
    data = json_body()
    order = PaymentConfirmation().confirm(
        order_id,
        actor_id=current_user.id,
        payment_method=data.get('paymentMethod'),
    )
    return jsonify({
        'message': 'Payment confirmed successfully',
        'data': order.to_dict(),
    })
