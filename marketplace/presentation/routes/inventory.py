from flask import Blueprint, jsonify, request
from flask_login import current_user

from marketplace import db
from marketplace.auth import ADMIN, SUPPLIER, role_required
from marketplace.buisness.inventory import InventoryReservationService
from marketplace.presentation.routes.parsing import json_body, positive_int_arg
from marketplace.services.inventory_movement_service import InventoryMovementService

bp = Blueprint('inventory', __name__)


@bp.post('/<int:item_id>/restock')
@role_required(SUPPLIER)
def restock_item(item_id):
    data = json_body()
    quantity = data.get('quantity')
    movement = InventoryReservationService().restock(
        item_id, quantity,
        actor_id=current_user.id,
        notes=data.get('notes'),
    )
    db.session.commit()
    return jsonify({
        'message': 'Stock updated successfully',
        'data': {
            'item': movement.inventory_item.to_dict(),
            'movement': movement.to_dict(),
        },
    })


@bp.get('/<int:item_id>/movements')
@role_required(SUPPLIER, ADMIN)
def item_movements(item_id):
    pagination = InventoryMovementService.get_movement_history(
        item_id,
        current_user,
        page=positive_int_arg('page') or 1,
        per_page=positive_int_arg('limit') or 50,
        movement_type=request.args.get('type'),
    )
    return jsonify({
        'data': [movement.to_dict() for movement in pagination.items],
        'pagination': {
            'currentPage': pagination.page,
            'totalPages': pagination.pages,
            'total': pagination.total,
        },
    })
