"""
Inventory Movement Service
Read-side queries over the stock movement audit trail.
"""

from typing import Optional

from flask_sqlalchemy.pagination import Pagination

from marketplace import db
from marketplace.data.catalog.inventory_item import InventoryItem
from marketplace.data.catalog.inventory_movement import InventoryMovement
from marketplace.errors import Forbidden, NotFound


class InventoryMovementService:

    @staticmethod
    def get_item_for_owner(item_id: int, principal) -> InventoryItem:
        item = db.session.get(InventoryItem, item_id)
        if item is None:
            raise NotFound(f"Inventory item {item_id} not found")
        if not (principal.is_admin or item.supplier_id == principal.id):
            raise Forbidden("Only the owning supplier can view this item's movements")
        return item

    @staticmethod
    def get_movement_history(
        item_id: int,
        principal,
        page: int = 1,
        per_page: int = 50,
        movement_type: Optional[str] = None,
    ) -> Pagination:
        """
        Movements of one item, most recent first.

        Args:
            item_id: Inventory item
            principal: Caller; must own the item or be an admin
            page: Page number
            per_page: Items per page
            movement_type: Optional filter (Reserve, Release, Restock)
        """
        InventoryMovementService.get_item_for_owner(item_id, principal)
        query = InventoryMovement.query.filter_by(inventory_item_id=item_id)
        if movement_type:
            query = query.filter_by(movement_type=movement_type)
        query = query.order_by(InventoryMovement.id.desc())
        return query.paginate(page=page, per_page=per_page, error_out=False)
