from marketplace.data.catalog.inventory_item import InventoryItem
from marketplace.data.catalog.inventory_movement import InventoryMovement

__all__ = ['InventoryItem', 'InventoryMovement']
