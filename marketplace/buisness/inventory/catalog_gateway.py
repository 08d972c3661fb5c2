from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from marketplace import db
from marketplace.data.catalog.inventory_item import InventoryItem
from marketplace.errors import NotFound


@dataclass(frozen=True)
class ItemSnapshot:
    id: int
    name: str
    price: Decimal
    quantity_available: int
    supplier_id: int


class CatalogGateway:
    """
    Read access to catalog items for checkout.

    Search and listing CRUD belong to the catalog service; checkout only needs
    the current price and supplier of each item, captured at call time.
    """

    @staticmethod
    def _snapshot(item: InventoryItem) -> ItemSnapshot:
        return ItemSnapshot(
            id=item.id,
            name=item.name,
            price=Decimal(str(item.price)),
            quantity_available=item.quantity_available,
            supplier_id=item.supplier_id,
        )

    def get_snapshot(self, item_id: int) -> ItemSnapshot:
        item = db.session.get(InventoryItem, item_id)
        if item is None:
            raise NotFound(f"Inventory item {item_id} not found")
        return self._snapshot(item)

    def get_snapshots(self, item_ids: list[int]) -> dict[int, ItemSnapshot]:
        items = InventoryItem.query.filter(InventoryItem.id.in_(item_ids)).all()
        found = {item.id: self._snapshot(item) for item in items}
        missing = [item_id for item_id in item_ids if item_id not in found]
        if missing:
            raise NotFound(
                f"Inventory item {missing[0]} not found",
                details={'missing_inventory_item_ids': missing},
            )
        return found
