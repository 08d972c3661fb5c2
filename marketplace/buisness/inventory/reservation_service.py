from __future__ import annotations

from sqlalchemy import update

from marketplace import db
from marketplace.buisness.shared.field_validation import optional_text
from marketplace.data.catalog.inventory_item import InventoryItem
from marketplace.data.catalog.inventory_movement import InventoryMovement
from marketplace.errors import Forbidden, InsufficientStock, NotFound, ValidationError
from marketplace.logger import get_logger
from marketplace.utils.clock import utcnow

logger = get_logger("marketplace.buisness.inventory.reservations")


class InventoryReservationService:
    """
    The only writer of InventoryItem.quantity_available.

    Every change is a single conditional UPDATE evaluated by the database, so
    concurrent reservations on one item serialize on the row and can never take
    the quantity below zero. Each call records an InventoryMovement.

    Methods join the caller's transaction and never commit; the workflow that
    called them decides whether the whole unit of work is kept.
    """

    @staticmethod
    def _check_quantity(quantity) -> int:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("quantity must be a positive integer", details={'quantity': quantity})
        return quantity

    @staticmethod
    def _reload(item_id: int) -> InventoryItem | None:
        # Bypass the identity map: the row was changed by a bulk UPDATE
        return db.session.get(InventoryItem, item_id, populate_existing=True)

    def _record(
        self,
        item: InventoryItem,
        movement_type: str,
        quantity_delta: int,
        *,
        actor_id: int | None,
        reference_type: str | None,
        reference_id: int | None,
        notes: str | None,
    ) -> InventoryMovement:
        movement = InventoryMovement(
            inventory_item_id=item.id,
            movement_type=movement_type,
            quantity_delta=quantity_delta,
            quantity_after=item.quantity_available,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            created_by_id=actor_id,
            updated_by_id=actor_id,
        )
        db.session.add(movement)
        return movement

    def reserve(
        self,
        item_id: int,
        quantity: int,
        *,
        actor_id: int | None = None,
        reference_type: str | None = None,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> InventoryMovement:
        """
        Take ``quantity`` units out of available stock.

        Raises:
            ValidationError: quantity is not a positive integer, or notes is not text
            NotFound: unknown item
            InsufficientStock: fewer than ``quantity`` units available
        """
        self._check_quantity(quantity)

        stmt = (
            update(InventoryItem)
            .where(InventoryItem.id == item_id)
            .where(InventoryItem.quantity_available >= quantity)
            .values(
                quantity_available=InventoryItem.quantity_available - quantity,
                # SET expressions see the pre-update row
                out_of_stock=(InventoryItem.quantity_available - quantity) == 0,
                updated_at=utcnow(),
                updated_by_id=actor_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = db.session.execute(stmt)

        item = self._reload(item_id)
        if item is None:
            raise NotFound(f"Inventory item {item_id} not found")
        if result.rowcount == 0:
            logger.warning(
                f"Reservation refused for item {item_id}: available {item.quantity_available}, requested {quantity}"
            )
            raise InsufficientStock(item.id, item.name, item.quantity_available, quantity)

        movement = self._record(
            item, InventoryMovement.RESERVE, -quantity,
            actor_id=actor_id, reference_type=reference_type, reference_id=reference_id, notes=notes,
        )
        logger.info(f"Reserved {quantity} of item {item_id}; {item.quantity_available} left")
        return movement

    def release(
        self,
        item_id: int,
        quantity: int,
        *,
        actor_id: int | None = None,
        reference_type: str | None = None,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> InventoryMovement:
        """
        Return ``quantity`` units to available stock and clear the out-of-stock flag.

        Raises:
            ValidationError: quantity is not a positive integer, or notes is not text
            NotFound: unknown item
        """
        self._check_quantity(quantity)
        result = db.session.execute(self._increment(item_id, quantity, actor_id))
        if result.rowcount == 0:
            raise NotFound(f"Inventory item {item_id} not found")

        item = self._reload(item_id)
        movement = self._record(
            item, InventoryMovement.RELEASE, quantity,
            actor_id=actor_id, reference_type=reference_type, reference_id=reference_id, notes=notes,
        )
        logger.info(f"Released {quantity} of item {item_id}; {item.quantity_available} available")
        return movement

    def restock(
        self,
        item_id: int,
        quantity: int,
        *,
        actor_id: int,
        notes: str | None = None,
    ) -> InventoryMovement:
        """
        Supplier restock of an item they own.

        Raises:
            ValidationError: quantity is not a positive integer, or notes is not text
            NotFound: unknown item
            Forbidden: the actor does not own the item
        """
        self._check_quantity(quantity)
        notes = optional_text(notes, 'notes')
        item = db.session.get(InventoryItem, item_id)
        if item is None:
            raise NotFound(f"Inventory item {item_id} not found")
        if item.supplier_id != actor_id:
            raise Forbidden("Only the owning supplier can restock this item")

        db.session.execute(self._increment(item_id, quantity, actor_id, restocked=True))
        item = self._reload(item_id)
        movement = self._record(
            item, InventoryMovement.RESTOCK, quantity,
            actor_id=actor_id, reference_type='restock', reference_id=None, notes=notes,
        )
        logger.info(f"Restocked item {item_id} by {quantity}; {item.quantity_available} available")
        return movement

    @staticmethod
    def _increment(item_id: int, quantity: int, actor_id: int | None, *, restocked: bool = False):
        now = utcnow()
        values = {
            'quantity_available': InventoryItem.quantity_available + quantity,
            # Quantity is authoritative; after a release the item is never left flagged
            'out_of_stock': False,
            'updated_at': now,
            'updated_by_id': actor_id,
        }
        if restocked:
            values['last_restocked_at'] = now
        return (
            update(InventoryItem)
            .where(InventoryItem.id == item_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
