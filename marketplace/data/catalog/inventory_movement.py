from marketplace import db
from marketplace.data.core.audited_base import AuditedBase
from marketplace.utils.clock import utcnow


class InventoryMovement(AuditedBase):
    """Audit trail for every change to an item's available quantity"""
    __tablename__ = 'inventory_movements'

    RESERVE = 'Reserve'
    RELEASE = 'Release'
    RESTOCK = 'Restock'

    inventory_item_id = db.Column(db.Integer, db.ForeignKey('inventory_items.id'), nullable=False, index=True)

    movement_type = db.Column(db.String(20), nullable=False)
    quantity_delta = db.Column(db.Integer, nullable=False)
    quantity_after = db.Column(db.Integer, nullable=False)
    movement_date = db.Column(db.DateTime, nullable=False, default=utcnow)

    # What caused the movement, e.g. ("order", 12) or ("checkout", None)
    reference_type = db.Column(db.String(50), nullable=True)
    reference_id = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    inventory_item = db.relationship('InventoryItem', back_populates='movements')

    def __repr__(self):
        return f'<InventoryMovement {self.movement_type}: Item {self.inventory_item_id}, Delta {self.quantity_delta}>'

    @property
    def is_reservation(self):
        return self.movement_type == self.RESERVE

    @property
    def is_release(self):
        return self.movement_type == self.RELEASE

    def to_dict(self):
        return {
            'id': self.id,
            'inventory_item_id': self.inventory_item_id,
            'movement_type': self.movement_type,
            'quantity_delta': self.quantity_delta,
            'quantity_after': self.quantity_after,
            'movement_date': self._iso(self.movement_date),
            'reference_type': self.reference_type,
            'reference_id': self.reference_id,
            'notes': self.notes,
            'created_by_id': self.created_by_id,
        }
