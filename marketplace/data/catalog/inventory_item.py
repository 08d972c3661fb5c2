from marketplace import db
from marketplace.data.core.audited_base import AuditedBase


class InventoryItem(AuditedBase):
    """A supplier's listing and its available stock"""
    __tablename__ = 'inventory_items'

    supplier_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Mutated only through InventoryReservationService
    quantity_available = db.Column(db.Integer, nullable=False, default=0)
    out_of_stock = db.Column(db.Boolean, nullable=False, default=False)
    last_restocked_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.CheckConstraint('quantity_available >= 0', name='ck_inventory_items_quantity_non_negative'),
        db.CheckConstraint('price >= 0', name='ck_inventory_items_price_non_negative'),
    )

    movements = db.relationship(
        'InventoryMovement',
        back_populates='inventory_item',
        lazy='dynamic',
        order_by='InventoryMovement.id',
    )

    def __repr__(self):
        return f'<InventoryItem {self.id} {self.name!r} Qty:{self.quantity_available}>'

    @property
    def is_available(self):
        return (self.quantity_available or 0) > 0

    def to_dict(self):
        data = self.audit_dict()
        data.update({
            'supplier_id': self.supplier_id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'price': float(self.price) if self.price is not None else None,
            'quantity_available': self.quantity_available,
            'out_of_stock': self.out_of_stock,
            'last_restocked_at': self._iso(self.last_restocked_at),
        })
        return data
