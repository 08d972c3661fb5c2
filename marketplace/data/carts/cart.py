from marketplace import db
from marketplace.data.core.audited_base import AuditedBase


class Cart(AuditedBase):
    """A vendor's working set of lines; emptied, never deleted, after checkout"""
    __tablename__ = 'carts'

    vendor_id = db.Column(db.Integer, nullable=False, unique=True, index=True)

    lines = db.relationship(
        'CartLine',
        back_populates='cart',
        cascade='all, delete-orphan',
        order_by='CartLine.id',
    )

    def __repr__(self):
        return f'<Cart vendor:{self.vendor_id} lines:{len(self.lines)}>'

    @property
    def is_empty(self):
        return not self.lines

    def set_quantity(self, inventory_item_id: int, quantity: int) -> "CartLine":
        """Add a line, or update the quantity of the existing line for the item"""
        for line in self.lines:
            if line.inventory_item_id == inventory_item_id:
                line.quantity = quantity
                return line
        line = CartLine(inventory_item_id=inventory_item_id, quantity=quantity)
        self.lines.append(line)
        return line


class CartLine(db.Model):
    __tablename__ = 'cart_lines'

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey('carts.id'), nullable=False, index=True)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey('inventory_items.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('cart_id', 'inventory_item_id', name='uix_cart_item'),
        db.CheckConstraint('quantity > 0', name='ck_cart_lines_quantity_positive'),
    )

    cart = db.relationship('Cart', back_populates='lines')

    def __repr__(self):
        return f'<CartLine item:{self.inventory_item_id} qty:{self.quantity}>'
