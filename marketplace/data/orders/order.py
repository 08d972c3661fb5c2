from marketplace import db
from marketplace.data.core.audited_base import AuditedBase
from marketplace.data.orders.statuses import OrderStatus, PaymentStatus, OrderType


class Order(AuditedBase):
    """One supplier's share of a vendor checkout"""
    __tablename__ = 'orders'

    vendor_id = db.Column(db.Integer, nullable=False, index=True)
    supplier_id = db.Column(db.Integer, nullable=False, index=True)
    # Shared by every order produced by the same checkout
    checkout_reference = db.Column(db.String(40), nullable=False, index=True)

    order_type = db.Column(db.String(20), nullable=False, default=OrderType.PICKUP.value)
    delivery_address = db.Column(db.JSON, nullable=True)
    vendor_notes = db.Column(db.Text, nullable=True)
    supplier_notes = db.Column(db.Text, nullable=True)
    expected_date = db.Column(db.DateTime, nullable=True)
    actual_completion_date = db.Column(db.DateTime, nullable=True)

    # Pricing, fixed at checkout
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    cgst = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    sgst = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    igst = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)

    order_status = db.Column(db.String(20), nullable=False, default=OrderStatus.PLACED.value, index=True)
    payment_method = db.Column(db.String(30), nullable=True)
    payment_status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)

    # Optimistic lock: concurrent writers to the same order cannot both commit
    version_id = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {'version_id_col': version_id}

    lines = db.relationship(
        'OrderLine',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderLine.position',
    )
    status_history = db.relationship(
        'OrderStatusHistory',
        back_populates='order',
        cascade='save-update, merge',
        order_by='OrderStatusHistory.id',
    )
    delivery = db.relationship('Delivery', back_populates='order', uselist=False)

    def __repr__(self):
        return f'<Order {self.id} vendor:{self.vendor_id} supplier:{self.supplier_id} {self.order_status}>'

    @property
    def status(self) -> OrderStatus:
        return OrderStatus(self.order_status)

    @property
    def tax_total(self):
        return (self.cgst or 0) + (self.sgst or 0) + (self.igst or 0)

    def is_party(self, user_id: int) -> bool:
        return user_id in (self.vendor_id, self.supplier_id)

    def to_dict(self, include_history=True):
        data = self.audit_dict()
        data.update({
            'vendor_id': self.vendor_id,
            'supplier_id': self.supplier_id,
            'checkout_reference': self.checkout_reference,
            'order_type': self.order_type,
            'delivery_address': self.delivery_address,
            'vendor_notes': self.vendor_notes,
            'supplier_notes': self.supplier_notes,
            'expected_date': self._iso(self.expected_date),
            'actual_completion_date': self._iso(self.actual_completion_date),
            'items': [line.to_dict() for line in self.lines],
            'subtotal': float(self.subtotal),
            'tax': {
                'cgst': float(self.cgst),
                'sgst': float(self.sgst),
                'igst': float(self.igst),
            },
            'total_amount': float(self.total_amount),
            'order_status': self.order_status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
        })
        if include_history:
            data['status_history'] = [entry.to_dict() for entry in self.status_history]
        return data


class OrderLine(db.Model):
    """Frozen copy of a cart line at checkout; catalog changes never reach it"""
    __tablename__ = 'order_lines'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey('inventory_items.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    line_total = db.Column(db.Numeric(12, 2), nullable=False)

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_order_lines_quantity_positive'),
    )

    order = db.relationship('Order', back_populates='lines')

    def __repr__(self):
        return f'<OrderLine {self.name!r} x{self.quantity}>'

    def to_dict(self):
        return {
            'inventory_item_id': self.inventory_item_id,
            'name': self.name,
            'quantity': self.quantity,
            'unit_price': float(self.unit_price),
            'line_total': float(self.line_total),
        }
