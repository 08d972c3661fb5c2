from marketplace import db
from marketplace.utils.clock import utcnow


class OrderStatusHistory(db.Model):
    """Append-only log of an order's status changes and payment events"""
    __tablename__ = 'order_status_history'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    status = db.Column(db.String(30), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)
    # None when the change was mirrored from a delivery rather than made by a person
    updated_by_id = db.Column(db.Integer, nullable=True)
    note = db.Column(db.Text, nullable=True)

    order = db.relationship('Order', back_populates='status_history')

    def __repr__(self):
        return f'<OrderStatusHistory order:{self.order_id} {self.status}>'

    def to_dict(self):
        return {
            'status': self.status,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'updated_by': self.updated_by_id,
            'note': self.note,
        }
