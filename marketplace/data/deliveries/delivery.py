from enum import Enum

from marketplace import db
from marketplace.data.core.audited_base import AuditedBase
from marketplace.utils.clock import utcnow


class DeliveryStatus(str, Enum):
    ASSIGNED = 'assigned'
    PARTNER_CONFIRMED = 'partner_confirmed'
    PICKED_UP = 'picked_up'
    ON_THE_WAY = 'on_the_way'
    DELIVERED = 'delivered'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None


class Delivery(AuditedBase):
    """Hand-off of a ready order to a delivery partner; at most one per order"""
    __tablename__ = 'deliveries'

    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, unique=True, index=True)
    delivery_partner_id = db.Column(db.Integer, nullable=False, index=True)

    customer_address = db.Column(db.JSON, nullable=False)
    pickup_address = db.Column(db.JSON, nullable=False)
    delivery_instructions = db.Column(db.Text, nullable=True)
    delivery_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    distance_km = db.Column(db.Float, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=DeliveryStatus.ASSIGNED.value, index=True)
    estimated_delivery_time = db.Column(db.DateTime, nullable=False)
    actual_delivery_time = db.Column(db.DateTime, nullable=True)

    # Live tracking, latest wins
    current_latitude = db.Column(db.Float, nullable=True)
    current_longitude = db.Column(db.Float, nullable=True)
    location_updated_at = db.Column(db.DateTime, nullable=True)

    version_id = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {'version_id_col': version_id}

    order = db.relationship('Order', back_populates='delivery')
    timeline = db.relationship(
        'DeliveryTimelineEntry',
        back_populates='delivery',
        cascade='save-update, merge',
        order_by='DeliveryTimelineEntry.id',
    )

    def __repr__(self):
        return f'<Delivery {self.id} order:{self.order_id} {self.status}>'

    @property
    def current_location(self):
        if self.current_latitude is None or self.current_longitude is None:
            return None
        return {
            'latitude': self.current_latitude,
            'longitude': self.current_longitude,
            'last_updated': self._iso(self.location_updated_at),
        }

    def to_dict(self, include_timeline=True):
        data = self.audit_dict()
        data.update({
            'order_id': self.order_id,
            'delivery_partner_id': self.delivery_partner_id,
            'customer_address': self.customer_address,
            'pickup_address': self.pickup_address,
            'delivery_instructions': self.delivery_instructions,
            'delivery_fee': float(self.delivery_fee or 0),
            'distance_km': self.distance_km,
            'status': self.status,
            'estimated_delivery_time': self._iso(self.estimated_delivery_time),
            'actual_delivery_time': self._iso(self.actual_delivery_time),
            'current_location': self.current_location,
        })
        if include_timeline:
            data['timeline'] = [entry.to_dict() for entry in self.timeline]
        return data


class DeliveryTimelineEntry(db.Model):
    """Append-only record of a delivery's progress"""
    __tablename__ = 'delivery_timeline'

    id = db.Column(db.Integer, primary_key=True)
    delivery_id = db.Column(db.Integer, db.ForeignKey('deliveries.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    note = db.Column(db.Text, nullable=True)

    delivery = db.relationship('Delivery', back_populates='timeline')

    def to_dict(self):
        location = None
        if self.latitude is not None and self.longitude is not None:
            location = {'latitude': self.latitude, 'longitude': self.longitude}
        return {
            'status': self.status,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'location': location,
            'note': self.note,
        }
