from marketplace import db
from marketplace.utils.clock import utcnow
from sqlalchemy.orm import declared_attr


class AuditedBase(db.Model):
    """Abstract base for marketplace records with an audit trail"""

    __abstract__ = True

    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + 's'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    # Principals live in the identity provider; ids are stored without a foreign key
    created_by_id = db.Column(db.Integer, nullable=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    updated_by_id = db.Column(db.Integer, nullable=True)

    @staticmethod
    def _iso(value):
        return value.isoformat() if value else None

    def audit_dict(self):
        return {
            'id': self.id,
            'created_at': self._iso(self.created_at),
            'created_by_id': self.created_by_id,
            'updated_at': self._iso(self.updated_at),
            'updated_by_id': self.updated_by_id,
        }
