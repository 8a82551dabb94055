# --- laundrydesk/model/service.py ---
from ..extensions import db

class Service(db.Model):
    """A price-list entry (e.g. "Dry Clean - Suit")."""
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.String(255))
    base_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    price_per_item = db.Column(db.Numeric(12, 2), default=0)
    price_per_kg = db.Column(db.Numeric(12, 2), default=0)
    is_active = db.Column(db.Boolean, default=True, index=True)

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "base_price": float(self.base_price or 0),
            "price_per_item": float(self.price_per_item or 0),
            "price_per_kg": float(self.price_per_kg or 0),
            "is_active": self.is_active,
        }
