# --- laundrydesk/model/customer.py ---
from ..extensions import db
from ..utils.dates import utcnow

class Customer(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(180), nullable=False)
    phone = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255))
    address = db.Column(db.String(255))
    sms_notifications_enabled = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
