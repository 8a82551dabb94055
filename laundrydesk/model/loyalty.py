from ..extensions import db
from ..utils.dates import utcnow

class LoyaltyAccount(db.Model):
    __tablename__ = "loyalty_points"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), unique=True, nullable=False)
    current_points = db.Column(db.Integer, nullable=False, default=0)
    lifetime_points = db.Column(db.Integer, nullable=False, default=0)
    tier = db.Column(db.String(20), nullable=False, default="Bronze")
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)


class LoyaltyTransaction(db.Model):
    __tablename__ = "loyalty_transactions"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)
    transaction_type = db.Column(db.String(20), nullable=False)  # earned | redeemed
    points = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255))
    balance_after = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    def as_api(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "transaction_type": self.transaction_type,
            "points": self.points,
            "description": self.description,
            "balance_after": self.balance_after,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
