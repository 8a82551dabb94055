# laundrydesk/model/order.py
from ..extensions import db
from ..utils.dates import utcnow

class Order(db.Model):
    """One line item on a receipt.

    Line items sharing ``receipt_number`` make up one customer transaction;
    the receipt itself is never stored.
    """
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    receipt_number = db.Column(db.String(32), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)

    # Item snapshot
    garment_type = db.Column(db.String(120))
    color = db.Column(db.String(60))
    quantity = db.Column(db.Integer, nullable=False, default=1)
    weight_kg = db.Column(db.Numeric(8, 2))
    special_instructions = db.Column(db.String(500))
    delivery_type = db.Column(db.String(20), nullable=False, default="standard")
    express_surcharge_multiplier = db.Column(db.Numeric(6, 2), default=0)

    # Money
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_status = db.Column(db.String(20), nullable=False, default="not_paid")
    payment_method = db.Column(db.String(20), default="cash")

    # Lifecycle
    order_date = db.Column(db.DateTime, default=utcnow, index=True)
    estimated_collection_date = db.Column(db.DateTime, nullable=True)
    ready_date = db.Column(db.DateTime)
    collected_date = db.Column(db.DateTime)
    created_by = db.Column(db.String(80))

    version = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    customer = db.relationship("Customer", lazy="joined")
    service = db.relationship("Service", lazy="joined")

    @property
    def balance_due(self):
        from ..services.reconciliation import summarize_receipt
        return summarize_receipt([self]).balance_due

    def as_api(self):
        from ..services.reconciliation import is_overdue
        return {
            "id": self.id,
            "receipt_number": self.receipt_number,
            "status": self.status,
            "customer": {
                "id": self.customer_id,
                "name": self.customer.name if self.customer else None,
                "phone": self.customer.phone if self.customer else None,
            },
            "service": {
                "id": self.service_id,
                "name": self.service.name if self.service else None,
            },
            "branch_id": self.branch_id,
            "garment_type": self.garment_type,
            "color": self.color,
            "quantity": self.quantity,
            "weight_kg": float(self.weight_kg) if self.weight_kg is not None else None,
            "special_instructions": self.special_instructions,
            "delivery_type": self.delivery_type,
            "express_surcharge_multiplier": float(self.express_surcharge_multiplier or 0),
            "money": {
                "total_amount": float(self.total_amount or 0),
                "paid_amount": float(self.paid_amount or 0),
                "balance_due": float(self.balance_due),
                "payment_status": self.payment_status,
                "payment_method": self.payment_method,
            },
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "estimated_collection_date": (
                self.estimated_collection_date.isoformat() if self.estimated_collection_date else None
            ),
            "ready_date": self.ready_date.isoformat() if self.ready_date else None,
            "collected_date": self.collected_date.isoformat() if self.collected_date else None,
            "is_overdue": is_overdue(self),
        }
