# laundrydesk/model/transaction.py
from ..extensions import db
from ..utils.dates import utcnow

class Transaction(db.Model):
    """Payment ledger. One row per payment action, not per line item."""
    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), index=True)
    receipt_number = db.Column(db.String(32), index=True)
    transaction_type = db.Column(db.String(30), nullable=False, default="payment_received")
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(20), default="cash", index=True)
    description = db.Column(db.String(255))
    created_by = db.Column(db.String(80))
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)
    transaction_date = db.Column(db.DateTime, default=utcnow, index=True)

    def as_api(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "receipt_number": self.receipt_number,
            "transaction_type": self.transaction_type,
            "amount": float(self.amount or 0),
            "payment_method": self.payment_method,
            "description": self.description,
            "created_by": self.created_by,
            "transaction_date": self.transaction_date.isoformat() if self.transaction_date else None,
        }


class PaymentAuditLog(db.Model):
    __tablename__ = "payment_audit_log"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    action = db.Column(db.String(30), nullable=False)
    old_payment_status = db.Column(db.String(20))
    new_payment_status = db.Column(db.String(20))
    old_paid_amount = db.Column(db.Numeric(12, 2))
    new_paid_amount = db.Column(db.Numeric(12, 2))
    old_payment_method = db.Column(db.String(20))
    new_payment_method = db.Column(db.String(20))
    changed_by = db.Column(db.String(80))
    changed_at = db.Column(db.DateTime, default=utcnow)
    notes = db.Column(db.String(500))
