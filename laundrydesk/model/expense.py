# laundrydesk/model/expense.py
from ..extensions import db
from ..utils.dates import utcnow

EXPENSE_SOURCES = ("cash", "bank", "mobile_money")

class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    category = db.Column(db.String(80), nullable=False, index=True)  # e.g. "Detergent", "Rent"
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_source = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(255))
    receipt_number = db.Column(db.String(64))  # supplier's receipt, not ours
    created_by = db.Column(db.String(80))
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def as_api(self):
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "category": self.category,
            "amount": float(self.amount or 0),
            "payment_source": self.payment_source,
            "description": self.description,
            "receipt_number": self.receipt_number,
            "created_by": self.created_by,
            "branch_id": self.branch_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
