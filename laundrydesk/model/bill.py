# laundrydesk/model/bill.py
from ..extensions import db
from ..utils.dates import utcnow

class Bill(db.Model):
    """Monthly account bill for a customer (hotels, offices), separate from counter receipts."""
    __tablename__ = "bills"

    id = db.Column(db.Integer, primary_key=True)
    bill_number = db.Column(db.String(32), unique=True, nullable=False, index=True)  # e.g. "BIL-2026-10-18-0001"
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    billing_date = db.Column(db.Date, nullable=False, index=True)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)
    created_by = db.Column(db.String(80))
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    customer = db.relationship("Customer", lazy="joined")
    items = db.relationship(
        "BillItem",
        backref="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.id",
    )

    def as_api(self, with_items=True):
        data = {
            "id": self.id,
            "bill_number": self.bill_number,
            "customer": {
                "id": self.customer_id,
                "name": self.customer.name if self.customer else None,
                "phone": self.customer.phone if self.customer else None,
            },
            "billing_date": self.billing_date.isoformat() if self.billing_date else None,
            "money": {
                "subtotal": float(self.subtotal or 0),
                "total_amount": float(self.total_amount or 0),
            },
            "branch_id": self.branch_id,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if with_items:
            data["items"] = [i.as_api() for i in self.items]
        return data


class BillItem(db.Model):
    __tablename__ = "bill_items"

    id = db.Column(db.Integer, primary_key=True)
    bill_id = db.Column(db.Integer, db.ForeignKey("bills.id"), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    def as_api(self):
        return {
            "id": self.id,
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price or 0),
            "total_amount": float(self.total_amount or 0),
        }
