# laundrydesk/model/receipt.py
from ..extensions import db
from ..utils.dates import utcnow

class ReceiptNumber(db.Model):
    """Registry of issued receipt numbers.

    Holds the identifier only. Receipt totals are always derived from the
    line items that carry the number.
    """
    __tablename__ = "receipt_numbers"
    __table_args__ = (db.UniqueConstraint("issued_on", "sequence", name="uq_receipt_day_sequence"),)

    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.String(32), unique=True, nullable=False, index=True)  # e.g. "7-18-10 (26)"
    sequence = db.Column(db.Integer, nullable=False)
    issued_on = db.Column(db.Date, nullable=False, index=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
