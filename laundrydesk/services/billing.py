# laundrydesk/services/billing.py
"""
Monthly account bills. Bill numbers look like ``BIL-2026-10-18-0001``;
the sequence restarts daily and collisions retry like receipt numbers.
"""
import logging
from datetime import date

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..model import Bill, BillItem, Customer
from ..utils.money import D, parse_money, round_money

log = logging.getLogger(__name__)

def format_bill_number(sequence: int, day: date) -> str:
    return f"BIL-{day:%Y}-{day:%m}-{day:%d}-{sequence:04d}"

def next_bill_sequence(day: date) -> int:
    prefix = f"BIL-{day:%Y}-{day:%m}-{day:%d}-"
    numbers = db.session.query(Bill.bill_number).filter(Bill.bill_number.like(f"{prefix}%")).all()
    used = [int(n[len(prefix):]) for (n,) in numbers if n[len(prefix):].isdigit()]
    return max(used, default=0) + 1

def bill_lines(raw_items):
    if not isinstance(raw_items, list) or not raw_items:
        raise ValueError("At least one item is required")
    lines = []
    for raw in raw_items:
        try:
            qty = max(1, int(raw.get("quantity") or 1))
        except (TypeError, ValueError):
            raise ValueError("quantity must be a whole number")
        unit_price = parse_money(raw.get("unit_price") if raw.get("unit_price") not in (None, "") else 0)
        if unit_price is None or unit_price < 0:
            raise ValueError("unit_price must be a non-negative number")
        unit_price = round_money(unit_price)
        lines.append({
            "description": str(raw.get("description") or "").strip() or "Item",
            "quantity": qty,
            "unit_price": unit_price,
            "total_amount": round_money(unit_price * qty),
        })
    return lines

def create_bill(ctx, payload: dict) -> Bill:
    try:
        customer_id = int(payload.get("customer_id"))
    except (TypeError, ValueError):
        raise ValueError("customer_id is required")
    try:
        billing_date = date.fromisoformat(str(payload.get("billing_date")))
    except ValueError:
        raise ValueError("billing_date must be YYYY-MM-DD")
    if not db.session.get(Customer, customer_id):
        raise ValueError(f"Customer {customer_id} not found")

    lines = bill_lines(payload.get("items"))
    subtotal = round_money(sum((l["total_amount"] for l in lines), D("0")))
    branch_id = ctx.effective_branch_id(payload.get("branch_id"))
    day = billing_date
    attempts = current_app.config.get("RECEIPT_NUMBER_MAX_ATTEMPTS", 5)

    for attempt in range(1, attempts + 1):
        number = format_bill_number(next_bill_sequence(day), day)
        bill = Bill(bill_number=number, customer_id=customer_id, billing_date=billing_date,
                    subtotal=subtotal, total_amount=subtotal, branch_id=branch_id,
                    created_by=ctx.username, items=[BillItem(**l) for l in lines])
        db.session.add(bill)
        try:
            db.session.commit()
            log.info("bill %s for customer %s: TSh %s by %s", number, customer_id, subtotal, ctx.username)
            return bill
        except IntegrityError:
            db.session.rollback()
            log.warning("bill number %s taken, retrying (attempt %s/%s)", number, attempt, attempts)

    raise ValueError(f"Could not allocate a bill number after {attempts} attempts")
