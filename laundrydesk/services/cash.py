# laundrydesk/services/cash.py
"""Daily takings by payment method, and the cash-in-hand check."""
from datetime import date, datetime, timedelta

from sqlalchemy import func

from ..extensions import db
from ..model import Transaction
from ..utils.money import D, Money, format_tsh, round_money
from .payments import payment_tolerance
from .reconciliation import PAYMENT_METHODS

def _day_bounds(day: date):
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)

def daily_payment_totals(ctx, day: date, branch_id=None) -> dict:
    """Payments received on ``day`` per method. ``cash`` is what the daily report calls book sales."""
    start, end = _day_bounds(day)
    q = (db.session.query(Transaction.payment_method, func.coalesce(func.sum(Transaction.amount), 0))
         .filter(Transaction.transaction_type == "payment_received",
                 Transaction.transaction_date >= start,
                 Transaction.transaction_date < end))
    branch_id = ctx.effective_branch_id(branch_id)
    if branch_id is not None:
        q = q.filter((Transaction.branch_id == branch_id) | (Transaction.branch_id.is_(None)))

    totals = {m: D("0.00") for m in PAYMENT_METHODS}
    for method, amount in q.group_by(Transaction.payment_method).all():
        totals[method or "cash"] = round_money(totals.get(method or "cash", D(0)) + D(amount))
    return totals

def daily_summary(ctx, day: date, branch_id=None) -> dict:
    totals = daily_payment_totals(ctx, day, branch_id)
    grand = round_money(sum(totals.values(), D("0")))
    return {
        "date": day.isoformat(),
        "book_sales": float(totals["cash"]),
        "card_sales": float(totals["card"]),
        "mobile_money_sales": float(totals["mobile_money"]),
        "bank_transfer_sales": float(totals["bank_transfer"]),
        "total_received": float(grand),
    }

def validate_cash_balance(ctx, day: date, expected_cash_in_hand: Money, branch_id=None) -> dict:
    actual = daily_payment_totals(ctx, day, branch_id)["cash"]
    expected = round_money(expected_cash_in_hand)
    difference = round_money(abs(actual - expected))
    valid = difference <= payment_tolerance()
    if valid:
        message = "Cash balance is valid"
    else:
        message = (f"Cash balance discrepancy: Expected {format_tsh(expected)}, "
                   f"Actual {format_tsh(actual)}, Difference: {format_tsh(difference)}")
    return {
        "valid": valid,
        "expected": float(expected),
        "actual": float(actual),
        "difference": float(difference),
        "message": message,
    }
