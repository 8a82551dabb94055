# laundrydesk/services/payments.py
"""
Writes payment plans back to the line items.

Ledger: one ``Transaction`` per payment action. Audit: one
``PaymentAuditLog`` row per touched line item. Callers commit.
"""
import logging
from datetime import timedelta

from flask import current_app

from ..errors import DuplicatePayment, InvalidPayment, OrderNotFound
from ..extensions import db
from ..model import Order, PaymentAuditLog, Transaction
from ..utils.dates import utcnow
from ..utils.money import D, round_money
from .receipts import load_receipt_items
from .reconciliation import PAYMENT_METHODS, STANDALONE, payment_status_for, plan_payment

log = logging.getLogger(__name__)

def payment_tolerance():
    return D(current_app.config.get("PAYMENT_TOLERANCE", "0.01"))

def check_payment_method(method) -> str:
    method = (method or "cash").strip().lower()
    if method not in PAYMENT_METHODS:
        raise InvalidPayment(f"Invalid payment method: {method}")
    return method

def check_duplicate_payment(receipt_number, amount, now=None) -> bool:
    """Same receipt, same amount, inside the configured window."""
    now = now or utcnow()
    window = timedelta(seconds=current_app.config.get("DUPLICATE_PAYMENT_WINDOW_SECONDS", 60))
    row = (Transaction.query
           .filter(Transaction.receipt_number == receipt_number,
                   Transaction.transaction_type == "payment_received",
                   Transaction.amount == round_money(amount),
                   Transaction.transaction_date >= now - window,
                   Transaction.transaction_date <= now + window)
           .first())
    return row is not None

def record_payment_transaction(ctx, order, amount, method, description=None) -> Transaction:
    tx = Transaction(
        order_id=order.id,
        receipt_number=order.receipt_number,
        transaction_type="payment_received",
        amount=round_money(amount),
        payment_method=method,
        description=description or f"Payment for receipt {order.receipt_number}",
        created_by=ctx.username,
        branch_id=order.branch_id,
    )
    db.session.add(tx)
    return tx

def apply_plan(ctx, plan, method, action, notes=None):
    """Mutate the planned items and write ledger + audit rows. Returns the Transaction."""
    if plan.noop or not plan.allocations:
        return None

    items = [a.item for a in plan.allocations]
    note = notes or f"Payment for receipt {items[0].receipt_number} ({len(items)} items)"

    for a in plan.allocations:
        item = a.item
        if a.amount == 0:
            continue
        old_status, old_method = item.payment_status, item.payment_method
        item.paid_amount = a.paid_after
        item.payment_status = payment_status_for(item.total_amount, a.paid_after)
        item.payment_method = method
        db.session.add(PaymentAuditLog(
            order_id=item.id,
            action=action,
            old_payment_status=old_status,
            new_payment_status=item.payment_status,
            old_paid_amount=a.paid_before,
            new_paid_amount=a.paid_after,
            old_payment_method=old_method,
            new_payment_method=method,
            changed_by=ctx.username,
            notes=note,
        ))

    tx = record_payment_transaction(ctx, items[0], plan.amount, method, note)
    log.info("payment %s TSh %s (%s) on receipt %s by %s",
             action, plan.amount, method, items[0].receipt_number, ctx.username)
    return tx

def receive_payment(ctx, order_id, amount, method="cash", notes=None):
    """Standalone payment: settles the whole receipt the order belongs to, exactly."""
    method = check_payment_method(method)
    order = ctx.scope(Order.query.filter(Order.id == order_id), Order).first()
    if not order:
        raise OrderNotFound(order_id)

    items = load_receipt_items(ctx, order.receipt_number, lock=True)
    plan = plan_payment(items, amount, mode=STANDALONE, tolerance=payment_tolerance())
    if plan.noop:
        return plan, items, None

    if check_duplicate_payment(order.receipt_number, plan.amount):
        raise DuplicatePayment()

    tx = apply_plan(ctx, plan, method, action="payment_received", notes=notes)
    db.session.commit()
    return plan, items, tx

def payment_history(ctx, receipt_number):
    items = load_receipt_items(ctx, receipt_number)
    numbers = {i.receipt_number for i in items}
    return (Transaction.query
            .filter(Transaction.receipt_number.in_(numbers),
                    Transaction.transaction_type == "payment_received")
            .order_by(Transaction.transaction_date.asc(), Transaction.id.asc())
            .all())
