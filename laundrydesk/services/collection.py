# laundrydesk/services/collection.py
"""ready -> collected, and the other forward status moves."""
import logging

from ..errors import DuplicatePayment, OrderNotFound
from ..extensions import db
from ..model import Order
from ..utils.dates import utcnow
from .loyalty import award_points_on_collection
from .payments import apply_plan, check_duplicate_payment, check_payment_method, payment_tolerance
from .receipts import load_receipt_items
from .reconciliation import COLLECTED, READY, check_transition, plan_collection

log = logging.getLogger(__name__)

def collect_receipt(ctx, receipt_number, amount=None, method="cash", notes=None):
    """Collect every item on a receipt, taking a collection-time payment first if given.

    A partial payment is recorded but leaves the receipt ``ready``.
    """
    method = check_payment_method(method)
    items = load_receipt_items(ctx, receipt_number, lock=True)
    plan = plan_collection(items, amount, tolerance=payment_tolerance())

    tx = None
    if plan.payment:
        if check_duplicate_payment(items[0].receipt_number, plan.payment.amount):
            raise DuplicatePayment()
        tx = apply_plan(ctx, plan.payment, method, action="collected", notes=notes)

    loyalty = None
    if plan.collectible:
        now = utcnow()
        for item in items:
            item.status = COLLECTED
            item.collected_date = now
        if plan.totals.receipt_total > 0:
            loyalty = award_points_on_collection(items[0].customer_id, items[0].id, plan.totals.receipt_total)
        log.info("receipt %s collected (%s items) by %s", items[0].receipt_number, len(items), ctx.username)
    else:
        log.info("receipt %s part-paid at collection, balance %s remains",
                 items[0].receipt_number, plan.totals.balance_due)

    db.session.commit()
    return {
        "collected": plan.collectible,
        "items": items,
        "totals": plan.totals,
        "payment": plan.payment,
        "transaction": tx,
        "loyalty": loyalty,
    }

def update_status(ctx, order_id, status):
    order = ctx.scope(Order.query.filter(Order.id == order_id), Order).first()
    if not order:
        raise OrderNotFound(order_id)

    if status == COLLECTED:
        collect_receipt(ctx, order.receipt_number)
        return db.session.get(Order, order.id)

    check_transition(order.status, status)
    order.status = status
    if status == READY:
        order.ready_date = utcnow()
    if order.branch_id is None and ctx.branch_id is not None:
        order.branch_id = ctx.branch_id
    db.session.commit()
    return order

def set_estimated_collection_date(ctx, order_id, when):
    order = ctx.scope(Order.query.filter(Order.id == order_id), Order).first()
    if not order:
        raise OrderNotFound(order_id)
    order.estimated_collection_date = when
    db.session.commit()
    return order
