# laundrydesk/services/receipts.py
from sqlalchemy import func

from ..errors import ReceiptNotFound
from ..model import Order
from .reconciliation import READY, is_overdue, receipt_status, summarize_receipt

def load_receipt_items(ctx, receipt_number: str, lock: bool = False):
    """All line items of a receipt visible to ``ctx``, in id order.

    ``lock=True`` takes row locks for a read-modify-write of paid amounts.
    """
    q = Order.query.filter(func.upper(Order.receipt_number) == (receipt_number or "").strip().upper())
    q = ctx.scope(q, Order).order_by(Order.id)
    if lock:
        q = q.with_for_update(of=Order)
    items = q.all()
    if not items:
        raise ReceiptNotFound(receipt_number)
    return items

def receipt_view(items, now=None):
    totals = summarize_receipt(items)
    first = items[0]
    return {
        "receipt_number": first.receipt_number,
        "status": receipt_status(items),
        "customer": {
            "id": first.customer_id,
            "name": first.customer.name if first.customer else None,
            "phone": first.customer.phone if first.customer else None,
        },
        "branch_id": first.branch_id,
        "receipt_item_count": len(items),
        "is_overdue": any(is_overdue(i, now) for i in items),
        **totals.as_api(),
        "items": [i.as_api() for i in items],
    }

def collection_queue(ctx, limit=20, overdue_only=False, now=None):
    """Receipts whose every item is ready; overdue first, then oldest promise first."""
    ready = ctx.scope(Order.query.filter(Order.status == READY), Order).order_by(Order.id)
    numbers = list(dict.fromkeys(o.receipt_number for o in ready.all()))
    if not numbers:
        return []

    groups = {}
    rows = ctx.scope(Order.query.filter(Order.receipt_number.in_(numbers)), Order).order_by(Order.id)
    for o in rows.all():
        groups.setdefault(o.receipt_number, []).append(o)

    entries = []
    for items in groups.values():
        if receipt_status(items) != READY:
            continue
        overdue = any(is_overdue(i, now) for i in items)
        if overdue_only and not overdue:
            continue
        first = items[0]
        due = first.estimated_collection_date or first.ready_date or first.order_date
        entries.append((not overdue, due, receipt_view(items, now)))

    entries.sort(key=lambda e: (e[0], e[1]))
    return [view for _, _, view in entries[:limit]]
