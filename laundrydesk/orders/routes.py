# laundrydesk/orders/routes.py
from datetime import datetime, timedelta

from flask import request

from . import bp
from ..errors import OrderNotFound
from ..model import Order
from ..services.collection import set_estimated_collection_date, update_status
from ..services.intake import create_receipt_orders
from ..services.payments import receive_payment
from ..services.receipts import load_receipt_items, receipt_view
from ..utils.api import ok
from ..utils.dates import parse_iso8601, utcnow
from ..utils.decorators import permission_required


@bp.get("")
@permission_required()
def list_orders(ctx):
    """
    Query params:
      - page, per_page
      - status=pending|processing|ready|collected
      - receipt_number=...
      - customer_id=...
      - overdue=true
      - start=YYYY-MM-DD
      - end=YYYY-MM-DD (inclusive)
    """
    q = ctx.scope(Order.query, Order)

    status = request.args.get("status")
    receipt = request.args.get("receipt_number")
    customer_id = request.args.get("customer_id", type=int)
    start = request.args.get("start")
    end = request.args.get("end")

    if status: q = q.filter(Order.status == status)
    if receipt: q = q.filter(Order.receipt_number == receipt)
    if customer_id: q = q.filter(Order.customer_id == customer_id)
    if request.args.get("overdue") == "true":
        q = q.filter(Order.status == "ready",
                     Order.estimated_collection_date.isnot(None),
                     Order.estimated_collection_date < utcnow())

    if start:
        q = q.filter(Order.order_date >= datetime.fromisoformat(start))
    if end:
        # make end inclusive for the whole day
        q = q.filter(Order.order_date < datetime.fromisoformat(end) + timedelta(days=1))

    page = request.args.get("page", 1, type=int)
    per = min(request.args.get("per_page", 20, type=int), 100)

    q = q.order_by(Order.order_date.desc(), Order.id.desc())
    paged = q.paginate(page=page, per_page=per, error_out=False)

    return ok("orders", {
        "page": page,
        "per_page": per,
        "total": paged.total,
        "items": [o.as_api() for o in paged.items],
    })


@bp.get("/<int:order_id>")
@permission_required()
def get_order(order_id: int, ctx):
    o = ctx.scope(Order.query.filter(Order.id == order_id), Order).first()
    if not o:
        raise OrderNotFound(order_id)
    return ok("order", o.as_api())


@bp.post("")
@permission_required("canCreateOrders")
def create_order(ctx):
    payload = request.get_json(silent=True) or {}
    receipt_number, _, tx = create_receipt_orders(ctx, payload)
    data = receipt_view(load_receipt_items(ctx, receipt_number))
    data["receipt_number"] = receipt_number
    data["transaction"] = tx.as_api() if tx else None
    resp = ok("order created", data, status=201)
    resp.headers["X-Receipt-Number"] = receipt_number
    return resp


@bp.put("/<int:order_id>/status")
@permission_required("canManageOrders")
def change_status(order_id: int, ctx):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().lower()
    order = update_status(ctx, order_id, status)
    return ok("Order status updated successfully", order.as_api())


@bp.put("/<int:order_id>/estimated-collection-date")
@permission_required("canManageOrders")
def change_estimated_collection_date(order_id: int, ctx):
    data = request.get_json(silent=True) or {}
    when = parse_iso8601(data.get("estimated_collection_date"))
    if not when:
        raise ValueError("estimated_collection_date is required (ISO 8601)")
    order = set_estimated_collection_date(ctx, order_id, when)
    return ok("Estimated collection date updated successfully", order.as_api())


@bp.post("/<int:order_id>/receive-payment")
@permission_required("canManageCash")
def receive_order_payment(order_id: int, ctx):
    data = request.get_json(silent=True) or {}
    plan, items, tx = receive_payment(
        ctx, order_id, data.get("payment_amount"),
        method=data.get("payment_method") or "cash", notes=data.get("notes"),
    )
    if plan.noop:
        return ok(plan.message, {"payment": plan.as_api(), "receipt": receipt_view(items)})
    return ok("Payment received successfully", {
        "payment": plan.as_api(),
        "receipt": receipt_view(items),
        "transaction": tx.as_api() if tx else None,
    })
