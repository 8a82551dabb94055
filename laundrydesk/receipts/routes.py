# laundrydesk/receipts/routes.py
from flask import request

from . import bp
from ..services.collection import collect_receipt
from ..services.payments import payment_history
from ..services.receipts import collection_queue, load_receipt_items, receipt_view
from ..utils.api import ok
from ..utils.decorators import permission_required


@bp.get("/collection-queue")
@permission_required()
def queue(ctx):
    """
    Query params:
      - limit (default 20)
      - overdue_only=true
    """
    limit = min(request.args.get("limit", 20, type=int), 200)
    overdue_only = request.args.get("overdue_only") == "true"
    items = collection_queue(ctx, limit=limit, overdue_only=overdue_only)
    return ok("collection queue", {"items": items, "count": len(items)})


@bp.get("/<receipt_number>")
@permission_required()
def get_receipt(receipt_number, ctx):
    items = load_receipt_items(ctx, receipt_number)
    return ok("receipt", receipt_view(items))


@bp.get("/<receipt_number>/payments")
@permission_required()
def get_payments(receipt_number, ctx):
    rows = payment_history(ctx, receipt_number)
    return ok("payments", {"items": [t.as_api() for t in rows]})


@bp.post("/<receipt_number>/collect")
@permission_required("canManageOrders")
def collect(receipt_number, ctx):
    data = request.get_json(silent=True) or {}
    result = collect_receipt(
        ctx, receipt_number,
        amount=data.get("payment_amount"),
        method=data.get("payment_method") or "cash",
        notes=data.get("notes"),
    )
    items = result["items"]
    if result["collected"]:
        noun = "item" if len(items) == 1 else "items"
        message = f"Receipt collected successfully ({len(items)} {noun})"
    else:
        message = "Payment recorded. Balance remains; receipt not collected."
    return ok(message, {
        "collected": result["collected"],
        "receipt": receipt_view(items),
        "payment": result["payment"].as_api() if result["payment"] else None,
        "transaction": result["transaction"].as_api() if result["transaction"] else None,
        "loyalty": result["loyalty"],
    })
