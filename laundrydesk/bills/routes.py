# laundrydesk/bills/routes.py
import re
from datetime import date

from flask import request

from . import bp
from ..extensions import db
from ..model import Bill
from ..services.billing import create_bill
from ..utils.api import err, ok
from ..utils.decorators import permission_required

MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def _month_bounds(value):
    m = MONTH_RE.match(value or "")
    if not m or not 1 <= int(m.group(2)) <= 12:
        raise ValueError("month must be YYYY-MM")
    year, month = int(m.group(1)), int(m.group(2))
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


@bp.get("")
@permission_required()
def list_bills(ctx):
    q = ctx.scope(Bill.query, Bill)
    customer_id = request.args.get("customer_id", type=int)
    if customer_id:
        q = q.filter(Bill.customer_id == customer_id)
    if request.args.get("month"):
        start, end = _month_bounds(request.args["month"])
        q = q.filter(Bill.billing_date >= start, Bill.billing_date < end)
    try:
        if request.args.get("date_from"):
            q = q.filter(Bill.billing_date >= date.fromisoformat(request.args["date_from"]))
        if request.args.get("date_to"):
            q = q.filter(Bill.billing_date <= date.fromisoformat(request.args["date_to"]))
    except ValueError:
        return err("date_from and date_to must be YYYY-MM-DD", 422)
    rows = q.order_by(Bill.billing_date.desc(), Bill.id.desc()).all()
    return ok("bills", {"items": [b.as_api(with_items=False) for b in rows]})


@bp.get("/<int:bill_id>")
@permission_required()
def get_bill(bill_id: int, ctx):
    b = db.session.get(Bill, bill_id)
    if not b or not ctx.sees_branch(b.branch_id):
        return err("bill not found", 404)
    return ok("bill", b.as_api())


@bp.post("")
@permission_required("canCreateOrders")
def add_bill(ctx):
    b = create_bill(ctx, request.get_json(silent=True) or {})
    return ok("Bill created", b.as_api(), status=201)
