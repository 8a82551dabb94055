# laundrydesk/loyalty/routes.py
from flask import request

from . import bp
from ..extensions import db
from ..model import Customer, LoyaltyTransaction
from ..services.loyalty import LOYALTY_CONFIG, get_or_create_account, redeem_points, summary
from ..utils.api import err, ok
from ..utils.decorators import permission_required


@bp.get("/tiers")
def tiers():
    return ok("tiers", LOYALTY_CONFIG["tiers"])


@bp.get("/customers/<int:customer_id>")
@permission_required()
def customer_loyalty(customer_id: int, ctx):
    if not db.session.get(Customer, customer_id):
        return err("customer not found", 404)
    acc = get_or_create_account(customer_id)
    db.session.commit()
    return ok("loyalty", summary(acc))


@bp.get("/customers/<int:customer_id>/transactions")
@permission_required()
def customer_transactions(customer_id: int, ctx):
    limit = min(request.args.get("limit", 50, type=int), 200)
    rows = (LoyaltyTransaction.query
            .filter_by(customer_id=customer_id)
            .order_by(LoyaltyTransaction.created_at.desc(), LoyaltyTransaction.id.desc())
            .limit(limit).all())
    return ok("loyalty transactions", {"items": [r.as_api() for r in rows]})


@bp.post("/redeem")
@permission_required("canManageCash")
def redeem(ctx):
    data = request.get_json(silent=True) or {}
    try:
        customer_id = int(data.get("customer_id"))
    except (TypeError, ValueError):
        return err("customer_id is required", 422)
    result = redeem_points(customer_id, data.get("points"), data.get("order_id"))
    return ok(f"Discount of TSh {result['discount_amount']:,} applied", result)
