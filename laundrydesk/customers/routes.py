# laundrydesk/customers/routes.py
from flask import request
from sqlalchemy import or_

from . import bp
from ..extensions import db
from ..model import Customer, LoyaltyAccount
from ..services.loyalty import summary
from ..utils.api import err, ok
from ..utils.decorators import permission_required


@bp.get("")
@permission_required()
def list_customers(ctx):
    q = Customer.query
    term = (request.args.get("q") or "").strip()
    if term:
        like = f"%{term}%"
        q = q.filter(or_(Customer.name.ilike(like), Customer.phone.ilike(like)))
    limit = min(request.args.get("limit", 50, type=int), 200)
    rows = q.order_by(Customer.name.asc()).limit(limit).all()
    return ok("customers", {"items": [c.as_api() for c in rows]})


@bp.get("/<int:customer_id>")
@permission_required()
def get_customer(customer_id: int, ctx):
    c = db.session.get(Customer, customer_id)
    if not c:
        return err("customer not found", 404)
    acc = LoyaltyAccount.query.filter_by(customer_id=c.id).first()
    data = c.as_api()
    data["loyalty"] = summary(acc) if acc else None
    return ok("customer", data)


@bp.post("")
@permission_required("canManageCustomers")
def create_customer(ctx):
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    phone = (data.get("phone") or "").strip()
    if not name or not phone:
        return err("name and phone are required", 422)
    if Customer.query.filter_by(phone=phone).first():
        return err("A customer with this phone already exists", 409)

    c = Customer(name=name, phone=phone,
                 email=(data.get("email") or "").strip() or None,
                 address=(data.get("address") or "").strip() or None)
    db.session.add(c)
    db.session.commit()
    return ok("Customer created", c.as_api(), status=201)
