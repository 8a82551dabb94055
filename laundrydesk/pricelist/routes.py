# laundrydesk/pricelist/routes.py
from flask import request

from . import bp
from ..extensions import db
from ..model import Service
from ..utils.api import err, ok
from ..utils.decorators import permission_required
from ..utils.money import parse_money, round_money


@bp.get("")
@permission_required()
def list_services(ctx):
    q = Service.query
    if request.args.get("all") != "true":
        q = q.filter(Service.is_active.is_(True))
    return ok("price list", {"items": [s.as_api() for s in q.order_by(Service.name).all()]})


@bp.post("")
@permission_required("canEditPrices")
def create_service(ctx):
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        return err("name is required", 422)
    if Service.query.filter_by(name=name).first():
        return err("A service with this name already exists", 409)

    prices = {}
    for field in ("base_price", "price_per_item", "price_per_kg"):
        value = parse_money(data.get(field) if data.get(field) not in (None, "") else 0)
        if value is None or value < 0:
            return err(f"{field} must be a non-negative number", 422)
        prices[field] = round_money(value)

    s = Service(name=name, description=data.get("description"), **prices)
    db.session.add(s)
    db.session.commit()
    return ok("Service created", s.as_api(), status=201)
