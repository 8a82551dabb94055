# laundrydesk/cash/routes.py
from datetime import date

from flask import request

from . import bp
from ..services.cash import daily_summary, validate_cash_balance
from ..utils.api import err, ok
from ..utils.decorators import permission_required
from ..utils.money import parse_money


def _parse_day(value):
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


@bp.get("/daily/<day>")
@permission_required("canManageCash")
def daily(day, ctx):
    d = _parse_day(day)
    if not d:
        return err("date must be YYYY-MM-DD", 422)
    return ok("daily summary", daily_summary(ctx, d, request.args.get("branch_id", type=int)))


@bp.post("/validate")
@permission_required("canManageCash")
def validate(ctx):
    data = request.get_json(silent=True) or {}
    d = _parse_day(data.get("date"))
    expected = parse_money(data.get("expected_cash_in_hand"))
    if not d or expected is None:
        return err("date (YYYY-MM-DD) and expected_cash_in_hand are required", 422)
    branch_id = data.get("branch_id")
    if branch_id not in (None, ""):
        try:
            branch_id = int(branch_id)
        except (TypeError, ValueError):
            return err("branch_id must be a number", 422)
    else:
        branch_id = None
    return ok("cash validation", validate_cash_balance(ctx, d, expected, branch_id))
