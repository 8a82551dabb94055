# laundrydesk/expenses/routes.py
from datetime import date

from flask import request

from . import bp
from ..extensions import db
from ..model import Expense
from ..services.expenses import create_expense, expense_fields, expenses_query, summary_by_category
from ..utils.api import err, ok
from ..utils.decorators import permission_required


def _date_arg(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{name} must be YYYY-MM-DD")


def _get_scoped(ctx, expense_id):
    e = db.session.get(Expense, expense_id)
    if not e or not ctx.sees_branch(e.branch_id):
        return None
    return e


@bp.get("")
@permission_required("canManageExpenses")
def list_expenses(ctx):
    q = expenses_query(ctx, _date_arg("start_date"), _date_arg("end_date"),
                       (request.args.get("category") or "").strip() or None,
                       request.args.get("branch_id", type=int))
    rows = q.order_by(Expense.date.desc(), Expense.id.desc()).all()
    return ok("expenses", {"items": [e.as_api() for e in rows]})


@bp.get("/summary/by-category")
@permission_required("canManageExpenses")
def by_category(ctx):
    return ok("expense summary", {"items": summary_by_category(ctx, _date_arg("start_date"), _date_arg("end_date"))})


@bp.get("/<int:expense_id>")
@permission_required("canManageExpenses")
def get_expense(expense_id: int, ctx):
    e = _get_scoped(ctx, expense_id)
    if not e:
        return err("expense not found", 404)
    return ok("expense", e.as_api())


@bp.post("")
@permission_required("canManageExpenses")
def add_expense(ctx):
    e = create_expense(ctx, request.get_json(silent=True) or {})
    return ok("Expense recorded", e.as_api(), status=201)


@bp.put("/<int:expense_id>")
@permission_required("canManageExpenses")
def update_expense(expense_id: int, ctx):
    e = _get_scoped(ctx, expense_id)
    if not e:
        return err("expense not found", 404)
    for k, v in expense_fields(request.get_json(silent=True) or {}, partial=True).items():
        setattr(e, k, v)
    db.session.commit()
    return ok("Expense updated", e.as_api())


@bp.delete("/<int:expense_id>")
@permission_required("canManageExpenses")
def delete_expense(expense_id: int, ctx):
    e = _get_scoped(ctx, expense_id)
    if not e:
        return err("expense not found", 404)
    db.session.delete(e)
    db.session.commit()
    return ok("Expense deleted", {"id": expense_id})
