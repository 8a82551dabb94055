# laundrydesk/services/expenses.py
"""Branch expenses: validation and the category summary."""
from datetime import date

from sqlalchemy import func

from ..extensions import db
from ..model import Expense
from ..model.expense import EXPENSE_SOURCES
from ..utils.money import D, parse_money, round_money

REQUIRED = ("date", "category", "amount", "payment_source")

def _parse_date(value, field="date"):
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be YYYY-MM-DD")

def expense_fields(data: dict, partial=False) -> dict:
    """Validated column values from a request body; ``partial`` allows a subset (PUT)."""
    if not partial:
        missing = [f for f in REQUIRED if data.get(f) in (None, "")]
        if missing:
            raise ValueError(f"{', '.join(missing)} required")

    fields = {}
    if "date" in data:
        fields["date"] = _parse_date(data.get("date"))
    if "category" in data:
        category = (data.get("category") or "").strip()
        if not category:
            raise ValueError("category cannot be empty")
        fields["category"] = category
    if "amount" in data:
        amount = parse_money(data.get("amount"))
        if amount is None or amount <= 0:
            raise ValueError("amount must be greater than 0")
        fields["amount"] = round_money(amount)
    if "payment_source" in data:
        source = (data.get("payment_source") or "").strip().lower()
        if source not in EXPENSE_SOURCES:
            raise ValueError(f"payment_source must be one of {', '.join(EXPENSE_SOURCES)}")
        fields["payment_source"] = source
    for key in ("description", "receipt_number"):
        if key in data:
            fields[key] = (data.get(key) or "").strip() or None
    return fields

def expenses_query(ctx, start=None, end=None, category=None, branch_id=None):
    q = ctx.scope(Expense.query, Expense)
    branch_id = ctx.effective_branch_id(branch_id)
    if ctx.sees_all_branches and branch_id is not None:
        q = q.filter((Expense.branch_id == branch_id) | (Expense.branch_id.is_(None)))
    if start:
        q = q.filter(Expense.date >= start)
    if end:
        q = q.filter(Expense.date <= end)
    if category:
        q = q.filter(Expense.category == category)
    return q

def summary_by_category(ctx, start=None, end=None):
    """Totals per (category, payment source), largest first."""
    q = (expenses_query(ctx, start, end)
         .with_entities(Expense.category, Expense.payment_source,
                        func.coalesce(func.sum(Expense.amount), 0), func.count(Expense.id))
         .group_by(Expense.category, Expense.payment_source))
    rows = [
        {"category": c, "payment_source": s, "total_amount": round_money(D(total)), "count": n}
        for c, s, total, n in q.all()
    ]
    rows.sort(key=lambda r: r["total_amount"], reverse=True)
    for r in rows:
        r["total_amount"] = float(r["total_amount"])
    return rows

def create_expense(ctx, data):
    e = Expense(**expense_fields(data), created_by=ctx.username, branch_id=ctx.effective_branch_id(data.get("branch_id")))
    db.session.add(e)
    db.session.commit()
    return e
