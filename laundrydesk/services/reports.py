# laundrydesk/services/reports.py
"""
Sales and profit reports. Revenue is money actually received (the
transactions ledger), expenses come from the expenses table; profit is
the difference. Days with neither are left out.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal

from ..extensions import db
from ..model import Order, Transaction
from ..utils.dates import utcnow
from ..utils.money import D, round_money
from .expenses import expenses_query
from .reconciliation import PAYMENT_METHODS

MAX_REPORT_DAYS = 366
PERIODS = ("day", "week", "month")
DIGITAL_METHODS = tuple(m for m in PAYMENT_METHODS if m != "cash")

def parse_range(start, end):
    try:
        start, end = date.fromisoformat(str(start)), date.fromisoformat(str(end))
    except ValueError:
        raise ValueError("start_date and end_date are required (YYYY-MM-DD)")
    if end < start:
        raise ValueError("end_date is before start_date")
    if (end - start).days >= MAX_REPORT_DAYS:
        raise ValueError(f"Report range is limited to {MAX_REPORT_DAYS} days")
    return start, end

def _bounds(start: date, end: date):
    return datetime.combine(start, datetime.min.time()), datetime.combine(end + timedelta(days=1), datetime.min.time())

def _branch_filter(ctx, q, model, branch_id):
    branch_id = ctx.effective_branch_id(branch_id)
    if branch_id is not None:
        q = q.filter((model.branch_id == branch_id) | (model.branch_id.is_(None)))
    return q

def revenue_by_day(ctx, start, end, branch_id=None) -> dict:
    """{day: {method: amount}} for payments received between start and end inclusive."""
    lo, hi = _bounds(start, end)
    q = (db.session.query(Transaction.transaction_date, Transaction.payment_method, Transaction.amount)
         .filter(Transaction.transaction_type == "payment_received",
                 Transaction.transaction_date >= lo,
                 Transaction.transaction_date < hi))
    days = defaultdict(lambda: {m: D("0.00") for m in PAYMENT_METHODS})
    for when, method, amount in _branch_filter(ctx, q, Transaction, branch_id).all():
        bucket = days[when.date()]
        method = method or "cash"
        bucket[method] = round_money(bucket.get(method, D(0)) + D(amount))
    return days

def expenses_by_day(ctx, start, end, branch_id=None) -> dict:
    """{day: {payment_source: amount}}"""
    days = defaultdict(lambda: defaultdict(lambda: D("0.00")))
    for e in expenses_query(ctx, start, end, branch_id=branch_id).all():
        days[e.date][e.payment_source] = round_money(days[e.date][e.payment_source] + D(e.amount))
    return days

def _day_row(day, revenue, expenses):
    total_revenue = round_money(sum(revenue.values(), D("0")))
    total_expenses = round_money(sum(expenses.values(), D("0")))
    return {
        "date": day.isoformat(),
        "revenue": total_revenue,
        "cash_revenue": revenue.get("cash", D("0.00")),
        "digital_revenue": round_money(sum((revenue.get(m, D(0)) for m in DIGITAL_METHODS), D("0"))),
        "by_method": dict(revenue),
        "expenses": total_expenses,
        "cash_expenses": expenses.get("cash", D("0.00")),
        "bank_expenses": expenses.get("bank", D("0.00")),
        "mobile_money_expenses": expenses.get("mobile_money", D("0.00")),
        "profit": round_money(total_revenue - total_expenses),
    }

def _as_float(row: dict) -> dict:
    out = {}
    for k, v in row.items():
        if isinstance(v, dict):
            out[k] = _as_float(v)
        else:
            out[k] = float(v) if isinstance(v, Decimal) else v
    return out

def daily_profit(ctx, start, end, branch_id=None) -> list:
    revenue = revenue_by_day(ctx, start, end, branch_id)
    expenses = expenses_by_day(ctx, start, end, branch_id)
    empty_revenue = {m: D("0.00") for m in PAYMENT_METHODS}
    rows = [
        _day_row(day, revenue.get(day, empty_revenue), expenses.get(day, {}))
        for day in sorted(set(revenue) | set(expenses), reverse=True)
    ]
    return [_as_float(r) for r in rows]

def period_key(day: date, period: str) -> str:
    if period == "week":
        return (day - timedelta(days=day.weekday())).isoformat()
    if period == "month":
        return f"{day:%Y-%m}"
    return day.isoformat()

def financial_report(ctx, start, end, period="day", branch_id=None) -> dict:
    if period not in PERIODS:
        raise ValueError(f"period must be one of {', '.join(PERIODS)}")

    summed = ("revenue", "cash_revenue", "digital_revenue", "expenses",
              "cash_expenses", "bank_expenses", "mobile_money_expenses", "profit")
    groups = {}
    for row in daily_profit(ctx, start, end, branch_id):
        key = period_key(date.fromisoformat(row["date"]), period)
        g = groups.setdefault(key, {"period": key, "days_count": 0, **{f: D("0.00") for f in summed}})
        g["days_count"] += 1
        for f in summed:
            g[f] = round_money(g[f] + D(row[f]))

    rows = [groups[k] for k in sorted(groups, reverse=True)]
    totals = {
        "total_revenue": round_money(sum((g["revenue"] for g in rows), D("0"))),
        "total_expenses": round_money(sum((g["expenses"] for g in rows), D("0"))),
    }
    totals["total_profit"] = round_money(totals["total_revenue"] - totals["total_expenses"])
    return {"period": period, "data": [_as_float(g) for g in rows], "totals": _as_float(totals)}

def sales_report(ctx, start, end, branch_id=None) -> list:
    """Per-day order stats by order date, newest first."""
    lo, hi = _bounds(start, end)
    q = ctx.scope(Order.query, Order).filter(Order.order_date >= lo, Order.order_date < hi)
    if ctx.sees_all_branches:
        q = _branch_filter(ctx, q, Order, branch_id)

    days = {}
    for o in q.all():
        d = days.setdefault(o.order_date.date(), {
            "total_orders": 0, "total_revenue": D("0.00"), "collected_revenue": D("0.00"),
            "pending_orders": 0, "ready_orders": 0,
        })
        d["total_orders"] += 1
        d["total_revenue"] = round_money(d["total_revenue"] + D(o.total_amount))
        if o.status == "collected":
            d["collected_revenue"] = round_money(d["collected_revenue"] + D(o.total_amount))
        elif o.status == "pending":
            d["pending_orders"] += 1
        elif o.status == "ready":
            d["ready_orders"] += 1
    return [_as_float({"date": day.isoformat(), **days[day]}) for day in sorted(days, reverse=True)]

def overview(ctx, day: date | None = None, branch_id=None) -> dict:
    day = day or utcnow().date()
    row = _day_row(day,
                   revenue_by_day(ctx, day, day, branch_id).get(day, {m: D("0.00") for m in PAYMENT_METHODS}),
                   expenses_by_day(ctx, day, day, branch_id).get(day, {}))
    lo, hi = _bounds(day, day)
    q = ctx.scope(Order.query, Order).filter(Order.order_date >= lo, Order.order_date < hi)
    if ctx.sees_all_branches:
        q = _branch_filter(ctx, q, Order, branch_id)
    return {
        "date": day.isoformat(),
        "total_income": float(row["revenue"]),
        "cash_income": float(row["cash_revenue"]),
        "digital_income": float(row["digital_revenue"]),
        "total_expenses": float(row["expenses"]),
        "net_income": float(row["profit"]),
        "total_transactions": q.count(),
    }
