# laundrydesk/reports/routes.py
from datetime import date

from flask import request

from . import bp
from ..services.reports import daily_profit, financial_report, overview, parse_range, sales_report
from ..utils.api import err, ok
from ..utils.decorators import permission_required


def _range():
    return parse_range(request.args.get("start_date"), request.args.get("end_date"))


@bp.get("/sales")
@permission_required("canViewReports")
def sales(ctx):
    start, end = _range()
    return ok("sales report", {"items": sales_report(ctx, start, end, request.args.get("branch_id", type=int))})


@bp.get("/profit/daily")
@permission_required("canViewReports")
def profit_daily(ctx):
    start, end = _range()
    return ok("daily profit", {"items": daily_profit(ctx, start, end, request.args.get("branch_id", type=int))})


@bp.get("/financial")
@permission_required("canViewReports")
def financial(ctx):
    start, end = _range()
    period = request.args.get("period", "day")
    return ok("financial report", financial_report(ctx, start, end, period, request.args.get("branch_id", type=int)))


@bp.get("/overview")
@permission_required("canViewReports")
def day_overview(ctx):
    day = None
    if request.args.get("date"):
        try:
            day = date.fromisoformat(request.args["date"])
        except ValueError:
            return err("date must be YYYY-MM-DD", 422)
    return ok("overview", overview(ctx, day, request.args.get("branch_id", type=int)))
