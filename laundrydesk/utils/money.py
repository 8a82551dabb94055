# laundrydesk/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal

CENT = Decimal("0.01")

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def parse_money(x) -> Money | None:
    """Strict variant of D() for user input: returns None for anything non-numeric."""
    if x is None or isinstance(x, bool):
        return None
    try:
        value = D(x)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not value.is_finite():
        return None
    return value

def round_money(x: Money) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)

def to_cents(x) -> int:
    return int(round_money(x) * 100)

def from_cents(cents: int) -> Money:
    return (Decimal(cents) / 100).quantize(CENT)

def format_tsh(x) -> str:
    # 3000 -> "3,000", 2999.5 -> "2,999.50"
    q = round_money(x)
    if q == q.to_integral_value():
        return f"{int(q):,}"
    return f"{q:,.2f}"
