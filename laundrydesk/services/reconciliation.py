# laundrydesk/services/reconciliation.py
"""
Receipt and payment reconciliation.

Pure functions over the line items that share a receipt number. Nothing in
here touches the database; callers load the items (locked), ask for a plan,
and write the plan back in one transaction.

Line items are read by attribute (``id``, ``receipt_number``,
``total_amount``, ``paid_amount``, ``status``, ``estimated_collection_date``),
so ORM ``Order`` rows and ``LineItem`` values are interchangeable.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ..errors import (
    AlreadyCollected, AmountMismatch, BalanceOutstanding, ExceedsBalance,
    InvalidAmount, InvalidStatusTransition, NotAllItemsReady, ReceiptNotFound,
)
from ..utils.dates import utcnow
from ..utils.money import D, Money, from_cents, parse_money, round_money, to_cents

TOLERANCE = Decimal("0.01")

PENDING, PROCESSING, READY, COLLECTED = "pending", "processing", "ready", "collected"
STATUSES = (PENDING, PROCESSING, READY, COLLECTED)

PAYMENT_METHODS = ("cash", "card", "mobile_money", "bank_transfer")

COLLECTION = "collection"
STANDALONE = "standalone"


@dataclass(frozen=True)
class LineItem:
    id: int
    receipt_number: str
    total_amount: Money
    paid_amount: Money = Decimal("0")
    status: str = PENDING
    estimated_collection_date: datetime | None = None

    @classmethod
    def from_record(cls, record: dict) -> "LineItem":
        return cls(
            id=record["id"],
            receipt_number=record["receipt_number"],
            total_amount=D(record.get("total_amount")),
            paid_amount=D(record.get("paid_amount")),
            status=record.get("status") or PENDING,
            estimated_collection_date=record.get("estimated_collection_date"),
        )


@dataclass(frozen=True)
class ReceiptTotals:
    receipt_total: Money
    receipt_paid: Money
    balance_due: Money

    @property
    def settled(self) -> bool:
        return self.balance_due == 0

    def as_api(self):
        return {
            "receiptTotal": float(self.receipt_total),
            "receiptPaid": float(self.receipt_paid),
            "balanceDue": float(self.balance_due),
        }


@dataclass(frozen=True)
class Allocation:
    item: object
    amount: Money
    paid_before: Money
    paid_after: Money

    @property
    def fully_paid(self) -> bool:
        return self.paid_after >= round_money(self.item.total_amount)

    def as_api(self):
        return {
            "id": self.item.id,
            "amount": float(self.amount),
            "paidBefore": float(self.paid_before),
            "paidAfter": float(self.paid_after),
            "totalAmount": float(round_money(self.item.total_amount)),
        }


@dataclass
class PaymentPlan:
    mode: str
    amount: Money
    before: ReceiptTotals
    after: ReceiptTotals
    allocations: list = field(default_factory=list)
    noop: bool = False
    message: str = ""

    def as_api(self):
        return {
            "mode": self.mode,
            "amount": float(self.amount),
            "noop": self.noop,
            "message": self.message,
            "updatedItems": [a.as_api() for a in self.allocations],
            **self.after.as_api(),
        }


@dataclass
class CollectionPlan:
    payment: PaymentPlan | None
    totals: ReceiptTotals
    collectible: bool


# ---- aggregation ------------------------------------------------------------

def summarize_receipt(items) -> ReceiptTotals:
    """Consolidated totals for the items of one receipt.

    Sums are exact Decimal additions; rounding (half-up, 2 dp) happens once
    per aggregate, not per addition.
    """
    items = list(items)
    if not items:
        raise ReceiptNotFound()
    receipt_total = round_money(sum((D(i.total_amount) for i in items), Decimal("0")))
    receipt_paid = round_money(sum((D(i.paid_amount) for i in items), Decimal("0")))
    balance_due = max(Decimal("0.00"), round_money(receipt_total - receipt_paid))
    return ReceiptTotals(receipt_total, receipt_paid, balance_due)


def receipt_status(items) -> str:
    statuses = [i.status for i in items]
    if not statuses:
        raise ReceiptNotFound()
    if all(s == READY for s in statuses):
        return READY
    if all(s == COLLECTED for s in statuses):
        return COLLECTED
    if any(s == PENDING for s in statuses):
        return PENDING
    return PROCESSING


def is_overdue(item, now=None) -> bool:
    """Display flag only: ready, and past its estimated collection date."""
    if item.status != READY or not item.estimated_collection_date:
        return False
    return item.estimated_collection_date < (now or utcnow())


def payment_status_for(total_amount, paid_amount) -> str:
    total, paid = round_money(total_amount), round_money(paid_amount)
    if paid <= 0:
        return "not_paid"
    if paid >= total - TOLERANCE:
        return "paid_full"
    return "advance"


# ---- state machine ----------------------------------------------------------

def check_transition(current: str, requested: str):
    if requested not in STATUSES:
        raise ValueError(f"Invalid status: {requested}")
    if STATUSES.index(requested) <= STATUSES.index(current or PENDING):
        raise InvalidStatusTransition(current, requested)


# ---- payment validation -----------------------------------------------------

def validate_amount(amount) -> Money:
    value = parse_money(amount)
    if value is None:
        raise InvalidAmount("Payment amount must be a number.")
    value = round_money(value)
    if value <= 0:
        raise InvalidAmount()
    return value


def check_collection_payment(amount, balance_due, tolerance=TOLERANCE) -> Money:
    """0 < amount <= balance + tolerance; partial payments allowed.

    Returns the amount to apply. An overpayment inside the tolerance is
    applied as the exact balance so paid never exceeds total.
    """
    value = validate_amount(amount)
    balance_due = round_money(balance_due)
    if value > balance_due + tolerance:
        raise ExceedsBalance(balance_due)
    return min(value, balance_due)


def check_standalone_payment(amount, balance_due, tolerance=TOLERANCE) -> Money:
    """Amount must equal the balance within tolerance; no partial payments."""
    value = validate_amount(amount)
    balance_due = round_money(balance_due)
    if abs(value - balance_due) > tolerance:
        raise AmountMismatch(balance_due)
    return balance_due


def distribute_payment(items, amount) -> list:
    """Split ``amount`` across items in proportion to each item's total.

    Works in whole cents: floor shares first, then the leftover cents go to
    the largest remainders (ties favour the later item). A share never
    exceeds the item's unpaid balance; any overflow spills to items with room,
    in receipt order. The shares always sum to ``amount`` exactly.
    """
    items = list(items)
    cents = to_cents(amount)
    if cents <= 0:
        raise InvalidAmount()

    weights = [max(0, to_cents(i.total_amount)) for i in items]
    rooms = [max(0, to_cents(i.total_amount) - to_cents(i.paid_amount)) for i in items]
    if cents > sum(rooms):
        raise ExceedsBalance(from_cents(sum(rooms)))

    weight_sum = sum(weights)
    shares = [0] * len(items)
    if weight_sum:
        shares = [cents * w // weight_sum for w in weights]
        remainders = [cents * w % weight_sum for w in weights]
        leftover = cents - sum(shares)
        by_remainder = sorted(range(len(items)), key=lambda k: (remainders[k], k), reverse=True)
        for k in by_remainder[:leftover]:
            shares[k] += 1

    overflow = 0
    for k, room in enumerate(rooms):
        if shares[k] > room:
            overflow += shares[k] - room
            shares[k] = room
    for k, room in enumerate(rooms):
        if not overflow:
            break
        take = min(overflow, room - shares[k])
        shares[k] += take
        overflow -= take

    return [from_cents(s) for s in shares]


def _allocate(items, amount):
    shares = distribute_payment(items, amount)
    allocations = []
    for item, share in zip(items, shares):
        before = round_money(item.paid_amount)
        allocations.append(Allocation(item=item, amount=share, paid_before=before,
                                      paid_after=round_money(before + share)))
    return allocations


def plan_payment(items, amount, mode=STANDALONE, tolerance=TOLERANCE) -> PaymentPlan:
    """Validate a payment against a receipt and work out its distribution."""
    items = list(items)
    before = summarize_receipt(items)

    if mode == STANDALONE:
        if before.settled:
            return PaymentPlan(mode=mode, amount=Decimal("0.00"), before=before, after=before,
                               noop=True, message="Receipt is already fully paid.")
        applied = check_standalone_payment(amount, before.balance_due, tolerance)
    elif mode == COLLECTION:
        if before.settled:
            raise ExceedsBalance(before.balance_due)
        applied = check_collection_payment(amount, before.balance_due, tolerance)
    else:
        raise ValueError(f"Unknown payment mode: {mode}")

    allocations = _allocate(items, applied)
    after = summarize_receipt(_paid_view(items, allocations))
    return PaymentPlan(mode=mode, amount=applied, before=before, after=after,
                       allocations=allocations, message="Payment accepted.")


def plan_collection(items, amount=None, tolerance=TOLERANCE) -> CollectionPlan:
    """Gate ready -> collected on every item being ready and the balance settled.

    With a payment the amount goes through the collection-time rules; the
    receipt is collectible only if that payment clears the balance.
    """
    items = list(items)
    if not items:
        raise ReceiptNotFound()
    if any(i.status == COLLECTED for i in items):
        raise AlreadyCollected(items[0].receipt_number)
    not_ready = [i.id for i in items if i.status != READY]
    if not_ready:
        raise NotAllItemsReady(not_ready)

    totals = summarize_receipt(items)
    if amount not in (None, ""):
        value = parse_money(amount)
        if value is None:
            raise InvalidAmount("Payment amount must be a number.")
        if value == 0:
            amount = None
    if amount in (None, ""):
        if not totals.settled:
            raise BalanceOutstanding(totals.balance_due)
        return CollectionPlan(payment=None, totals=totals, collectible=True)

    payment = plan_payment(items, amount, mode=COLLECTION, tolerance=tolerance)
    return CollectionPlan(payment=payment, totals=payment.after, collectible=payment.after.settled)


def _paid_view(items, allocations):
    return [
        LineItem(id=a.item.id, receipt_number=a.item.receipt_number,
                 total_amount=D(a.item.total_amount), paid_amount=a.paid_after,
                 status=a.item.status)
        for a in allocations
    ]
