# laundrydesk/services/intake.py
"""Order intake: one receipt, one or more line items, optional up-front payment."""
import logging

from ..errors import AlreadyCollected, InvalidPayment, ReceiptNotFound
from ..extensions import db
from ..model import Customer, Order, PaymentAuditLog, Service
from ..utils.dates import parse_iso8601
from ..utils.money import D, format_tsh, parse_money, round_money
from .payments import check_payment_method, payment_tolerance, record_payment_transaction
from .pricing import calculate_total, express_multiplier_for
from .receipt_numbers import allocate_receipt_number, registered_receipt
from .receipts import load_receipt_items
from .reconciliation import COLLECTED, PENDING, distribute_payment, payment_status_for

log = logging.getLogger(__name__)

PAYMENT_STATUSES = ("not_paid", "advance", "paid_full")

def validate_initial_payment(payment_status, amount, total, tolerance):
    """Consistency of an up-front payment with the receipt total. Returns the amount to apply."""
    total = round_money(total)
    if payment_status not in PAYMENT_STATUSES:
        raise InvalidPayment(f"Invalid payment status: {payment_status}")

    if amount in (None, ""):
        amount = total if payment_status == "paid_full" else 0
    paid = parse_money(amount)
    if paid is None:
        raise InvalidPayment("Payment amount must be a number.")
    paid = round_money(paid)
    if paid < 0:
        raise InvalidPayment("Payment amount cannot be negative")

    if payment_status == "paid_full":
        if abs(paid - total) > tolerance:
            raise InvalidPayment(
                f"Paid amount ({format_tsh(paid)}) must equal total amount ({format_tsh(total)}) for full payment"
            )
        return total
    if payment_status == "advance":
        if paid <= 0:
            raise InvalidPayment("Advance payment must be greater than zero")
        if paid >= total:
            raise InvalidPayment(
                f"Advance payment ({format_tsh(paid)}) must be less than total amount ({format_tsh(total)})"
            )
        return paid
    if paid > 0:
        raise InvalidPayment("Cannot have paid amount for unpaid orders")
    return paid

def _build_line(ctx, data, customer_id, receipt_number, branch_id, estimated):
    try:
        service_id = int(data.get("service_id"))
    except (TypeError, ValueError):
        raise ValueError("service_id is required")
    service = db.session.get(Service, service_id)
    if not service or not service.is_active:
        raise ValueError(f"Service {service_id} not found")

    try:
        quantity = int(data.get("quantity") or 1)
    except (TypeError, ValueError):
        raise ValueError("quantity must be a whole number")
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    weight = None
    if data.get("weight_kg") not in (None, ""):
        weight = parse_money(data.get("weight_kg"))
        if weight is None or weight < 0:
            raise ValueError("weight_kg must be a non-negative number")
    delivery_type = (data.get("delivery_type") or "standard").strip().lower()
    multiplier = express_multiplier_for(delivery_type, data.get("express_surcharge_multiplier"))

    if data.get("total_amount") not in (None, ""):
        total = parse_money(data.get("total_amount"))
        if total is None or total < 0:
            raise ValueError("total_amount must be a non-negative number")
        total = round_money(total)
    else:
        total = calculate_total(service, quantity, weight or 0, delivery_type, multiplier)

    return Order(
        receipt_number=receipt_number,
        status=PENDING,
        customer_id=customer_id,
        service_id=service.id,
        branch_id=branch_id,
        garment_type=data.get("garment_type"),
        color=data.get("color"),
        quantity=quantity,
        weight_kg=weight,
        special_instructions=data.get("special_instructions"),
        delivery_type=delivery_type,
        express_surcharge_multiplier=multiplier,
        total_amount=total,
        paid_amount=D("0.00"),
        payment_status="not_paid",
        payment_method=None,
        estimated_collection_date=estimated,
        created_by=ctx.username,
    )

def create_receipt_orders(ctx, payload: dict):
    """Create the line items of a (new or existing) receipt in one transaction."""
    try:
        customer_id = int(payload.get("customer_id"))
    except (TypeError, ValueError):
        raise ValueError("customer_id is required")
    if not db.session.get(Customer, customer_id):
        raise ValueError(f"Customer {customer_id} not found")

    lines = payload.get("items") or []
    if not isinstance(lines, list) or not lines:
        raise ValueError("items must be a non-empty list")

    estimated = None
    if payload.get("estimated_collection_date"):
        estimated = parse_iso8601(payload.get("estimated_collection_date"))
        if not estimated:
            raise ValueError("Invalid datetime format for estimated_collection_date")

    payment = payload.get("payment") or {}
    payment_status = (payment.get("status") or "not_paid").strip().lower()
    method = check_payment_method(payment.get("method"))

    branch_id = ctx.effective_branch_id(payload.get("branch_id"))

    receipt_number = (payload.get("receipt_number") or "").strip()
    if receipt_number:
        try:
            existing = load_receipt_items(ctx, receipt_number, lock=True)
        except ReceiptNotFound:
            registered = registered_receipt(receipt_number)
            if not registered or not ctx.sees_branch(registered.branch_id):
                raise
            # items under this number exist, just not in the caller's branch
            if Order.query.filter(Order.receipt_number == registered.number).first():
                raise
            receipt_number = registered.number
            existing = []
        if any(o.status == COLLECTED for o in existing):
            raise AlreadyCollected(receipt_number)
        if existing:
            receipt_number = existing[0].receipt_number

    orders = [_build_line(ctx, line, customer_id, receipt_number, branch_id, estimated) for line in lines]
    total = sum((o.total_amount for o in orders), D("0"))
    paid = validate_initial_payment(payment_status, payment.get("amount"), total, payment_tolerance())

    if not receipt_number:
        receipt_number = allocate_receipt_number(branch_id)
        for o in orders:
            o.receipt_number = receipt_number

    for o in orders:
        db.session.add(o)
    db.session.flush()

    tx = None
    if paid > 0:
        for o, share in zip(orders, distribute_payment(orders, paid)):
            o.paid_amount = share
            o.payment_status = payment_status_for(o.total_amount, share)
            o.payment_method = method
        tx = record_payment_transaction(ctx, orders[0], paid, method,
                                        f"Payment at drop-off for receipt {receipt_number}")

    for o in orders:
        db.session.add(PaymentAuditLog(
            order_id=o.id, action="created",
            new_payment_status=o.payment_status, new_paid_amount=o.paid_amount,
            new_payment_method=o.payment_method, changed_by=ctx.username,
            notes="Order created",
        ))

    db.session.commit()
    log.info("receipt %s: %s item(s), total TSh %s, paid TSh %s by %s",
             receipt_number, len(orders), total, paid, ctx.username)
    return receipt_number, orders, tx
