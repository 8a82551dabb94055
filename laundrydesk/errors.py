# laundrydesk/errors.py
"""
Domain errors raised by the reconciliation core and the services around it.

Each error carries an ``error_kind`` (stable, machine readable) and an HTTP
status used by the app-level handler. Handlers never retry; the caller
re-submits a corrected request.
"""
from flask import jsonify
from sqlalchemy.orm.exc import StaleDataError

from .extensions import db
from .utils.api import api_error
from .utils.money import format_tsh


class DomainError(Exception):
    error_kind = "DomainError"
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_api(self):
        return {"errorKind": self.error_kind, "message": self.message, **self.details}


class InvalidAmount(DomainError):
    error_kind = "InvalidAmount"
    status_code = 422

    def __init__(self, message="Payment amount must be greater than 0."):
        super().__init__(message)


class ExceedsBalance(DomainError):
    error_kind = "ExceedsBalance"

    def __init__(self, balance_due):
        super().__init__(
            f"Payment cannot exceed the balance due of TSh {format_tsh(balance_due)}.",
            balanceDue=float(balance_due),
        )


class AmountMismatch(DomainError):
    error_kind = "AmountMismatch"

    def __init__(self, required_amount):
        self.required_amount = required_amount
        super().__init__(
            f"Payment must equal balance due of TSh {format_tsh(required_amount)}. "
            "Partial payments are not allowed.",
            requiredAmount=float(required_amount),
        )


class ReceiptNotFound(DomainError):
    error_kind = "ReceiptNotFound"
    status_code = 404

    def __init__(self, receipt_number=None):
        super().__init__("Receipt not found", receiptNumber=receipt_number)


class OrderNotFound(DomainError):
    error_kind = "OrderNotFound"
    status_code = 404

    def __init__(self, order_id=None):
        super().__init__("Order not found", orderId=order_id)


class NotAllItemsReady(DomainError):
    error_kind = "NotAllItemsReady"
    status_code = 409

    def __init__(self, not_ready):
        super().__init__(
            "All items on the receipt must be ready before collection.",
            notReady=list(not_ready),
        )


class AlreadyCollected(DomainError):
    error_kind = "AlreadyCollected"
    status_code = 409

    def __init__(self, receipt_number=None):
        super().__init__("Receipt already collected", receiptNumber=receipt_number)


class BalanceOutstanding(DomainError):
    error_kind = "BalanceOutstanding"

    def __init__(self, balance_due):
        super().__init__(
            f"Cannot collect without payment. Record the balance due of TSh {format_tsh(balance_due)} first.",
            balanceDue=float(balance_due),
        )


class InvalidStatusTransition(DomainError):
    error_kind = "InvalidStatusTransition"

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot move an order from '{current}' to '{requested}'.",
            current=current, requested=requested,
        )


class DuplicatePayment(DomainError):
    error_kind = "DuplicatePayment"
    status_code = 409

    def __init__(self):
        super().__init__("Duplicate payment detected. This payment was already recorded.")


class InvalidPayment(DomainError):
    error_kind = "InvalidPayment"
    status_code = 422


class ReceiptNumberUnavailable(DomainError):
    error_kind = "ReceiptNumberUnavailable"
    status_code = 503

    def __init__(self, attempts):
        super().__init__(
            f"Could not allocate a receipt number after {attempts} attempts.",
            attempts=attempts,
        )


def register_error_handlers(app):
    @app.errorhandler(DomainError)
    def handle_domain_error(e):
        db.session.rollback()
        app.logger.info("rejected: %s (%s)", e.message, e.error_kind)
        r = jsonify(api_error(e.message, e.as_api()))
        r.status_code = e.status_code
        return r

    @app.errorhandler(StaleDataError)
    def handle_stale_data(e):
        db.session.rollback()
        app.logger.warning("concurrent modification: %s", e)
        r = jsonify(api_error(
            "The receipt was modified by another operator. Reload and try again.",
            {"errorKind": "ConcurrentModification"},
        ))
        r.status_code = 409
        return r

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        db.session.rollback()
        r = jsonify(api_error(str(e), {"errorKind": "ValidationError"}))
        r.status_code = 422
        return r
