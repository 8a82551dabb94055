# laundrydesk/services/receipt_numbers.py
"""
Receipt numbers look like ``{sequence}-{DD}-{MM} ({YY})``, e.g. ``1-01-01 (26)``
for the first receipt of 1 January 2026. The sequence restarts every day.

Uniqueness comes from the ``receipt_numbers`` table; a collision on insert
means another operator took the sequence first, so we retry with the next one.
"""
import logging
from datetime import date

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import ReceiptNumberUnavailable
from ..extensions import db
from ..model import ReceiptNumber
from ..utils.dates import utcnow

log = logging.getLogger(__name__)

def format_receipt_number(sequence: int, day: date) -> str:
    return f"{sequence}-{day:%d}-{day:%m} ({day:%y})"

def next_sequence(day: date) -> int:
    current = (db.session.query(func.max(ReceiptNumber.sequence))
               .filter(ReceiptNumber.issued_on == day)
               .scalar())
    return (current or 0) + 1

def allocate_receipt_number(branch_id=None, day: date | None = None) -> str:
    """Reserve and commit the next receipt number for ``day``."""
    day = day or utcnow().date()
    attempts = current_app.config.get("RECEIPT_NUMBER_MAX_ATTEMPTS", 5)

    for attempt in range(1, attempts + 1):
        seq = next_sequence(day)
        number = format_receipt_number(seq, day)
        db.session.add(ReceiptNumber(number=number, sequence=seq, issued_on=day, branch_id=branch_id))
        try:
            db.session.commit()
            return number
        except IntegrityError:
            db.session.rollback()
            log.warning("receipt number %s taken, retrying (attempt %s/%s)", number, attempt, attempts)

    raise ReceiptNumberUnavailable(attempts)

def registered_receipt(receipt_number: str):
    return ReceiptNumber.query.filter(
        func.upper(ReceiptNumber.number) == receipt_number.strip().upper()
    ).first()

def is_registered(receipt_number: str) -> bool:
    return registered_receipt(receipt_number) is not None
