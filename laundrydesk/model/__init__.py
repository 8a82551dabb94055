# ------ laundrydesk/model/__init__.py ------

from .branch import Branch
from .user import User
from .customer import Customer
from .service import Service
from .setting import Setting
from .order import Order
from .receipt import ReceiptNumber
from .transaction import Transaction, PaymentAuditLog
from .loyalty import LoyaltyAccount, LoyaltyTransaction
from .expense import Expense
from .bill import Bill, BillItem

__all__ = [
    "Branch",
    "User",
    "Customer",
    "Service",
    "Setting",
    "Order",
    "ReceiptNumber",
    "Transaction",
    "PaymentAuditLog",
    "LoyaltyAccount",
    "LoyaltyTransaction",
    "Expense",
    "Bill",
    "BillItem",
]
