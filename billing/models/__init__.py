from billing import db
from billing.models.user import User
from billing.models.customer import Customer
from billing.models.quotation import Quotation, QuotationStatus
from billing.models.quotation_item import QuotationItem
from billing.models.payment import Payment, PaymentStatus
from billing.models.payment_reconciliation import PaymentReconciliation

__all__ = [
    "User",
    "Customer",
    "Quotation",
    "QuotationStatus",
    "QuotationItem",
    "Payment",
    "PaymentStatus",
    "PaymentReconciliation",
]
