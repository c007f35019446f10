"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client CinetPay, le repository Supabase, les cas d'usage et le poller de statut.
"""

from .models import PaymentStatus, PaymentRecord, PaymentSnapshot, PaymentInitResult
from .cinetpay_client import require_cinetpay, create_payment, check_payment
from .repository import (
    insert_payment,
    get_payment,
    get_payment_snapshot,
    update_payment_verification,
    list_payments,
)
from .service import (
    generate_transaction_id,
    validate_payment_request,
    initialize_payment,
    handle_notification,
    verify_payment,
    get_payment_status,
    map_provider_status,
)
from .poller import PaymentStatusPoller

__all__ = [
    # models
    "PaymentStatus",
    "PaymentRecord",
    "PaymentSnapshot",
    "PaymentInitResult",
    # cinetpay
    "require_cinetpay",
    "create_payment",
    "check_payment",
    # repository
    "insert_payment",
    "get_payment",
    "get_payment_snapshot",
    "update_payment_verification",
    "list_payments",
    # services
    "generate_transaction_id",
    "validate_payment_request",
    "initialize_payment",
    "handle_notification",
    "verify_payment",
    "get_payment_status",
    "map_provider_status",
    # polling
    "PaymentStatusPoller",
]
