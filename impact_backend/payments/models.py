"""
Types de la feature 'payments' (pydantic).
- PaymentStatus: tri-état local pending -> completed | failed
- PaymentRequest: entrée d'initialisation normalisée
- PaymentRecord: ligne de la table 'payments'
- PaymentSnapshot / PaymentInitResult: réponses exposées au front
"""
from enum import Enum
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


TERMINAL_STATUSES = {PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value}


class PaymentRequest(BaseModel):
    amount: int
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    description: Optional[str] = None


class PaymentRecord(BaseModel):
    transaction_id: str
    amount: int
    currency: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    description: Optional[str] = None
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    cinetpay_data: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        """Colonnes envoyées à l'insert (les timestamps sont posés par la base)."""
        row = self.model_dump(mode="json", exclude={"created_at", "updated_at", "payment_method", "cinetpay_data"})
        return row


class PaymentSnapshot(BaseModel):
    status: str
    payment_method: Optional[str] = None
    amount: Optional[Union[int, float]] = None
    currency: Optional[str] = None


class PaymentInitResult(BaseModel):
    payment_url: str
    transaction_id: str
