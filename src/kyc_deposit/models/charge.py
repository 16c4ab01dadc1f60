"""
Charge models — PIX charge creation and status polling payloads.
"""

from decimal import Decimal
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class Charge(BaseModel):
    """A generated PIX charge. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    transaction_id: str = Field(validation_alias=AliasChoices("transaction_id", "transactionId", "id"))
    payment_code: str = Field(validation_alias=AliasChoices("payment_code", "paymentCode", "qrcode"))
    amount: Decimal


class StatusResult(BaseModel):
    """Status check response. Produced fresh on every poll."""
    status: PaymentStatus = PaymentStatus.PENDING
    value: Decimal = Decimal("0")

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID


def format_brl(amount: Decimal) -> str:
    """Display an amount the way the deposit screen does: R$ 4,90"""
    quantized = Decimal(amount).quantize(Decimal("0.01"))
    whole, _, cents = f"{quantized:,.2f}".partition(".")
    return f"R$ {whole.replace(',', '.')},{cents}"
