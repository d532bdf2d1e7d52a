"""Response models: status records and the header-borne create results."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from swish_client.shared.models import InstructionStatus


class CreatePaymentResult(BaseModel):
    """Taken from the ``Location`` and ``PaymentRequestToken`` response headers."""

    model_config = ConfigDict(frozen=True)

    location: str
    token: Optional[str] = None


class CreateRefundResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: str


class StatusRecord(BaseModel):
    """Gateway-side state of a payment request or refund."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    status: InstructionStatus
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    message: Optional[str] = None
    callback_url: Optional[str] = Field(default=None, alias="callbackUrl")
    payee_alias: Optional[str] = Field(default=None, alias="payeeAlias")
    payer_alias: Optional[str] = Field(default=None, alias="payerAlias")
    payer_ssn: Optional[str] = Field(default=None, alias="payerSSN")
    payee_payment_reference: Optional[str] = Field(default=None, alias="payeePaymentReference")
    payment_reference: Optional[str] = Field(default=None, alias="paymentReference")
    date_created: Optional[datetime] = Field(default=None, alias="dateCreated")
    date_paid: Optional[datetime] = Field(default=None, alias="datePaid")
    error_code: Optional[str] = Field(default=None, alias="errorCode")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    additional_information: Optional[str] = Field(default=None, alias="additionalInformation")

    # Refund records only
    original_payment_reference: Optional[str] = Field(default=None, alias="originalPaymentReference")
    payer_payment_reference: Optional[str] = Field(default=None, alias="payerPaymentReference")
