"""Request models for the payment request and refund endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _InstructionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Goes into the URL path, never into the body.
    instruction_id: str = Field(exclude=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PaymentRequest(_InstructionRequest):
    callback_url: str = Field(alias="callbackUrl")
    payee_alias: str = Field(alias="payeeAlias")
    amount: str
    currency: str = "SEK"
    payee_payment_reference: Optional[str] = Field(default=None, alias="payeePaymentReference")
    payer_alias: Optional[str] = Field(default=None, alias="payerAlias")
    payer_ssn: Optional[str] = Field(default=None, alias="payerSSN")
    payer_age_limit: Optional[int] = Field(default=None, alias="payerAgeLimit")
    message: Optional[str] = None


class RefundRequest(_InstructionRequest):
    original_payment_reference: str = Field(alias="originalPaymentReference")
    callback_url: str = Field(alias="callbackUrl")
    payer_alias: str = Field(alias="payerAlias")
    amount: str
    currency: str = "SEK"
    payer_payment_reference: Optional[str] = Field(default=None, alias="payerPaymentReference")
    message: Optional[str] = None
