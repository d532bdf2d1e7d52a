"""Enums, status transitions and the error entry shared by client and simulator."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# === Enums ===

class Environment(str, Enum):
    TEST = "test"
    PRODUCTION = "production"


class InstructionStatus(str, Enum):
    CREATED = "CREATED"
    PAID = "PAID"
    DECLINED = "DECLINED"
    ERROR = "ERROR"


BASE_URLS: dict[Environment, str] = {
    Environment.TEST: "https://mss.cpc.getswish.net",
    Environment.PRODUCTION: "https://cpc.getswish.net",
}

PAYMENT_REQUESTS_PATH = "/swish-cpcapi/api/v2/paymentrequests"
REFUNDS_PATH = "/swish-cpcapi/api/v2/refunds"


# === Status Transitions ===

INSTRUCTION_TRANSITIONS: dict[InstructionStatus, list[InstructionStatus]] = {
    InstructionStatus.CREATED: [
        InstructionStatus.PAID,
        InstructionStatus.DECLINED,
        InstructionStatus.ERROR,
    ],
    InstructionStatus.PAID: [],
    InstructionStatus.DECLINED: [],
    InstructionStatus.ERROR: [],
}


# === Error Entries ===

class ApiError(BaseModel):
    """One entry of the error list the gateway returns on 4xx responses."""

    model_config = ConfigDict(populate_by_name=True)

    error_code: str = Field(alias="errorCode")
    error_message: str = Field(default="", alias="errorMessage")
    additional_information: Optional[str] = Field(default=None, alias="additionalInformation")

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.error_message}"


PAYEE_ALIAS_MISMATCH = ApiError(
    error_code="PA01",
    error_message="The payeeAlias in the payment request object is not the same as merchant’s Swish number",
)


def format_api_errors(errors: list[ApiError]) -> str:
    return " | ".join(str(e) for e in errors)
