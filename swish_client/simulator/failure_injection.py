"""Failure injection settings for the gateway simulator."""

from pydantic import BaseModel, Field


class FailureConfig(BaseModel):
    decline_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    error_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    latency_ms_min: int = 0
    latency_ms_max: int = 0


# Outcomes the payer's bank can report when an instruction ends in ERROR
ERROR_OUTCOMES = [
    ("TM01", "Swish timed out before the payment was started"),
    ("BANKIDCL", "Payer cancelled BankID signing"),
    ("FF10", "Bank system processing error"),
]
