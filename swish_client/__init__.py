"""Client for the Swish merchant payment request and refund API."""

from swish_client.client import SwishClient
from swish_client.config import ClientConfig, load_bundled_ca
from swish_client.errors import (
    AliasMismatchError,
    ConfigurationError,
    DecodeError,
    NotFoundError,
    RemoteError,
    SwishError,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from swish_client.models.requests import PaymentRequest, RefundRequest
from swish_client.models.responses import CreatePaymentResult, CreateRefundResult, StatusRecord
from swish_client.shared.models import ApiError, Environment, InstructionStatus

__all__ = [
    "AliasMismatchError",
    "ApiError",
    "ClientConfig",
    "ConfigurationError",
    "CreatePaymentResult",
    "CreateRefundResult",
    "DecodeError",
    "Environment",
    "InstructionStatus",
    "NotFoundError",
    "PaymentRequest",
    "RefundRequest",
    "RemoteError",
    "StatusRecord",
    "SwishClient",
    "SwishError",
    "TransportError",
    "UnexpectedStatusError",
    "ValidationError",
    "load_bundled_ca",
]
