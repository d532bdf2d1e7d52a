"""Field checks the simulator applies before accepting an instruction.

Error codes and messages follow the gateway's published error list so the
client sees the same entries it would get from the real service.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from swish_client.shared.models import ApiError

AMOUNT_RE = re.compile(r"^\d{1,12}(\.\d{1,2})?$")
REFERENCE_RE = re.compile(r"^[a-zA-Z0-9\-_.+*/]{1,36}$")
PAYER_ALIAS_RE = re.compile(r"^\d{8,15}$")

MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999999.99")
MAX_MESSAGE_LENGTH = 50

MESSAGES = {
    "RP01": "Missing Merchant Swish Number",
    "RP02": "Wrong formatted message",
    "RP03": "Callback URL is missing or does not use HTTPS",
    "RP04": "No payment request found related to a token",
    "RP06": "A payment request already exists for that instruction identifier",
    "PA02": "Amount value is missing or not a valid number",
    "AM03": "Invalid or missing Currency",
    "FF08": "PaymentReference is invalid",
    "BE18": "Payer alias is invalid",
    "RF02": "Original Payment not found or original payment is more than 13 months old",
    "RF03": "Payer alias in the refund does not match the payee alias in the original payment",
    "RF08": "Amount value is too large, or amount exceeds the amount of the original payment minus any previous refunds",
}


def api_error(code: str) -> ApiError:
    return ApiError(error_code=code, error_message=MESSAGES[code])


def parse_amount(value: Any) -> Optional[Decimal]:
    if not isinstance(value, str) or not AMOUNT_RE.match(value):
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        return None
    if amount < MIN_AMOUNT or amount > MAX_AMOUNT:
        return None
    return amount


def _common_errors(body: dict, alias_field: str) -> list[ApiError]:
    errors = []
    callback = body.get("callbackUrl")
    if not isinstance(callback, str) or not callback.startswith("https://"):
        errors.append(api_error("RP03"))
    if not body.get(alias_field):
        errors.append(api_error("RP01"))
    if parse_amount(body.get("amount")) is None:
        errors.append(api_error("PA02"))
    if body.get("currency") != "SEK":
        errors.append(api_error("AM03"))
    message = body.get("message")
    if message is not None and (not isinstance(message, str) or len(message) > MAX_MESSAGE_LENGTH):
        errors.append(api_error("RP02"))
    return errors


def validate_payment(body: dict) -> list[ApiError]:
    errors = _common_errors(body, "payeeAlias")

    reference = body.get("payeePaymentReference")
    if reference is not None and not REFERENCE_RE.match(str(reference)):
        errors.append(api_error("FF08"))

    payer_alias = body.get("payerAlias")
    if payer_alias is not None and not PAYER_ALIAS_RE.match(str(payer_alias)):
        errors.append(api_error("BE18"))

    return errors


def validate_refund(body: dict, original: Optional[dict], refunded: Decimal) -> list[ApiError]:
    """``original`` is the paid payment being refunded, ``refunded`` what was already returned."""
    errors = _common_errors(body, "payerAlias")

    if original is None:
        errors.append(api_error("RF02"))
        return errors

    if body.get("payerAlias") and body["payerAlias"] != original.get("payeeAlias"):
        errors.append(api_error("RF03"))

    amount = parse_amount(body.get("amount"))
    if amount is not None and amount > Decimal(str(original["amount"])) - refunded:
        errors.append(api_error("RF08"))

    return errors
