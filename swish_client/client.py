"""Mutual-TLS HTTP client for the Swish payment request and refund API."""

import json
import logging
from decimal import Decimal
from typing import Any, Optional

import httpx
import pydantic

from swish_client.certificates import build_ssl_context
from swish_client.config import ClientConfig
from swish_client.errors import (
    AliasMismatchError,
    DecodeError,
    NotFoundError,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from swish_client.models.requests import PaymentRequest, RefundRequest
from swish_client.models.responses import CreatePaymentResult, CreateRefundResult, StatusRecord
from swish_client.shared.models import ApiError, PAYMENT_REQUESTS_PATH, REFUNDS_PATH

logger = logging.getLogger("swish.client")

_API_ERRORS = pydantic.TypeAdapter(list[ApiError])


class SwishClient:
    """Issues payment request, refund and status calls against one environment.

    Holds no mutable state after construction, so one instance can be shared
    by any number of concurrent tasks.
    """

    def __init__(self, config: ClientConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = config.url
        self.timeout = config.timeout
        self._ssl_context = build_ssl_context(config.certificate, config.passphrase, config.ca)
        self._transport = transport
        logger.info(f"Swish client ready for {self.base_url} ({config.environment.value})")

    async def create_payment_request(self, request: PaymentRequest,
                                     timeout: Optional[float] = None) -> CreatePaymentResult:
        url = f"{self.base_url}{PAYMENT_REQUESTS_PATH}/{request.instruction_id}"
        resp = await self._send("PUT", url, request.to_payload(), timeout)
        self._raise_for_create(resp)

        result = CreatePaymentResult(
            location=self._location(resp),
            token=resp.headers.get("PaymentRequestToken") or None,
        )
        logger.info(f"Payment request {request.instruction_id} created at {result.location}")
        return result

    async def create_refund(self, request: RefundRequest,
                            timeout: Optional[float] = None) -> CreateRefundResult:
        url = f"{self.base_url}{REFUNDS_PATH}/{request.instruction_id}"
        resp = await self._send("PUT", url, request.to_payload(), timeout)
        self._raise_for_create(resp)

        result = CreateRefundResult(location=self._location(resp))
        logger.info(f"Refund {request.instruction_id} created at {result.location}")
        return result

    async def status(self, location: str, timeout: Optional[float] = None) -> StatusRecord:
        resp = await self._send("GET", location, None, timeout)

        if resp.status_code == 404:
            errors = self._decode_errors(resp)
            logger.warning(f"Status lookup for {location} not found: {errors}")
            raise NotFoundError(errors)
        if not resp.is_success:
            raise UnexpectedStatusError(resp.status_code, resp.text)

        try:
            return StatusRecord.model_validate(self._decode_json(resp))
        except pydantic.ValidationError as e:
            raise DecodeError(f"status record does not match schema: {e}") from e

    async def _send(self, method: str, url: str, payload: Optional[dict[str, Any]],
                    timeout: Optional[float]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                verify=self._ssl_context,
                transport=self._transport,
                timeout=timeout if timeout is not None else self.timeout,
            ) as client:
                return await client.request(method, url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {url} timed out")
            raise TransportError(f"{method} {url} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

    def _raise_for_create(self, resp: httpx.Response) -> None:
        if resp.status_code == 422:
            errors = self._decode_errors(resp)
            logger.warning(f"Gateway rejected {resp.request.url}: {errors}")
            raise ValidationError(errors)
        if resp.status_code == 403:
            logger.warning(f"Gateway refused {resp.request.url}: payee alias mismatch")
            raise AliasMismatchError()
        if not resp.is_success:
            raise UnexpectedStatusError(resp.status_code, resp.text)

    @staticmethod
    def _location(resp: httpx.Response) -> str:
        location = resp.headers.get("Location")
        if not location:
            raise DecodeError(f"HTTP {resp.status_code} response has no Location header")
        return location

    @staticmethod
    def _decode_json(resp: httpx.Response) -> Any:
        # Decimal keeps amounts exactly as the gateway formatted them
        try:
            return json.loads(resp.content, parse_float=Decimal)
        except ValueError as e:
            raise DecodeError(f"invalid JSON body: {e}") from e

    @classmethod
    def _decode_errors(cls, resp: httpx.Response) -> list[ApiError]:
        data = cls._decode_json(resp)
        if isinstance(data, dict):
            data = [data]
        try:
            return _API_ERRORS.validate_python(data)
        except pydantic.ValidationError as e:
            raise DecodeError(f"error list does not match schema: {e}") from e
