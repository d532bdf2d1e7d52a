import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from swish_client import (
    AliasMismatchError,
    DecodeError,
    InstructionStatus,
    NotFoundError,
    PaymentRequest,
    RefundRequest,
    SwishClient,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from tests.helpers import BASE_URL

LOCATION = f"{BASE_URL}/swish-cpcapi/api/v2/paymentrequests/AB23D7406ECE4542A80152D909EF9F6B"


def mock_client(config, handler) -> SwishClient:
    return SwishClient(config, transport=httpx.MockTransport(handler))


def payment(**overrides) -> PaymentRequest:
    values = {
        "instruction_id": "AB23D7406ECE4542A80152D909EF9F6B",
        "callback_url": "https://example.com/callback",
        "payee_alias": "1234679304",
        "amount": "100.01",
        "currency": "SEK",
    }
    values.update(overrides)
    return PaymentRequest(**values)


def refund() -> RefundRequest:
    return RefundRequest(
        instruction_id="0D1F2B7B3F0C4E9B8C3A6E5D4C3B2A10",
        original_payment_reference="6D6CD7406ECE4542A80152D909EF9F6B",
        callback_url="https://example.com/callback",
        payer_alias="1234679304",
        amount="100.01",
    )


@pytest.mark.asyncio
async def test_create_payment_request_reads_headers(config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, headers={"Location": LOCATION, "PaymentRequestToken": "f34DS34lfd0d03fdDselkfd3ffk21"})

    result = await mock_client(config, handler).create_payment_request(payment())

    assert result.location == LOCATION
    assert result.token == "f34DS34lfd0d03fdDselkfd3ffk21"
    assert seen["method"] == "PUT"
    assert seen["url"] == LOCATION
    assert seen["content_type"] == "application/json"
    assert "instruction_id" not in seen["body"]
    assert seen["body"]["payeeAlias"] == "1234679304"


@pytest.mark.asyncio
async def test_create_payment_request_without_token(config):
    def handler(request):
        return httpx.Response(201, headers={"Location": LOCATION})

    result = await mock_client(config, handler).create_payment_request(payment())

    assert result.token is None


@pytest.mark.asyncio
async def test_unknown_success_status_is_accepted(config):
    def handler(request):
        return httpx.Response(202, headers={"Location": LOCATION})

    result = await mock_client(config, handler).create_payment_request(payment())

    assert result.location == LOCATION


@pytest.mark.asyncio
async def test_success_without_location_is_a_decode_error(config):
    def handler(request):
        return httpx.Response(201)

    with pytest.raises(DecodeError, match="Location"):
        await mock_client(config, handler).create_payment_request(payment())


@pytest.mark.asyncio
async def test_422_raises_validation_error_with_all_entries(config):
    def handler(request):
        return httpx.Response(422, json=[
            {"errorCode": "RP03", "errorMessage": "Callback URL is missing or does not use HTTPS", "additionalInformation": None},
            {"errorCode": "PA02", "errorMessage": "Amount value is missing or not a valid number", "additionalInformation": None},
        ])

    with pytest.raises(ValidationError) as exc:
        await mock_client(config, handler).create_payment_request(payment(callback_url="", amount=""))

    assert [e.error_code for e in exc.value.errors] == ["RP03", "PA02"]
    assert str(exc.value) == (
        "[RP03] Callback URL is missing or does not use HTTPS | "
        "[PA02] Amount value is missing or not a valid number"
    )


@pytest.mark.asyncio
async def test_422_with_garbage_body_is_a_decode_error(config):
    def handler(request):
        return httpx.Response(422, content=b"<html>oops</html>")

    with pytest.raises(DecodeError):
        await mock_client(config, handler).create_payment_request(payment())


@pytest.mark.asyncio
async def test_403_raises_alias_mismatch(config):
    def handler(request):
        return httpx.Response(403)

    with pytest.raises(AliasMismatchError) as exc:
        await mock_client(config, handler).create_payment_request(payment(payee_alias="1231181189"))

    assert exc.value.error_code == "PA01"
    assert len(exc.value.errors) == 1


@pytest.mark.asyncio
async def test_other_status_is_unexpected(config):
    def handler(request):
        return httpx.Response(500, text="Internal Server Error")

    with pytest.raises(UnexpectedStatusError) as exc:
        await mock_client(config, handler).create_payment_request(payment())

    assert exc.value.status_code == 500
    assert isinstance(exc.value, TransportError)


@pytest.mark.asyncio
async def test_create_refund_targets_refunds_path(config):
    seen = {}
    location = f"{BASE_URL}/swish-cpcapi/api/v2/refunds/0D1F2B7B3F0C4E9B8C3A6E5D4C3B2A10"

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, headers={"Location": location})

    result = await mock_client(config, handler).create_refund(refund())

    assert result.location == location
    assert seen["url"] == location
    assert seen["body"]["originalPaymentReference"] == "6D6CD7406ECE4542A80152D909EF9F6B"


@pytest.mark.asyncio
async def test_create_refund_403(config):
    def handler(request):
        return httpx.Response(403)

    with pytest.raises(AliasMismatchError):
        await mock_client(config, handler).create_refund(refund())


@pytest.mark.asyncio
async def test_status_decodes_record_and_keeps_amount_formatting(config):
    body = (
        b'{"id": "AB23D7406ECE4542A80152D909EF9F6B", "status": "PAID", "amount": 100.00,'
        b' "currency": "SEK", "message": "Kingston USB", "dateCreated": "2015-02-19T22:01:53.315Z"}'
    )

    def handler(request):
        assert request.method == "GET"
        return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})

    record = await mock_client(config, handler).status(LOCATION)

    assert record.id == "AB23D7406ECE4542A80152D909EF9F6B"
    assert record.status == InstructionStatus.PAID
    assert record.amount == Decimal("100.00")
    assert str(record.amount) == "100.00"
    assert record.message == "Kingston USB"


@pytest.mark.asyncio
async def test_status_404_copies_first_error(config):
    def handler(request):
        return httpx.Response(404, json=[
            {"errorCode": "RP04", "errorMessage": "No payment request found related to a token"},
        ])

    with pytest.raises(NotFoundError) as exc:
        await mock_client(config, handler).status(LOCATION)

    assert exc.value.error_code == "RP04"
    assert exc.value.error_message == "No payment request found related to a token"
    assert str(exc.value) == "[RP04] No payment request found related to a token"


@pytest.mark.asyncio
async def test_status_with_malformed_body(config):
    def handler(request):
        return httpx.Response(200, content=b"{not json")

    with pytest.raises(DecodeError):
        await mock_client(config, handler).status(LOCATION)


@pytest.mark.asyncio
async def test_status_with_wrong_schema(config):
    def handler(request):
        return httpx.Response(200, json={"id": "x"})

    with pytest.raises(DecodeError, match="schema"):
        await mock_client(config, handler).status(LOCATION)


@pytest.mark.asyncio
async def test_status_other_error(config):
    def handler(request):
        return httpx.Response(401)

    with pytest.raises(UnexpectedStatusError) as exc:
        await mock_client(config, handler).status(LOCATION)

    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_timeout_is_a_transport_error(config):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError, match="timed out"):
        await mock_client(config, handler).status(LOCATION)


@pytest.mark.asyncio
async def test_connection_failure_is_a_transport_error(config):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        await mock_client(config, handler).create_payment_request(payment())


@pytest.mark.asyncio
async def test_per_call_timeout_overrides_config(config):
    seen = {}

    def handler(request):
        seen["timeout"] = request.extensions["timeout"]
        return httpx.Response(201, headers={"Location": LOCATION})

    await mock_client(config, handler).create_payment_request(payment(), timeout=1.5)

    assert seen["timeout"]["read"] == 1.5


@pytest.mark.asyncio
async def test_cancellation_aborts_the_call(config):
    started = asyncio.Event()

    async def handler(request):
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200)

    task = asyncio.create_task(mock_client(config, handler).status(LOCATION))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_client(config):
    async def handler(request):
        await asyncio.sleep(0)
        instruction_id = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(201, headers={"Location": f"{BASE_URL}/{instruction_id}"})

    client = mock_client(config, handler)
    results = await asyncio.gather(*[
        client.create_payment_request(payment(instruction_id=f"ID{i}")) for i in range(10)
    ])

    assert [r.location for r in results] == [f"{BASE_URL}/ID{i}" for i in range(10)]
