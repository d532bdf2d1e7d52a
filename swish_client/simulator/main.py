"""Swish gateway simulator - emulates the v2 payment request and refund endpoints."""

import asyncio
import json
import logging
import os
import random
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import httpx
from fastapi import APIRouter, BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from swish_client.shared.models import (
    ApiError, InstructionStatus, PAYMENT_REQUESTS_PATH, REFUNDS_PATH,
)
from swish_client.simulator.failure_injection import ERROR_OUTCOMES, FailureConfig
from swish_client.simulator.state_machine import InvalidTransitionError, validate_transition
from swish_client.simulator.store import KIND_FILES, InstructionStore
from swish_client.simulator.validation import api_error, validate_payment, validate_refund

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger("swish.simulator")

DATA_DIR = os.environ.get("SWISH_SIM_DATA_DIR", "/tmp/swish-simulator")
MERCHANT_ALIAS = os.environ.get("SWISH_SIM_MERCHANT_ALIAS", "1234679304")
AUTO_SETTLE = os.environ.get("SWISH_SIM_AUTO_SETTLE", "true").lower() == "true"
SEND_CALLBACKS = os.environ.get("SWISH_SIM_SEND_CALLBACKS", "false").lower() == "true"
SEED = int(os.environ.get("SEED", 42))

SETTLED_OUT = {InstructionStatus.DECLINED.value, InstructionStatus.ERROR.value}


class SimulatorSettings(BaseModel):
    data_dir: str = DATA_DIR
    merchant_alias: str = MERCHANT_ALIAS
    auto_settle: bool = AUTO_SETTLE
    send_callbacks: bool = SEND_CALLBACKS
    seed: int = SEED
    failure: FailureConfig = Field(default_factory=FailureConfig)


class StatusUpdate(BaseModel):
    status: InstructionStatus


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _error_response(status_code: int, errors: list[ApiError]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=[e.model_dump(by_alias=True) for e in errors],
    )


def render(record: dict) -> bytes:
    """Record as the gateway returns it: unset fields dropped, amount as a JSON number.

    The amount keeps the digits it was created with, so "100.00" goes out as
    ``100.00`` rather than ``100.0``.
    """
    out = {k: v for k, v in record.items() if v is not None}
    amount = out.pop("amount", None)
    body = json.dumps(out, separators=(",", ":"), ensure_ascii=False)
    if amount is not None:
        # stored amounts already matched AMOUNT_RE, so they are valid JSON numbers
        body = body[:-1] + ("," if out else "") + f"\"amount\":{amount}}}"
    return body.encode("utf-8")


def _record_response(record: dict) -> Response:
    return Response(content=render(record), media_type="application/json")


async def _read_body(request: Request) -> Optional[dict]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


async def send_callback(url: str, body: bytes,
                        transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            await client.post(
                url, content=body, headers={"Content-Type": "application/json"}, timeout=10.0,
            )
        logger.info(f"Callback sent to {url}")
    except httpx.HTTPError as e:
        logger.error(f"Callback delivery to {url} failed: {e}")


def create_app(settings: Optional[SimulatorSettings] = None,
               callback_transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    settings = settings or SimulatorSettings()
    store = InstructionStore(settings.data_dir)
    rng = random.Random(settings.seed)
    router = APIRouter()

    async def simulate_latency():
        failure = settings.failure
        if failure.latency_ms_max > 0:
            latency = rng.randint(failure.latency_ms_min, failure.latency_ms_max)
            await asyncio.sleep(latency / 1000.0)

    def transition(kind: str, record: dict, target: InstructionStatus,
                   background_tasks: BackgroundTasks) -> dict:
        validate_transition(record["id"], record["status"], target.value)

        record = dict(record)
        record["status"] = target.value
        if target == InstructionStatus.PAID:
            record["datePaid"] = _now()
            record["paymentReference"] = uuid.uuid4().hex.upper()
        elif target == InstructionStatus.ERROR:
            code, message = rng.choice(ERROR_OUTCOMES)
            record["errorCode"] = code
            record["errorMessage"] = message
        store.save(kind, record)

        if settings.send_callbacks and record.get("callbackUrl"):
            background_tasks.add_task(
                send_callback, record["callbackUrl"], render(record), callback_transport
            )

        logger.info(f"{kind} {record['id']} -> {target.value}")
        return record

    def settle(kind: str, record: dict, background_tasks: BackgroundTasks) -> dict:
        failure = settings.failure
        roll = rng.random()
        if roll < failure.error_rate:
            target = InstructionStatus.ERROR
        elif roll < failure.error_rate + failure.decline_rate:
            target = InstructionStatus.DECLINED
        else:
            target = InstructionStatus.PAID
        return transition(kind, record, target, background_tasks)

    def find_paid_payment(reference: Optional[str]) -> Optional[dict]:
        if not reference:
            return None
        for payment in store.all("paymentrequests").values():
            if reference in (payment["id"], payment.get("paymentReference")):
                if payment["status"] == InstructionStatus.PAID.value:
                    return payment
        return None

    def refunded_total(payment: dict) -> Decimal:
        refs = {payment["id"], payment.get("paymentReference")}
        return sum(
            (Decimal(r["amount"]) for r in store.all("refunds").values()
             if r.get("originalPaymentReference") in refs and r["status"] not in SETTLED_OUT),
            Decimal("0"),
        )

    def created(request: Request, path: str, instruction_id: str, headers: dict) -> Response:
        base = str(request.base_url).rstrip("/")
        headers = {"Location": f"{base}{path}/{instruction_id}", **headers}
        return Response(status_code=201, headers=headers)

    @router.put(PAYMENT_REQUESTS_PATH + "/{instruction_id}")
    async def create_payment_request(instruction_id: str, request: Request,
                                     background_tasks: BackgroundTasks):
        body = await _read_body(request)
        if body is None:
            return Response(status_code=400)
        await simulate_latency()

        payee_alias = body.get("payeeAlias")
        if payee_alias and payee_alias != settings.merchant_alias:
            logger.info(f"Payment request {instruction_id} refused: payee {payee_alias} is not the merchant")
            return Response(status_code=403)

        errors = validate_payment(body)
        if errors:
            logger.info(f"Payment request {instruction_id} rejected: {[e.error_code for e in errors]}")
            return _error_response(422, errors)

        record = {
            "id": instruction_id,
            "payeePaymentReference": body.get("payeePaymentReference"),
            "paymentReference": None,
            "callbackUrl": body["callbackUrl"],
            "payerAlias": body.get("payerAlias"),
            "payerSSN": body.get("payerSSN"),
            "payeeAlias": payee_alias,
            "amount": body["amount"],
            "currency": body["currency"],
            "message": body.get("message"),
            "status": InstructionStatus.CREATED.value,
            "dateCreated": _now(),
            "datePaid": None,
            "errorCode": None,
            "errorMessage": None,
            "additionalInformation": None,
        }
        if not store.insert("paymentrequests", record):
            return _error_response(409, [api_error("RP06")])

        logger.info(f"Payment request {instruction_id} created for {record['amount']} {record['currency']}")
        if settings.auto_settle:
            settle("paymentrequests", record, background_tasks)

        return created(request, PAYMENT_REQUESTS_PATH, instruction_id,
                       {"PaymentRequestToken": uuid.uuid4().hex})

    @router.put(REFUNDS_PATH + "/{instruction_id}")
    async def create_refund(instruction_id: str, request: Request,
                            background_tasks: BackgroundTasks):
        body = await _read_body(request)
        if body is None:
            return Response(status_code=400)
        await simulate_latency()

        payer_alias = body.get("payerAlias")
        if payer_alias and payer_alias != settings.merchant_alias:
            logger.info(f"Refund {instruction_id} refused: payer {payer_alias} is not the merchant")
            return Response(status_code=403)

        original = find_paid_payment(body.get("originalPaymentReference"))
        refunded = refunded_total(original) if original else Decimal("0")
        errors = validate_refund(body, original, refunded)
        if errors:
            logger.info(f"Refund {instruction_id} rejected: {[e.error_code for e in errors]}")
            return _error_response(422, errors)

        record = {
            "id": instruction_id,
            "paymentReference": None,
            "payerPaymentReference": body.get("payerPaymentReference"),
            "originalPaymentReference": body["originalPaymentReference"],
            "callbackUrl": body["callbackUrl"],
            "payerAlias": payer_alias,
            "payeeAlias": original.get("payerAlias"),
            "amount": body["amount"],
            "currency": body["currency"],
            "message": body.get("message"),
            "status": InstructionStatus.CREATED.value,
            "dateCreated": _now(),
            "datePaid": None,
            "errorCode": None,
            "errorMessage": None,
            "additionalInformation": None,
        }
        if not store.insert("refunds", record):
            return _error_response(409, [api_error("RP06")])

        logger.info(f"Refund {instruction_id} created against {record['originalPaymentReference']}")
        if settings.auto_settle:
            settle("refunds", record, background_tasks)

        return created(request, REFUNDS_PATH, instruction_id, {})

    @router.get("/swish-cpcapi/api/{version}/{kind}/{instruction_id}")
    async def get_status(version: str, kind: str, instruction_id: str):
        if kind not in KIND_FILES:
            return Response(status_code=404)
        record = store.get(kind, instruction_id)
        if record is None:
            return _error_response(404, [api_error("RP04")])
        return _record_response(record)

    @router.post("/simulator/{kind}/{instruction_id}/status")
    async def force_status(kind: str, instruction_id: str, update: StatusUpdate,
                           background_tasks: BackgroundTasks):
        if kind not in KIND_FILES:
            return Response(status_code=404)
        record = store.get(kind, instruction_id)
        if record is None:
            return _error_response(404, [api_error("RP04")])
        try:
            record = transition(kind, record, update.status, background_tasks)
        except InvalidTransitionError as e:
            return JSONResponse(status_code=409, content={"detail": str(e)})
        return _record_response(record)

    @router.get("/health")
    async def health():
        return {"status": "healthy", "service": "swish-simulator"}

    app = FastAPI(title="Swish Gateway Simulator", version="1.0.0")
    app.include_router(router)
    return app


app = create_app()
