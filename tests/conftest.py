"""Pytest fixtures: throwaway merchant certificates and a simulator-backed client."""

import base64

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs12

from swish_client import ClientConfig, Environment, SwishClient
from swish_client.simulator.main import SimulatorSettings, create_app
from tests.helpers import BASE_URL, MERCHANT_ALIAS, PASSPHRASE, self_signed


@pytest.fixture(scope="session")
def merchant_identity():
    key = ec.generate_private_key(ec.SECP256R1())
    return key, self_signed(f"Swish Merchant {MERCHANT_ALIAS}", key, is_ca=False)


@pytest.fixture(scope="session")
def merchant_bundle(merchant_identity) -> bytes:
    key, cert = merchant_identity
    return pkcs12.serialize_key_and_certificates(
        b"merchant", key, cert, None,
        serialization.BestAvailableEncryption(PASSPHRASE.encode()),
    )


@pytest.fixture(scope="session")
def ca_b64() -> str:
    key = ec.generate_private_key(ec.SECP256R1())
    cert = self_signed("Test Root CA", key, is_ca=True)
    return base64.b64encode(cert.public_bytes(serialization.Encoding.PEM)).decode("ascii")


@pytest.fixture
def config(merchant_bundle, ca_b64) -> ClientConfig:
    return ClientConfig(
        certificate=merchant_bundle,
        passphrase=PASSPHRASE,
        ca=ca_b64,
        environment=Environment.TEST,
        timeout=5,
        base_url=BASE_URL,
    )


@pytest.fixture
def simulator_settings(tmp_path) -> SimulatorSettings:
    return SimulatorSettings(data_dir=str(tmp_path / "simulator"), merchant_alias=MERCHANT_ALIAS)


@pytest.fixture
def simulator_app(simulator_settings):
    return create_app(simulator_settings)


@pytest.fixture
def client(config, simulator_app) -> SwishClient:
    return SwishClient(config, transport=httpx.ASGITransport(app=simulator_app))
