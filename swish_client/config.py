"""Client configuration and the bundled certificate authority."""

import os
from importlib import resources
from typing import Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from swish_client.errors import ConfigurationError
from swish_client.shared.models import BASE_URLS, Environment

DEFAULT_TIMEOUT = 10.0


def load_bundled_ca() -> str:
    """Return the base64-encoded PEM of the CA shipped with the package."""
    return (
        resources.files("swish_client")
        .joinpath("resources/swish_ca.b64")
        .read_text(encoding="ascii")
        .strip()
    )


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    certificate: bytes = Field(repr=False)
    passphrase: str = Field(default="", repr=False)
    ca: str = Field(default_factory=load_bundled_ca, repr=False)
    environment: Environment = Environment.PRODUCTION
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    base_url: Optional[str] = None

    @property
    def url(self) -> str:
        return (self.base_url or BASE_URLS[self.environment]).rstrip("/")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        cert_path = os.environ.get("SWISH_CERTIFICATE_PATH")
        if not cert_path:
            raise ConfigurationError("SWISH_CERTIFICATE_PATH is not set")
        try:
            with open(cert_path, "rb") as f:
                certificate = f.read()
        except OSError as e:
            raise ConfigurationError(f"cannot read certificate bundle {cert_path}: {e}") from e

        try:
            values = {
                "certificate": certificate,
                "passphrase": os.environ.get("SWISH_PASSPHRASE", ""),
                "environment": os.environ.get("SWISH_ENVIRONMENT", Environment.PRODUCTION.value),
                "timeout": float(os.environ.get("SWISH_TIMEOUT", DEFAULT_TIMEOUT)),
                "base_url": os.environ.get("SWISH_BASE_URL") or None,
            }
            if os.environ.get("SWISH_CA"):
                values["ca"] = os.environ["SWISH_CA"]
            return cls(**values)
        except (ValueError, pydantic.ValidationError) as e:
            raise ConfigurationError(f"invalid environment configuration: {e}") from e
