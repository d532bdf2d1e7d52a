"""PKCS#12 identity and pinned CA loading for the mutual-TLS transport."""

import base64
import binascii
import os
import ssl
import tempfile

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from swish_client.errors import ConfigurationError


def load_identity(bundle: bytes, passphrase: str) -> tuple[bytes, bytes]:
    """Unpack a passphrase-protected PKCS#12 bundle.

    Returns ``(certificate_chain_pem, private_key_pem)``. The leaf certificate
    comes first, followed by any intermediates shipped in the bundle.
    """
    password = passphrase.encode() if passphrase else None
    try:
        key, cert, additional = pkcs12.load_key_and_certificates(bundle, password)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"could not decode certificate bundle: {e}") from e

    if key is None or cert is None:
        raise ConfigurationError("certificate bundle must hold both a certificate and a private key")

    chain = cert.public_bytes(serialization.Encoding.PEM)
    for extra in additional or []:
        chain += extra.public_bytes(serialization.Encoding.PEM)

    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return chain, key_pem


def decode_ca(ca: str) -> str:
    """Decode a base64-encoded PEM CA bundle into PEM text."""
    try:
        pem = base64.b64decode("".join(ca.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"CA is not valid base64: {e}") from e

    try:
        certs = x509.load_pem_x509_certificates(pem)
    except ValueError as e:
        raise ConfigurationError(f"CA does not contain a PEM certificate: {e}") from e

    return "".join(
        c.public_bytes(serialization.Encoding.PEM).decode("ascii") for c in certs
    )


def build_ssl_context(bundle: bytes, passphrase: str, ca: str) -> ssl.SSLContext:
    """Build a client context presenting the bundle identity and trusting only ``ca``."""
    ca_pem = decode_ca(ca)
    chain, key_pem = load_identity(bundle, passphrase)

    try:
        context = ssl.create_default_context(cadata=ca_pem)
    except ssl.SSLError as e:
        raise ConfigurationError(f"CA could not be loaded: {e}") from e

    # load_cert_chain only reads from disk
    fd, tmp = tempfile.mkstemp(suffix=".pem")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(chain + key_pem)
        context.load_cert_chain(tmp)
    except ssl.SSLError as e:
        raise ConfigurationError(f"identity certificate is malformed: {e}") from e
    finally:
        os.unlink(tmp)

    return context
