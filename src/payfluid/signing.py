"""
Signing primitives for PayFluid requests and notifications.

Outbound requests and inbound notifications are canonicalized differently:

- Requests: sort the body keys, then concatenate the values in that order.
  The HMAC-SHA256 hex digest (keyed by the session salt) is RSA-PKCS1
  encrypted with the session public key and base64 encoded.
- Notifications: drop the signature, then concatenate the remaining values in
  the order they were delivered. The HMAC-SHA256 hex digest is keyed by the
  hex MD5 of the session and compared in constant time.

Both rules must stay exactly as PayFluid computes them, so they are kept as
two separate functions.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Any, Mapping

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from payfluid.exceptions import CryptoError
from payfluid.models import SecureCredentials


def request_timestamp(now: datetime = None) -> str:
    """Format ``now`` as YmdHisv: digits only, millisecond precision, UTC."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"


def value_to_text(value: Any) -> str:
    """String form of a body value as it takes part in a signature.

    Floats keep their zero fraction (``1.0`` stays ``"1.0"``), matching the
    JSON the request is sent as.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


# --- RSA ---


def load_public_key(key_material: str) -> rsa.RSAPublicKey:
    """Load an RSA public key from PEM or bare base64 DER.

    PayFluid hands keys out without PEM armour, so both forms are accepted.
    A PEM private key is accepted too; its public half is used.
    """
    if not key_material or not key_material.strip():
        raise CryptoError("RSA key material is empty")

    data = key_material.strip()
    try:
        if data.startswith("-----BEGIN"):
            if "PRIVATE KEY" in data.split("\n", 1)[0]:
                key = serialization.load_pem_private_key(data.encode(), password=None).public_key()
            else:
                key = serialization.load_pem_public_key(data.encode())
        else:
            der = base64.b64decode("".join(data.split()), validate=True)
            key = serialization.load_der_public_key(der)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CryptoError("could not load RSA key") from exc

    if not isinstance(key, rsa.RSAPublicKey):
        raise CryptoError("key material is not an RSA key")
    return key


def rsa_encrypt(key_material: str, message: str) -> str:
    """RSA-PKCS1 v1.5 encrypt ``message`` and return the base64 ciphertext."""
    key = load_public_key(key_material)
    try:
        ciphertext = key.encrypt(message.encode("utf-8"), padding.PKCS1v15())
    except ValueError as exc:
        raise CryptoError("RSA encryption failed") from exc
    return base64.b64encode(ciphertext).decode("ascii")


def auth_token(api_key: str, login_parameter: str, timestamp: str) -> str:
    """The ``apiKey`` header sent when asking for secure credentials."""
    return rsa_encrypt(api_key, f"{login_parameter}.{timestamp}")


# --- HMAC ---


def hmac_sha256_hex(key: str, message: str) -> str:
    return hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def canonicalize_request_body(body: Mapping[str, Any]) -> str:
    """Concatenate the values of ``body`` in ascending key order."""
    return "".join(value_to_text(body[key]) for key in sorted(body))


def sign_request(credentials: SecureCredentials, body: Mapping[str, Any]) -> str:
    """Produce the ``signature`` header for a payment link request."""
    if not credentials.sha256_salt:
        raise CryptoError("credentials carry no HMAC salt")
    digest = hmac_sha256_hex(credentials.sha256_salt, canonicalize_request_body(body))
    return rsa_encrypt(credentials.rsa_public_key, digest)


def canonicalize_notification(payload: Mapping[str, Any]) -> str:
    """Concatenate the values of ``payload`` in delivered order.

    The caller removes the signature entry first.
    """
    return "".join(value_to_text(value) for value in payload.values())


def notification_key(session: str) -> str:
    # MD5 only derives the HMAC key; integrity comes from the HMAC.
    return hashlib.md5(session.encode("utf-8")).hexdigest()


def notification_signature(payload: Mapping[str, Any], session: str) -> str:
    """HMAC-SHA256 hex digest PayFluid puts in ``aapf_txn_signature``."""
    return hmac_sha256_hex(notification_key(session), canonicalize_notification(payload))


def signatures_match(expected: str, supplied: str) -> bool:
    """Case-insensitive constant-time comparison of two hex signatures."""
    return hmac.compare_digest(
        expected.lower().encode("utf-8"),
        supplied.lower().encode("utf-8"),
    )
