import base64
import hashlib
import hmac
import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from requests.structures import CaseInsensitiveDict

from payfluid import Payment, SecureCredentials


FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------

def mock_http_response(json_data=None, status_code: int = 200, headers: dict = None, text: str = None) -> Mock:
    """Return a mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.ok = 200 <= status_code < 400
    resp.status_code = status_code
    resp.reason = "OK" if resp.ok else "Error"
    if text is None:
        resp.json.return_value = json_data
        resp.text = json.dumps(json_data)
    else:
        resp.json.side_effect = ValueError("not json")
        resp.text = text
    resp.headers = CaseInsensitiveDict(headers or {"Content-Type": "application/json"})
    return resp


def rsa_decrypt(private_key, ciphertext_b64: str) -> str:
    return private_key.decrypt(base64.b64decode(ciphertext_b64), padding.PKCS1v15()).decode()


def sign_notification(payload: dict, session: str) -> str:
    """Signature as PayFluid computes it: values in delivered order."""
    key = hashlib.md5(session.encode()).hexdigest()
    message = "".join(str(v) for v in payload.values())
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()


def status_payload(**overrides) -> dict:
    payload = {
        "aapf_txn_amt": "1.00",
        "aapf_txn_clientRspRedirectURL": "https://shop.email.com/paid",
        "aapf_txn_clientTxnWH": "https://shop.email.com/hook",
        "aapf_txn_cref": "abc123",
        "aapf_txn_currency": "GHS",
        "aapf_txn_datetime": "2024-01-02T03:04:05.678Z",
        "aapf_txn_gw_ref": "GW998877",
        "aapf_txn_gw_sc": "0",
        "aapf_txn_maskedInstr": "024****111",
        "aapf_txn_payLink": "abcref123",
        "aapf_txn_payScheme": "MTNMM",
        "aapf_txn_ref": "PF123456",
        "aapf_txn_sc": "0",
        "aapf_txn_sc_msg": "Transaction successful",
    }
    payload.update(overrides)
    return payload


def signed_status_payload(session: str, **overrides) -> dict:
    payload = status_payload(**overrides)
    payload["aapf_txn_signature"] = sign_notification(payload, session)
    return payload


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key_pem(private_key) -> str:
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


@pytest.fixture(scope="session")
def public_key_b64(private_key) -> str:
    """Bare base64 DER, the way PayFluid sends it in the KEK header."""
    der = private_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode()


@pytest.fixture
def credentials(public_key_b64) -> SecureCredentials:
    return SecureCredentials(
        session="S1",
        rsa_public_key=public_key_b64,
        sha256_salt="salt1",
        kek_expiry=1700000000,
        mac_expiry=1700000000,
        approval_code="AP1",
    )


@pytest.fixture
def payment() -> Payment:
    return (
        Payment(now=FIXED_NOW)
        .amount(1.0)
        .email("a@b.com")
        .phone("0241111111")
        .name("Jane")
        .reference("abc123")
        .redirect_url("https://x/y")
    )
