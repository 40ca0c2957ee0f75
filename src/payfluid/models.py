"""
Immutable result objects returned by the PayFluid client.
"""

from dataclasses import dataclass, field
from typing import Mapping


SUCCESS_RESULT_CODE = "00"
PAYMENT_SUCCESS_STATUS = "0"


@dataclass(frozen=True)
class SecureCredentials:
    """Session plus key material issued by ``getSecureParams``.

    The expiry markers are informational; request new credentials once they
    have passed.
    """

    session: str
    rsa_public_key: str = field(repr=False)
    sha256_salt: str = field(repr=False)
    kek_expiry: int = 0
    mac_expiry: int = 0
    approval_code: str = ""


@dataclass(frozen=True)
class PaymentLink:
    """A newly created hosted payment page.

    Keep ``pay_reference`` and ``session`` to verify the payment later.
    """

    approval_code: str
    result_message: str
    web_url: str
    session: str
    result_code: str
    pay_reference: str

    @classmethod
    def from_response(cls, data: Mapping) -> "PaymentLink":
        web_url = data["webURL"]
        return cls(
            approval_code=str(data.get("approvalCode", "")),
            result_message=str(data.get("result_message", "")),
            web_url=web_url,
            session=str(data.get("session", "")),
            result_code=str(data["result_code"]),
            pay_reference=web_url.rsplit("/", 1)[-1],
        )


# PaymentStatus field -> notification payload key
STATUS_FIELDS = {
    "amount": "aapf_txn_amt",
    "redirect_url": "aapf_txn_clientRspRedirectURL",
    "callback_url": "aapf_txn_clientTxnWH",
    "client_reference": "aapf_txn_cref",
    "currency": "aapf_txn_currency",
    "date_time": "aapf_txn_datetime",
    "upstream_reference": "aapf_txn_gw_ref",
    "upstream_status": "aapf_txn_gw_sc",
    "masked_instrument": "aapf_txn_maskedInstr",
    "pay_reference": "aapf_txn_payLink",
    "pay_scheme": "aapf_txn_payScheme",
    "payfluid_reference": "aapf_txn_ref",
    "status_code": "aapf_txn_sc",
    "status_string": "aapf_txn_sc_msg",
    "signature": "aapf_txn_signature",
}


@dataclass(frozen=True)
class PaymentStatus:
    """Verified outcome of a payment, built from a signed notification."""

    amount: str
    redirect_url: str
    callback_url: str
    client_reference: str
    currency: str
    date_time: str
    upstream_reference: str
    upstream_status: str
    masked_instrument: str
    pay_reference: str
    pay_scheme: str
    payfluid_reference: str
    status_code: str
    status_string: str
    signature: str

    @property
    def is_successful(self) -> bool:
        return self.status_code == PAYMENT_SUCCESS_STATUS

    @classmethod
    def from_payload(cls, payload: Mapping) -> "PaymentStatus":
        """Map a verified payload. Raises KeyError if any expected key is absent."""
        values = {}
        for name, key in STATUS_FIELDS.items():
            value = payload[key]
            values[name] = "" if value is None else str(value)
        return cls(**values)
