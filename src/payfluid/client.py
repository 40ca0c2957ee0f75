"""
PayFluid client — Python SDK for the PayFluid payment API.

Creating a payment is a two-step exchange: ask for secure credentials for the
customer's phone number, then request a payment link signed with them. Keep
the link's session and pay reference; they are needed to verify the outcome.

Usage:
    from payfluid import PayFluidClient, Payment

    client = PayFluidClient(
        client_id="...",
        api_key="-----BEGIN PUBLIC KEY-----...",
        login_parameter="...",
        live=False,
    )

    credentials = client.get_secure_credentials("0241111111")

    payment = (
        Payment()
        .amount(1.0)
        .email("jane@example.org")
        .phone("0241111111")
        .name("Jane")
        .reference("abc123")
        .redirect_url("https://shop.example.org/paid")
    )
    link = client.get_payment_link(credentials, payment)
    # send the customer to link.web_url

    # Later, poll for the outcome (or verify the redirect/webhook payload)
    status = client.get_payment_status(link.pay_reference, link.session)
    if status.is_successful:
        ...
"""

import base64
import logging
from typing import Mapping

import requests

from payfluid.config import DEFAULT_TIMEOUT, Endpoints
from payfluid.exceptions import (
    DecodeError,
    InvalidCredentialsError,
    MissingKeyMaterialError,
    RemoteError,
    TransportError,
    ValidationError,
)
from payfluid.models import SUCCESS_RESULT_CODE, PaymentLink, PaymentStatus, SecureCredentials
from payfluid.payment import Payment
from payfluid.signing import auth_token, request_timestamp, sign_request
from payfluid.verify import verify_payment

logger = logging.getLogger(__name__)

KEK_HEADER_MARKER = "kek"


def find_header(headers: Mapping[str, str], marker: str):
    """Return the value of the header named ``marker``.

    Falls back to the first header whose name contains ``marker``. Matching
    is case-insensitive. Returns None when no header matches.
    """
    marker = marker.lower()
    partial = None
    for name, value in headers.items():
        name = name.lower()
        if name == marker:
            return value
        if partial is None and marker in name:
            partial = value
    return partial


def split_kek(value: str):
    """Split a KEK header into (rsa_public_key, sha256_salt) on the first dot."""
    if value is None:
        raise MissingKeyMaterialError("response carried no KEK header")
    rsa_public_key, _, sha256_salt = value.strip().partition(".")
    if not rsa_public_key or not sha256_salt:
        raise MissingKeyMaterialError("KEK header is malformed")
    return rsa_public_key, sha256_salt


class PayFluidClient:
    """Client for creating and verifying PayFluid payments."""

    def __init__(
        self,
        client_id: str,
        api_key: str,
        login_parameter: str,
        live: bool = False,
        endpoints: Endpoints = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.client_id = client_id
        self.api_key = api_key
        self.login_parameter = login_parameter
        self.endpoints = endpoints or Endpoints.for_environment(live)
        self.timeout = timeout
        self.session = requests.Session()

    def __repr__(self) -> str:
        return f"PayFluidClient(endpoints={self.endpoints!r})"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request, turning transport failures into TransportError."""
        logger.debug("PayFluid %s %s", method, url)
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(url, exc) from exc

    @staticmethod
    def _decode(resp: requests.Response, url: str) -> dict:
        """Decode a JSON object body.

        Non-2xx responses raise RemoteError with whatever message the body has.
        """
        try:
            data = resp.json()
        except ValueError as exc:
            if not resp.ok:
                raise RemoteError(resp.text[:200] or resp.reason or "request failed", status_code=resp.status_code)
            raise DecodeError(url, resp.text) from exc

        if not isinstance(data, dict):
            raise DecodeError(url, resp.text)

        if not resp.ok:
            message = data.get("resultMessage") or data.get("result_message") or resp.reason or "request failed"
            code = data.get("resultCode") or data.get("result_code")
            raise RemoteError(str(message), result_code=code, status_code=resp.status_code)
        return data

    # --- Credentials ---

    def get_secure_credentials(self, phone_number: str) -> SecureCredentials:
        """Ask PayFluid for a session and its signing keys.

        Args:
            phone_number: The paying customer's mobile number.

        Returns:
            SecureCredentials for one payment. They expire; request new ones
            for each payment rather than reusing old ones.

        Raises:
            ValidationError: phone_number is empty.
            TransportError, DecodeError: the request failed.
            RemoteError: PayFluid refused, or sent no key material.
        """
        if not phone_number or not phone_number.strip():
            raise ValidationError("phone number cannot be empty")

        timestamp = request_timestamp()
        url = self.endpoints.secure_credentials
        headers = {
            "Content-Type": "application/json",
            "id": base64.b64encode(self.client_id.encode("utf-8")).decode("ascii"),
            "apiKey": auth_token(self.api_key, self.login_parameter, timestamp),
        }
        body = {
            "cmd": "getSecureParams",
            "datetime": timestamp,
            "mobile": phone_number.strip(),
        }

        resp = self._request("POST", url, json=body, headers=headers)
        data = self._decode(resp, url)

        if data.get("resultCode") != SUCCESS_RESULT_CODE:
            raise RemoteError(
                f"could not create secure credentials: {data.get('resultMessage', 'unknown error')}",
                result_code=data.get("resultCode"),
            )

        rsa_public_key, sha256_salt = split_kek(find_header(resp.headers, KEK_HEADER_MARKER))

        try:
            credentials = SecureCredentials(
                session=str(data["session"]),
                rsa_public_key=rsa_public_key,
                sha256_salt=sha256_salt,
                kek_expiry=int(data.get("kekExpiry") or 0),
                mac_expiry=int(data.get("macExpiry") or 0),
                approval_code=str(data.get("approvalCode", "")),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise DecodeError(url, resp.text) from exc

        if not credentials.session:
            raise RemoteError("could not create secure credentials: response carried no session")

        logger.info("Obtained PayFluid secure credentials (kek expiry %s)", credentials.kek_expiry)
        return credentials

    # --- Payment links ---

    def get_payment_link(self, credentials: SecureCredentials, payment: Payment) -> PaymentLink:
        """Create a hosted payment page for ``payment``.

        Raises:
            InvalidCredentialsError: credentials have no session.
            InvalidPaymentRequestError: the payment failed validation.
            CryptoError: the credentials' key material is unusable.
            TransportError, DecodeError, RemoteError: the request failed.
        """
        if not credentials.session:
            raise InvalidCredentialsError("invalid credentials: the session value cannot be empty")

        details = payment.build()
        body = details.request_body(credentials.session)
        signature = sign_request(credentials, body)

        url = self.endpoints.payment_link
        headers = {
            "Content-Type": "application/json",
            "signature": signature,
        }
        resp = self._request("POST", url, json=body, headers=headers)
        data = self._decode(resp, url)

        if data.get("result_code") != SUCCESS_RESULT_CODE:
            raise RemoteError(
                f"get payment link failed: {data.get('result_message', 'unknown error')}",
                result_code=data.get("result_code"),
            )

        try:
            link = PaymentLink.from_response(data)
        except (KeyError, AttributeError) as exc:
            raise DecodeError(url, resp.text) from exc

        logger.info("Created PayFluid payment link for reference %s", details.reference)
        return link

    # --- Status ---

    def get_payment_status(self, pay_reference: str, session: str) -> PaymentStatus:
        """Fetch the status of a payment link and verify its signature.

        Args:
            pay_reference: PaymentLink.pay_reference.
            session: The session the link was created with.

        Raises:
            ValidationError: an argument is empty.
            VerificationError: the status report is not properly signed.
            TransportError, DecodeError, RemoteError: the request failed.
        """
        if not pay_reference:
            raise ValidationError("pay reference cannot be empty")
        if not session:
            raise ValidationError("session cannot be empty")

        url = self.endpoints.payment_status
        resp = self._request("GET", url, headers={"payReference": pay_reference})
        data = self._decode(resp, url)
        return verify_payment(data, session)

    def verify_payment(self, payload, session: str) -> PaymentStatus:
        """Verify a redirect (url-encoded JSON text) or webhook (mapping) payload."""
        return verify_payment(payload, session)
