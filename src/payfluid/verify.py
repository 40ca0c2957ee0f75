"""
Verification of payment notifications.

PayFluid reports a payment outcome three ways: a redirect carrying a
url-encoded JSON query parameter, a webhook POST with a JSON body, and the
status endpoint. All three carry ``aapf_txn_*`` fields signed with
``aapf_txn_signature`` and are checked the same way against the session the
payment link was created with.

Usage:
    from payfluid import verify_redirect, verify_webhook, VerificationError

    # Redirect: the raw value of the query parameter
    status = verify_redirect(request.args["qs"], session=link.session)

    # Webhook: the decoded JSON body
    status = verify_webhook(request.get_json(), session=link.session)
    if status.is_successful:
        mark_paid(status.client_reference)
"""

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote_plus

from payfluid.exceptions import PayloadTypeError, ValidationError, VerificationError
from payfluid.models import PaymentStatus
from payfluid.signing import notification_signature, signatures_match

logger = logging.getLogger(__name__)

SIGNATURE_KEY = "aapf_txn_signature"


def parse_redirect_payload(text: str) -> dict:
    """URL-decode then JSON-decode a redirect payload.

    Key order is kept, since the signature depends on it.
    """
    try:
        payload = json.loads(unquote_plus(text))
    except ValueError as exc:
        raise VerificationError("payload is not valid url-encoded json") from exc
    if not isinstance(payload, dict):
        raise VerificationError("payload is not a json object")
    return payload


def verify_webhook(payload: Mapping[str, Any], session: str) -> PaymentStatus:
    """Verify a decoded notification and return the payment status.

    Raises:
        VerificationError: signature missing, empty or wrong.
        KeyError: the payload lacks one of the status fields.
    """
    if not session:
        raise ValidationError("session cannot be empty")

    if SIGNATURE_KEY not in payload:
        logger.warning("Rejected payment notification: no signature")
        raise VerificationError("no signature")
    supplied = payload[SIGNATURE_KEY]
    if not supplied:
        logger.warning("Rejected payment notification: empty signature")
        raise VerificationError("empty signature")

    signed_fields = {key: value for key, value in payload.items() if key != SIGNATURE_KEY}
    expected = notification_signature(signed_fields, session)
    if not signatures_match(expected, str(supplied)):
        logger.warning("Rejected payment notification: signature mismatch")
        raise VerificationError("signature is not valid")

    return PaymentStatus.from_payload(payload)


def verify_redirect(text: str, session: str) -> PaymentStatus:
    """Verify the url-encoded JSON a redirect delivers."""
    return verify_webhook(parse_redirect_payload(text), session)


def verify_payment(payload, session: str) -> PaymentStatus:
    """Verify a payload given either as redirect text or as a mapping."""
    if isinstance(payload, str):
        return verify_redirect(payload, session)
    if isinstance(payload, Mapping):
        return verify_webhook(payload, session)
    raise PayloadTypeError(type(payload))
