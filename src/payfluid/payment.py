"""
Payment request builder.

Each setter validates its own field right away and returns the builder, so
calls chain. ``build()`` then checks the payment as a whole and freezes it.

Usage:
    from payfluid import Payment

    payment = (
        Payment()
        .amount(10.0)
        .email("jane@example.org")
        .phone("0241111111")
        .name("Jane Doe")
        .reference("ord123")
        .description("Two shirts")
        .redirect_url("https://shop.example.org/paid")
        .callback_url("https://shop.example.org/webhooks/payfluid")
    )
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from payfluid.customization import Customization
from payfluid.exceptions import InvalidPaymentRequestError, ValidationError
from payfluid.validation import check_amount, check_phone, is_valid_email, is_valid_url


MAX_DESCRIPTION_LEN = 40
MAX_REFERENCE_LEN = 10
VALID_LANG_VALUES = ("en", "fr")
DEFAULT_CURRENCY = "GHS"
DEFAULT_LANG = "en"

_REFERENCE_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def payment_timestamp(now: datetime = None) -> str:
    """Format ``now`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class PaymentDetails:
    """A validated payment, ready to be signed and sent."""

    amount: float
    currency: str
    date_time: str
    email: str
    phone: str
    name: str
    reference: str
    redirect_url: str
    lang: str = DEFAULT_LANG
    description: str = ""
    other_info: str = ""
    callback_url: str = ""
    customization: str = ""

    def request_body(self, session: str) -> dict:
        """The getPayLink body for ``session``, keys in ascending order.

        Optional keys are only present when set.
        """
        body = {
            "amount": self.amount,
            "currency": self.currency,
            "datetime": self.date_time,
            "email": self.email,
            "lang": self.lang,
            "mobile": self.phone,
            "name": self.name,
            "reference": self.reference,
            "responseRedirectURL": self.redirect_url,
            "session": session,
        }
        if self.description:
            body["descr"] = self.description
        if self.other_info:
            body["otherInfo"] = self.other_info
        if self.callback_url:
            body["trxStatusCallbackURL"] = self.callback_url
        if self.customization:
            body["customTxn"] = self.customization
        return dict(sorted(body.items()))


class Payment:
    """Builder for a payment request."""

    def __init__(self, now: datetime = None):
        self._amount = None
        self._currency = DEFAULT_CURRENCY
        self._date_time = payment_timestamp(now)
        self._description = ""
        self._email = ""
        self._lang = DEFAULT_LANG
        self._phone = ""
        self._name = ""
        self._other_info = ""
        self._reference = ""
        self._redirect_url = ""
        self._callback_url = ""
        self._customization = None

    def amount(self, amount) -> "Payment":
        """The exact amount to charge. Must be a positive number."""
        self._amount = check_amount(amount, "payment")
        return self

    def currency(self, currency: str = DEFAULT_CURRENCY) -> "Payment":
        """ISO currency code, e.g. GHS."""
        currency = currency.strip()
        if not currency:
            raise ValidationError("payment: currency cannot be empty")
        self._currency = currency
        return self

    def description(self, description: str) -> "Payment":
        description = description.strip()
        if len(description) > MAX_DESCRIPTION_LEN:
            raise ValidationError(
                f"payment: description cannot be more than {MAX_DESCRIPTION_LEN} characters long"
            )
        self._description = description
        return self

    def email(self, email: str) -> "Payment":
        email = email.strip()
        if not is_valid_email(email):
            raise ValidationError(f"payment: email '{email}' is not valid")
        self._email = email
        return self

    def language(self, lang: str) -> "Payment":
        lang = lang.strip()
        if lang not in VALID_LANG_VALUES:
            raise ValidationError(
                f"payment: invalid value for language, expected one of "
                f"[{','.join(VALID_LANG_VALUES)}] but got '{lang}'"
            )
        self._lang = lang
        return self

    def phone(self, phone: str) -> "Payment":
        """Customer mobile number, preferably in international format."""
        self._phone = check_phone(phone, "payment")
        return self

    def name(self, name: str) -> "Payment":
        self._name = name.strip()
        return self

    def other_info(self, other_info: str) -> "Payment":
        self._other_info = other_info.strip()
        return self

    def reference(self, reference: str) -> "Payment":
        """Your own transaction reference. Use a fresh one for every attempt."""
        reference = reference.strip()
        if not reference:
            raise ValidationError("payment: reference cannot be empty")
        if len(reference) > MAX_REFERENCE_LEN:
            raise ValidationError(
                f"payment: reference cannot be more than {MAX_REFERENCE_LEN} characters: "
                f"your reference '{reference}' is {len(reference)} characters long"
            )
        if not _REFERENCE_PATTERN.match(reference):
            raise ValidationError(f"payment: reference '{reference}' must only contain letters and digits")
        self._reference = reference
        return self

    def redirect_url(self, url: str) -> "Payment":
        """Where the customer lands after paying."""
        url = url.strip()
        if not is_valid_url(url):
            raise ValidationError("payment: invalid redirect url")
        if self._callback_url and self._callback_url == url:
            raise ValidationError("payment: redirect and callback url cannot be the same")
        self._redirect_url = url
        return self

    def callback_url(self, url: str) -> "Payment":
        """Webhook PayFluid posts the transaction status to."""
        url = url.strip()
        if not is_valid_url(url):
            raise ValidationError("payment: invalid callback url")
        if self._redirect_url and self._redirect_url == url:
            raise ValidationError("payment: callback and redirect url cannot be the same")
        self._callback_url = url
        return self

    def customize(self, customization: Customization) -> "Payment":
        self._customization = customization
        return self

    @property
    def date_time(self) -> str:
        return self._date_time

    @property
    def customization(self) -> Customization:
        return self._customization

    def build(self) -> PaymentDetails:
        """Check the whole payment and freeze it.

        Checks run in a fixed order and stop at the first failure, which is
        raised as InvalidPaymentRequestError.
        """
        if self._amount is None:
            raise InvalidPaymentRequestError("payment amount cannot be empty")
        if not self._currency:
            raise InvalidPaymentRequestError("payment currency cannot be empty")
        if not self._date_time:
            raise InvalidPaymentRequestError(
                "payment datetime cannot be empty: expected the format 'YYYY-MM-DDTHH:MM:SS.mmmZ'"
            )
        if not self._email:
            raise InvalidPaymentRequestError("payment email cannot be empty")
        if not is_valid_email(self._email):
            raise InvalidPaymentRequestError(f"the supplied payment email '{self._email}' is not a valid email")
        if not self._phone:
            raise InvalidPaymentRequestError("payment phone cannot be empty")
        try:
            check_phone(self._phone, "payment")
        except ValidationError as exc:
            raise InvalidPaymentRequestError(str(exc)) from exc
        if not self._reference:
            raise InvalidPaymentRequestError("payment reference cannot be empty")
        if len(self._reference) > MAX_REFERENCE_LEN:
            raise InvalidPaymentRequestError(
                f"payment reference cannot be more than {MAX_REFERENCE_LEN} characters"
            )
        if not self._redirect_url:
            raise InvalidPaymentRequestError("payment redirect url cannot be empty")
        if self._callback_url and self._callback_url == self._redirect_url:
            raise InvalidPaymentRequestError("the redirect url and callback url cannot be the same")
        if not self._name:
            raise InvalidPaymentRequestError("payment name cannot be empty")

        return PaymentDetails(
            amount=self._amount,
            currency=self._currency,
            date_time=self._date_time,
            email=self._email,
            phone=self._phone,
            name=self._name,
            reference=self._reference,
            redirect_url=self._redirect_url,
            lang=self._lang,
            description=self._description,
            other_info=self._other_info,
            callback_url=self._callback_url,
            customization=self._customization.to_json() if self._customization else "",
        )
