import json
import math
from datetime import datetime, timedelta, timezone

import pytest

from payfluid import Customization, InvalidPaymentRequestError, Payment, ValidationError
from payfluid.payment import payment_timestamp

from conftest import FIXED_NOW


class TestPaymentFields:

    def test_defaults(self):
        details = (
            Payment(now=FIXED_NOW)
            .amount(5)
            .email("a@b.com")
            .phone("0241111111")
            .name("Jane")
            .reference("abc123")
            .redirect_url("https://x/y")
            .build()
        )
        assert details.currency == "GHS"
        assert details.lang == "en"
        assert details.date_time == "2024-01-02T03:04:05.678Z"
        assert details.amount == 5.0
        assert isinstance(details.amount, float)

    def test_timestamp_is_utc(self):
        plus_two = timezone(timedelta(hours=2))
        local = datetime(2024, 1, 2, 5, 4, 5, 678000, tzinfo=plus_two)
        assert payment_timestamp(local) == "2024-01-02T03:04:05.678Z"

    @pytest.mark.parametrize("amount", [1, 1.5, "2.50", 0.01])
    def test_valid_amounts(self, amount):
        Payment().amount(amount)

    @pytest.mark.parametrize("amount", [0, 0.0, -3, "abc", "", None, True, math.nan, math.inf])
    def test_invalid_amounts(self, amount):
        with pytest.raises(ValidationError):
            Payment().amount(amount)

    def test_reference_boundary(self):
        Payment().reference("a" * 10)
        with pytest.raises(ValidationError, match="more than 10 characters"):
            Payment().reference("a" * 11)

    @pytest.mark.parametrize("reference", ["", "   ", "ord-1", "ord 1"])
    def test_invalid_reference(self, reference):
        with pytest.raises(ValidationError):
            Payment().reference(reference)

    def test_phone_boundary(self):
        Payment().phone("0241111111")
        with pytest.raises(ValidationError, match="less than 10 digits"):
            Payment().phone("024111111")

    @pytest.mark.parametrize("phone", ["024111111A", "abcdefghijkl", "0241 111 111", "+", "+233241111111"])
    def test_non_digit_phone(self, phone):
        with pytest.raises(ValidationError):
            Payment().phone(phone)

    def test_same_valid_value_twice(self):
        payment = Payment(now=FIXED_NOW).phone("0241111111")
        first = payment.phone("0241111111")
        assert first is payment

        for _ in range(2):
            with pytest.raises(ValidationError):
                payment.phone("12")

    def test_description_length(self):
        Payment().description("x" * 40)
        with pytest.raises(ValidationError):
            Payment().description("x" * 41)

    def test_language(self):
        Payment().language("fr")
        with pytest.raises(ValidationError, match="expected one of"):
            Payment().language("de")

    def test_email(self):
        with pytest.raises(ValidationError):
            Payment().email("not-an-email")

    def test_redirect_and_callback_must_differ(self):
        with pytest.raises(ValidationError, match="cannot be the same"):
            Payment().redirect_url("https://x/y").callback_url("https://x/y")
        with pytest.raises(ValidationError, match="cannot be the same"):
            Payment().callback_url("https://x/y").redirect_url(" https://x/y ")

    @pytest.mark.parametrize("url", ["x/y", "https//x/y", "https:/x/y", "not a url"])
    def test_invalid_urls(self, url):
        with pytest.raises(ValidationError):
            Payment().redirect_url(url)
        with pytest.raises(ValidationError):
            Payment().callback_url(url)


class TestPaymentBuild:

    def test_checks_run_in_order(self):
        payment = Payment(now=FIXED_NOW)
        with pytest.raises(InvalidPaymentRequestError, match="amount"):
            payment.build()

        payment.amount(1.0)
        with pytest.raises(InvalidPaymentRequestError, match="email"):
            payment.build()

        payment.email("a@b.com")
        with pytest.raises(InvalidPaymentRequestError, match="phone"):
            payment.build()

        payment.phone("0241111111")
        with pytest.raises(InvalidPaymentRequestError, match="reference"):
            payment.build()

        payment.reference("abc123")
        with pytest.raises(InvalidPaymentRequestError, match="redirect url"):
            payment.build()

        payment.redirect_url("https://x/y")
        with pytest.raises(InvalidPaymentRequestError, match="name"):
            payment.build()

        payment.name("Jane")
        assert payment.build().reference == "abc123"

    def test_error_is_a_validation_error(self, payment):
        with pytest.raises(ValidationError, match="^invalid payment object"):
            Payment().build()

    def test_details_are_frozen(self, payment):
        details = payment.build()
        with pytest.raises(AttributeError):
            details.amount = 2.0


class TestRequestBody:

    def test_required_keys_only(self, payment):
        body = payment.build().request_body("S1")
        assert body == {
            "amount": 1.0,
            "currency": "GHS",
            "datetime": "2024-01-02T03:04:05.678Z",
            "email": "a@b.com",
            "lang": "en",
            "mobile": "0241111111",
            "name": "Jane",
            "reference": "abc123",
            "responseRedirectURL": "https://x/y",
            "session": "S1",
        }
        assert list(body) == sorted(body)

    def test_optional_keys_when_set(self, payment):
        customization = Customization().border_theme("#fff")
        payment.description("Two shirts").other_info("gift").callback_url("https://x/hook").customize(customization)

        body = payment.build().request_body("S1")
        assert body["descr"] == "Two shirts"
        assert body["otherInfo"] == "gift"
        assert body["trxStatusCallbackURL"] == "https://x/hook"
        assert json.loads(body["customTxn"])["borderTheme"] == "#fff"
        assert list(body) == sorted(body)
