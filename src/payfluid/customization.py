"""
Payment page customization.

Usage:
    from payfluid import Customization, CustomerInput, InputType

    size = (
        CustomerInput()
        .label("Shirt size")
        .type(InputType.SELECT)
        .set_option("m", "Medium")
        .set_option("l", "Large")
        .required(True)
    )

    customization = (
        Customization()
        .edit_amount(True)
        .minimum_amount(5.0)
        .maximum_amount(50.0)
        .border_theme("#aa33ff")
        .with_customer_input(size)
    )
"""

import copy
import json
from enum import Enum

from payfluid.exceptions import ValidationError
from payfluid.validation import check_amount, check_phone, is_hex_colour, is_valid_email, is_valid_url


class InputType(str, Enum):
    """Kinds of extra field a customer can be asked to fill in."""

    TEXT = "input"
    SELECT = "select"


class CustomerInput:
    """An extra field shown on the payment page."""

    def __init__(self):
        self._label = ""
        self._placeholder = ""
        self._type = None
        self._required = False
        self._options = []

    def label(self, label: str) -> "CustomerInput":
        self._label = label.strip()
        return self

    def placeholder(self, placeholder: str) -> "CustomerInput":
        self._placeholder = placeholder.strip()
        return self

    def type(self, input_type) -> "CustomerInput":
        """Set the input type. Accepts an InputType or its wire value."""
        try:
            self._type = InputType(input_type)
        except ValueError:
            valid = ",".join(t.value for t in InputType)
            raise ValidationError(
                f"customer input: invalid input type '{input_type}', expected one of ({valid})"
            ) from None
        return self

    def required(self, required: bool) -> "CustomerInput":
        self._required = bool(required)
        return self

    def set_option(self, key: str, value: str) -> "CustomerInput":
        """Append a choice for a SELECT input. Order is kept."""
        key = key.strip()
        if not key:
            raise ValidationError("customer input: set option: key cannot be empty")
        self._options.append({"k": key, "v": value.strip()})
        return self

    @property
    def options(self) -> list:
        return [dict(option) for option in self._options]

    def check_complete(self):
        """Raise ValidationError unless the input can go on a payment page."""
        if not self._label:
            raise ValidationError("customization: input has no label, make sure to give the input a label")
        if self._type is None:
            raise ValidationError("customization: input has no type, make sure to set the type of the input")
        if self._type is InputType.SELECT and not self._options:
            raise ValidationError(
                f"customization: input with type '{InputType.SELECT.value}' must have at least one option set"
            )

    def to_dict(self) -> dict:
        return {
            "label": self._label,
            "options": self.options,
            "placeholder": self._placeholder,
            "required": self._required,
            "type": self._type.value if self._type else "",
        }


class Customization:
    """Look and behaviour of the hosted payment page."""

    MAX_CUSTOMER_INPUTS = 3
    DEFAULT_LINK_EXPIRY_DAYS = 3

    def __init__(self):
        self._edit_amount = False
        self._min_amount = 0.0
        self._max_amount = 0.0
        self._border_theme = ""
        self._receipt_message = ""
        self._receipt_feedback_phone = ""
        self._receipt_feedback_email = ""
        self._link_expiry_days = self.DEFAULT_LINK_EXPIRY_DAYS
        self._can_pay_multiple_times = False
        self._display_picture = ""
        self._customer_inputs = []

    def edit_amount(self, is_editable: bool) -> "Customization":
        """Let the customer change the amount on the payment page."""
        self._edit_amount = bool(is_editable)
        return self

    def minimum_amount(self, amount) -> "Customization":
        amount = self._bound(amount, "minimum")
        if self._max_amount and self._max_amount < amount:
            raise ValidationError(
                f"customization: maximum amount '{self._max_amount}' cannot be less than minimum amount '{amount}'"
            )
        self._min_amount = amount
        return self

    def maximum_amount(self, amount) -> "Customization":
        amount = self._bound(amount, "maximum")
        if self._min_amount and self._min_amount > amount:
            raise ValidationError(
                f"customization: minimum amount '{self._min_amount}' cannot be greater than maximum amount '{amount}'"
            )
        self._max_amount = amount
        return self

    @staticmethod
    def _bound(amount, which: str) -> float:
        return check_amount(amount, "customization", f"{which} amount")

    def border_theme(self, hex_code: str) -> "Customization":
        """Border colour as ``#rgb`` or ``#rrggbb``."""
        hex_code = hex_code.strip()
        if not is_hex_colour(hex_code):
            raise ValidationError(
                f"customization: invalid hex code '{hex_code}' supplied as borderTheme, "
                "please make sure it is a valid hex code"
            )
        self._border_theme = hex_code
        return self

    def receipt_message(self, message: str) -> "Customization":
        self._receipt_message = message.strip()
        return self

    def receipt_feedback_phone(self, phone: str) -> "Customization":
        self._receipt_feedback_phone = check_phone(phone, "customization", "receipt feedback phone")
        return self

    def receipt_feedback_email(self, email: str) -> "Customization":
        email = email.strip()
        if not is_valid_email(email):
            raise ValidationError(f"customization: receipt feedback email '{email}' is not valid")
        self._receipt_feedback_email = email
        return self

    def days_until_link_expires(self, days: int = DEFAULT_LINK_EXPIRY_DAYS) -> "Customization":
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValidationError(f"customization: link expiry must be a whole number of days, got '{days}'")
        self._link_expiry_days = days
        return self

    def can_pay_multiple_times(self, can_pay_multiple: bool) -> "Customization":
        self._can_pay_multiple_times = bool(can_pay_multiple)
        return self

    def display_picture(self, image_url: str) -> "Customization":
        image_url = image_url.strip()
        if not is_valid_url(image_url):
            raise ValidationError(f"customization: invalid url '{image_url}' supplied for display picture")
        self._display_picture = image_url
        return self

    def with_customer_input(self, customer_input: CustomerInput) -> "Customization":
        """Ask the customer for one more field (at most three)."""
        if len(self._customer_inputs) >= self.MAX_CUSTOMER_INPUTS:
            raise ValidationError(
                f"customization: maximum number of '{self.MAX_CUSTOMER_INPUTS}' extra customer inputs reached"
            )
        customer_input.check_complete()
        # snapshot: later edits to the input do not reach the payment page
        self._customer_inputs.append(customer_input.to_dict())
        return self

    @property
    def customer_inputs(self) -> tuple:
        """The inputs as they were when added."""
        return tuple(copy.deepcopy(self._customer_inputs))

    def to_dict(self) -> dict:
        """Wire representation, keys in ascending order."""
        payload = {
            "borderTheme": self._border_theme,
            "displayPicture": self._display_picture,
            "editAmt": self._edit_amount,
            "maxAmt": self._max_amount,
            "minAmt": self._min_amount,
            "payLinkCanPayMultipleTimes": self._can_pay_multiple_times,
            "payLinkExpiryInDays": self._link_expiry_days,
            "receiptFeedbackEmail": self._receipt_feedback_email,
            "receiptFeedbackPhone": self._receipt_feedback_phone,
            "receiptSxMsg": self._receipt_message,
        }
        if self._customer_inputs:
            payload["xtraCustomerInput"] = copy.deepcopy(self._customer_inputs)
        return dict(sorted(payload.items()))

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))
