"""PayFluid SDK — signed payment links and verified payment notifications."""

import logging

__version__ = "0.1.0"

from payfluid.client import PayFluidClient
from payfluid.config import Endpoints
from payfluid.customization import CustomerInput, Customization, InputType
from payfluid.exceptions import (
    PayFluidError,
    ValidationError,
    InvalidPaymentRequestError,
    InvalidCredentialsError,
    TransportError,
    DecodeError,
    RemoteError,
    MissingKeyMaterialError,
    CryptoError,
    VerificationError,
    PayloadTypeError,
)
from payfluid.models import PaymentLink, PaymentStatus, SecureCredentials
from payfluid.payment import Payment, PaymentDetails
from payfluid.verify import verify_payment, verify_redirect, verify_webhook

logging.getLogger(__name__).addHandler(logging.NullHandler())
