"""
Error hierarchy for the PayFluid client.

Every public operation either returns a fully populated result object or
raises one of these. Messages never carry API keys, RSA key material or
HMAC salts.
"""


class PayFluidError(Exception):
    """Base exception for all PayFluid SDK errors."""
    pass


class ValidationError(PayFluidError, ValueError):
    """Input rejected locally, before any network call."""
    pass


class InvalidPaymentRequestError(ValidationError):
    """A payment failed whole-object validation before a link request."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"invalid payment object: {detail}")


class InvalidCredentialsError(ValidationError):
    """Credentials cannot be used for a signed request."""
    pass


class TransportError(PayFluidError):
    """The HTTP call itself failed (connection, DNS, TLS, timeout)."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"request to {url} failed: {cause}")


class DecodeError(PayFluidError):
    """A response body was not valid JSON."""

    MAX_BODY_CONTEXT = 200

    def __init__(self, url: str, body: str):
        self.url = url
        self.body = body
        snippet = body[: self.MAX_BODY_CONTEXT]
        super().__init__(f"could not decode json response from {url}: {snippet!r}")


class RemoteError(PayFluidError):
    """PayFluid answered with a non-success result code."""

    def __init__(self, message: str, result_code: str = None, status_code: int = None):
        self.message = message
        self.result_code = result_code
        self.status_code = status_code
        prefix = "PayFluid error"
        if result_code:
            prefix += f" {result_code}"
        if status_code:
            prefix += f" (HTTP {status_code})"
        super().__init__(f"{prefix}: {message}")


class MissingKeyMaterialError(RemoteError):
    """The credentials response carried no usable KEK header."""

    def __init__(self, detail: str):
        super().__init__(f"could not create secure credentials: {detail}")


class CryptoError(PayFluidError):
    """Key material failed to load or a cryptographic operation failed."""
    pass


class VerificationError(PayFluidError):
    """An inbound payload is unsigned or its signature does not match.

    Treat this as a security event: nothing in the payload can be trusted.
    """
    pass


class PayloadTypeError(PayFluidError, TypeError):
    """A notification payload was neither text nor a mapping."""

    def __init__(self, payload_type: type):
        self.payload_type = payload_type
        super().__init__(
            f"payload must be a url-encoded json string or a mapping, got {payload_type.__name__}"
        )
