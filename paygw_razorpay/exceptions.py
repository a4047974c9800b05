class PaymentGatewayError(Exception):
    """Base class for everything the razorpay payment flows raise."""


class ConfigurationError(PaymentGatewayError):
    """No usable gateway configuration (or payable) exists for the purchase context."""


class GatewayError(PaymentGatewayError):
    """The gateway could not be reached or answered with something unusable.

    ``reason`` tells "cannot determine" cases apart: timeout, unreachable,
    auth_failure, not_found, bad_request, server_error, malformed_response.
    """

    def __init__(self, reason, detail=""):
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason
        self.detail = detail


class VerificationFailed(PaymentGatewayError):
    """The callback did not verify (bad signature or order not issued for this context)."""


class NotCleared(PaymentGatewayError):
    """The gateway does not (yet) report the order as paid and the payment as captured."""


class InternalError(PaymentGatewayError):
    """Persisting the payment or delivering the order failed."""
