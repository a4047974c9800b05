"""Thin client over the Razorpay REST API.

Orders and payments are fetched with HTTP basic auth (key id / key secret).
Every transport or API problem surfaces as ``GatewayError`` with a reason;
signature checking is a pure function and never raises for untrusted input.
"""
import hashlib
import hmac
import logging

import httpx

from paygw_razorpay.config import RAZORPAY_API_URL, RAZORPAY_TIMEOUT
from paygw_razorpay.exceptions import GatewayError

logger = logging.getLogger(__name__)

ORDER_STATUS_PAID = "paid"

PAYMENT_STATUS_CAPTURED = "captured"

# Razorpay limits receipts to 40 characters
RECEIPT_MAX_LENGTH = 40


def generate_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(order_id, payment_id, signature, secret) -> bool:
    """Check the checkout callback signature (HMAC-SHA256 over ``order_id|payment_id``)."""
    values = (order_id, payment_id, signature, secret)
    if not all(isinstance(v, str) and v for v in values):
        return False
    expected = generate_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8", "replace"))


class RazorpayClient:
    def __init__(self, key_id: str, key_secret: str, base_url: str = RAZORPAY_API_URL,
                 timeout: float = RAZORPAY_TIMEOUT, transport: httpx.BaseTransport = None):
        self.key_id = key_id
        self._client = httpx.Client(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def create_order(self, amount: int, currency: str, buyer: dict = None,
                     notes: dict = None, receipt: str = None) -> dict:
        # Amounts go to the gateway ledger in minor units only
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError(f"amount must be an integer in minor units, got {amount!r}")
        if amount <= 0:
            raise ValueError("amount must be positive")

        order_notes = {k: str(v) for k, v in (notes or {}).items()}
        if buyer and buyer.get("id") is not None:
            order_notes.setdefault("user_id", str(buyer["id"]))
        payload = {"amount": amount, "currency": currency.upper(), "notes": order_notes}
        if receipt:
            payload["receipt"] = receipt[:RECEIPT_MAX_LENGTH]

        order = self._request("POST", "/orders", json=payload)
        self._require_fields(order, "id", "amount", "currency", "status")
        logger.info("razorpay order %s created amount=%s currency=%s",
                    order["id"], order["amount"], order["currency"])
        return order

    def get_order_details(self, order_id: str) -> dict:
        order = self._request("GET", f"/orders/{order_id}")
        self._require_fields(order, "id", "amount", "currency", "status")
        return order

    def fetch_payment_details(self, payment_id: str) -> dict:
        payment = self._request("GET", f"/payments/{payment_id}")
        self._require_fields(payment, "id", "status")
        return payment

    def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise GatewayError("timeout", f"{method} {path}") from exc
        except httpx.TransportError as exc:
            raise GatewayError("unreachable", f"{method} {path}: {exc}") from exc

        if response.status_code >= 400:
            raise self._error_for(response, f"{method} {path}")

        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayError("malformed_response", f"{method} {path}: body is not JSON") from exc
        if not isinstance(body, dict):
            raise GatewayError("malformed_response", f"{method} {path}: expected an object")
        return body

    @staticmethod
    def _error_for(response: httpx.Response, where: str) -> GatewayError:
        description = ""
        try:
            description = (response.json().get("error") or {}).get("description") or ""
        except (ValueError, AttributeError):
            pass
        status = response.status_code
        if status == 401:
            reason = "auth_failure"
        elif status == 404 or (status == 400 and "does not exist" in description.lower()):
            reason = "not_found"
        elif status >= 500:
            reason = "server_error"
        else:
            reason = "bad_request"
        return GatewayError(reason, f"{where} -> HTTP {status} {description}".strip())

    @staticmethod
    def _require_fields(body: dict, *fields):
        missing = [f for f in fields if body.get(f) in (None, "")]
        if missing:
            raise GatewayError("malformed_response", f"missing {', '.join(missing)}")
