"""Capture: verify a checkout callback with Razorpay, then record and deliver.

Checks run in order and each one narrows trust: callback signature, order
status, payment status. Nothing is written locally before all of them pass,
and the payment rows plus the delivery share one transaction.
"""
import hashlib
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paygw_razorpay import config, events, payment_helper
from paygw_razorpay.domain import CallbackPayload, CaptureResult, PaymentContext
from paygw_razorpay.exceptions import GatewayError, InternalError, NotCleared, VerificationFailed
from paygw_razorpay.models import Payment, RazorpayPayment
from paygw_razorpay.razorpay_client import (
    ORDER_STATUS_PAID, PAYMENT_STATUS_CAPTURED, RazorpayClient, verify_signature
)

logger = logging.getLogger(__name__)

CANNOT_FETCH_ORDER_DETAILS = "Could not fetch payment details from Razorpay. Your account has not been debited."
PAYMENT_NOT_CLEARED = "Payment not cleared by Razorpay."
INTERNAL_ERROR = "An internal error has occurred. Please contact us."


def capture_reference(callback: CallbackPayload) -> str:
    """Stable key of a gateway order/payment pair, stored on the host payment."""
    pair = f"{config.GATEWAY_NAME}|{callback.order_id}|{callback.payment_id}"
    return hashlib.sha256(pair.encode("utf-8")).hexdigest()


def find_capture(db: Session, callback: CallbackPayload):
    return db.query(Payment).filter_by(gateway_reference=capture_reference(callback)).first()


def transaction_complete(db: Session, context: PaymentContext, callback: CallbackPayload,
                         client_factory=RazorpayClient) -> CaptureResult:
    """Run one capture attempt and reduce its outcome to a safe CaptureResult.

    The amount is never taken from the caller; it is recomputed from the payable.
    ConfigurationError is not caught and reaches the caller as-is.
    """
    try:
        payment_id = _capture(db, context, callback, client_factory)
    except VerificationFailed as exc:
        logger.warning("razorpay callback rejected order=%s payment=%s: %s",
                       callback.order_id, callback.payment_id, exc)
        return CaptureResult(success=False, message=CANNOT_FETCH_ORDER_DETAILS)
    except NotCleared as exc:
        logger.warning("razorpay payment not cleared order=%s payment=%s: %s",
                       callback.order_id, callback.payment_id, exc)
        return CaptureResult(success=False, message=PAYMENT_NOT_CLEARED)
    except InternalError:
        return CaptureResult(success=False, message=INTERNAL_ERROR)
    return CaptureResult(success=True, message="", payment_id=payment_id)


def _capture(db, context, callback, client_factory) -> int:
    gateway_config = payment_helper.get_gateway_configuration(
        db, context.component, context.payment_area, context.item_id, config.GATEWAY_NAME
    )
    payable = payment_helper.get_payable(db, context.component, context.payment_area, context.item_id)
    currency, cost, amount = payment_helper.get_payable_cost(payable, config.GATEWAY_NAME)

    if not verify_signature(callback.order_id, callback.payment_id, callback.signature,
                            gateway_config.secret):
        raise VerificationFailed("signature mismatch")

    existing = find_capture(db, callback)
    if existing is not None:
        return _already_captured(context, callback, existing)

    with client_factory(gateway_config.client_id, gateway_config.secret) as gateway:
        try:
            order = gateway.get_order_details(callback.order_id)
        except GatewayError as exc:
            raise NotCleared(f"order lookup failed ({exc.reason})") from exc
        if order.get("status") != ORDER_STATUS_PAID:
            raise NotCleared(f"order status is {order.get('status')!r}")
        user_id = _check_order(order, context, amount, currency)

        try:
            payment = gateway.fetch_payment_details(callback.payment_id)
        except GatewayError as exc:
            raise NotCleared(f"payment lookup failed ({exc.reason})") from exc
        if payment.get("status") != PAYMENT_STATUS_CAPTURED:
            raise NotCleared(f"payment status is {payment.get('status')!r}")

    return _record_and_deliver(db, payable, context, callback, user_id, cost, currency)


def _check_order(order: dict, context: PaymentContext, amount: int, currency: str) -> int:
    """Make sure the paid order was issued for this purchase and price; return its payer."""
    notes = order.get("notes")
    if not isinstance(notes, dict):
        # Razorpay serialises empty notes as []
        notes = {}
    issued_for = (notes.get("component"), notes.get("paymentarea"), notes.get("itemid"))
    if issued_for != (context.component, context.payment_area, str(context.item_id)):
        raise VerificationFailed(f"order {order.get('id')} was issued for {issued_for}")

    if order.get("amount") != amount or str(order.get("currency", "")).upper() != currency:
        raise NotCleared(
            f"order is for {order.get('amount')} {order.get('currency')}, expected {amount} {currency}"
        )

    try:
        return int(notes.get("user_id"))
    except (TypeError, ValueError) as exc:
        raise VerificationFailed(f"order {order.get('id')} carries no payer") from exc


def _already_captured(context, callback, payment: Payment) -> int:
    if (payment.component, payment.payment_area, payment.item_id) != (
            context.component, context.payment_area, context.item_id):
        raise VerificationFailed("callback replayed against another purchase")
    logger.info("razorpay order=%s payment=%s already captured as payment %s",
                callback.order_id, callback.payment_id, payment.id)
    return payment.id


def _record_and_deliver(db, payable, context, callback, user_id, cost, currency) -> int:
    try:
        payment = payment_helper.save_payment(
            db, payable, user_id, cost, currency, config.GATEWAY_NAME,
            reference=capture_reference(callback),
        )
        db.add(RazorpayPayment(
            payment_id=payment.id,
            rp_order_id=callback.order_id,
            rp_payment_id=callback.payment_id,
            rp_signature=callback.signature,
        ))
        db.flush()
        payment_helper.deliver_order(db, context.component, context.payment_area, context.item_id,
                                     payment.id, user_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        existing = find_capture(db, callback)
        if existing is not None:
            # Lost the race against a concurrent callback for the same pair
            return _already_captured(context, callback, existing)
        logger.exception("Integrity error while recording razorpay order=%s payment=%s",
                         callback.order_id, callback.payment_id)
        raise InternalError("payment could not be recorded") from exc
    except Exception as exc:
        db.rollback()
        logger.exception("Exception while trying to process payment order=%s payment=%s",
                         callback.order_id, callback.payment_id)
        raise InternalError("payment could not be recorded") from exc

    logger.info("razorpay payment %s captured order=%s user=%s amount=%s %s",
                payment.id, callback.order_id, user_id, cost, currency)
    events.dispatch(events.PaymentCreated(
        payment_id=payment.id,
        user_id=user_id,
        course_id=payable.course_id,
        component=context.component,
        payment_area=context.payment_area,
        item_id=context.item_id,
        amount=str(cost),
        currency=currency,
    ))
    return payment.id
