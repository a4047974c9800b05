"""Order creation: build what the Razorpay checkout widget needs to launch."""
import logging

from sqlalchemy.orm import Session

from paygw_razorpay import config, payment_helper
from paygw_razorpay.domain import Payer, PaymentContext
from paygw_razorpay.models import Course
from paygw_razorpay.razorpay_client import RazorpayClient

logger = logging.getLogger(__name__)


def order_notes(context: PaymentContext, payer: Payer, course_id) -> dict:
    return {
        "course_id": "" if course_id is None else str(course_id),
        "user_id": str(payer.id),
        "component": context.component,
        "paymentarea": context.payment_area,
        "itemid": str(context.item_id),
    }


def get_config_for_js(db: Session, context: PaymentContext, payer: Payer,
                      client_factory=RazorpayClient) -> dict:
    """Create a gateway order for the payable and return the widget payload.

    Raises ConfigurationError when the context has no usable gateway setup and
    GatewayError when the order cannot be created remotely.
    """
    gateway_config = payment_helper.get_gateway_configuration(
        db, context.component, context.payment_area, context.item_id, config.GATEWAY_NAME
    )
    payable = payment_helper.get_payable(db, context.component, context.payment_area, context.item_id)
    currency, _, amount = payment_helper.get_payable_cost(payable, config.GATEWAY_NAME)

    course = db.get(Course, payable.course_id) if payable.course_id is not None else None
    name = course.fullname if course else config.SITE_NAME
    description = (course.summary or "") if course else f"{context.component} {context.payment_area}"
    notes = order_notes(context, payer, payable.course_id)

    with client_factory(gateway_config.client_id, gateway_config.secret) as gateway:
        order = gateway.create_order(
            amount,
            currency,
            buyer={"id": payer.id, "name": payer.name, "email": payer.email, "contact": payer.contact},
            notes=notes,
            receipt=f"{context.payment_area}-{context.item_id}-{payer.id}",
        )

    logger.info("checkout prepared order=%s component=%s item=%s user=%s",
                order["id"], context.component, context.item_id, payer.id)
    return {
        "key": gateway_config.client_id,
        "amount": amount,
        "currency": currency,
        "name": name,
        "description": description,
        "image": config.SITE_LOGO_URL,
        "prefill": {"name": payer.name, "email": payer.email, "contact": payer.contact},
        "notes": {"course_id": notes["course_id"]},
        "order_id": order["id"],
    }
