"""Host payment subsystem: payables, gateway accounts, costs, payments and delivery."""
import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from sqlalchemy.orm import Session

from paygw_razorpay import config
from paygw_razorpay.domain import GatewayConfig
from paygw_razorpay.exceptions import ConfigurationError
from paygw_razorpay.models import Enrolment, Payable, Payment, PaymentAccount, PaymentGateway

logger = logging.getLogger(__name__)

ZERO_DECIMAL_CURRENCIES = {"BIF", "CLP", "DJF", "GNF", "ISK", "JPY", "KMF", "KRW",
                           "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF"}
THREE_DECIMAL_CURRENCIES = {"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"}

# component -> callable(db, payable, payment_id, user_id)
_delivery_handlers = {}


def currency_digits(currency: str) -> int:
    code = (currency or "").upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def get_payable(db: Session, component: str, payment_area: str, item_id: int) -> Payable:
    payable = db.query(Payable).filter_by(
        component=component, payment_area=payment_area, item_id=item_id
    ).first()
    if payable is None:
        raise ConfigurationError(f"No payable for {component}/{payment_area}/{item_id}")
    return payable


def get_gateway_configuration(db: Session, component: str, payment_area: str, item_id: int,
                              gateway: str) -> GatewayConfig:
    payable = get_payable(db, component, payment_area, item_id)
    account = db.get(PaymentAccount, payable.account_id)
    if account is None or not account.enabled:
        raise ConfigurationError(f"Payment account {payable.account_id} is not available")

    row = db.query(PaymentGateway).filter_by(
        account_id=account.id, gateway=gateway, enabled=True
    ).first()
    settings = (row.config or {}) if row else {}
    if not settings.get("clientid") or not settings.get("secret"):
        raise ConfigurationError(f"Gateway {gateway} is not configured for account {account.id}")
    return GatewayConfig(client_id=settings["clientid"], secret=settings["secret"])


def get_gateway_surcharge(gateway: str) -> Decimal:
    """Surcharge percentage configured for the gateway (0 when unset)."""
    raw = config.RAZORPAY_SURCHARGE if gateway == config.GATEWAY_NAME else "0"
    try:
        surcharge = Decimal(str(raw or "0"))
    except InvalidOperation as exc:
        raise ConfigurationError(f"Invalid surcharge {raw!r} for {gateway}") from exc
    return max(surcharge, Decimal("0"))


def get_rounded_cost(amount, currency: str, surcharge=0) -> Decimal:
    quantum = Decimal(1).scaleb(-currency_digits(currency))
    cost = Decimal(str(amount)) * (Decimal(100) + Decimal(str(surcharge))) / Decimal(100)
    return cost.quantize(quantum, rounding=ROUND_HALF_UP)


def to_minor_units(cost, currency: str) -> int:
    """Convert a cost to the gateway's integer minor units, rounding half-up."""
    minor = Decimal(str(cost)).scaleb(currency_digits(currency))
    return int(minor.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def get_payable_cost(payable: Payable, gateway: str):
    """Return (currency, cost, amount in minor units) for the payable, surcharge included."""
    currency = payable.currency.upper()
    cost = get_rounded_cost(payable.amount, currency, get_gateway_surcharge(gateway))
    amount = to_minor_units(cost, currency)
    if amount <= 0:
        raise ConfigurationError(
            f"Payable {payable.component}/{payable.payment_area}/{payable.item_id} has no cost to collect"
        )
    return currency, cost, amount


def save_payment(db: Session, payable: Payable, user_id: int, amount, currency: str,
                 gateway: str, reference: str = None) -> Payment:
    payment = Payment(
        account_id=payable.account_id,
        component=payable.component,
        payment_area=payable.payment_area,
        item_id=payable.item_id,
        user_id=user_id,
        amount=amount,
        currency=currency,
        gateway=gateway,
        gateway_reference=reference,
    )
    db.add(payment)
    db.flush()
    return payment


def register_delivery_handler(component: str):
    def decorator(func):
        _delivery_handlers[component] = func
        return func
    return decorator


def deliver_order(db: Session, component: str, payment_area: str, item_id: int,
                  payment_id: int, user_id: int):
    handler = _delivery_handlers.get(component)
    if handler is None:
        raise LookupError(f"No delivery handler for component {component}")
    payable = get_payable(db, component, payment_area, item_id)
    handler(db, payable, payment_id, user_id)
    logger.info("order delivered component=%s item=%s payment=%s user=%s",
                component, item_id, payment_id, user_id)


@register_delivery_handler("enrol_fee")
def enrol_user(db: Session, payable: Payable, payment_id: int, user_id: int):
    if payable.course_id is None:
        raise LookupError(f"Payable {payable.id} is not linked to a course")
    db.add(Enrolment(user_id=user_id, course_id=payable.course_id, payment_id=payment_id))
    db.flush()
