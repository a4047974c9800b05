from decimal import Decimal

import pytest

from conftest import AMOUNT_MINOR, CLIENT_ID, ORDER_ID, SECRET, FakeRazorpay
from paygw_razorpay import config
from paygw_razorpay.checkout import get_config_for_js
from paygw_razorpay.domain import Payer, PaymentContext
from paygw_razorpay.exceptions import ConfigurationError, GatewayError
from paygw_razorpay.models import Payable

PAYER = Payer(id=42, name="Asha Rao", email="asha@example.com", contact="+919800000000")


def test_config_payload_for_widget(db, seeded, context, monkeypatch):
    monkeypatch.setattr(config, "SITE_LOGO_URL", "https://lms.example.com/logo.png")
    gateway = FakeRazorpay()

    payload = get_config_for_js(db, context, PAYER, client_factory=gateway)

    assert payload == {
        "key": CLIENT_ID,
        "amount": AMOUNT_MINOR,
        "currency": "INR",
        "name": "Python for Data Science",
        "description": "Eight week course",
        "image": "https://lms.example.com/logo.png",
        "prefill": {"name": "Asha Rao", "email": "asha@example.com", "contact": "+919800000000"},
        "notes": {"course_id": "3"},
        "order_id": ORDER_ID,
    }
    assert gateway.credentials == (CLIENT_ID, SECRET)


def test_secret_never_in_payload(db, seeded, context):
    payload = get_config_for_js(db, context, PAYER, client_factory=FakeRazorpay())

    assert SECRET not in repr(payload)


def test_order_notes_bind_payer_and_context(db, seeded, context):
    gateway = FakeRazorpay()

    get_config_for_js(db, context, PAYER, client_factory=gateway)

    assert gateway.created["notes"] == {
        "course_id": "3",
        "user_id": "42",
        "component": "enrol_fee",
        "paymentarea": "fee",
        "itemid": "7",
    }
    assert gateway.created["buyer"]["email"] == "asha@example.com"


def test_surcharge_is_rounded_to_integer_minor_units(db, seeded, context, monkeypatch):
    monkeypatch.setattr(config, "RAZORPAY_SURCHARGE", "2.5")
    gateway = FakeRazorpay()

    payload = get_config_for_js(db, context, PAYER, client_factory=gateway)

    # 499.99 * 1.025 = 512.48975 -> 512.49
    assert gateway.calls == [("create_order", 51249, "INR")]
    assert isinstance(gateway.calls[0][1], int)
    assert payload["amount"] == 51249


def test_payable_without_course_falls_back_to_site_name(db, seeded, monkeypatch):
    monkeypatch.setattr(config, "SITE_NAME", "Academy")
    db.add(Payable(component="enrol_fee", payment_area="fee", item_id=8, account_id=1,
                   amount=Decimal("10"), currency="INR"))
    db.commit()

    payload = get_config_for_js(db, PaymentContext("enrol_fee", "fee", 8), PAYER,
                                client_factory=FakeRazorpay())

    assert payload["name"] == "Academy"
    assert payload["notes"] == {"course_id": ""}


def test_missing_configuration(db, seeded):
    gateway = FakeRazorpay()

    with pytest.raises(ConfigurationError):
        get_config_for_js(db, PaymentContext("enrol_fee", "fee", 404), PAYER, client_factory=gateway)

    assert gateway.calls == []


def test_gateway_failure_propagates(db, seeded, context, mocker):
    gateway = FakeRazorpay()
    mocker.patch.object(gateway, "create_order", side_effect=GatewayError("timeout"))

    with pytest.raises(GatewayError):
        get_config_for_js(db, context, PAYER, client_factory=gateway)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("0.004"), Decimal("-5")])
def test_payable_without_cost_is_a_configuration_error(db, seeded, amount):
    db.add(Payable(component="enrol_fee", payment_area="fee", item_id=9, account_id=1,
                   amount=amount, currency="INR", course_id=3))
    db.commit()
    gateway = FakeRazorpay()

    with pytest.raises(ConfigurationError):
        get_config_for_js(db, PaymentContext("enrol_fee", "fee", 9), PAYER, client_factory=gateway)

    assert gateway.calls == []
