import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_paygw.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("RAZORPAY_SURCHARGE", "0")

import pytest
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from paygw_razorpay.database import Base
from paygw_razorpay.domain import CallbackPayload, PaymentContext
from paygw_razorpay.models import Course, Payable, PaymentAccount, PaymentGateway
from paygw_razorpay.razorpay_client import generate_signature

SQLALCHEMY_DATABASE_URL = "sqlite:///./test_temp.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={
                       "check_same_thread": False})
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)

CLIENT_ID = "rzp_test_key"
SECRET = "rzp_test_secret"
ORDER_ID = "order_Nx1"
PAYMENT_ID = "pay_Nx1"
PAYER_ID = 42
COURSE_ID = 3
ITEM_ID = 7
AMOUNT_MINOR = 49999


class FakeRazorpay:
    """Stands in for RazorpayClient; pass it as client_factory."""

    def __init__(self, order=None, payment=None, order_error=None, payment_error=None):
        self.order = order
        self.payment = payment
        self.order_error = order_error
        self.payment_error = payment_error
        self.calls = []
        self.credentials = None

    def __call__(self, key_id, key_secret):
        self.credentials = (key_id, key_secret)
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        pass

    def create_order(self, amount, currency, buyer=None, notes=None, receipt=None):
        self.calls.append(("create_order", amount, currency))
        self.created = {"buyer": buyer, "notes": notes, "receipt": receipt}
        return {"id": ORDER_ID, "amount": amount, "currency": currency,
                "status": "created", "notes": notes}

    def get_order_details(self, order_id):
        self.calls.append(("get_order_details", order_id))
        if self.order_error:
            raise self.order_error
        return self.order

    def fetch_payment_details(self, payment_id):
        self.calls.append(("fetch_payment_details", payment_id))
        if self.payment_error:
            raise self.payment_error
        return self.payment

    def remote_calls(self):
        return [c[0] for c in self.calls]


def paid_order(**overrides):
    order = {
        "id": ORDER_ID,
        "amount": AMOUNT_MINOR,
        "currency": "INR",
        "status": "paid",
        "notes": {
            "course_id": str(COURSE_ID),
            "user_id": str(PAYER_ID),
            "component": "enrol_fee",
            "paymentarea": "fee",
            "itemid": str(ITEM_ID),
        },
    }
    order.update(overrides)
    return order


def captured_payment(**overrides):
    payment = {"id": PAYMENT_ID, "order_id": ORDER_ID, "amount": AMOUNT_MINOR,
               "currency": "INR", "status": "captured"}
    payment.update(overrides)
    return payment


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def seeded(db):
    account = PaymentAccount(id=1, name="Main account", enabled=True)
    db.add(account)
    db.add(PaymentGateway(account_id=1, gateway="razorpay", enabled=True,
                          config={"clientid": CLIENT_ID, "secret": SECRET}))
    db.add(Course(id=COURSE_ID, fullname="Python for Data Science", summary="Eight week course"))
    db.add(Payable(component="enrol_fee", payment_area="fee", item_id=ITEM_ID, account_id=1,
                   amount=Decimal("499.99"), currency="INR", course_id=COURSE_ID))
    db.commit()
    return account


@pytest.fixture
def context():
    return PaymentContext("enrol_fee", "fee", ITEM_ID)


@pytest.fixture
def callback():
    return CallbackPayload(ORDER_ID, PAYMENT_ID, generate_signature(ORDER_ID, PAYMENT_ID, SECRET))
