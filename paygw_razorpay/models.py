from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
)
from paygw_razorpay.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class PaymentAccount(Base):
    __tablename__ = "payment_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)


class PaymentGateway(Base):
    __tablename__ = "payment_gateways"
    __table_args__ = (UniqueConstraint("account_id", "gateway"),)

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("payment_accounts.id"), nullable=False)
    gateway = Column(String, nullable=False)       # razorpay
    enabled = Column(Boolean, default=True, nullable=False)
    config = Column(JSON, default=dict)            # {"clientid": ..., "secret": ...}


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True)
    fullname = Column(String, nullable=False)
    summary = Column(Text, default="")


class Payable(Base):
    __tablename__ = "payables"
    __table_args__ = (UniqueConstraint("component", "payment_area", "item_id"),)

    id = Column(Integer, primary_key=True)
    component = Column(String, nullable=False)     # enrol_fee
    payment_area = Column(String, nullable=False)  # fee
    item_id = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey("payment_accounts.id"), nullable=False)
    amount = Column(Numeric(15, 5), nullable=False)
    currency = Column(String(3), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=True)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("payment_accounts.id"), nullable=False)
    component = Column(String, nullable=False)
    payment_area = Column(String, nullable=False)
    item_id = Column(Integer, nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    amount = Column(Numeric(15, 5), nullable=False)
    currency = Column(String(3), nullable=False)
    gateway = Column(String, nullable=False)
    # Hash of the gateway order/payment pair, kept when gateway rows are erased
    gateway_reference = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class RazorpayPayment(Base):
    __tablename__ = "paygw_razorpay"
    # One row per gateway order/payment pair
    __table_args__ = (UniqueConstraint("rp_order_id", "rp_payment_id"),)

    id = Column(Integer, primary_key=True)
    payment_id = Column(Integer, ForeignKey("payments.id"), unique=True, nullable=False)
    rp_order_id = Column(String, nullable=False, index=True)
    rp_payment_id = Column(String, nullable=False)
    rp_signature = Column(String, nullable=False)


class Enrolment(Base):
    __tablename__ = "enrolments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    payment_id = Column(Integer, ForeignKey("payments.id"), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
