"""Personal data held by, or shared through, the razorpay gateway plugin."""
from sqlalchemy.orm import Session

from paygw_razorpay.models import RazorpayPayment

# Buyer details prefilled into the Razorpay checkout
METADATA = {
    "external_location": "razorpay.com",
    "fields": {
        "name": "The name of the user making the payment.",
        "email": "The email address of the user making the payment.",
        "contact": "The phone number of the user making the payment.",
    },
    "summary": "The razorpay plugin sends buyer details to Razorpay to prefill the checkout.",
}


def export_payment_data(db: Session, payment_id: int):
    record = db.query(RazorpayPayment).filter_by(payment_id=payment_id).first()
    if record is None:
        return None
    return {"orderid": record.rp_order_id}


def delete_data_for_payments(db: Session, payment_ids) -> int:
    ids = list(payment_ids)
    if not ids:
        return 0
    deleted = (
        db.query(RazorpayPayment)
        .filter(RazorpayPayment.payment_id.in_(ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
