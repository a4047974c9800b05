from fastapi import APIRouter, Depends
from pydantic import BaseModel
from paygw_razorpay.auth import verify_token
from paygw_razorpay.capture import transaction_complete
from paygw_razorpay.checkout import get_config_for_js
from paygw_razorpay.database import SessionLocal
from paygw_razorpay.domain import CallbackPayload, Payer, PaymentContext

router = APIRouter()


class ConfigRequest(BaseModel):
    component: str
    paymentarea: str
    itemid: int


class Prefill(BaseModel):
    name: str
    email: str
    contact: str


class Notes(BaseModel):
    course_id: str


class ConfigResponse(BaseModel):
    key: str
    amount: int
    currency: str
    name: str
    description: str
    image: str
    prefill: Prefill
    notes: Notes
    order_id: str


class TransactionCompleteRequest(ConfigRequest):
    orderid: str
    paymentid: str
    signature: str


class TransactionCompleteResponse(BaseModel):
    success: bool
    message: str


@router.post("/get_config_for_js", response_model=ConfigResponse)
def get_config_for_js_api(
    request: ConfigRequest,
    payer: Payer = Depends(verify_token)
):
    db = SessionLocal()
    try:
        context = PaymentContext(request.component, request.paymentarea, request.itemid)
        return get_config_for_js(db, context, payer)
    finally:
        db.close()


# No login: the callback comes from the checkout popup, trust rests on the signature
@router.post("/create_transaction_complete", response_model=TransactionCompleteResponse)
def create_transaction_complete_api(request: TransactionCompleteRequest):
    db = SessionLocal()
    try:
        context = PaymentContext(request.component, request.paymentarea, request.itemid)
        callback = CallbackPayload(request.orderid, request.paymentid, request.signature)
        result = transaction_complete(db, context, callback)
    finally:
        db.close()

    return {"success": result.success, "message": result.message}
