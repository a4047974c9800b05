import logging
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentCreated:
    payment_id: int
    user_id: int
    course_id: Optional[int]
    component: str
    payment_area: str
    item_id: int
    amount: str
    currency: str


_listeners: List[Callable[[PaymentCreated], None]] = []


def subscribe(listener):
    _listeners.append(listener)
    return listener


def unsubscribe(listener):
    if listener in _listeners:
        _listeners.remove(listener)


def dispatch(event):
    logger.info("event %s %s", type(event).__name__, asdict(event))
    for listener in list(_listeners):
        try:
            listener(event)
        except Exception:
            # The payment is already committed at this point
            logger.exception("listener %r failed for %s", listener, type(event).__name__)
