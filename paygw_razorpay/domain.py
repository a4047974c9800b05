from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PaymentContext:
    """What is being bought: the host component, its payment area and item."""
    component: str
    payment_area: str
    item_id: int


@dataclass(frozen=True)
class GatewayConfig:
    client_id: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class Payer:
    id: int
    name: str = ""
    email: str = ""
    contact: str = ""


@dataclass(frozen=True)
class CallbackPayload:
    order_id: str
    payment_id: str
    signature: str


@dataclass(frozen=True)
class CaptureResult:
    success: bool
    message: str = ""
    payment_id: Optional[int] = None
