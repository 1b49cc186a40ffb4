from typing import Any, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class CreateIntentRequest(CamelModel):
    order_id: str = Field(min_length=1)


class CreateIntentResponse(CamelModel):
    client_secret: Optional[str] = None
    payment_intent_id: str


class PayPalCreateRequest(CamelModel):
    order_id: str = Field(min_length=1)


class PayPalCreateResponse(CamelModel):
    paypal_order_id: str


class PayPalCaptureRequest(CamelModel):
    order_id: str = Field(min_length=1)
    paypal_order_id: str = Field(min_length=1)


class PayPalCaptureResponse(CamelModel):
    status: str
    paypal: dict[str, Any]


class WebhookAck(CamelModel):
    received: bool = True
