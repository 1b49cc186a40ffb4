import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.core.errors import error_detail
from app.models.order import Order, OrderStatus, PaymentProvider
from app.schemas.payment import CreateIntentRequest, CreateIntentResponse, WebhookAck
from app.services.payments import PaymentProviderError, apply_payment_status
from app.services.stripe_payments import (
    FAILED_EVENT,
    SUCCEEDED_EVENT,
    StripeGateway,
    WebhookSignatureError,
    get_stripe_gateway,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_EVENT_STATUS = {
    SUCCEEDED_EVENT: OrderStatus.PAID,
    FAILED_EVENT: OrderStatus.FAILED,
}


@router.post("/payments/stripe/create-intent", response_model=CreateIntentResponse)
def create_intent(
    body: CreateIntentRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability(Capability.PURCHASE)),
    gateway: StripeGateway = Depends(get_stripe_gateway),
):
    """Create a Stripe PaymentIntent for one of the caller's orders."""
    order = db.query(Order).filter(Order.id == body.order_id).first()
    if not order or order.user_id != principal.user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.status == OrderStatus.PAID:
        raise HTTPException(status_code=400, detail=error_detail("invalid_status", "Order is already paid"))
    try:
        intent = gateway.create_payment_intent(order.id, order.amount, order.currency)
    except PaymentProviderError as e:
        raise HTTPException(status_code=502, detail=error_detail("payment_provider_error", str(e)))

    order.provider = PaymentProvider.STRIPE
    order.provider_payment_id = intent["id"]
    db.commit()
    return CreateIntentResponse(client_secret=intent.get("client_secret"), payment_intent_id=intent["id"])


def _handle_webhook(db: Session, gateway: StripeGateway, payload: bytes, signature: Optional[str]) -> WebhookAck:
    try:
        event = gateway.construct_event(payload, signature)
    except WebhookSignatureError as e:
        logger.warning("Stripe webhook rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    new_status = _EVENT_STATUS.get(event["type"])
    if new_status is None:
        logger.debug("Stripe webhook %s ignored (type=%s)", event.get("id"), event["type"])
        return WebhookAck()

    intent = event["data"]["object"]
    order_id = (intent.get("metadata") or {}).get("orderId")
    if not order_id:
        logger.warning("Stripe webhook %s: PaymentIntent %s has no orderId metadata", event.get("id"), intent.get("id"))
        return WebhookAck()

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        logger.warning("Stripe webhook %s: order %s not found", event.get("id"), order_id)
        return WebhookAck()
    try:
        apply_payment_status(db, order, new_status, PaymentProvider.STRIPE, intent.get("id"))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Stripe webhook %s: failed to update order %s", event.get("id"), order_id)
        raise
    return WebhookAck()


@router.post("/webhooks/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_stripe_gateway),
):
    """Stripe webhook: signature-verified PaymentIntent events move the embedded order to PAID or FAILED."""
    payload = await request.body()
    return await run_in_threadpool(_handle_webhook, db, gateway, payload, request.headers.get("stripe-signature"))
