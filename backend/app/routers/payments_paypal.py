import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.core.errors import error_detail
from app.models.merchant import MerchantStatus
from app.models.order import Order, OrderStatus, PaymentProvider
from app.schemas.payment import (
    PayPalCaptureRequest,
    PayPalCaptureResponse,
    PayPalCreateRequest,
    PayPalCreateResponse,
)
from app.services.payments import PaymentProviderError, apply_payment_status
from app.services.paypal import PayPalClient, get_paypal_client

logger = logging.getLogger(__name__)

router = APIRouter()

require_purchase = require_capability(Capability.PURCHASE)


def _own_order(db: Session, principal: Principal, order_id: str) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order or order.user_id != principal.user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/payments/paypal/create-order", response_model=PayPalCreateResponse)
def create_paypal_order(
    body: PayPalCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_purchase),
    paypal: PayPalClient = Depends(get_paypal_client),
):
    order = _own_order(db, principal, body.order_id)
    if order.status == OrderStatus.PAID:
        raise HTTPException(status_code=400, detail=error_detail("invalid_status", "Order is already paid"))
    try:
        result = paypal.create_order(order.id, order.amount, order.currency)
    except PaymentProviderError as e:
        raise HTTPException(status_code=502, detail=error_detail("payment_provider_error", str(e)))

    order.provider = PaymentProvider.PAYPAL
    order.provider_payment_id = result["id"]
    db.commit()
    return PayPalCreateResponse(paypal_order_id=result["id"])


def _captured_reference(result: dict) -> Optional[str]:
    units = result.get("purchase_units") or []
    if not units:
        return None
    return units[0].get("reference_id") or units[0].get("custom_id")


@router.post("/payments/paypal/capture-order", response_model=PayPalCaptureResponse)
def capture_paypal_order(
    body: PayPalCaptureRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_purchase),
    paypal: PayPalClient = Depends(get_paypal_client),
):
    """Capture an approved PayPal order; COMPLETED marks the order PAID, anything else FAILED.

    Only the PayPal order created for this order can be captured against it.
    """
    order = _own_order(db, principal, body.order_id)
    if order.provider != PaymentProvider.PAYPAL or order.provider_payment_id != body.paypal_order_id:
        logger.warning(
            "Refusing capture of PayPal order %s for order %s (recorded %s)",
            body.paypal_order_id,
            order.id,
            order.provider_payment_id,
        )
        raise HTTPException(
            status_code=400,
            detail=error_detail("invalid_status", "PayPal order does not belong to this order"),
        )
    if order.merchant and order.merchant.status != MerchantStatus.ACTIVE:
        # Orders keep the merchant resolved at creation; capture is not blocked
        logger.warning("Capturing order %s for suspended merchant %s", order.id, order.merchant_id)
    try:
        result = paypal.capture_order(body.paypal_order_id)
    except PaymentProviderError as e:
        raise HTTPException(status_code=502, detail=error_detail("payment_provider_error", str(e)))

    reference = _captured_reference(result)
    if reference != order.id:
        logger.error(
            "PayPal order %s references %s, not order %s; status left unchanged",
            body.paypal_order_id,
            reference,
            order.id,
        )
        raise HTTPException(
            status_code=400,
            detail=error_detail("invalid_status", "PayPal order does not belong to this order"),
        )

    status = result.get("status", "")
    new_status = OrderStatus.PAID if status == "COMPLETED" else OrderStatus.FAILED
    apply_payment_status(db, order, new_status, PaymentProvider.PAYPAL, body.paypal_order_id)
    return PayPalCaptureResponse(status=status, paypal=result)
