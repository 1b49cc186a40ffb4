import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.core.errors import error_detail
from app.models.order import Order, OrderStatus
from app.schemas.order import OrderCreate, OrderResponse
from app.services.order_resolution import OrderResolutionError, create_order
from app.services.payments import apply_payment_status

logger = logging.getLogger(__name__)

router = APIRouter()

require_purchase = require_capability(Capability.PURCHASE)


@router.get("/orders/me", response_model=list[OrderResponse])
def my_orders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_purchase),
):
    """Caller's orders, newest first."""
    return (
        db.query(Order)
        .options(selectinload(Order.game), selectinload(Order.sku))
        .filter(Order.user_id == principal.user_id)
        .order_by(Order.created_at.desc())
        .all()
    )


@router.post("/orders", response_model=OrderResponse, status_code=201)
def place_order(
    body: OrderCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_purchase),
):
    """Create a PENDING order for a SKU; the seller of record is resolved from the game's merchant bindings."""
    try:
        return create_order(db, principal, body.sku_id, body.merchant_id)
    except OrderResolutionError as e:
        db.rollback()
        logger.info("Order rejected for %s: sku=%s merchant=%s (%s)", principal.subject, body.sku_id, body.merchant_id, e.code)
        raise HTTPException(status_code=e.status_code, detail=error_detail(e.code, e.message))


@router.post("/orders/{order_id}/demo-pay", response_model=OrderResponse)
def demo_pay(
    order_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_purchase),
):
    """Demo identities only: mark one of your own orders as PAID without a payment provider."""
    if not principal.is_demo:
        raise HTTPException(status_code=403, detail="Demo only")
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.user_id != principal.user_id:
        raise HTTPException(status_code=403, detail="Not your order")
    apply_payment_status(db, order, OrderStatus.PAID)
    return order
