"""Order status transitions driven by payment providers."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.order import Order, OrderStatus, PaymentProvider

logger = logging.getLogger(__name__)


class PaymentProviderError(Exception):
    """A payment provider rejected or failed a request."""


# PAID is terminal; a FAILED order can still be paid by a later attempt
_ALLOWED = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.FAILED},
    OrderStatus.FAILED: {OrderStatus.PAID},
    OrderStatus.PAID: set(),
}


def apply_payment_status(
    db: Session,
    order: Order,
    new_status: OrderStatus,
    provider: Optional[PaymentProvider] = None,
    provider_payment_id: Optional[str] = None,
) -> bool:
    """Move ``order`` to ``new_status``. Returns False (and writes nothing) for repeats and disallowed moves."""
    if order.status == new_status:
        logger.info("Order %s already %s; ignoring repeated update", order.id, new_status.value)
        return False
    if new_status not in _ALLOWED[order.status]:
        logger.warning(
            "Order %s: ignoring transition %s -> %s",
            order.id,
            order.status.value,
            new_status.value,
        )
        return False
    order.status = new_status
    if provider is not None:
        order.provider = provider
    if provider_payment_id:
        order.provider_payment_id = provider_payment_id
    db.commit()
    db.refresh(order)
    logger.info("Order %s -> %s (provider=%s)", order.id, new_status.value, provider.value if provider else "-")
    return True
