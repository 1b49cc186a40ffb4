"""
Order-to-merchant resolution.

Decides which merchant is the seller of record for a purchase:

1. An explicitly requested merchant must hold an active binding to the SKU's
   game and be ACTIVE itself.
2. Otherwise the oldest active binding whose merchant is ACTIVE wins.
3. Failing that, the game's owning merchant is used if it is ACTIVE.

Nothing is written until a merchant has been resolved.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from app.core.auth import Principal
from app.models.game import Game
from app.models.merchant import Merchant, MerchantStatus
from app.models.merchant_game import MerchantGame
from app.models.order import Order, OrderStatus
from app.models.sku import SKU

logger = logging.getLogger(__name__)


class OrderResolutionError(Exception):
    code = "bad_request"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SkuNotFound(OrderResolutionError):
    code = "not_found"
    status_code = 404


class MerchantForbidden(OrderResolutionError):
    code = "forbidden"
    status_code = 403


class NoMerchantAvailable(OrderResolutionError):
    code = "no_merchant"
    status_code = 400


def _requested_merchant(db: Session, game_id: str, merchant_id: str) -> Merchant:
    link = (
        db.query(MerchantGame)
        .filter(
            MerchantGame.merchant_id == merchant_id,
            MerchantGame.game_id == game_id,
            MerchantGame.is_active.is_(True),
        )
        .first()
    )
    if not link:
        raise MerchantForbidden("Merchant is not bound to this game")
    if link.merchant.status != MerchantStatus.ACTIVE:
        raise MerchantForbidden("Merchant is suspended")
    return link.merchant


def _default_merchant(db: Session, game: Game) -> Merchant:
    link = (
        db.query(MerchantGame)
        .join(Merchant, Merchant.id == MerchantGame.merchant_id)
        .filter(
            MerchantGame.game_id == game.id,
            MerchantGame.is_active.is_(True),
            Merchant.status == MerchantStatus.ACTIVE,
        )
        .order_by(MerchantGame.created_at.asc(), MerchantGame.id.asc())
        .first()
    )
    if link:
        return link.merchant

    owner = db.query(Merchant).filter(Merchant.id == game.merchant_id).first()
    if not owner or owner.status != MerchantStatus.ACTIVE:
        raise NoMerchantAvailable("No active merchant available for this game")
    return owner


def resolve_order_merchant(db: Session, sku: SKU, requested_merchant_id: Optional[str] = None) -> Merchant:
    """Return the merchant of record for a purchase of ``sku``."""
    if requested_merchant_id:
        return _requested_merchant(db, sku.game_id, requested_merchant_id)
    return _default_merchant(db, sku.game)


def create_order(
    db: Session,
    principal: Principal,
    sku_id: str,
    requested_merchant_id: Optional[str] = None,
) -> Order:
    """Resolve the merchant and persist a PENDING order with the SKU's price snapshotted."""
    sku = db.query(SKU).filter(SKU.id == sku_id).first()
    if not sku:
        raise SkuNotFound("SKU not found")

    merchant = resolve_order_merchant(db, sku, requested_merchant_id)

    order = Order(
        id=str(uuid.uuid4()),
        user_id=principal.user_id,
        merchant_id=merchant.id,
        game_id=sku.game_id,
        sku_id=sku.id,
        visitor_id=principal.subject or principal.user_id,
        amount=sku.price,
        currency=sku.currency,
        status=OrderStatus.PENDING,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(
        "Order %s created: sku=%s merchant=%s (requested=%s) amount=%s %s",
        order.id,
        sku.id,
        merchant.id,
        requested_merchant_id or "-",
        order.amount,
        order.currency,
    )
    return order
