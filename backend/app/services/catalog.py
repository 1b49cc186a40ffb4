"""Catalog helpers shared by the admin and merchant routers."""
import logging
import uuid
from typing import Iterable, Optional

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.errors import error_detail
from app.models.merchant_game import MerchantGame
from app.models.order import Order
from app.models.sku import SKU
from app.schemas.sku import SKUCreate

logger = logging.getLogger(__name__)


def next_sort_order(db: Session, game_id: str) -> int:
    current = db.query(func.max(SKU.sort_order)).filter(SKU.game_id == game_id).scalar()
    return (current or 0) + 1


def build_sku(db: Session, data: SKUCreate) -> SKU:
    values = data.model_dump()
    values["limited"] = bool(values.get("limited"))
    if values.get("sort_order") is None:
        values["sort_order"] = next_sort_order(db, data.game_id)
    return SKU(id=str(uuid.uuid4()), **values)


def has_active_binding(db: Session, merchant_id: str, game_id: str) -> bool:
    link = (
        db.query(MerchantGame)
        .filter(
            MerchantGame.merchant_id == merchant_id,
            MerchantGame.game_id == game_id,
            MerchantGame.is_active.is_(True),
        )
        .first()
    )
    return link is not None


def bind_games(db: Session, merchant_id: str, game_ids: Iterable[str]) -> list[str]:
    """Add active bindings for ``game_ids``; existing bindings are reactivated. Does not commit."""
    bound = []
    for game_id in dict.fromkeys(game_ids):
        link = (
            db.query(MerchantGame)
            .filter(MerchantGame.merchant_id == merchant_id, MerchantGame.game_id == game_id)
            .first()
        )
        if link:
            link.is_active = True
        else:
            db.add(MerchantGame(id=str(uuid.uuid4()), merchant_id=merchant_id, game_id=game_id, is_active=True))
        bound.append(game_id)
    db.flush()
    return bound


def ensure_no_orders(db: Session, game_id: Optional[str] = None, sku_id: Optional[str] = None) -> None:
    """Refuse (409) to delete a game or SKU that orders still reference; order history is kept."""
    q = db.query(Order.id)
    if game_id is not None:
        game_skus = select(SKU.id).where(SKU.game_id == game_id)
        q = q.filter(or_(Order.game_id == game_id, Order.sku_id.in_(game_skus)))
    if sku_id is not None:
        q = q.filter(Order.sku_id == sku_id)
    if q.first() is not None:
        what = "SKU" if sku_id is not None else "Game"
        logger.info("Refusing to delete %s %s: orders reference it", what.lower(), sku_id or game_id)
        raise HTTPException(
            status_code=409,
            detail=error_detail("conflict", f"{what} has orders and cannot be deleted"),
        )
