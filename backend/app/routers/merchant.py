"""Merchant self-service: orders, stats and catalog for the caller's merchant."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.core.auth import Principal, get_active_merchant_scope, get_merchant_scope, get_principal
from app.core.deps import get_db
from app.core.errors import error_detail
from app.models.game import Game
from app.models.merchant_game import MerchantGame
from app.models.order import Order, OrderStatus
from app.models.sku import SKU
from app.schemas.game import GameResponse, GameUpdate, MerchantGameCreate, MerchantGamesResponse
from app.schemas.order import MerchantOrdersResponse, MerchantStatsResponse
from app.schemas.sku import SKUCreate, SKUResponse, SKUUpdate
from app.services.catalog import bind_games, build_sku, ensure_no_orders, has_active_binding

logger = logging.getLogger(__name__)

router = APIRouter()

MERCHANT_ORDERS_LIMIT = 100


def _require_game_access(db: Session, principal: Principal, merchant_id: str, game_id: str) -> None:
    if principal.is_admin:
        return
    if not has_active_binding(db, merchant_id, game_id):
        raise HTTPException(status_code=403, detail=error_detail("forbidden", "No access to this game"))


def _order_totals(db: Session, merchant_id: str, since: Optional[datetime] = None) -> tuple[int, int, int]:
    q = db.query(Order).filter(Order.merchant_id == merchant_id)
    if since is not None:
        q = q.filter(Order.created_at >= since)
    total = q.count()
    paid_count, revenue = (
        q.filter(Order.status == OrderStatus.PAID)
        .with_entities(func.count(Order.id), func.coalesce(func.sum(Order.amount), 0))
        .one()
    )
    return total, paid_count, int(revenue)


@router.get("/merchant/me/orders", response_model=MerchantOrdersResponse)
def merchant_orders(
    db: Session = Depends(get_db),
    merchant_id: str = Depends(get_merchant_scope),
):
    orders = (
        db.query(Order)
        .options(selectinload(Order.user), selectinload(Order.game), selectinload(Order.sku))
        .filter(Order.merchant_id == merchant_id)
        .order_by(Order.created_at.desc())
        .limit(MERCHANT_ORDERS_LIMIT)
        .all()
    )
    return MerchantOrdersResponse.model_validate({"merchant_id": merchant_id, "orders": orders})


@router.get("/merchant/me/stats", response_model=MerchantStatsResponse)
def merchant_stats(
    db: Session = Depends(get_db),
    merchant_id: str = Depends(get_merchant_scope),
):
    """Order counts and paid revenue, overall and since UTC midnight."""
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    total, paid, revenue = _order_totals(db, merchant_id)
    today_total, today_paid, today_revenue = _order_totals(db, merchant_id, since=today)
    return MerchantStatsResponse(
        merchant_id=merchant_id,
        total_orders=total,
        paid_orders=paid,
        total_revenue=revenue,
        today_orders=today_total,
        today_paid_orders=today_paid,
        today_revenue=today_revenue,
    )


@router.get("/merchant/me/games", response_model=MerchantGamesResponse)
def merchant_games(
    db: Session = Depends(get_db),
    merchant_id: str = Depends(get_merchant_scope),
):
    """Games the merchant is actively bound to or owns."""
    bound = select(MerchantGame.game_id).where(
        MerchantGame.merchant_id == merchant_id,
        MerchantGame.is_active.is_(True),
    )
    games = (
        db.query(Game)
        .options(selectinload(Game.skus))
        .filter(or_(Game.id.in_(bound), Game.merchant_id == merchant_id))
        .order_by(Game.created_at.desc())
        .all()
    )
    return MerchantGamesResponse.model_validate({"merchant_id": merchant_id, "games": games})


# --- Games ---


@router.post("/merchant/me/games", response_model=GameResponse, status_code=201)
def merchant_create_game(
    body: MerchantGameCreate,
    db: Session = Depends(get_db),
    merchant_id: str = Depends(get_active_merchant_scope),
):
    """Create a game owned by the merchant and bind the merchant to it in one transaction."""
    values = body.model_dump()
    values["rating"] = values["rating"] if values["rating"] is not None else 4.5
    values["downloads"] = values["downloads"] or "0"
    game = Game(id=str(uuid.uuid4()), merchant_id=merchant_id, **values)
    db.add(game)
    db.flush()
    bind_games(db, merchant_id, [game.id])
    db.commit()
    db.refresh(game)
    logger.info("Merchant %s created game %s", merchant_id, game.id)
    return game


@router.put("/merchant/me/games/{game_id}", response_model=GameResponse)
def merchant_update_game(
    game_id: str,
    body: GameUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    merchant_id: str = Depends(get_active_merchant_scope),
):
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    _require_game_access(db, principal, merchant_id, game.id)
    # Ownership cannot be transferred from the merchant dashboard
    changes = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"merchant_id"})
    for field, value in changes.items():
        setattr(game, field, value)
    db.commit()
    db.refresh(game)
    return game


@router.delete("/merchant/me/games/{game_id}", status_code=204)
def merchant_delete_game(
    game_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    merchant_id: str = Depends(get_active_merchant_scope),
):
    """The owner deletes the game for everyone; any other merchant only unbinds itself."""
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    _require_game_access(db, principal, merchant_id, game.id)
    if game.merchant_id == merchant_id:
        ensure_no_orders(db, game_id=game.id)
        db.delete(game)
        logger.info("Merchant %s deleted game %s", merchant_id, game_id)
    else:
        db.query(MerchantGame).filter(
            MerchantGame.merchant_id == merchant_id,
            MerchantGame.game_id == game.id,
        ).delete(synchronize_session=False)
        logger.info("Merchant %s unbound from game %s", merchant_id, game_id)
    db.commit()
    return None


# --- SKUs ---


@router.post("/merchant/me/skus", response_model=SKUResponse, status_code=201)
def merchant_create_sku(
    body: SKUCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    merchant_id: str = Depends(get_active_merchant_scope),
):
    game = db.query(Game).filter(Game.id == body.game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    _require_game_access(db, principal, merchant_id, game.id)
    sku = build_sku(db, body)
    db.add(sku)
    db.commit()
    db.refresh(sku)
    return sku


@router.put("/merchant/me/skus/{sku_id}", response_model=SKUResponse)
def merchant_update_sku(
    sku_id: str,
    body: SKUUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    merchant_id: str = Depends(get_active_merchant_scope),
):
    sku = db.query(SKU).filter(SKU.id == sku_id).first()
    if not sku:
        raise HTTPException(status_code=404, detail="SKU not found")
    _require_game_access(db, principal, merchant_id, sku.game_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    new_game_id = changes.get("game_id")
    if new_game_id and new_game_id != sku.game_id:
        if not db.query(Game.id).filter(Game.id == new_game_id).first():
            raise HTTPException(status_code=404, detail="Target game not found")
        _require_game_access(db, principal, merchant_id, new_game_id)
    for field, value in changes.items():
        setattr(sku, field, value)
    db.commit()
    db.refresh(sku)
    return sku


@router.delete("/merchant/me/skus/{sku_id}", status_code=204)
def merchant_delete_sku(
    sku_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    merchant_id: str = Depends(get_active_merchant_scope),
):
    sku = db.query(SKU).filter(SKU.id == sku_id).first()
    if not sku:
        raise HTTPException(status_code=404, detail="SKU not found")
    _require_game_access(db, principal, merchant_id, sku.game_id)
    ensure_no_orders(db, sku_id=sku.id)
    db.delete(sku)
    db.commit()
    return None
