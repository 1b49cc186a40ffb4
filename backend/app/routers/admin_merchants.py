import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.models.game import Game
from app.models.merchant import Merchant, MerchantStatus
from app.models.merchant_game import MerchantGame
from app.models.order import Order, OrderStatus
from app.schemas.merchant import (
    AdminMerchantListResponse,
    AdminMerchantSummary,
    MerchantCreate,
    MerchantResponse,
    MerchantUpdate,
    SetMerchantGames,
    SetMerchantGamesResponse,
)
from app.services.catalog import bind_games

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_capability(Capability.ADMINISTER)


def _ensure_games_exist(db: Session, game_ids: list[str]) -> None:
    if not game_ids:
        return
    found = {row.id for row in db.query(Game.id).filter(Game.id.in_(game_ids)).all()}
    missing = [g for g in game_ids if g not in found]
    if missing:
        raise HTTPException(status_code=404, detail=f"Game not found: {', '.join(missing)}")


@router.get("/admin/merchants", response_model=AdminMerchantListResponse)
def list_merchants(
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """All merchants with their active games, order counts and paid revenue."""
    merchants = (
        db.query(Merchant)
        .options(selectinload(Merchant.merchant_games))
        .order_by(Merchant.created_at.desc(), Merchant.id)
        .all()
    )
    totals = dict(
        db.query(Order.merchant_id, func.count(Order.id)).group_by(Order.merchant_id).all()
    )
    paid = {
        merchant_id: (count, revenue or 0)
        for merchant_id, count, revenue in db.query(Order.merchant_id, func.count(Order.id), func.sum(Order.amount))
        .filter(Order.status == OrderStatus.PAID)
        .group_by(Order.merchant_id)
        .all()
    }
    summaries = []
    for m in merchants:
        game_ids = [mg.game_id for mg in m.merchant_games if mg.is_active]
        paid_orders, revenue = paid.get(m.id, (0, 0))
        summaries.append(
            AdminMerchantSummary(
                id=m.id,
                name=m.name,
                email=m.email,
                status=m.status,
                created_at=m.created_at,
                games_count=len(game_ids),
                game_ids=game_ids,
                total_orders=totals.get(m.id, 0),
                paid_orders=paid_orders,
                total_revenue=int(revenue),
            )
        )
    return AdminMerchantListResponse(merchants=summaries)


@router.post("/admin/merchants", response_model=MerchantResponse, status_code=201)
def create_merchant(
    body: MerchantCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Create a merchant and its optional game bindings in one transaction."""
    game_ids = list(dict.fromkeys(body.game_ids or []))
    _ensure_games_exist(db, game_ids)
    merchant = Merchant(
        id=str(uuid.uuid4()),
        name=body.name,
        email=str(body.email) if body.email else None,
        status=body.status or MerchantStatus.ACTIVE,
    )
    db.add(merchant)
    db.flush()
    bind_games(db, merchant.id, game_ids)
    db.commit()
    db.refresh(merchant)
    logger.info("Admin %s created merchant %s with %d game(s)", admin.subject, merchant.id, len(game_ids))
    return merchant


@router.put("/admin/merchants/{merchant_id}", response_model=MerchantResponse)
def update_merchant(
    merchant_id: str,
    body: MerchantUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    merchant = db.query(Merchant).filter(Merchant.id == merchant_id).first()
    if not merchant:
        raise HTTPException(status_code=404, detail="Merchant not found")
    changes = body.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is not None:
        merchant.name = changes["name"]
    if "email" in changes:
        merchant.email = str(changes["email"]) if changes["email"] else None
    if changes.get("status") is not None and changes["status"] != merchant.status:
        logger.info("Admin %s set merchant %s status %s -> %s", admin.subject, merchant.id, merchant.status.value, changes["status"].value)
        merchant.status = changes["status"]
    db.commit()
    db.refresh(merchant)
    return merchant


@router.put("/admin/merchants/{merchant_id}/games", response_model=SetMerchantGamesResponse)
def set_merchant_games(
    merchant_id: str,
    body: SetMerchantGames,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Replace the merchant's game bindings in one transaction."""
    merchant = db.query(Merchant).filter(Merchant.id == merchant_id).first()
    if not merchant:
        raise HTTPException(status_code=404, detail="Merchant not found")
    game_ids = list(dict.fromkeys(body.game_ids))
    _ensure_games_exist(db, game_ids)
    db.query(MerchantGame).filter(MerchantGame.merchant_id == merchant.id).delete(synchronize_session=False)
    db.flush()
    bind_games(db, merchant.id, game_ids)
    db.commit()
    logger.info("Admin %s replaced bindings of merchant %s: %d game(s)", admin.subject, merchant.id, len(game_ids))
    return SetMerchantGamesResponse(merchant_id=merchant.id, game_ids=game_ids)
