import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.models.game import Game
from app.models.merchant import Merchant, MerchantStatus
from app.models.merchant_game import MerchantGame
from app.schemas.game import (
    GameCreate,
    GameMerchant,
    GameMerchantsResponse,
    GameResponse,
    GameUpdate,
)
from app.services.catalog import ensure_no_orders

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_capability(Capability.ADMINISTER)


@router.get("/games", response_model=list[GameResponse])
def list_games(db: Session = Depends(get_db)):
    return db.query(Game).options(selectinload(Game.skus)).order_by(Game.created_at.asc(), Game.id).all()


@router.get("/games/{game_id}", response_model=GameResponse)
def get_game(game_id: str, db: Session = Depends(get_db)):
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


@router.get("/games/{game_id}/merchants", response_model=GameMerchantsResponse)
def list_game_merchants(game_id: str, db: Session = Depends(get_db)):
    """Public: active merchants selling this game, oldest binding first (the default seller comes first)."""
    game = db.query(Game.id).filter(Game.id == game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    links = (
        db.query(MerchantGame)
        .join(Merchant, Merchant.id == MerchantGame.merchant_id)
        .filter(
            MerchantGame.game_id == game_id,
            MerchantGame.is_active.is_(True),
            Merchant.status == MerchantStatus.ACTIVE,
        )
        .order_by(MerchantGame.created_at.asc(), MerchantGame.id.asc())
        .all()
    )
    return GameMerchantsResponse(
        game_id=game_id,
        merchants=[
            GameMerchant(
                id=link.merchant.id,
                name=link.merchant.name,
                email=link.merchant.email,
                status=link.merchant.status.value,
            )
            for link in links
        ],
    )


# --- Admin CRUD ---


@router.post("/admin/games", response_model=GameResponse, status_code=201)
def admin_create_game(
    body: GameCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    if not db.query(Merchant.id).filter(Merchant.id == body.merchant_id).first():
        raise HTTPException(status_code=404, detail="Merchant not found")
    values = body.model_dump(exclude_none=True)
    game = Game(id=str(uuid.uuid4()), **values)
    db.add(game)
    db.commit()
    db.refresh(game)
    logger.info("Admin %s created game %s", admin.subject, game.id)
    return game


@router.put("/admin/games/{game_id}", response_model=GameResponse)
def admin_update_game(
    game_id: str,
    body: GameUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "merchant_id" in changes and not db.query(Merchant.id).filter(Merchant.id == changes["merchant_id"]).first():
        raise HTTPException(status_code=404, detail="Merchant not found")
    for field, value in changes.items():
        setattr(game, field, value)
    db.commit()
    db.refresh(game)
    return game


@router.delete("/admin/games/{game_id}", status_code=204)
def admin_delete_game(
    game_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    ensure_no_orders(db, game_id=game.id)
    db.delete(game)
    db.commit()
    logger.info("Admin %s deleted game %s", admin.subject, game_id)
    return None
