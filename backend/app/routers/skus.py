from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.models.game import Game
from app.models.sku import SKU
from app.schemas.sku import SKUCreate, SKUResponse, SKUUpdate
from app.services.catalog import build_sku, ensure_no_orders

router = APIRouter()

require_admin = require_capability(Capability.ADMINISTER)


@router.get("/games/{game_id}/skus", response_model=list[SKUResponse])
def list_game_skus(game_id: str, db: Session = Depends(get_db)):
    return db.query(SKU).filter(SKU.game_id == game_id).order_by(SKU.sort_order.asc()).all()


@router.post("/admin/skus", response_model=SKUResponse, status_code=201)
def admin_create_sku(
    body: SKUCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    if not db.query(Game.id).filter(Game.id == body.game_id).first():
        raise HTTPException(status_code=404, detail="Game not found")
    sku = build_sku(db, body)
    db.add(sku)
    db.commit()
    db.refresh(sku)
    return sku


@router.put("/admin/skus/{sku_id}", response_model=SKUResponse)
def admin_update_sku(
    sku_id: str,
    body: SKUUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    sku = db.query(SKU).filter(SKU.id == sku_id).first()
    if not sku:
        raise HTTPException(status_code=404, detail="SKU not found")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "game_id" in changes and not db.query(Game.id).filter(Game.id == changes["game_id"]).first():
        raise HTTPException(status_code=404, detail="Target game not found")
    for field, value in changes.items():
        setattr(sku, field, value)
    db.commit()
    db.refresh(sku)
    return sku


@router.delete("/admin/skus/{sku_id}", status_code=204)
def admin_delete_sku(
    sku_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    sku = db.query(SKU).filter(SKU.id == sku_id).first()
    if not sku:
        raise HTTPException(status_code=404, detail="SKU not found")
    ensure_no_orders(db, sku_id=sku.id)
    db.delete(sku)
    db.commit()
    return None
