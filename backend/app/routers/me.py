from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import Principal, get_principal
from app.core.deps import get_db
from app.models.user import User
from app.schemas.user import MeResponse

router = APIRouter()


@router.get("/me", response_model=MeResponse)
def me(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    """Current user profile (created on first call)."""
    return db.query(User).filter(User.id == principal.user_id).first()
