import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.core.errors import error_detail
from app.models.merchant_user import MerchantUser
from app.models.order import Order
from app.models.user import User
from app.schemas.merchant import MerchantResponse
from app.schemas.user import (
    UpdateUserRole,
    UserDetailResponse,
    UserListResponse,
    UserOrderSummary,
    UserResponse,
    UserSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_capability(Capability.ADMINISTER)

RECENT_ORDERS_LIMIT = 10


@router.get("/admin/users", response_model=UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    users = db.query(User).order_by(User.created_at.desc(), User.id).all()
    order_counts = dict(db.query(Order.user_id, func.count(Order.id)).group_by(Order.user_id).all())
    merchant_counts = dict(
        db.query(MerchantUser.user_id, func.count(MerchantUser.id)).group_by(MerchantUser.user_id).all()
    )
    return UserListResponse(
        users=[
            UserSummary(
                **UserResponse.model_validate(u).model_dump(),
                orders_count=order_counts.get(u.id, 0),
                merchants_count=merchant_counts.get(u.id, 0),
            )
            for u in users
        ]
    )


@router.get("/admin/users/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """One user with their ten most recent orders and linked merchants."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    orders = (
        db.query(Order)
        .filter(Order.user_id == user.id)
        .order_by(Order.created_at.desc())
        .limit(RECENT_ORDERS_LIMIT)
        .all()
    )
    return UserDetailResponse(
        **UserResponse.model_validate(user).model_dump(),
        orders=[UserOrderSummary.model_validate(o) for o in orders],
        merchants=[MerchantResponse.model_validate(link.merchant) for link in user.merchants],
    )


@router.put("/admin/users/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: str,
    body: UpdateUserRole,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role != body.role:
        logger.info("Admin %s changed role of user %s: %s -> %s", admin.subject, user.id, user.role.value, body.role.value)
        user.role = body.role
        db.commit()
        db.refresh(user)
    return user


@router.delete("/admin/users/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.auth_sub == admin.subject:
        raise HTTPException(status_code=400, detail=error_detail("cannot_delete_self", "Cannot delete your own account"))
    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s", admin.subject, user_id)
    return None
