from datetime import datetime
from typing import Optional

from app.models.order import OrderStatus
from app.models.user import UserRole
from app.schemas.common import CamelModel
from app.schemas.merchant import MerchantResponse


class MeResponse(CamelModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: UserRole


class UserResponse(CamelModel):
    id: str
    auth_sub: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSummary(UserResponse):
    orders_count: int
    merchants_count: int


class UserListResponse(CamelModel):
    users: list[UserSummary]


class UserOrderSummary(CamelModel):
    id: str
    amount: int
    currency: str
    status: OrderStatus
    created_at: Optional[datetime] = None


class UserDetailResponse(UserResponse):
    orders: list[UserOrderSummary] = []
    merchants: list[MerchantResponse] = []


class UpdateUserRole(CamelModel):
    role: UserRole
