from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.order import OrderStatus, PaymentProvider
from app.schemas.common import CamelModel
from app.schemas.game import GameSummary
from app.schemas.sku import SKUResponse


class OrderCreate(CamelModel):
    sku_id: str = Field(min_length=1)
    merchant_id: Optional[str] = Field(default=None, min_length=1)


class OrderUser(CamelModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class OrderResponse(CamelModel):
    id: str
    user_id: str
    merchant_id: str
    game_id: str
    sku_id: str
    visitor_id: str
    amount: int
    currency: str
    status: OrderStatus
    provider: Optional[PaymentProvider] = None
    provider_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    game: Optional[GameSummary] = None
    sku: Optional[SKUResponse] = None


class MerchantOrderResponse(OrderResponse):
    user: Optional[OrderUser] = None


class MerchantOrdersResponse(CamelModel):
    merchant_id: str
    orders: list[MerchantOrderResponse]


class MerchantStatsResponse(CamelModel):
    merchant_id: str
    total_orders: int
    paid_orders: int
    total_revenue: int
    today_orders: int
    today_paid_orders: int
    today_revenue: int
