from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.models.merchant import MerchantStatus
from app.schemas.common import CamelModel


class MerchantCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    status: Optional[MerchantStatus] = None
    game_ids: Optional[list[str]] = None


class MerchantUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    status: Optional[MerchantStatus] = None


class MerchantResponse(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    status: MerchantStatus
    created_at: Optional[datetime] = None


class AdminMerchantSummary(MerchantResponse):
    games_count: int
    game_ids: list[str]
    total_orders: int
    paid_orders: int
    total_revenue: int


class AdminMerchantListResponse(CamelModel):
    merchants: list[AdminMerchantSummary]


class SetMerchantGames(CamelModel):
    game_ids: list[str]


class SetMerchantGamesResponse(CamelModel):
    ok: bool = True
    merchant_id: str
    game_ids: list[str]
