from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.sku import SKUResponse


class MerchantGameCreate(CamelModel):
    """Game created by a merchant; the merchant becomes the owner."""

    name_zh: str = Field(min_length=1)
    name_ja: str = Field(min_length=1)
    name_en: str = Field(min_length=1)
    developer: str = Field(min_length=1)
    icon_url: str = Field(min_length=1)
    banner_url: str = Field(min_length=1)
    badge: str = Field(min_length=1)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    downloads: Optional[str] = Field(default=None, min_length=1)


class GameCreate(MerchantGameCreate):
    merchant_id: str = Field(min_length=1)


class GameUpdate(CamelModel):
    merchant_id: Optional[str] = Field(default=None, min_length=1)
    name_zh: Optional[str] = Field(default=None, min_length=1)
    name_ja: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = Field(default=None, min_length=1)
    developer: Optional[str] = Field(default=None, min_length=1)
    icon_url: Optional[str] = Field(default=None, min_length=1)
    banner_url: Optional[str] = Field(default=None, min_length=1)
    badge: Optional[str] = Field(default=None, min_length=1)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    downloads: Optional[str] = Field(default=None, min_length=1)


class GameResponse(CamelModel):
    id: str
    merchant_id: str
    name_zh: str
    name_ja: str
    name_en: str
    developer: str
    icon_url: str
    banner_url: str
    badge: str
    rating: float
    downloads: str
    created_at: Optional[datetime] = None
    skus: list[SKUResponse] = []


class GameSummary(CamelModel):
    id: str
    name_en: str
    icon_url: str


class GameMerchant(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    status: str


class GameMerchantsResponse(CamelModel):
    game_id: str
    merchants: list[GameMerchant]


class MerchantGamesResponse(CamelModel):
    merchant_id: str
    games: list[GameResponse]
