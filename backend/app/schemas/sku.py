from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class SKUBase(CamelModel):
    game_id: str = Field(min_length=1)
    name_zh: str = Field(min_length=1)
    name_ja: str = Field(min_length=1)
    name_en: str = Field(min_length=1)
    price: int = Field(ge=0)
    original_price: int = Field(ge=0)
    bonus: str
    currency: str = Field(min_length=1, max_length=8)
    limited: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, min_length=1)
    sort_order: Optional[int] = None


class SKUCreate(SKUBase):
    pass


class SKUUpdate(CamelModel):
    game_id: Optional[str] = Field(default=None, min_length=1)
    name_zh: Optional[str] = Field(default=None, min_length=1)
    name_ja: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = Field(default=None, min_length=1)
    price: Optional[int] = Field(default=None, ge=0)
    original_price: Optional[int] = Field(default=None, ge=0)
    bonus: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=1, max_length=8)
    limited: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, min_length=1)
    sort_order: Optional[int] = None


class SKUResponse(CamelModel):
    id: str
    game_id: str
    name_zh: str
    name_ja: str
    name_en: str
    price: int
    original_price: int
    bonus: str
    currency: str
    limited: bool
    image_url: Optional[str] = None
    sort_order: int
    created_at: Optional[datetime] = None
