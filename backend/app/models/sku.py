from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class SKU(Base):
    """A purchasable price point for in-game currency. Prices are in the currency's minor unit."""

    __tablename__ = "skus"

    id = Column(String(36), primary_key=True, index=True)
    game_id = Column(String(36), ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)
    name_zh = Column(String(255), nullable=False)
    name_ja = Column(String(255), nullable=False)
    name_en = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)
    original_price = Column(Integer, nullable=False)
    bonus = Column(String(255), nullable=False, default="")
    currency = Column(String(8), nullable=False)
    limited = Column(Boolean, default=False, nullable=False)
    image_url = Column(String(512), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    game = relationship("Game", back_populates="skus")
    orders = relationship("Order", back_populates="sku")
