from sqlalchemy import Column, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)  # owning merchant
    name_zh = Column(String(255), nullable=False)
    name_ja = Column(String(255), nullable=False)
    name_en = Column(String(255), nullable=False)
    developer = Column(String(255), nullable=False)
    icon_url = Column(String(512), nullable=False)
    banner_url = Column(String(512), nullable=False)
    badge = Column(String(32), nullable=False)
    rating = Column(Float, default=4.5, nullable=False)
    downloads = Column(String(32), default="0", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    merchant = relationship("Merchant", back_populates="games")
    skus = relationship(
        "SKU",
        back_populates="game",
        order_by="SKU.sort_order",
        cascade="all, delete-orphan",
    )
    merchant_games = relationship("MerchantGame", back_populates="game", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="game")
