import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class PaymentProvider(str, enum.Enum):
    STRIPE = "STRIPE"
    PAYPAL = "PAYPAL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    sku_id = Column(String(36), ForeignKey("skus.id"), nullable=False, index=True)
    visitor_id = Column(String(255), nullable=False)
    # Snapshot of the SKU at creation time
    amount = Column(Integer, nullable=False)
    currency = Column(String(8), nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    provider = Column(Enum(PaymentProvider), nullable=True)
    provider_payment_id = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    user = relationship("User", back_populates="orders")
    merchant = relationship("Merchant", back_populates="orders")
    game = relationship("Game", back_populates="orders")
    sku = relationship("SKU", back_populates="orders")
