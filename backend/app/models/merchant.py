import enum

from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class MerchantStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class Merchant(Base):
    __tablename__ = "merchants"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    status = Column(Enum(MerchantStatus), default=MerchantStatus.ACTIVE, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    games = relationship("Game", back_populates="merchant")
    merchant_games = relationship("MerchantGame", back_populates="merchant", cascade="all, delete-orphan")
    users = relationship("MerchantUser", back_populates="merchant", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="merchant")

    @property
    def is_active(self) -> bool:
        return self.status == MerchantStatus.ACTIVE
