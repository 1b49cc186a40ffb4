from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class MerchantUser(Base):
    __tablename__ = "merchant_users"
    __table_args__ = (UniqueConstraint("merchant_id", "user_id", name="uq_merchant_users_merchant_user"),)

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # relationships
    merchant = relationship("Merchant", back_populates="users")
    user = relationship("User", back_populates="merchants")
