import enum

from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class UserRole(str, enum.Enum):
    USER = "USER"
    MERCHANT = "MERCHANT"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    auth_sub = Column(String(255), unique=True, index=True, nullable=False)  # identity provider subject
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    orders = relationship("Order", back_populates="user", cascade="all, delete-orphan")
    merchants = relationship("MerchantUser", back_populates="user", cascade="all, delete-orphan")
    applications = relationship("MerchantApplication", back_populates="user", cascade="all, delete-orphan")
