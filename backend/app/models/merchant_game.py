from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MerchantGame(Base):
    """Binding that lets a merchant sell a game's SKUs. Several merchants may sell the same game."""

    __tablename__ = "merchant_games"
    __table_args__ = (UniqueConstraint("merchant_id", "game_id", name="uq_merchant_games_merchant_game"),)

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = Column(String(36), ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Set client-side with microseconds: default order resolution picks the oldest binding
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    # relationships
    merchant = relationship("Merchant", back_populates="merchant_games")
    game = relationship("Game", back_populates="merchant_games")
