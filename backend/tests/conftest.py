"""
Pytest configuration and fixtures.

The app runs against an in-memory SQLite database shared through a StaticPool;
callers authenticate with the demo identity headers unless a test switches
AUTH_MODE back to jwt.
"""
import os
import uuid
from datetime import datetime, timezone
from typing import Optional

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["AUTH_MODE"] = "demo"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.deps import get_db
from app.main import app
from app.models import (
    Base,
    Game,
    Merchant,
    MerchantGame,
    MerchantStatus,
    Order,
    OrderStatus,
    SKU,
    User,
    UserRole,
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def demo_headers(role: str = "user", merchant_id: Optional[str] = None) -> dict:
    headers = {"X-Demo-Role": role}
    if merchant_id:
        headers["X-Demo-Merchant-Id"] = merchant_id
    return headers


class Factory:
    """Insert committed rows with stable ids."""

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def merchant(self, merchant_id: str, status: MerchantStatus = MerchantStatus.ACTIVE) -> Merchant:
        return self._save(Merchant(id=merchant_id, name=f"Merchant {merchant_id}", status=status))

    def game(self, game_id: str, owner_id: str) -> Game:
        return self._save(Game(
            id=game_id,
            merchant_id=owner_id,
            name_zh=game_id,
            name_ja=game_id,
            name_en=game_id,
            developer="Dev",
            icon_url="/icon.png",
            banner_url="/banner.png",
            badge="new",
        ))

    def sku(self, sku_id: str, game_id: str, price: int = 500, currency: str = "JPY", sort_order: int = 1) -> SKU:
        return self._save(SKU(
            id=sku_id,
            game_id=game_id,
            name_zh=sku_id,
            name_ja=sku_id,
            name_en=sku_id,
            price=price,
            original_price=price,
            bonus="",
            currency=currency,
            sort_order=sort_order,
        ))

    def bind(
        self,
        merchant_id: str,
        game_id: str,
        created_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> MerchantGame:
        link = MerchantGame(id=str(uuid.uuid4()), merchant_id=merchant_id, game_id=game_id, is_active=is_active)
        if created_at is not None:
            link.created_at = created_at
        return self._save(link)

    def user(self, sub: str, role: UserRole = UserRole.USER) -> User:
        return self._save(User(id=str(uuid.uuid4()), auth_sub=sub, role=role))

    def order(
        self,
        user: User,
        sku: SKU,
        merchant_id: str,
        status: OrderStatus = OrderStatus.PENDING,
        created_at: Optional[datetime] = None,
    ) -> Order:
        order = Order(
            id=str(uuid.uuid4()),
            user_id=user.id,
            merchant_id=merchant_id,
            game_id=sku.game_id,
            sku_id=sku.id,
            visitor_id=user.auth_sub,
            amount=sku.price,
            currency=sku.currency,
            status=status,
        )
        if created_at is not None:
            order.created_at = created_at
        return self._save(order)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 1, 1, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(factory):
    """Game g1 owned by m_owner, bound to m_a (t=1) and m_b (t=2), with one 500 JPY SKU."""
    factory.merchant("m_owner")
    factory.merchant("m_a")
    factory.merchant("m_b")
    factory.game("g1", "m_owner")
    sku = factory.sku("sku_1", "g1", price=500)
    factory.bind("m_a", "g1", created_at=at(1))
    factory.bind("m_b", "g1", created_at=at(2))
    return sku
