import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import setup_exception_handlers
from app.models import Base  # noqa: F401 - register models
from app.routers import (
    admin_merchants,
    admin_users,
    games,
    health,
    me,
    merchant,
    merchant_apply,
    orders,
    payments_paypal,
    payments_stripe,
    skus,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Game Recharge API",
    description="Multi-merchant storefront for in-game currency",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type", "Authorization", "X-Demo-Role", "X-Demo-Merchant-Id"],
)

setup_exception_handlers(app)

app.include_router(health.router, prefix="/health")
app.include_router(me.router, prefix="/api")
app.include_router(games.router, prefix="/api")
app.include_router(skus.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(merchant.router, prefix="/api")
app.include_router(merchant_apply.router, prefix="/api")
app.include_router(admin_merchants.router, prefix="/api")
app.include_router(admin_users.router, prefix="/api")
app.include_router(payments_stripe.router, prefix="/api")
app.include_router(payments_paypal.router, prefix="/api")


@app.on_event("startup")
async def startup():
    logger.info("Starting Game Recharge API (env=%s, auth=%s)", settings.APP_ENV, settings.AUTH_MODE)
    if settings.SEED_DEMO_DATA:
        from app.core.database import SessionLocal
        from app.seed import seed_demo_data
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()
