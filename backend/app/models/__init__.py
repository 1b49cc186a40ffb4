from app.core.database import Base
from app.models.merchant import Merchant, MerchantStatus
from app.models.game import Game
from app.models.sku import SKU
from app.models.merchant_game import MerchantGame
from app.models.user import User, UserRole
from app.models.merchant_user import MerchantUser
from app.models.order import Order, OrderStatus, PaymentProvider
from app.models.merchant_application import ApplicationStatus, MerchantApplication

__all__ = [
    "Base",
    "Merchant",
    "MerchantStatus",
    "Game",
    "SKU",
    "MerchantGame",
    "User",
    "UserRole",
    "MerchantUser",
    "Order",
    "OrderStatus",
    "PaymentProvider",
    "MerchantApplication",
    "ApplicationStatus",
]
