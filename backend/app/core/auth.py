"""Caller identity and capability checks.

An identity provider turns a request into a ``Principal``. Which providers are
active is decided by ``AUTH_MODE``: ``jwt`` accepts Bearer tokens only,
``demo`` additionally accepts the ``X-Demo-Role`` / ``X-Demo-Merchant-Id``
headers (refused in production by the settings validator).
"""
import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import error_detail
from app.core.security import decode_access_token
from app.models.merchant import Merchant
from app.models.merchant_user import MerchantUser
from app.models.user import UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

DEMO_ROLE_HEADER = "X-Demo-Role"
DEMO_MERCHANT_HEADER = "X-Demo-Merchant-Id"
DEFAULT_DEMO_MERCHANT_ID = "merchant_demo"

ADMIN_PERMISSION = "admin:all"
MERCHANT_PERMISSION = "merchant:all"


class Capability(str, enum.Enum):
    PURCHASE = "purchase"
    APPLY_FOR_MERCHANT = "apply_for_merchant"
    MANAGE_CATALOG = "manage_catalog"
    VIEW_MERCHANT_ORDERS = "view_merchant_orders"
    ADMINISTER = "administer"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.USER: frozenset({Capability.PURCHASE, Capability.APPLY_FOR_MERCHANT}),
    UserRole.MERCHANT: frozenset({
        Capability.PURCHASE,
        Capability.APPLY_FOR_MERCHANT,
        Capability.MANAGE_CATALOG,
        Capability.VIEW_MERCHANT_ORDERS,
    }),
    UserRole.ADMIN: frozenset(Capability),
}


@dataclass(frozen=True)
class Principal:
    subject: str
    role: UserRole
    merchant_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    is_demo: bool = False
    user_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def has_capability(principal: Principal, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(principal.role, frozenset())


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _claim(claims: dict, name: str):
    """Read a claim either plainly or under the configured namespace."""
    if claims.get(name) is not None:
        return claims[name]
    ns = settings.AUTH_CLAIMS_NAMESPACE.rstrip("/")
    if ns:
        return claims.get(f"{ns}/{name}")
    return None


def role_from_claims(claims: dict) -> UserRole:
    perms = _claim(claims, "permissions") or []
    if isinstance(perms, str):
        perms = perms.split()
    if ADMIN_PERMISSION in perms:
        return UserRole.ADMIN
    if MERCHANT_PERMISSION in perms:
        return UserRole.MERCHANT
    raw = _claim(claims, "role")
    if isinstance(raw, str):
        try:
            return UserRole(raw.upper())
        except ValueError:
            pass
    return UserRole.USER


class JwtIdentityProvider:
    """Bearer token verified with python-jose (HS256 secret or RS256 JWKS)."""

    def authenticate(
        self, request: Request, credentials: Optional[HTTPAuthorizationCredentials]
    ) -> Principal:
        if not credentials or not credentials.credentials:
            raise _unauthorized("Not authenticated")
        claims = decode_access_token(credentials.credentials)
        if not claims or not claims.get("sub"):
            raise _unauthorized("Invalid or expired token")
        merchant_id = _claim(claims, "merchant_id")
        return Principal(
            subject=str(claims["sub"]),
            role=role_from_claims(claims),
            merchant_id=merchant_id if isinstance(merchant_id, str) and merchant_id else None,
            email=claims.get("email") if isinstance(claims.get("email"), str) else None,
            name=claims.get("name") if isinstance(claims.get("name"), str) else None,
        )


class DemoIdentityProvider:
    """Header-driven identities for local demos; falls back to Bearer tokens when no demo header is sent."""

    def __init__(self, fallback: Optional[JwtIdentityProvider] = None):
        self.fallback = fallback or JwtIdentityProvider()

    @staticmethod
    def _header(request: Request, name: str) -> Optional[str]:
        v = request.headers.get(name)
        return v.strip() if v and v.strip() else None

    def authenticate(
        self, request: Request, credentials: Optional[HTTPAuthorizationCredentials]
    ) -> Principal:
        raw = (self._header(request, DEMO_ROLE_HEADER) or "").lower()
        if raw not in ("admin", "merchant", "user"):
            return self.fallback.authenticate(request, credentials)

        if raw == "merchant":
            merchant_id = self._header(request, DEMO_MERCHANT_HEADER) or DEFAULT_DEMO_MERCHANT_ID
            return Principal(
                subject=f"demo|merchant|{merchant_id}",
                role=UserRole.MERCHANT,
                merchant_id=merchant_id,
                email=f"{merchant_id}@demo.local",
                name=f"Demo Merchant ({merchant_id})",
                is_demo=True,
            )
        return Principal(
            subject=f"demo|{raw}",
            role=UserRole.ADMIN if raw == "admin" else UserRole.USER,
            email=f"{raw}@demo.local",
            name="Demo Admin" if raw == "admin" else "Demo User",
            is_demo=True,
        )


def get_identity_provider():
    if settings.AUTH_MODE == "demo":
        return DemoIdentityProvider()
    return JwtIdentityProvider()


def get_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    """Authenticate the caller and sync their user row; role is the effective (synced) role."""
    from app.services.user_sync import upsert_user

    principal = get_identity_provider().authenticate(request, credentials)
    user = upsert_user(db, principal)
    return replace(principal, role=user.role, user_id=user.id)


def require_capability(capability: Capability):
    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if not has_capability(principal, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing capability: {capability.value}",
            )
        return principal

    return dependency


def resolve_merchant_id(db: Session, principal: Principal) -> Optional[str]:
    """Merchant scope: explicit claim first, then the caller's MerchantUser link."""
    if principal.merchant_id:
        return principal.merchant_id
    if not principal.user_id:
        return None
    link = db.query(MerchantUser).filter(MerchantUser.user_id == principal.user_id).first()
    return link.merchant_id if link else None


def get_merchant_scope(
    principal: Principal = Depends(require_capability(Capability.VIEW_MERCHANT_ORDERS)),
    db: Session = Depends(get_db),
) -> str:
    merchant_id = resolve_merchant_id(db, principal)
    if not merchant_id:
        raise HTTPException(status_code=403, detail=error_detail("forbidden", "No merchant scope"))
    return merchant_id


def get_active_merchant_scope(
    principal: Principal = Depends(require_capability(Capability.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
) -> str:
    """Merchant scope for catalog writes; non-admin merchants must be ACTIVE."""
    merchant_id = resolve_merchant_id(db, principal)
    if not merchant_id:
        raise HTTPException(status_code=403, detail=error_detail("forbidden", "No merchant scope"))
    if not principal.is_admin:
        merchant = db.query(Merchant).filter(Merchant.id == merchant_id).first()
        if not merchant:
            raise HTTPException(status_code=403, detail=error_detail("forbidden", "Unknown merchant"))
        if not merchant.is_active:
            raise HTTPException(status_code=403, detail=error_detail("forbidden", "Merchant is suspended"))
    return merchant_id
