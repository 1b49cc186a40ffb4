import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

# Refetch JWKS at most once per hour unless a kid is missing
JWKS_CACHE_SECONDS = 3600

_jwks_cache: dict[str, Any] = {"keys": None, "fetched_at": 0.0}


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict] = None,
) -> str:
    """Issue an HS256 token signed with SECRET_KEY (local tooling and tests)."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": subject, "exp": expire}
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    if settings.JWT_ISSUER:
        to_encode["iss"] = settings.JWT_ISSUER
    if extra_claims:
        to_encode.update(extra_claims)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm="HS256")


def _fetch_jwks(force: bool = False) -> dict:
    now = time.time()
    cached = _jwks_cache["keys"]
    if cached is not None and not force and now - _jwks_cache["fetched_at"] < JWKS_CACHE_SECONDS:
        return cached
    with httpx.Client(timeout=10) as client:
        resp = client.get(settings.JWT_JWKS_URL)
        resp.raise_for_status()
        keys = resp.json()
    _jwks_cache["keys"] = keys
    _jwks_cache["fetched_at"] = now
    return keys


def _decode_options() -> dict:
    kwargs: dict[str, Any] = {}
    if settings.JWT_AUDIENCE:
        kwargs["audience"] = settings.JWT_AUDIENCE
    else:
        kwargs["options"] = {"verify_aud": False}
    if settings.JWT_ISSUER:
        kwargs["issuer"] = settings.JWT_ISSUER
    return kwargs


def decode_access_token(token: str) -> Optional[dict]:
    """Verify a bearer token. Returns the claims, or None if invalid or expired."""
    if settings.JWT_JWKS_URL:
        try:
            header = jwt.get_unverified_header(token)
            keys = _fetch_jwks()
            kid = header.get("kid")
            if kid and not any(k.get("kid") == kid for k in keys.get("keys", [])):
                keys = _fetch_jwks(force=True)
            return jwt.decode(token, keys, algorithms=["RS256"], **_decode_options())
        except JWTError:
            return None
        except httpx.HTTPError as e:
            logger.warning("JWKS fetch failed: %s", e)
            return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM], **_decode_options())
    except JWTError:
        return None
