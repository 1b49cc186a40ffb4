import pytest
from pydantic import ValidationError

from app.core.auth import (
    Capability,
    Principal,
    has_capability,
    role_from_claims,
)
from app.core.config import Settings, settings
from app.core.security import create_access_token, decode_access_token
from app.models import User, UserRole
from app.services.user_sync import create_user, effective_role
from conftest import demo_headers


@pytest.mark.parametrize(
    "role,capability,allowed",
    [
        (UserRole.USER, Capability.PURCHASE, True),
        (UserRole.USER, Capability.APPLY_FOR_MERCHANT, True),
        (UserRole.USER, Capability.MANAGE_CATALOG, False),
        (UserRole.USER, Capability.ADMINISTER, False),
        (UserRole.MERCHANT, Capability.MANAGE_CATALOG, True),
        (UserRole.MERCHANT, Capability.VIEW_MERCHANT_ORDERS, True),
        (UserRole.MERCHANT, Capability.ADMINISTER, False),
        (UserRole.ADMIN, Capability.ADMINISTER, True),
        (UserRole.ADMIN, Capability.MANAGE_CATALOG, True),
    ],
)
def test_role_capabilities(role, capability, allowed):
    assert has_capability(Principal(subject="s", role=role), capability) is allowed


def test_role_from_permissions():
    assert role_from_claims({"permissions": ["admin:all"]}) == UserRole.ADMIN
    assert role_from_claims({"permissions": "read merchant:all"}) == UserRole.MERCHANT
    assert role_from_claims({"role": "merchant"}) == UserRole.MERCHANT
    assert role_from_claims({"role": "superuser"}) == UserRole.USER
    assert role_from_claims({}) == UserRole.USER


def test_role_from_namespaced_claims(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_CLAIMS_NAMESPACE", "https://example.com/")
    assert role_from_claims({"https://example.com/role": "ADMIN"}) == UserRole.ADMIN


def test_effective_role_never_demotes():
    assert effective_role(UserRole.MERCHANT, UserRole.USER) == UserRole.MERCHANT
    assert effective_role(UserRole.USER, UserRole.ADMIN) == UserRole.ADMIN


def test_demo_mode_refused_in_production():
    with pytest.raises(ValidationError):
        Settings(APP_ENV="production", AUTH_MODE="demo")


def test_unknown_auth_mode_refused():
    with pytest.raises(ValidationError):
        Settings(AUTH_MODE="none")


def test_token_round_trip():
    token = create_access_token("auth0|abc", extra_claims={"email": "a@example.com"})
    claims = decode_access_token(token)
    assert claims["sub"] == "auth0|abc"
    assert claims["email"] == "a@example.com"
    assert decode_access_token(token + "x") is None


def test_demo_headers_create_user(client, db):
    resp = client.get("/api/me", headers=demo_headers("admin"))
    assert resp.status_code == 200
    assert resp.json()["role"] == "ADMIN"
    user = db.query(User).filter(User.auth_sub == "demo|admin").one()
    assert user.email == "admin@demo.local"


def test_bearer_token_in_jwt_mode(client, monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "jwt")
    token = create_access_token("auth0|merchant", extra_claims={"permissions": ["merchant:all"], "name": "Shop"})
    resp = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["role"] == "MERCHANT"
    assert resp.json()["name"] == "Shop"


def test_demo_headers_ignored_in_jwt_mode(client, monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "jwt")
    resp = client.get("/api/me", headers=demo_headers("admin"))
    assert resp.status_code == 401
    assert resp.json()["error"] == "unauthorized"


def test_invalid_token(client):
    resp = client.get("/api/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_user_cannot_reach_admin_routes(client):
    resp = client.get("/api/admin/users", headers=demo_headers("user"))
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"


def test_create_user_returns_row_inserted_concurrently(db, factory):
    existing = factory.user("auth0|race")
    principal = Principal(subject="auth0|race", role=UserRole.USER, email="race@example.com")
    user = create_user(db, principal)
    assert user.id == existing.id
    assert db.query(User).filter(User.auth_sub == "auth0|race").count() == 1
