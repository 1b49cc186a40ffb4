import pytest

from app.models import Game, MerchantGame, MerchantStatus, Order, OrderStatus, SKU
from conftest import at, demo_headers

NEW_GAME = {
    "nameZh": "新游戏",
    "nameJa": "新しいゲーム",
    "nameEn": "New Game",
    "developer": "Studio",
    "iconUrl": "/icon.png",
    "bannerUrl": "/banner.png",
    "badge": "new",
}


def _sku_body(game_id, **overrides):
    body = {
        "gameId": game_id,
        "nameZh": "包",
        "nameJa": "パック",
        "nameEn": "Pack",
        "price": 300,
        "originalPrice": 400,
        "bonus": "10%",
        "currency": "JPY",
    }
    body.update(overrides)
    return body


@pytest.fixture
def shop(factory, catalog):
    """m_a as a signed-in merchant, with one paid and one pending order."""
    buyer = factory.user("buyer|1")
    factory.order(buyer, catalog, "m_a", status=OrderStatus.PAID)
    factory.order(buyer, catalog, "m_a")
    factory.order(buyer, catalog, "m_b", status=OrderStatus.PAID)
    return demo_headers("merchant", "m_a")


def test_orders_are_scoped_to_merchant(client, shop):
    resp = client.get("/api/merchant/me/orders", headers=shop)
    assert resp.status_code == 200
    body = resp.json()
    assert body["merchantId"] == "m_a"
    assert len(body["orders"]) == 2
    assert {o["merchantId"] for o in body["orders"]} == {"m_a"}
    assert body["orders"][0]["user"]["id"]


def test_stats(client, shop):
    resp = client.get("/api/merchant/me/stats", headers=shop)
    assert resp.status_code == 200
    body = resp.json()
    assert body["totalOrders"] == 2
    assert body["paidOrders"] == 1
    assert body["totalRevenue"] == 500
    assert body["todayOrders"] == 2
    assert body["todayRevenue"] == 500


def test_old_orders_are_not_counted_today(client, factory, catalog):
    buyer = factory.user("buyer|1")
    factory.order(buyer, catalog, "m_a", status=OrderStatus.PAID, created_at=at(1))
    body = client.get("/api/merchant/me/stats", headers=demo_headers("merchant", "m_a")).json()
    assert body["totalOrders"] == 1
    assert body["todayOrders"] == 0
    assert body["todayRevenue"] == 0


def test_plain_user_has_no_merchant_access(client, catalog):
    resp = client.get("/api/merchant/me/orders", headers=demo_headers("user"))
    assert resp.status_code == 403


def test_merchant_games_lists_bound_and_owned(client, factory, catalog):
    factory.game("g_own", "m_a")
    resp = client.get("/api/merchant/me/games", headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 200
    assert {g["id"] for g in resp.json()["games"]} == {"g1", "g_own"}


def test_create_game_binds_owner(client, db, catalog):
    resp = client.post("/api/merchant/me/games", json=NEW_GAME, headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 201
    body = resp.json()
    assert body["merchantId"] == "m_a"
    assert body["rating"] == 4.5
    assert body["downloads"] == "0"
    link = db.query(MerchantGame).filter(MerchantGame.game_id == body["id"]).one()
    assert link.merchant_id == "m_a"
    assert link.is_active


def test_suspended_merchant_cannot_edit_catalog(client, factory):
    factory.merchant("m_s", status=MerchantStatus.SUSPENDED)
    resp = client.post("/api/merchant/me/games", json=NEW_GAME, headers=demo_headers("merchant", "m_s"))
    assert resp.status_code == 403
    assert resp.json()["message"] == "Merchant is suspended"


def test_unknown_merchant_cannot_edit_catalog(client, db):
    resp = client.post("/api/merchant/me/games", json=NEW_GAME, headers=demo_headers("merchant", "ghost"))
    assert resp.status_code == 403


def test_update_game_requires_binding(client, catalog):
    headers = demo_headers("merchant", "m_owner")
    resp = client.put("/api/merchant/me/games/g1", json={"badge": "hot"}, headers=headers)
    assert resp.status_code == 403

    resp = client.put("/api/merchant/me/games/g1", json={"badge": "hot"}, headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 200
    assert resp.json()["badge"] == "hot"
    assert resp.json()["merchantId"] == "m_owner"


def test_non_owner_delete_only_unbinds(client, db, catalog):
    resp = client.delete("/api/merchant/me/games/g1", headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 204
    assert db.query(Game).filter(Game.id == "g1").count() == 1
    assert db.query(MerchantGame).filter(MerchantGame.merchant_id == "m_a").count() == 0


def test_owner_delete_removes_game(client, db, factory):
    factory.merchant("m_a")
    factory.game("g_own", "m_a")
    factory.sku("s_own", "g_own")
    factory.bind("m_a", "g_own")
    resp = client.delete("/api/merchant/me/games/g_own", headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 204
    assert db.query(Game).filter(Game.id == "g_own").count() == 0
    assert db.query(SKU).filter(SKU.id == "s_own").count() == 0


def test_create_sku_appends_sort_order(client, catalog):
    resp = client.post("/api/merchant/me/skus", json=_sku_body("g1"), headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 201
    assert resp.json()["sortOrder"] == 2
    assert resp.json()["limited"] is False


def test_create_sku_requires_binding(client, catalog):
    resp = client.post("/api/merchant/me/skus", json=_sku_body("g1"), headers=demo_headers("merchant", "m_owner"))
    assert resp.status_code == 403


def test_moving_sku_requires_target_access(client, factory, catalog):
    factory.game("g2", "m_owner")
    headers = demo_headers("merchant", "m_a")
    resp = client.put("/api/merchant/me/skus/sku_1", json={"gameId": "g2"}, headers=headers)
    assert resp.status_code == 403

    factory.bind("m_a", "g2")
    resp = client.put("/api/merchant/me/skus/sku_1", json={"gameId": "g2", "price": 450}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["gameId"] == "g2"
    assert resp.json()["price"] == 450


def test_delete_sku(client, db, catalog):
    resp = client.delete("/api/merchant/me/skus/sku_1", headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 204
    assert db.query(SKU).count() == 0


def test_sku_with_orders_cannot_be_deleted(client, db, factory, catalog):
    buyer = factory.user("buyer|1")
    factory.order(buyer, catalog, "m_a", status=OrderStatus.PAID)
    resp = client.delete("/api/merchant/me/skus/sku_1", headers=demo_headers("merchant", "m_b"))
    assert resp.status_code == 409
    assert resp.json()["error"] == "conflict"
    assert db.query(SKU).filter(SKU.id == "sku_1").count() == 1
    assert db.query(Order).filter(Order.merchant_id == "m_a", Order.status == OrderStatus.PAID).count() == 1


def test_owned_game_with_orders_cannot_be_deleted(client, db, factory):
    factory.merchant("m_a")
    factory.game("g_own", "m_a")
    sku = factory.sku("s_own", "g_own")
    factory.bind("m_a", "g_own")
    factory.order(factory.user("buyer|1"), sku, "m_a", status=OrderStatus.PAID)
    resp = client.delete("/api/merchant/me/games/g_own", headers=demo_headers("merchant", "m_a"))
    assert resp.status_code == 409
    assert db.query(Game).filter(Game.id == "g_own").count() == 1
    assert db.query(Order).count() == 1
