from app.models import (
    Merchant,
    MerchantApplication,
    MerchantGame,
    MerchantUser,
    OrderStatus,
    User,
    UserRole,
)
from conftest import demo_headers

ADMIN = demo_headers("admin")

APPLICATION = {
    "companyName": "Acme Games",
    "contactName": "Kim",
    "contactEmail": "kim@acme.example",
    "description": "We resell top-up codes in Japan.",
}


class TestMerchants:
    def test_create_with_bindings(self, client, db, catalog):
        resp = client.post(
            "/api/admin/merchants",
            json={"name": "New Shop", "email": "shop@example.com", "gameIds": ["g1", "g1"]},
            headers=ADMIN,
        )
        assert resp.status_code == 201
        merchant_id = resp.json()["id"]
        assert resp.json()["status"] == "ACTIVE"
        links = db.query(MerchantGame).filter(MerchantGame.merchant_id == merchant_id).all()
        assert [link.game_id for link in links] == ["g1"]

    def test_create_with_unknown_game(self, client, db, catalog):
        resp = client.post("/api/admin/merchants", json={"name": "X", "gameIds": ["nope"]}, headers=ADMIN)
        assert resp.status_code == 404
        assert db.query(Merchant).filter(Merchant.name == "X").count() == 0

    def test_invalid_email_rejected(self, client):
        resp = client.post("/api/admin/merchants", json={"name": "X", "email": "not-an-email"}, headers=ADMIN)
        assert resp.status_code == 422

    def test_list_with_totals(self, client, factory, catalog):
        buyer = factory.user("buyer|1")
        factory.order(buyer, catalog, "m_a", status=OrderStatus.PAID)
        factory.order(buyer, catalog, "m_a")
        resp = client.get("/api/admin/merchants", headers=ADMIN)
        assert resp.status_code == 200
        by_id = {m["id"]: m for m in resp.json()["merchants"]}
        assert by_id["m_a"]["totalOrders"] == 2
        assert by_id["m_a"]["paidOrders"] == 1
        assert by_id["m_a"]["totalRevenue"] == 500
        assert by_id["m_a"]["gameIds"] == ["g1"]
        assert by_id["m_owner"]["gamesCount"] == 0

    def test_suspension_changes_default_resolution(self, client, catalog):
        resp = client.put("/api/admin/merchants/m_a", json={"status": "SUSPENDED"}, headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["status"] == "SUSPENDED"

        order = client.post("/api/orders", json={"skuId": "sku_1"}, headers=demo_headers()).json()
        assert order["merchantId"] == "m_b"

        merchants = client.get("/api/games/g1/merchants").json()["merchants"]
        assert [m["id"] for m in merchants] == ["m_b"]

    def test_update_unknown_merchant(self, client, db):
        resp = client.put("/api/admin/merchants/nope", json={"name": "Y"}, headers=ADMIN)
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    def test_replace_bindings(self, client, db, factory, catalog):
        factory.game("g2", "m_owner")
        resp = client.put("/api/admin/merchants/m_a/games", json={"gameIds": ["g2"]}, headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "merchantId": "m_a", "gameIds": ["g2"]}
        links = db.query(MerchantGame).filter(MerchantGame.merchant_id == "m_a").all()
        assert [link.game_id for link in links] == ["g2"]


class TestApplications:
    def _apply(self, client):
        return client.post("/api/merchant/apply", json=APPLICATION, headers=demo_headers())

    def test_apply_and_duplicate(self, client):
        resp = self._apply(client)
        assert resp.status_code == 201
        assert resp.json()["status"] == "PENDING"

        resp = self._apply(client)
        assert resp.status_code == 400
        assert resp.json()["error"] == "duplicate"

    def test_short_description_rejected(self, client, db):
        resp = client.post(
            "/api/merchant/apply",
            json={**APPLICATION, "description": "too short"},
            headers=demo_headers(),
        )
        assert resp.status_code == 422
        assert db.query(MerchantApplication).count() == 0

    def test_status_lists_own_applications(self, client):
        self._apply(client)
        resp = client.get("/api/merchant/apply/status", headers=demo_headers())
        assert resp.status_code == 200
        assert [a["companyName"] for a in resp.json()["applications"]] == ["Acme Games"]

    def test_approve_promotes_user(self, client, db):
        application_id = self._apply(client).json()["id"]

        resp = client.post(
            f"/api/admin/merchant-applications/{application_id}/approve",
            json={"reviewNote": "welcome"},
            headers=ADMIN,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["application"]["status"] == "APPROVED"
        assert body["application"]["reviewNote"] == "welcome"
        assert body["merchant"]["name"] == "Acme Games"
        assert body["merchant"]["email"] == "kim@acme.example"

        user = db.query(User).filter(User.auth_sub == "demo|user").one()
        assert user.role == UserRole.MERCHANT
        link = db.query(MerchantUser).filter(MerchantUser.user_id == user.id).one()
        assert link.merchant_id == body["merchant"]["id"]

        # The promoted role sticks and the merchant link provides the scope
        resp = client.get("/api/merchant/me/orders", headers=demo_headers())
        assert resp.status_code == 200
        assert resp.json()["merchantId"] == body["merchant"]["id"]

        resp = self._apply(client)
        assert resp.status_code == 400
        assert resp.json()["error"] == "already_merchant"

    def test_approval_keeps_admin_role(self, client, db, factory):
        factory.user("demo|user", role=UserRole.ADMIN)
        application_id = self._apply(client).json()["id"]
        resp = client.post(f"/api/admin/merchant-applications/{application_id}/approve", headers=ADMIN)
        assert resp.status_code == 200
        db.expire_all()
        user = db.query(User).filter(User.auth_sub == "demo|user").one()
        assert user.role == UserRole.ADMIN
        assert db.query(MerchantUser).filter(MerchantUser.user_id == user.id).count() == 1

    def test_reject_defaults_note(self, client, db):
        application_id = self._apply(client).json()["id"]
        resp = client.post(f"/api/admin/merchant-applications/{application_id}/reject", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["status"] == "REJECTED"
        assert resp.json()["reviewNote"] == "Application rejected"
        assert db.query(Merchant).count() == 0

    def test_only_pending_can_be_reviewed(self, client):
        application_id = self._apply(client).json()["id"]
        client.post(f"/api/admin/merchant-applications/{application_id}/reject", headers=ADMIN)
        resp = client.post(f"/api/admin/merchant-applications/{application_id}/approve", headers=ADMIN)
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_status"

    def test_list_filters_by_status(self, client):
        self._apply(client)
        resp = client.get("/api/admin/merchant-applications", params={"status": "PENDING"}, headers=ADMIN)
        assert resp.status_code == 200
        applications = resp.json()["applications"]
        assert len(applications) == 1
        assert applications[0]["user"]["email"] == "user@demo.local"

        resp = client.get("/api/admin/merchant-applications", params={"status": "APPROVED"}, headers=ADMIN)
        assert resp.json()["applications"] == []

    def test_users_cannot_review(self, client):
        application_id = self._apply(client).json()["id"]
        resp = client.post(f"/api/admin/merchant-applications/{application_id}/approve", headers=demo_headers())
        assert resp.status_code == 403


class TestUsers:
    def test_list_with_counts(self, client, factory, catalog):
        buyer = factory.user("buyer|1")
        factory.order(buyer, catalog, "m_a")
        resp = client.get("/api/admin/users", headers=ADMIN)
        assert resp.status_code == 200
        by_sub = {u["authSub"]: u for u in resp.json()["users"]}
        assert by_sub["buyer|1"]["ordersCount"] == 1
        assert by_sub["demo|admin"]["role"] == "ADMIN"

    def test_detail(self, client, factory, catalog):
        buyer = factory.user("buyer|1")
        factory.order(buyer, catalog, "m_a")
        resp = client.get(f"/api/admin/users/{buyer.id}", headers=ADMIN)
        assert resp.status_code == 200
        assert len(resp.json()["orders"]) == 1
        assert resp.json()["merchants"] == []

    def test_update_role(self, client, db, factory):
        buyer = factory.user("buyer|1")
        resp = client.put(f"/api/admin/users/{buyer.id}/role", json={"role": "MERCHANT"}, headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["role"] == "MERCHANT"

        resp = client.put(f"/api/admin/users/{buyer.id}/role", json={"role": "OWNER"}, headers=ADMIN)
        assert resp.status_code == 422

    def test_delete_user(self, client, db, factory):
        buyer = factory.user("buyer|1")
        resp = client.delete(f"/api/admin/users/{buyer.id}", headers=ADMIN)
        assert resp.status_code == 204
        assert db.query(User).filter(User.auth_sub == "buyer|1").count() == 0

    def test_cannot_delete_self(self, client):
        me = client.get("/api/me", headers=ADMIN).json()
        resp = client.delete(f"/api/admin/users/{me['id']}", headers=ADMIN)
        assert resp.status_code == 400
        assert resp.json()["error"] == "cannot_delete_self"
