from app.models import Game, Merchant, MerchantGame, Order, SKU, User
from app.seed import seed_demo_data
from app.services.order_resolution import resolve_order_merchant


def test_seed_is_idempotent(db):
    seed_demo_data(db)
    seed_demo_data(db)
    assert db.query(Merchant).count() == 5
    assert db.query(Game).count() == 13
    assert db.query(SKU).count() == 71
    assert db.query(MerchantGame).count() == 34
    assert db.query(User).count() == 5
    assert db.query(Order).count() == 30


def test_seeded_game_resolves_to_a_bound_merchant(db):
    seed_demo_data(db)
    sku = db.query(SKU).filter(SKU.id == "sku_18t_1").one()
    merchant = resolve_order_merchant(db, sku)
    assert merchant.id in {"merchant_demo", "merchant_a", "merchant_c", "merchant_official"}
