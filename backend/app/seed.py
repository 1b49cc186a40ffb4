"""
Demo catalogue: merchants, games, SKUs, bindings, users and orders.

Every row has a stable id, so running this repeatedly updates in place.
Run with ``python -m app.seed`` or set SEED_DEMO_DATA=true.
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.game import Game
from app.models.merchant import Merchant, MerchantStatus
from app.models.order import Order, OrderStatus
from app.models.sku import SKU
from app.models.user import User, UserRole
from app.services.catalog import bind_games

logger = logging.getLogger(__name__)

MERCHANTS = [
    ("merchant_demo", "Demo Merchant", "demo@merchant.local"),
    ("merchant_a", "Merchant A", "a@merchant.local"),
    ("merchant_b", "Merchant B", "b@merchant.local"),
    ("merchant_c", "Merchant C", "c@merchant.local"),
    ("merchant_official", "Official Partner", "official@merchant.local"),
]

TOP_ICONS = [
    "icon_1A88CBMaO7G.png", "icon_4T2phVU0T7S.png", "icon_5h84vwM69vk.png", "icon_88HdPTjcd6f.png",
    "icon_9W6yP5U5i8h.png", "icon_AdXR4V33Zvz.png", "icon_aOge3C5IFzK.png", "icon_AXBckJo0syl.png",
    "icon_c6MTU6wJL25.png", "icon_dnVdWTn6UhC.png", "icon_eJtOPSV8wFR.png", "icon_fdlKG0CAJvn.png",
]
TOP_BANNERS = [
    "banner_5VE288BXcEx.png", "banner_67Axck2xpqA.png", "banner_6Brm4qK6aUk.png", "banner_AB2CmeGBt5u.png",
    "banner_aNaxXugjy8M.png", "banner_aoh6OvTh9c8.png", "banner_bGjbn7jsVbk.png", "banner_Bpzo6YG5CEd.png",
    "banner_Bsw7Hdg3ONB.png", "banner_C6mHgn3NaKG.png", "banner_cAYSxGQxs0J.png", "banner_CH1SbTS82zv.png",
]

RANDOM_GAME_COUNT = 10
DEMO_USER_COUNT = 5
DEMO_ORDER_COUNT = 30

# (suffix, zh, ja, en, price, original_price, bonus, limited)
RANDOM_SKU_ROWS = [
    (1, "小额包", "小額パック", "Small Pack", 160, 200, "20%", False),
    (2, "标准包", "標準パック", "Standard Pack", 480, 610, "21%", False),
    (3, "进阶包", "上級パック", "Advanced Pack", 980, 1220, "20%", True),
    (4, "豪华包", "豪華パック", "Deluxe Pack", 2400, 3050, "21%", True),
    (5, "大师包", "マスターパック", "Master Pack", 4900, 6100, "20%", False),
    (6, "至尊包", "アルティメット", "Ultimate Pack", 9800, 12200, "20%", True),
]

# (id, name_ja, name_en, price, original_price, bonus, limited, image)
TRIP_SKUS = [
    ("sku_18t_1", "ダイヤパックA", "Diamond Pack A", 120, 160, "", False, "1_DENldD4Ox16.png"),
    ("sku_18t_2", "ダイヤパックB", "Diamond Pack B", 490, 610, "20%", False, "2_2jXn4wj83Db.png"),
    ("sku_18t_3", "ダイヤパックC", "Diamond Pack C", 1000, 1220, "18%", False, "3_61uuOsgLAWv.png"),
    ("sku_18t_4", "ダイヤパックD", "Diamond Pack D", 1480, 1840, "20%", True, "4_3YOcFKvQAwj.png"),
    ("sku_18t_5", "ダイヤパックE", "Diamond Pack E", 2000, 2440, "18%", False, "5_7q2EH4DWoqI.png"),
    ("sku_18t_6", "ダイヤパックF", "Diamond Pack F", 3000, 3680, "18%", False, "6_0AqW0N1aO5h.png"),
    ("sku_18t_7", "パス", "Pass", 480, 610, "21%", True, "99_Is9DEe2sEip.png"),
    ("sku_18t_8", "特別パック", "Special Pack", 10000, 12200, "18%", True, "100_CiGCr7i04qL.png"),
]


def _pick(i: int, items: list):
    return items[i % len(items)]


def _games() -> list[dict]:
    games = [
        dict(
            id="game_18trip", merchant_id="merchant_official", name_zh="18TRIP", name_ja="18TRIP",
            name_en="18TRIP", developer="LIBER Entertainment", icon_url="/images/games/18trip/1_DENldD4Ox16.png",
            banner_url=f"/images/top/{TOP_BANNERS[0]}", badge="hot", rating=4.9, downloads="1M+",
        ),
        dict(
            id="game_monster_strike", merchant_id="merchant_a", name_zh="怪物弹珠", name_ja="モンスターストライク",
            name_en="Monster Strike", developer="MIXI", icon_url=f"/images/top/{TOP_ICONS[0]}",
            banner_url=f"/images/top/{TOP_BANNERS[1]}", badge="hot", rating=4.8, downloads="50M+",
        ),
        dict(
            id="game_dragon_poker", merchant_id="merchant_b", name_zh="龙扑克", name_ja="ドラゴンポーカー",
            name_en="Dragon Poker", developer="Asobism", icon_url=f"/images/top/{TOP_ICONS[1]}",
            banner_url=f"/images/top/{TOP_BANNERS[2]}", badge="sale", rating=4.5, downloads="10M+",
        ),
    ]
    for i in range(RANDOM_GAME_COUNT):
        games.append(dict(
            id=f"game_random_{i}",
            merchant_id=_pick(i, ["merchant_a", "merchant_b", "merchant_c"]),
            name_zh=f"游戏 {i + 1}",
            name_ja=f"ゲーム {i + 1}",
            name_en=f"Game {i + 1}",
            developer=f"Developer {i + 1}",
            icon_url=f"/images/top/{_pick(i, TOP_ICONS)}",
            banner_url=f"/images/top/{_pick(i, TOP_BANNERS)}",
            badge=_pick(i, ["new", "sale", "hot"]),
            rating=round(4.0 + (i % 10) / 10, 1),
            downloads=f"{(i + 1) * 10}k+",
        ))
    return games


def _bindings(game_ids: list[str]) -> dict[str, list[str]]:
    return {
        "merchant_demo": game_ids,
        "merchant_a": ["game_monster_strike", "game_18trip"] + [f"game_random_{i}" for i in range(6)],
        "merchant_b": ["game_dragon_poker"] + [f"game_random_{i + 3}" for i in range(6)],
        "merchant_c": ["game_18trip", "game_random_1", "game_random_2", "game_random_7", "game_random_9"],
        "merchant_official": ["game_18trip"],
    }


def _skus() -> list[dict]:
    skus = [
        dict(
            id=sid, game_id="game_18trip", name_zh=ja, name_ja=ja, name_en=en, price=price,
            original_price=orig, bonus=bonus, currency="JPY", limited=limited,
            image_url=f"/images/games/18trip/{img}", sort_order=idx + 1,
        )
        for idx, (sid, ja, en, price, orig, bonus, limited, img) in enumerate(TRIP_SKUS)
    ]
    skus += [
        dict(
            id="sku_ms_1", game_id="game_monster_strike", name_zh="超满开包", name_ja="超満開パック",
            name_en="Super Pack", price=10000, original_price=12000, bonus="5倍", currency="JPY",
            limited=True, image_url=f"/images/top/{TOP_BANNERS[0]}", sort_order=1,
        ),
        dict(
            id="sku_ms_2", game_id="game_monster_strike", name_zh="满开包", name_ja="満開パック",
            name_en="Bloom Pack", price=4600, original_price=5000, bonus="7倍", currency="JPY",
            limited=False, image_url=f"/images/top/{TOP_BANNERS[1]}", sort_order=2,
        ),
        dict(
            id="sku_dp_1", game_id="game_dragon_poker", name_zh="龙石720个", name_ja="竜石720個",
            name_en="720 Dragon Stones", price=10000, original_price=12000, bonus="18%", currency="JPY",
            limited=True, image_url=f"/images/top/{TOP_BANNERS[2]}", sort_order=1,
        ),
    ]
    for i in range(RANDOM_GAME_COUNT):
        for idx, (suffix, zh, ja, en, price, orig, bonus, limited) in enumerate(RANDOM_SKU_ROWS):
            skus.append(dict(
                id=f"sku_rnd_{i}_{suffix}", game_id=f"game_random_{i}", name_zh=zh, name_ja=ja, name_en=en,
                price=price, original_price=orig, bonus=bonus, currency="JPY", limited=limited,
                image_url=f"/images/top/{_pick(i + idx, TOP_BANNERS)}", sort_order=idx + 1,
            ))
    return skus


def seed_demo_data(db: Session) -> None:
    for merchant_id, name, email in MERCHANTS:
        db.merge(Merchant(id=merchant_id, name=name, email=email, status=MerchantStatus.ACTIVE))
    db.flush()

    games = _games()
    for g in games:
        db.merge(Game(**g))
    db.flush()

    for merchant_id, game_ids in _bindings([g["id"] for g in games]).items():
        bind_games(db, merchant_id, game_ids)

    skus = _skus()
    for s in skus:
        db.merge(SKU(**s))
    db.flush()

    users = []
    for i in range(1, DEMO_USER_COUNT + 1):
        sub = f"demo|user|{i}"
        user = db.query(User).filter(User.auth_sub == sub).first()
        if user is None:
            user = User(id=f"user_demo_{i}", auth_sub=sub, role=UserRole.USER)
            db.add(user)
        user.email = f"user{i}@demo.local"
        user.name = f"Demo User {i}"
        users.append(user)
    db.flush()

    bindings = _bindings([g["id"] for g in games])
    skus_by_game: dict[str, list[dict]] = {}
    for s in skus:
        skus_by_game.setdefault(s["game_id"], []).append(s)
    merchant_ids = ["merchant_a", "merchant_b", "merchant_c"]
    now = datetime.now(timezone.utc)
    for i in range(1, DEMO_ORDER_COUNT + 1):
        merchant_id = _pick(i, merchant_ids)
        game_id = _pick(i * 3, bindings[merchant_id])
        sku = _pick(i * 7, skus_by_game[game_id])
        user = _pick(i, users)
        created_at = (now - timedelta(days=i % 7)).replace(hour=8 + i % 12, minute=(i * 7) % 60, second=0, microsecond=0)
        db.merge(Order(
            id=f"ord_demo_{i:03d}",
            user_id=user.id,
            merchant_id=merchant_id,
            game_id=game_id,
            sku_id=sku["id"],
            visitor_id=user.auth_sub,
            amount=sku["price"],
            currency=sku["currency"],
            status=OrderStatus.PENDING if i % 5 == 0 else OrderStatus.PAID,
            created_at=created_at,
        ))
    db.commit()
    logger.info(
        "Seeded %d merchants, %d games, %d SKUs, %d users, %d orders",
        len(MERCHANTS), len(games), len(skus), len(users), DEMO_ORDER_COUNT,
    )


if __name__ == "__main__":
    from app.core.database import SessionLocal

    logging.basicConfig(level=logging.INFO)
    session = SessionLocal()
    try:
        seed_demo_data(session)
    finally:
        session.close()
