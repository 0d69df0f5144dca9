from decimal import Decimal
from pathlib import Path

import pytest
from kungfu import Ok, Error

from settle import Session
from settle.cart import PricedItem
from settle.config import Settings
from settle.gateway import PaymentMethod, ScriptedGateway
from settle.checkout import UpiDetails
from settle.persistence import Keys, MemoryStore, SQLAlchemyStore
from tests.helpers import ok, run


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'settle.db'}"


def test_memory_store_absent_key_is_not_an_error() -> None:
    store = MemoryStore()

    assert ok(store.get("missing")) is None
    assert ok(store.remove("missing")) is False


def test_memory_store_copies_values() -> None:
    store = MemoryStore()
    record = {"items": [1, 2]}
    store.set("k", record)

    record["items"].append(3)

    assert ok(store.get("k")) == {"items": [1, 2]}


def test_memory_store_rejects_unserializable_values() -> None:
    store = MemoryStore()

    match store.set("k", {"when": object()}):
        case Error(e):
            assert "not serializable" in e.message
        case Ok(_):
            pytest.fail("value was stored")

    assert ok(store.get("k")) is None


def test_sqlalchemy_round_trip_across_engines(db_url: str) -> None:
    first = SQLAlchemyStore.from_url(db_url)
    ok(first.set_many({Keys.USER_BALANCE: "1600", Keys.CART_ITEMS: [{"item_id": "1"}]}))
    first.dispose()

    second = SQLAlchemyStore.from_url(db_url)

    assert ok(second.get(Keys.USER_BALANCE)) == "1600"
    assert ok(second.get(Keys.CART_ITEMS)) == [{"item_id": "1"}]
    assert ok(second.get(Keys.LAST_ORDER)) is None
    second.dispose()


def test_sqlalchemy_overwrite_and_remove(db_url: str) -> None:
    store = SQLAlchemyStore.from_url(db_url)

    ok(store.set("k", 1))
    ok(store.set("k", 2))
    assert ok(store.get("k")) == 2

    assert ok(store.remove("k")) is True
    assert ok(store.remove("k")) is False
    assert ok(store.get("k")) is None
    store.dispose()


def test_session_survives_restart(db_url: str) -> None:
    settings = Settings().with_storage(db_url).with_gateway(latency_scale=0)
    gateway = ScriptedGateway()
    item = PricedItem("52795", "Chicken Handi", Decimal("249"))

    session = ok(Session.open(settings=settings, gateway=gateway))
    ok(session.cart.add(item, 2))
    ok(run(session.top_up(Decimal("100"), PaymentMethod.UPI, UpiDetails("asha@okbank"))))

    reopened = ok(Session.open(settings=settings, gateway=gateway))

    assert reopened.cart.total() == Decimal("498")
    assert reopened.wallet.balance == Decimal("1600")
    assert reopened.wallet.history[0].description == "Money Added - UPI Payment"
