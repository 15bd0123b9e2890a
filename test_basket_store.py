import threading

import pytest

from basket_store import Basket, BasketItem, InMemoryBasketStore, create_basket_store
from settings import Settings
from sqlite_basket_store import SqliteBasketStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryBasketStore()
    return SqliteBasketStore(tmp_path / "basket.db")


def as_dict(basket):
    return {item.pizza_id: item.quantity for item in basket.items}


def test_new_store_is_empty(store):
    assert store.get_basket().items == []
    assert store.get_basket().is_empty()


def test_add_then_read_single_item(store):
    store.add_item(1, 2)
    assert store.get_basket().items == [BasketItem(1, 2)]


def test_add_same_pizza_accumulates(store):
    store.add_item(2, 1)
    store.add_item(2, 1)
    assert as_dict(store.get_basket()) == {2: 2}


@pytest.mark.parametrize("quantities", [[1], [3, 4], [1, 1, 1, 1, 1], [10, 2, 7]])
def test_add_quantity_is_sum_of_adds(store, quantities):
    for q in quantities:
        store.add_item(5, q)
    assert as_dict(store.get_basket()) == {5: sum(quantities)}


def test_add_does_not_validate_sign(store):
    # Known gap: a negative add can leave a non-positive entry behind.
    store.add_item(1, 2)
    store.add_item(1, -2)
    assert as_dict(store.get_basket()) == {1: 0}


def test_update_replaces_quantity(store):
    store.add_item(3, 1)
    assert store.update_quantity(3, 7) is True
    assert as_dict(store.get_basket()) == {3: 7}


@pytest.mark.parametrize("quantity", [0, -1, -50])
def test_update_non_positive_equals_remove(store, quantity):
    store.add_item(1, 2)
    store.add_item(4, 1)
    assert store.update_quantity(1, quantity) is True
    assert as_dict(store.get_basket()) == {4: 1}


def test_update_absent_fails_without_mutation(store):
    store.add_item(1, 2)
    before = as_dict(store.get_basket())
    assert store.update_quantity(6, 3) is False
    assert store.update_quantity(6, 0) is False
    assert as_dict(store.get_basket()) == before


def test_remove_is_idempotent(store):
    store.add_item(1, 1)
    assert store.remove_item(1) is True
    assert store.remove_item(1) is False
    assert store.get_basket().items == []


def test_clear_empties_basket(store):
    store.add_item(1, 1)
    store.add_item(2, 3)
    store.clear()
    assert store.get_basket().items == []
    store.clear()
    assert store.get_basket().items == []


def test_basket_snapshot_is_detached(store):
    store.add_item(1, 1)
    snapshot = store.get_basket()
    store.add_item(2, 1)
    assert as_dict(snapshot) == {1: 1}


def test_basket_to_dict_uses_wire_names():
    basket = Basket([BasketItem(1, 2)])
    assert basket.to_dict() == {"items": [{"pizzaId": 1, "quantity": 2}]}


def test_concurrent_adds_do_not_lose_updates():
    store = InMemoryBasketStore()

    def worker():
        for _ in range(500):
            store.add_item(1, 1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert as_dict(store.get_basket()) == {1: 4000}


def test_sqlite_baskets_are_scoped_per_user(tmp_path):
    db = tmp_path / "shared.db"
    first = SqliteBasketStore(db, user_id=1)
    second = SqliteBasketStore(db, user_id=2)

    first.add_item(1, 1)
    second.add_item(2, 5)
    first.clear()

    assert first.get_basket().items == []
    assert as_dict(second.get_basket()) == {2: 5}


def test_sqlite_treats_hostile_ids_as_data(tmp_path):
    store = SqliteBasketStore(tmp_path / "basket.db")
    store.add_item(1, 1)
    # Bound as a parameter, this matches nothing instead of every row.
    assert store.remove_item("1 OR 1=1") is False
    assert as_dict(store.get_basket()) == {1: 1}


def test_sqlite_contents_survive_new_instance(tmp_path):
    db = tmp_path / "basket.db"
    SqliteBasketStore(db).add_item(3, 2)
    assert as_dict(SqliteBasketStore(db).get_basket()) == {3: 2}


def test_factory_selects_backend(tmp_path):
    assert isinstance(create_basket_store(Settings(backend="memory")), InMemoryBasketStore)
    sqlite_store = create_basket_store(Settings(backend="sqlite", db_path=str(tmp_path / "b.db"), user_id=7))
    assert isinstance(sqlite_store, SqliteBasketStore)
    assert sqlite_store.user_id == 7


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_basket_store(Settings(backend="redis"))


@pytest.mark.parametrize("pizza_id", [2 ** 63, 10 ** 20, -(2 ** 63) - 1])
def test_ids_beyond_int64_are_absent(store, pizza_id):
    store.add_item(1, 1)
    assert store.remove_item(pizza_id) is False
    assert store.update_quantity(pizza_id, 3) is False
    assert store.update_quantity(pizza_id, 0) is False
    assert as_dict(store.get_basket()) == {1: 1}


def test_take_basket_returns_items_and_empties(store):
    store.add_item(1, 2)
    store.add_item(4, 1)
    taken = store.take_basket()
    assert as_dict(taken) == {1: 2, 4: 1}
    assert store.get_basket().items == []
    assert store.take_basket().items == []


def test_take_basket_under_concurrent_adds_loses_nothing():
    store = InMemoryBasketStore()
    taken = []
    done = threading.Event()

    def adder():
        for _ in range(2000):
            store.add_item(1, 1)
        done.set()

    def taker():
        while not done.is_set():
            taken.append(store.take_basket())
        taken.append(store.take_basket())

    threads = [threading.Thread(target=adder), threading.Thread(target=taker)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = sum(item.quantity for basket in taken for item in basket.items)
    assert total == 2000
