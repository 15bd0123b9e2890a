# basket_store.py
# ============================================================
# BASKET STORE - INTERFACE AND IN-MEMORY BACKEND
# ============================================================
# The basket is a mapping of pizza id -> requested quantity, shared by
# every request of the process (there are no user sessions in this demo).
#
# SECURITY / CORRECTNESS NOTES:
# - The store does NOT check pizza ids against the catalog. Callers must
#   validate ids first (the HTTP layer does).
# - add_item() does NOT validate the sign of the quantity. A negative
#   quantity added to an existing entry can drive it to zero or below.
#   update_quantity() on the other hand treats quantity <= 0 as removal.
#   The asymmetry is kept on purpose and is covered by tests.
# - The in-memory backend guards every operation with a lock, so
#   concurrent requests cannot lose updates on read-modify-write.
# ============================================================
import abc
import logging
import threading
from typing import List, NamedTuple

logger = logging.getLogger(__name__)


class BasketItem(NamedTuple):
    pizza_id: int
    quantity: int

    def to_dict(self):
        return {"pizzaId": self.pizza_id, "quantity": self.quantity}


class Basket(NamedTuple):
    items: List[BasketItem]

    def is_empty(self):
        return not self.items

    def to_dict(self):
        return {"items": [item.to_dict() for item in self.items]}


class BasketStore(abc.ABC):
    """Operations every basket backend must provide."""

    @abc.abstractmethod
    def add_item(self, pizza_id, quantity):
        """Adds quantity to the entry for pizza_id, creating it if needed."""

    @abc.abstractmethod
    def update_quantity(self, pizza_id, quantity) -> bool:
        """
        Sets the quantity of an existing entry.

        Returns False (and changes nothing) when there is no entry for
        pizza_id. A quantity of zero or less removes the entry.
        """

    @abc.abstractmethod
    def remove_item(self, pizza_id) -> bool:
        """Removes the entry; returns whether it was present."""

    @abc.abstractmethod
    def get_basket(self) -> Basket:
        """Snapshot of the current entries."""

    @abc.abstractmethod
    def clear(self):
        """Removes every entry."""

    def take_basket(self) -> Basket:
        """
        Returns the current entries and empties the store.

        Backends that can do this in one critical section override it;
        this fallback is a plain read followed by a clear.
        """
        basket = self.get_basket()
        self.clear()
        return basket


class InMemoryBasketStore(BasketStore):
    name = "memory"

    def __init__(self):
        self._items = {}
        self._lock = threading.Lock()

    def add_item(self, pizza_id, quantity):
        with self._lock:
            self._items[pizza_id] = self._items.get(pizza_id, 0) + quantity
            logger.debug("basket add pizza=%s qty=%s -> %s", pizza_id, quantity, self._items[pizza_id])

    def update_quantity(self, pizza_id, quantity):
        with self._lock:
            if pizza_id not in self._items:
                return False
            if quantity <= 0:
                del self._items[pizza_id]
                logger.debug("basket update pizza=%s qty=%s -> removed", pizza_id, quantity)
            else:
                self._items[pizza_id] = quantity
                logger.debug("basket update pizza=%s -> %s", pizza_id, quantity)
            return True

    def remove_item(self, pizza_id):
        with self._lock:
            removed = self._items.pop(pizza_id, None) is not None
        if removed:
            logger.debug("basket remove pizza=%s", pizza_id)
        return removed

    def get_basket(self):
        with self._lock:
            return Basket([BasketItem(pid, qty) for pid, qty in self._items.items()])

    def clear(self):
        with self._lock:
            self._items.clear()
        logger.debug("basket cleared")

    def take_basket(self):
        with self._lock:
            basket = Basket([BasketItem(pid, qty) for pid, qty in self._items.items()])
            self._items.clear()
        return basket


def create_basket_store(settings):
    """Builds the backend named by settings.backend."""
    if settings.backend == "memory":
        return InMemoryBasketStore()
    if settings.backend == "sqlite":
        from sqlite_basket_store import SqliteBasketStore

        return SqliteBasketStore(settings.db_path, user_id=settings.user_id)
    raise ValueError(f"unknown basket backend: {settings.backend!r}")
