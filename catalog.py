# catalog.py
# ============================================================
# PIZZA CATALOG
# ============================================================
# The fixed, read-only menu. Built once at import time and never mutated,
# so it needs no locking and can be shared by every request.
# ============================================================
from typing import NamedTuple, Optional, Tuple


class Pizza(NamedTuple):
    id: int
    name: str
    description: str
    ingredients: Tuple[str, ...] = ()

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "ingredients": list(self.ingredients),
        }


PIZZAS = (
    Pizza(
        1,
        "Margherita",
        "Classic pizza with tomato sauce, mozzarella, and basil",
        ("Tomato Sauce", "Mozzarella", "Basil", "Olive Oil"),
    ),
    Pizza(
        2,
        "Pepperoni",
        "Spicy pepperoni with mozzarella and tomato sauce",
        ("Tomato Sauce", "Mozzarella", "Pepperoni"),
    ),
    Pizza(
        3,
        "Quattro Formaggi",
        "Four cheese pizza with mozzarella, gorgonzola, parmesan, and fontina",
        ("Mozzarella", "Gorgonzola", "Parmesan", "Fontina"),
    ),
    Pizza(
        4,
        "Vegetariana",
        "Vegetarian pizza with grilled vegetables",
        ("Tomato Sauce", "Mozzarella", "Bell Peppers", "Zucchini", "Eggplant", "Mushrooms"),
    ),
    Pizza(
        5,
        "Diavola",
        "Spicy salami pizza with hot peppers",
        ("Tomato Sauce", "Mozzarella", "Spicy Salami", "Hot Peppers"),
    ),
    Pizza(
        6,
        "Prosciutto e Funghi",
        "Ham and mushroom pizza",
        ("Tomato Sauce", "Mozzarella", "Ham", "Mushrooms"),
    ),
)


class Catalog:
    """Read-only lookup over a fixed sequence of pizzas."""

    def __init__(self, pizzas=PIZZAS):
        self._pizzas = tuple(pizzas)
        for p in self._pizzas:
            if not (isinstance(p.id, int) and not isinstance(p.id, bool) and p.id > 0):
                raise ValueError(f"pizza id must be a positive integer, got {p.id!r}")
            if not p.name or not p.name.strip():
                raise ValueError(f"pizza {p.id} must have a name")
        self._by_id = {p.id: p for p in self._pizzas}
        if len(self._by_id) != len(self._pizzas):
            raise ValueError("pizza ids must be unique")

    def list_all(self):
        return list(self._pizzas)

    def find_by_id(self, pizza_id) -> Optional[Pizza]:
        return self._by_id.get(pizza_id)

    def exists(self, pizza_id) -> bool:
        return pizza_id in self._by_id
