# sqlite_basket_store.py
# ============================================================
# BASKET STORE - SQLITE BACKEND
# ============================================================
# Persists the basket in a sqlite table.
#
# SQL INJECTION PREVENTION:
# - Every statement uses ? placeholders; values are bound by the driver
#   and are never formatted into the SQL text.
# - The SQL strings below are constants. Do not build them with f-strings,
#   % formatting or concatenation, even for "trusted" integer ids.
#
# Rows are scoped to a fixed user_id. There is no authentication in this
# demo, so every client shares that one basket.
# ============================================================
import logging
import sqlite3

from basket_store import Basket, BasketItem, BasketStore

logger = logging.getLogger(__name__)

SCHEMA = (
    "CREATE TABLE IF NOT EXISTS basket_items ("
    " user_id INTEGER NOT NULL,"
    " pizza_id INTEGER NOT NULL,"
    " quantity INTEGER NOT NULL,"
    " PRIMARY KEY (user_id, pizza_id))"
)

# Single statement, so concurrent adds accumulate without a read-modify-write race.
ADD_SQL = (
    "INSERT INTO basket_items (user_id, pizza_id, quantity) VALUES (?, ?, ?) "
    "ON CONFLICT (user_id, pizza_id) DO UPDATE SET quantity = quantity + excluded.quantity"
)
UPDATE_SQL = "UPDATE basket_items SET quantity = ? WHERE user_id = ? AND pizza_id = ?"
DELETE_SQL = "DELETE FROM basket_items WHERE user_id = ? AND pizza_id = ?"
SELECT_SQL = "SELECT pizza_id, quantity FROM basket_items WHERE user_id = ? ORDER BY pizza_id"
CLEAR_SQL = "DELETE FROM basket_items WHERE user_id = ?"

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _out_of_range(value):
    # Such an id cannot be bound as an INTEGER, so it cannot be stored either
    return isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX


class SqliteBasketStore(BasketStore):
    name = "sqlite"

    def __init__(self, db_path, user_id=1):
        self.db_path = str(db_path)
        self.user_id = user_id
        conn = self._connect()
        try:
            conn.execute(SCHEMA)
            conn.commit()
        finally:
            conn.close()
        logger.info("sqlite basket store ready at %s (user_id=%s)", self.db_path, self.user_id)

    def _connect(self):
        return sqlite3.connect(self.db_path, timeout=5)

    def _write(self, sql, params):
        conn = self._connect()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    def add_item(self, pizza_id, quantity):
        self._write(ADD_SQL, (self.user_id, pizza_id, quantity))
        logger.debug("basket add pizza=%s qty=%s", pizza_id, quantity)

    def update_quantity(self, pizza_id, quantity):
        if _out_of_range(pizza_id):
            return False
        if quantity <= 0:
            return self.remove_item(pizza_id)
        return self._write(UPDATE_SQL, (quantity, self.user_id, pizza_id)) > 0

    def remove_item(self, pizza_id):
        if _out_of_range(pizza_id):
            return False
        return self._write(DELETE_SQL, (self.user_id, pizza_id)) > 0

    def get_basket(self):
        conn = self._connect()
        try:
            rows = conn.execute(SELECT_SQL, (self.user_id,)).fetchall()
        finally:
            conn.close()
        return Basket([BasketItem(pid, qty) for pid, qty in rows])

    def clear(self):
        self._write(CLEAR_SQL, (self.user_id,))
        logger.debug("basket cleared")

    def take_basket(self):
        # BEGIN IMMEDIATE takes the write lock before the read, so no add
        # can land between the SELECT and the DELETE.
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            rows = conn.execute(SELECT_SQL, (self.user_id,)).fetchall()
            conn.execute(CLEAR_SQL, (self.user_id,))
            conn.commit()
        finally:
            conn.close()
        return Basket([BasketItem(pid, qty) for pid, qty in rows])
