# orders.py
# ============================================================
# ORDER CONFIRMATION
# ============================================================
# Turns a non-empty basket into an order id and empties the basket.
# No order history is kept anywhere; the item list is discarded.
# ============================================================
import logging
import uuid
from typing import NamedTuple

logger = logging.getLogger(__name__)

CONFIRMED_MESSAGE = "Order confirmed successfully"


class OrderError(Exception):
    """Base class for business-rule failures while ordering."""


class EmptyBasketError(OrderError):
    def __init__(self):
        super().__init__("Basket is empty")


class OrderConfirmation(NamedTuple):
    order_id: str
    message: str
    item_count: int

    def to_dict(self):
        return {"orderId": self.order_id, "message": self.message}


def confirm_order(store):
    """
    Confirms the current basket held by store.

    Raises EmptyBasketError, leaving the store untouched, when there is
    nothing to order. The basket is read and emptied in one take_basket()
    call, so an item added by a concurrent request either makes it into
    this order or stays in the basket.
    """
    basket = store.take_basket()
    if basket.is_empty():
        raise EmptyBasketError()

    # uuid4 comes from os.urandom, so order ids are not guessable
    order_id = str(uuid.uuid4())
    logger.info("order %s confirmed with %d line(s)", order_id, len(basket.items))
    return OrderConfirmation(order_id, CONFIRMED_MESSAGE, len(basket.items))
