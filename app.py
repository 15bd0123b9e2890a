# app.py
# ============================================================
# PIZZA BASKET API - FLASK APPLICATION
# ============================================================
# A small ordering API used to demonstrate secure SDLC practices:
# a read-only pizza catalog, one shared basket, and order confirmation.
#
# SECURITY CONTROLS SHOWN HERE:
# ✅ Input validation (JSON object bodies, strict integer types)
# ✅ Parameterized SQL for the sqlite backend (see sqlite_basket_store.py)
# ✅ Locking around shared in-memory state (see basket_store.py)
# ✅ Security response headers and explicit CORS policy
# ✅ Generic error responses; details are logged server-side only
# ✅ Configuration from environment, never hardcoded
#
# KNOWN, DOCUMENTED RISK:
# ⚠️ POST /basket/items does not reject zero or negative quantities.
#    This mirrors the store contract on purpose (see basket_store.py).
#
# SETUP:
#   pip install -e .
#   export BASKET_BACKEND=sqlite        # optional, default is memory
#   python app.py
#
# ACCESS: http://127.0.0.1:5200/
# ============================================================
import logging

from flask import Blueprint, Flask, current_app, jsonify, request

from basket_store import create_basket_store
from catalog import Catalog
from orders import EmptyBasketError, confirm_order
from settings import load_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

api = Blueprint("pizza_api", __name__)

# ============================================================
# UTILITY FUNCTIONS FOR API RESPONSES
# ============================================================


def ok(data=None, status=200):
    """
    Return the resource itself as JSON, with no envelope.

    Success bodies stay bare because the frontend reads /pizzas as a list
    and /basket as {"items": [...]}. Only errors carry the
    {"ok": false, "error": code} envelope, so clients can tell them apart
    by status code alone.
    """
    return (jsonify(data), status)


def err(msg="error", status=400):
    """Return error JSON response with consistent format."""
    return (jsonify({"ok": False, "error": msg}), status)


def _store():
    return current_app.extensions["basket_store"]


def _catalog():
    return current_app.extensions["catalog"]


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _fits_int64(value):
    # SQLite INTEGER is 64-bit; larger Python ints raise OverflowError on bind
    return INT64_MIN <= value <= INT64_MAX


def _is_int(value):
    # bool is a subclass of int; "quantity": true must not count as 1
    return isinstance(value, int) and not isinstance(value, bool) and _fits_int64(value)


def _json_body():
    """
    Returns the request body as a dict, or None when it is not a JSON object.

    silent=True keeps malformed JSON from raising a 400 HTML page;
    the caller answers with a JSON error instead.
    """
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


# ============================================================
# API INDEX AND HEALTH
# ============================================================


@api.get("/")
def index():
    """Lists the available endpoints."""
    return ok({
        "message": "Pizza Basket API - Secure SDLC demonstration",
        "endpoints": [
            "List pizzas -> /pizzas (GET)",
            "Get pizza -> /pizzas/<id> (GET)",
            "Add to basket -> /basket/items (POST {pizzaId, quantity})",
            "Update quantity -> /basket/items/<pizzaId> (PUT {quantity})",
            "Remove from basket -> /basket/items/<pizzaId> (DELETE)",
            "View basket -> /basket (GET)",
            "Confirm order -> /basket/confirm (POST)",
            "Health -> /health (GET)",
        ],
    })


@api.get("/health")
def health():
    return ok({"status": "ok", "backend": getattr(_store(), "name", "custom")})


# ============================================================
# CATALOG ENDPOINTS
# ============================================================


@api.get("/pizzas")
def list_pizzas():
    return ok([p.to_dict() for p in _catalog().list_all()])


@api.get("/pizzas/<int:pizza_id>")
def get_pizza(pizza_id):
    pizza = _catalog().find_by_id(pizza_id)
    if pizza is None:
        return err("pizza_not_found", 404)
    return ok(pizza.to_dict())


# ============================================================
# BASKET ENDPOINTS
# ============================================================


@api.post("/basket/items")
def add_to_basket():
    """
    Adds a pizza to the shared basket.

    VALIDATION:
    - Body must be a JSON object with integer pizzaId and quantity
    - pizzaId must exist in the catalog; unknown ids never reach the store
    - quantity sign is NOT checked (documented risk, see module header)
    """
    body = _json_body()
    if body is None:
        return err("invalid_json", 400)

    pizza_id = body.get("pizzaId")
    quantity = body.get("quantity")
    if not (_is_int(pizza_id) and _is_int(quantity)):
        return err("invalid_int", 400)

    if not _catalog().exists(pizza_id):
        logger.warning("add rejected: unknown pizza id %s", pizza_id)
        return err("pizza_not_found", 404)

    store = _store()
    store.add_item(pizza_id, quantity)
    return ok(store.get_basket().to_dict())


@api.put("/basket/items/<int:pizza_id>")
def update_basket_item(pizza_id):
    """Sets an absolute quantity; zero or less removes the line."""
    body = _json_body()
    if body is None:
        return err("invalid_json", 400)

    quantity = body.get("quantity")
    if not _is_int(quantity):
        return err("invalid_int", 400)

    if not _fits_int64(pizza_id):
        return err("not_in_basket", 404)

    store = _store()
    if not store.update_quantity(pizza_id, quantity):
        return err("not_in_basket", 404)
    return ok(store.get_basket().to_dict())


@api.delete("/basket/items/<int:pizza_id>")
def remove_from_basket(pizza_id):
    if not _fits_int64(pizza_id):
        return err("not_in_basket", 404)

    store = _store()
    if not store.remove_item(pizza_id):
        return err("not_in_basket", 404)
    return ok(store.get_basket().to_dict())


@api.get("/basket")
def get_basket():
    return ok(_store().get_basket().to_dict())


@api.post("/basket/confirm")
def confirm():
    try:
        confirmation = confirm_order(_store())
    except EmptyBasketError:
        logger.warning("confirm rejected: basket is empty")
        return err("basket_empty", 400)
    return ok(confirmation.to_dict())


# ============================================================
# RESPONSE HARDENING (CORS + SECURITY HEADERS)
# ============================================================


def _harden_response(response):
    """
    Adds the CORS policy and defensive headers to every response.

    - nosniff stops browsers from guessing content types
    - DENY prevents the API from being framed (clickjacking)
    - no-store keeps basket contents out of shared caches
    """
    response.headers["Access-Control-Allow-Origin"] = current_app.config["CORS_ALLOW_ORIGIN"]
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    response.headers["Cache-Control"] = "no-store"
    return response


# ============================================================
# SECURE ERROR HANDLING
# ============================================================


def handle_404(e):
    return err("not_found", 404)


def handle_405(e):
    return err("method_not_allowed", 405)


def handle_500(e):
    """
    Logs the failure for developers and returns a generic message,
    so stack traces and internals never reach the client.
    """
    logging.exception("Internal error: %s", e)
    return err("internal_error", 500)


# ============================================================
# APPLICATION FACTORY (COMPOSITION ROOT)
# ============================================================


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings=None, store=None, catalog=None):
    """
    Builds the Flask app and the single basket store it owns.

    The store lives in app.extensions rather than a module global,
    so each app (and each test) gets its own basket.
    """
    settings = settings or load_settings()

    app = Flask(__name__)
    app.config["CORS_ALLOW_ORIGIN"] = settings.cors_allow_origin
    app.json.sort_keys = False

    app.extensions["settings"] = settings
    app.extensions["catalog"] = catalog if catalog is not None else Catalog()
    app.extensions["basket_store"] = store if store is not None else create_basket_store(settings)

    app.register_blueprint(api)
    app.after_request(_harden_response)
    app.register_error_handler(404, handle_404)
    app.register_error_handler(405, handle_405)
    app.register_error_handler(500, handle_500)

    logger.info("pizza basket api created (backend=%s)", settings.backend)
    return app


# ============================================================
# APPLICATION STARTUP
# ============================================================


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    # debug=False: debug mode exposes tracebacks and an interactive console
    app.run(host=settings.host, port=settings.port, debug=False)


if __name__ == "__main__":
    main()
