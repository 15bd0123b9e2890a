# settings.py
# ============================================================
# RUNTIME CONFIGURATION
# ============================================================
# All configuration comes from environment variables so that nothing
# environment-specific (paths, origins, ports) is hardcoded in source.
#
#   BASKET_BACKEND     memory | sqlite          (default: memory)
#   BASKET_DB          sqlite file path         (default: basket.db)
#   BASKET_USER_ID     owner key for sqlite rows (default: 1)
#   CORS_ALLOW_ORIGIN  allowed browser origin   (default: *)
#   LOG_LEVEL          logging level name       (default: INFO)
#   HOST / PORT        dev server bind          (default: 127.0.0.1:5200)
# ============================================================
import os
from dataclasses import dataclass

BACKENDS = ("memory", "sqlite")


@dataclass(frozen=True)
class Settings:
    backend: str = "memory"
    db_path: str = "basket.db"
    user_id: int = 1
    cors_allow_origin: str = "*"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5200


def _int(environ, name, default):
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings(environ=None):
    """
    Builds a Settings value from the environment.

    Unknown backends and non-integer numbers are rejected here, at start-up,
    instead of surfacing later as request failures.
    """
    env = os.environ if environ is None else environ

    backend = env.get("BASKET_BACKEND", "memory").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"BASKET_BACKEND must be one of {BACKENDS}, got {backend!r}")

    return Settings(
        backend=backend,
        db_path=env.get("BASKET_DB", "basket.db"),
        user_id=_int(env, "BASKET_USER_ID", 1),
        cors_allow_origin=env.get("CORS_ALLOW_ORIGIN", "*"),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        host=env.get("HOST", "127.0.0.1"),
        port=_int(env, "PORT", 5200),
    )
