"""
Settings for the share relay: Django + Channels (ASGI).

Key points:
- Django + Django Channels (ASGI), websocket endpoint at /ws/share/
- Room registry is in-memory and per-process; InMemoryChannelLayer by default,
  RedisChannelLayer when REDIS_URL is set (requires sticky sessions across instances)
- Environment-based configuration; relay tunables live in relay_server.config
- No database: nothing is persisted
"""

from __future__ import annotations

import os
from typing import List

from relay_server.config import BASE_DIR, config


def _env(name: str, default: str | None = None) -> str | None:
    v = os.environ.get(name)
    return v if v not in (None, "") else default


def _env_bool(name: str, default: bool = False) -> bool:
    v = _env(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_csv(name: str, default: str = "") -> List[str]:
    raw = _env(name, default) or ""
    return [x.strip() for x in raw.split(",") if x.strip()]


# SECURITY WARNING: Do not hardcode secrets in code.
DEBUG = _env_bool("DJANGO_DEBUG", default=False)

SECRET_KEY = _env("DJANGO_SECRET_KEY", "dev-insecure-secret-key-change-me")
if not DEBUG and (not SECRET_KEY or SECRET_KEY.startswith("dev-insecure-")):
    raise RuntimeError("DJANGO_SECRET_KEY must be set in production")

ALLOWED_HOSTS = _env_csv("DJANGO_ALLOWED_HOSTS", default="localhost,127.0.0.1")

# CORS: the share page may be hosted elsewhere; open by default.
CORS_ALLOWED_ORIGINS = _env_csv("CORS_ALLOWED_ORIGINS")
CORS_ALLOW_ALL_ORIGINS = not CORS_ALLOWED_ORIGINS

# When serving behind a proxy, Django must respect X-Forwarded-* headers.
USE_X_FORWARDED_HOST = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = _env_bool("DJANGO_SECURE_SSL_REDIRECT", default=False)


INSTALLED_APPS = [
    "corsheaders",
    "django.contrib.staticfiles",
    # Channels must be installed to enable ASGI + websocket routing.
    "channels",
    "rooms.apps.RoomsConfig",
]

MIDDLEWARE = [
    "relay_server.middleware.HealthCheckAllowHttpMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "rooms.middleware.VisitorCounterMiddleware",
]

ROOT_URLCONF = "relay_server.urls"

WSGI_APPLICATION = "relay_server.wsgi.application"
ASGI_APPLICATION = "relay_server.asgi.application"

# Websocket-only service: no database.
DATABASES: dict = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


#
# Channels configuration
#
# The room registry lives in process memory, so the in-memory layer is the default.
# A Redis layer only makes sense when every connection for a code lands on one instance.
#
REDIS_URL = _env("REDIS_URL", None)
_LAYER_CONFIG = {
    # Chunks are fanned out through the layer; a full channel silently drops group sends.
    "capacity": int(_env("CHANNEL_LAYER_CAPACITY", "1000") or "1000"),
    "expiry": int(_env("CHANNEL_LAYER_EXPIRY", "60") or "60"),
}
if REDIS_URL:
    CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels_redis.core.RedisChannelLayer",
            "CONFIG": {"hosts": [REDIS_URL], **_LAYER_CONFIG},
        }
    }
else:
    CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels.layers.InMemoryChannelLayer",
            "CONFIG": _LAYER_CONFIG,
        }
    }


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"}},
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "plain"}},
    "root": {"handlers": ["console"], "level": _env("DJANGO_LOG_LEVEL", "INFO") or "INFO"},
}


# Relay tunables (see relay_server.config for the RELAY_* environment variables).
RELAY_CODE_DIGITS = config.CODE_DIGITS
RELAY_SESSION_TTL_SECONDS = config.SESSION_TTL_SECONDS
RELAY_REAPER_INTERVAL_SECONDS = config.REAPER_INTERVAL_SECONDS
RELAY_ROOM_CAPACITY = config.ROOM_CAPACITY
RELAY_NOTIFY_PEER_LEFT = config.NOTIFY_PEER_LEFT
RELAY_TRUST_PROXY = config.TRUST_PROXY
RELAY_PUBLIC_DIR = config.PUBLIC_DIR
