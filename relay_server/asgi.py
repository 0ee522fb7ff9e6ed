"""
ASGI config for the share relay.

It exposes the ASGI callable as a module-level variable named ``application``.
"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "relay_server.settings")

from channels.routing import ProtocolTypeRouter, URLRouter
from django.conf import settings
from django.core.asgi import get_asgi_application

# Initialise Django before importing anything that touches models or settings.
django_asgi_app = get_asgi_application()

from relay_server.routing import websocket_urlpatterns  # noqa: E402
from relay_server.ws_origin import AllowedHostsOrForwardedHostOriginValidator  # noqa: E402

# Channels router for WebSockets.
#
# AllowedHostsOrForwardedHostOriginValidator (when DEBUG is False):
# - Allows when Origin's host is in ALLOWED_HOSTS, or when Origin is missing but
#   Host / X-Forwarded-Host is in ALLOWED_HOSTS (proxies can drop Origin).
# - Logs "WebSocket origin denied: ..." when rejecting.
#
# No auth middleware: possession of the room code is the only credential.
websocket_app = URLRouter(websocket_urlpatterns)
if not settings.DEBUG:
    websocket_app = AllowedHostsOrForwardedHostOriginValidator(websocket_app)

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": websocket_app,
    }
)
