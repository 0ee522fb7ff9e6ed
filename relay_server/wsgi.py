"""
WSGI config for the share relay.

Only the HTTP surface (share page, /visitors/, /health/) works under WSGI;
websockets need the ASGI application.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "relay_server.settings")

application = get_wsgi_application()
