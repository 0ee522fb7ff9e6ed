"""
URL configuration for the share relay.

The static catch-all shadows APPEND_SLASH redirects, so the API routes accept an
optional trailing slash themselves.
"""
from django.urls import path, re_path

from rooms.views import public_file, visitors
from .health import health

urlpatterns = [
    re_path(r"^health/?$", health),
    re_path(r"^visitors/?$", visitors),
    path("", public_file),
    re_path(r"^(?P<path>.+)$", public_file),
]
